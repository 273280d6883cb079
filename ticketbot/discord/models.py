"""Pydantic models for slash command descriptors and interactions."""

from enum import IntEnum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class CommandOptionType(IntEnum):
    """Discord ApplicationCommandOptionType."""

    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10


class InteractionResponseType(IntEnum):
    """Discord InteractionCallbackType values used by commands."""

    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5


_CHOICE_TYPES = frozenset({
    CommandOptionType.STRING,
    CommandOptionType.INTEGER,
    CommandOptionType.NUMBER,
})

_NESTING_TYPES = frozenset({
    CommandOptionType.SUB_COMMAND,
    CommandOptionType.SUB_COMMAND_GROUP,
})


class CommandOptionChoice(BaseModel):
    """A fixed value the user can pick for an option."""

    name: str = Field(..., min_length=1, max_length=100)
    value: Union[str, int, float]


class CommandOption(BaseModel):
    """An option (argument, subcommand or subcommand group) of a command."""

    type: CommandOptionType
    name: str = Field(..., min_length=1, max_length=32, pattern=r"^[-_\w]+$")
    description: str = Field(..., min_length=1, max_length=100)
    required: Optional[bool] = None
    choices: Optional[List[CommandOptionChoice]] = Field(default=None, max_length=25)
    options: Optional[List["CommandOption"]] = Field(default=None, max_length=25)

    @field_validator("name")
    @classmethod
    def name_is_lowercase(cls, value: str) -> str:
        if value != value.lower():
            raise ValueError("must be lowercase")
        return value

    @model_validator(mode="after")
    def check_shape(self) -> "CommandOption":
        if self.choices and self.type not in _CHOICE_TYPES:
            raise ValueError(f"choices are not allowed on {self.type.name} options")
        if self.options and self.type not in _NESTING_TYPES:
            raise ValueError(f"nested options are not allowed on {self.type.name} options")
        return self


class CommandData(BaseModel):
    """Declarative definition of a slash command.

    ``staff_only``, ``permissions`` and ``internal`` are used by the bot
    only and are stripped from the payload published to Discord.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=3, max_length=32, pattern=r"^[-_\w]+$")
    description: str = Field(..., min_length=1, max_length=100)
    staff_only: bool = False
    permissions: List[str] = Field(default_factory=list)
    options: List[CommandOption] = Field(default_factory=list, max_length=10)
    internal: bool = False

    @field_validator("name")
    @classmethod
    def name_is_lowercase(cls, value: str) -> str:
        if value != value.lower():
            raise ValueError("must be lowercase")
        return value

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON body for ``POST /applications/{id}/commands``."""
        return self.model_dump(
            mode="json",
            exclude={"staff_only", "permissions", "internal"},
            exclude_none=True,
        )


class InteractionDataOption(BaseModel):
    """An option value received with an interaction."""

    name: str
    type: int
    value: Any = None
    options: Optional[List["InteractionDataOption"]] = None


class InteractionData(BaseModel):
    """The ``data`` field of an application command interaction."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    name: str
    options: List[InteractionDataOption] = Field(default_factory=list)


class Interaction(BaseModel):
    """An interaction event delivered by Discord.

    Only the addressing fields are typed; everything else Discord sends
    is kept as extra attributes and passed through untouched.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    type: int
    token: str
    application_id: Optional[str] = None
    data: Optional[InteractionData] = None
    guild_id: Optional[str] = None
    channel_id: Optional[str] = None
    member: Optional[Dict[str, Any]] = None

    def arguments(self) -> Dict[str, Any]:
        """Flatten the option tree into ``{name: value}``.

        Subcommands and groups become nested dicts keyed by their name.
        """
        if self.data is None:
            return {}
        return _flatten(self.data.options)


def _flatten(options: List[InteractionDataOption]) -> Dict[str, Any]:
    args: Dict[str, Any] = {}
    for option in options:
        if option.type in _NESTING_TYPES:
            args[option.name] = _flatten(option.options or [])
        else:
            args[option.name] = option.value
    return args
