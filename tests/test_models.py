"""Tests for descriptor and interaction models."""

import pytest
from pydantic import ValidationError

from ticketbot.discord.models import (
    CommandData,
    CommandOption,
    CommandOptionType,
    Interaction,
)


def _option(**overrides):
    data = {"type": 3, "name": "reason", "description": "Why"}
    data.update(overrides)
    return data


class TestCommandData:

    def test_defaults(self):
        data = CommandData(name="new", description="Open a ticket")
        assert data.staff_only is False
        assert data.permissions == []
        assert data.internal is False

    @pytest.mark.parametrize("name", ["ab", "x" * 33, "New", "has space"])
    def test_invalid_names(self, name):
        with pytest.raises(ValidationError):
            CommandData(name=name, description="Something")

    @pytest.mark.parametrize("description", ["", "d" * 101])
    def test_description_bounds(self, description):
        with pytest.raises(ValidationError):
            CommandData(name="new", description=description)

    def test_at_most_ten_options(self):
        options = [_option(name=f"opt{i}") for i in range(11)]
        with pytest.raises(ValidationError):
            CommandData(name="new", description="Open", options=options)

    def test_payload_drops_bot_side_fields(self):
        data = CommandData(
            name="close",
            description="Close this ticket",
            staff_only=True,
            permissions=["MANAGE_CHANNELS"],
            internal=True,
            options=[_option(required=False)],
        )
        assert data.to_payload() == {
            "name": "close",
            "description": "Close this ticket",
            "options": [
                {"type": 3, "name": "reason", "description": "Why", "required": False},
            ],
        }

    def test_unknown_keys_ignored(self):
        data = CommandData(name="new", description="Open", colour="red")
        assert "colour" not in data.to_payload()


class TestCommandOption:

    def test_choices_on_string(self):
        option = CommandOption(**_option(choices=[{"name": "Bug", "value": "bug"}]))
        assert option.choices[0].value == "bug"

    def test_choices_rejected_on_boolean(self):
        with pytest.raises(ValidationError, match="choices"):
            CommandOption(**_option(type=5, choices=[{"name": "Yes", "value": "y"}]))

    def test_nested_options_on_subcommand(self):
        option = CommandOption(
            type=CommandOptionType.SUB_COMMAND,
            name="add",
            description="Add a member",
            options=[_option(type=6, name="member", description="Who")],
        )
        assert option.options[0].type is CommandOptionType.USER

    def test_nested_options_rejected_on_string(self):
        with pytest.raises(ValidationError, match="nested options"):
            CommandOption(**_option(options=[_option()]))

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            CommandOption(**_option(type=99))


class TestInteraction:

    def test_arguments_flat(self, interaction):
        assert interaction.arguments() == {"text": "hello"}

    def test_arguments_with_subcommand_group(self):
        interaction = Interaction(
            id="1",
            type=2,
            token="t",
            data={
                "name": "ticket",
                "options": [{
                    "name": "members",
                    "type": 2,
                    "options": [{
                        "name": "add",
                        "type": 1,
                        "options": [{"name": "member", "type": 6, "value": "123"}],
                    }],
                }],
            },
        )
        assert interaction.arguments() == {"members": {"add": {"member": "123"}}}

    def test_arguments_without_data(self):
        assert Interaction(id="1", type=1, token="t").arguments() == {}

    def test_extra_fields_kept(self):
        interaction = Interaction(id="1", type=2, token="t", locale="en-GB")
        assert interaction.locale == "en-GB"
