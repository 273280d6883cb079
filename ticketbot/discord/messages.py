"""Message flags and payload formatting for interaction responses."""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional

import structlog

logger = structlog.get_logger("ticketbot.commands")

# MessageFlags.EPHEMERAL: only the invoking user sees the message
EPHEMERAL = 1 << 6

MAX_EMBEDS = 10

# Keys that mark a mapping as a whole message rather than a single embed
_MESSAGE_KEYS = ("content", "embed", "embeds", "components", "allowed_mentions")


def flags(secret: bool) -> int:
    """Return the message flags for an (optionally ephemeral) response."""
    return EPHEMERAL if secret else 0


def is_structured(content: Any) -> bool:
    """True for message/embed objects, False for plain text."""
    return isinstance(content, (Mapping, list, tuple))


class MessageFormatter:
    """Turns structured content into Discord message fields.

    Accepted shapes:
        {"embed": {...}}          a single embed
        {"embeds": [{...}, ...]}  several embeds
        {"title": ..., ...}       a bare embed
        [{...}, ...]              a list of embeds

    ``content``, ``components`` and ``allowed_mentions`` are passed
    through. Embeds without a colour or footer get the configured
    defaults.

    Args:
        colour: Default embed colour as an int (0xRRGGBB).
        footer: Default embed footer text, or None for no footer.
    """

    def __init__(self, colour: int, footer: Optional[str] = None):
        self.colour = colour
        self.footer = footer

    async def embed_defaults(self, channel_id: Optional[str]) -> Dict[str, Any]:
        """Defaults applied to every embed sent to ``channel_id``.

        Override to look up per-guild appearance settings.
        """
        defaults: Dict[str, Any] = {"color": self.colour}
        if self.footer:
            defaults["footer"] = {"text": self.footer}
        return defaults

    async def format(self, channel_id: Optional[str], content: Any) -> Dict[str, Any]:
        """Build message fields for ``content``.

        Raises:
            TypeError: If content is plain text.
            ValueError: If more than 10 embeds are given.
        """
        if not is_structured(content):
            raise TypeError(f"Expected structured content, got {type(content).__name__}")

        message: Dict[str, Any] = {}
        if isinstance(content, Mapping):
            if any(key in content for key in _MESSAGE_KEYS):
                embeds = list(content.get("embeds") or [])
                if content.get("embed") is not None:
                    embeds.insert(0, content["embed"])
                for key in ("content", "components", "allowed_mentions"):
                    if content.get(key) is not None:
                        message[key] = content[key]
            else:
                embeds = [content]
        else:
            embeds = list(content)

        if len(embeds) > MAX_EMBEDS:
            raise ValueError(f"A message can have at most {MAX_EMBEDS} embeds, got {len(embeds)}")

        defaults = await self.embed_defaults(channel_id)
        message["embeds"] = [self._apply_defaults(embed, defaults) for embed in embeds]
        logger.debug(
            "message_formatted",
            channel_id=channel_id,
            embeds=len(message["embeds"]),
        )
        return message

    @staticmethod
    def _apply_defaults(embed: Mapping, defaults: Dict[str, Any]) -> Dict[str, Any]:
        merged: Dict[str, Any] = dict(embed)
        # Accept the British spelling used in settings
        if "colour" in merged:
            merged.setdefault("color", merged.pop("colour"))
        for key, value in defaults.items():
            merged.setdefault(key, value)
        return merged


def embed_fields(lines: Mapping[str, str], inline: bool = False) -> List[Dict[str, Any]]:
    """Build an embed ``fields`` list from ``{name: value}``."""
    return [{"name": name, "value": value, "inline": inline} for name, value in lines.items()]
