"""Configuration management for ticketbot.

Loads YAML settings (settings.yaml) and environment variables (.env)
into a typed Config object. Property getters provide safe access with
sensible defaults for the Discord API client, plugins, embeds and
logging.

Key classes:
    Config: Central configuration manager.

Key functions:
    get_config: Singleton accessor for the global Config instance.
"""

import os
import re
from pathlib import Path
from typing import Optional

import structlog
import yaml
from dotenv import load_dotenv

logger = structlog.get_logger("ticketbot.bot")

DEFAULT_API_URL = "https://discord.com/api/v10"
DEFAULT_EMBED_COLOUR = 0x009999

_HEX_COLOUR = re.compile(r"^#?([0-9a-fA-F]{6})$")


def parse_colour(value, default: int = DEFAULT_EMBED_COLOUR) -> int:
    """Parse an embed colour given as ``#rrggbb``, ``rrggbb`` or an int."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if 0 <= value <= 0xFFFFFF else default
    if isinstance(value, str):
        match = _HEX_COLOUR.match(value.strip())
        if match:
            return int(match.group(1), 16)
    return default


class Config:
    """Central configuration manager for ticketbot.

    Loads settings.yaml and .env from the config directory. No
    mutation after __init__.

    Args:
        config_dir: Path to the config directory. Defaults to
            ``<repo_root>/config/``.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"
        self.config_dir = config_dir

        env_file = config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file."""
        filepath = self.config_dir / filename
        if filepath.exists():
            with open(filepath, "r") as f:
                return yaml.safe_load(f) or {}
        return {}

    def validate(self):
        """Validate critical settings at startup.

        Logs warnings/errors but does not raise; TicketBot refuses to
        start later if the token or application id is missing.
        """
        if not self.discord_token:
            logger.error("config_missing_value", key="DISCORD_TOKEN")
        if not self.application_id:
            logger.error("config_missing_value", key="DISCORD_APPLICATION_ID")
        elif not self.application_id.isdigit():
            logger.error(
                "config_invalid_value",
                key="application_id",
                value=self.application_id,
                valid="snowflake",
            )

        if not self.discord_api_url.startswith("https://"):
            logger.warning("insecure_discord_api_url", url=self.discord_api_url)

        allowlist = self.settings.get("plugin_allowlist")
        if allowlist is not None and not isinstance(allowlist, list):
            logger.error("plugin_allowlist_invalid_type", type=type(allowlist).__name__)

        colour = self.settings.get("embeds", {}).get("colour")
        if colour is not None and parse_colour(colour, default=-1) == -1:
            logger.error("config_invalid_value", key="embeds.colour", value=colour)

    @property
    def discord_token(self) -> str:
        """Bot token. Only read from the environment."""
        return os.environ.get("DISCORD_TOKEN", "")

    @property
    def application_id(self) -> str:
        """Application (client) id. Env var DISCORD_APPLICATION_ID takes precedence."""
        value = os.environ.get("DISCORD_APPLICATION_ID") or self.settings.get("application_id", "")
        return str(value) if value else ""

    @property
    def discord_api_url(self) -> str:
        """Base URL of the Discord REST API, without trailing slash."""
        return str(self.settings.get("discord_api_url", DEFAULT_API_URL)).rstrip("/")

    @property
    def http_timeout(self) -> int:
        """Total timeout per API request in seconds (default 10)."""
        return self.settings.get("http_timeout", 10)

    @property
    def plugins_dir(self) -> Path:
        """Directory scanned for ``<name>/plugin.py`` plugins."""
        configured = self.settings.get("plugins_dir")
        if configured:
            return Path(configured).expanduser()
        return Path(__file__).parent.parent / "plugins"

    @property
    def data_dir(self) -> Path:
        """Directory for runtime data (plugin storage)."""
        configured = self.settings.get("data_dir")
        if configured:
            return Path(configured).expanduser()
        return Path(__file__).parent.parent / "data"

    @property
    def embed_colour(self) -> int:
        """Default embed colour (``embeds.colour``)."""
        return parse_colour(self.settings.get("embeds", {}).get("colour"))

    @property
    def embed_footer(self) -> Optional[str]:
        """Default embed footer text (``embeds.footer``)."""
        return self.settings.get("embeds", {}).get("footer")

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return Path(__file__).parent.parent / "logs"

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO). Controls console and combined file."""
        log_config = self.settings.get("logging", {})
        return log_config.get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> dict:
        """Per-subsystem log level overrides. E.g. {"http": "DEBUG"}."""
        log_config = self.settings.get("logging", {})
        return log_config.get("subsystem_levels", {})

    @property
    def logging_max_file_size_mb(self) -> int:
        """Max size per log file in MB before rotation (default 10)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        """Number of rotated log files to keep (default 5)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("backup_count", 5)


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
