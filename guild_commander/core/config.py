"""Configuration loader."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .errors import ConfigError
from .models import AuthOptions, BotType, CommandsOptions, RateLimitOptions

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path("~/.guild-commander").expanduser()
ENV_FILE_NAME = ".env"
COMMANDER_FILE = "commander.yaml"
DEFAULT_DATABASE = "commander_entities.db"


@dataclass
class Config:
    prefix: str
    slack_bot_token: str
    slack_app_token: str
    config_dir: Path
    database_path: Path
    options: CommandsOptions = field(default_factory=CommandsOptions)
    auth: AuthOptions = field(default_factory=AuthOptions)
    rate_limit: Optional[RateLimitOptions] = None
    superuser: Optional[str] = None


def resolve_config_dir(config_dir: Path | str | None) -> Path:
    """Resolve and validate the directory containing .env + commander.yaml."""
    target = (
        Path(config_dir).expanduser() if config_dir else DEFAULT_CONFIG_DIR
    ).resolve()
    if not target.exists():
        raise ConfigError(
            f"Config directory {target} does not exist. "
            "Create it and add .env and commander.yaml."
        )
    if not target.is_dir():
        raise ConfigError(f"Config directory {target} is not a directory")
    return target


def load_config(config_dir: Path | str | None = None) -> Config:
    """Load Guild Commander configuration from the provided or default directory."""
    root = resolve_config_dir(config_dir)
    return _load_config_from_root(root)


def _load_config_from_root(root: Path) -> Config:
    _load_env_file(root / ENV_FILE_NAME)
    data = _load_yaml(root / COMMANDER_FILE)

    prefix = data.get("prefix")
    if not isinstance(prefix, str) or not prefix.strip():
        raise ConfigError("commander.yaml must define a non-empty prefix")

    database_path = Path(str(data.get("database") or DEFAULT_DATABASE)).expanduser()
    if not database_path.is_absolute():
        database_path = (root / database_path).resolve()

    superuser = data.get("superuser")
    return Config(
        prefix=prefix.strip(),
        slack_bot_token=_require_env("SLACK_BOT_TOKEN"),
        slack_app_token=_require_env("SLACK_APP_TOKEN"),
        config_dir=root,
        database_path=database_path,
        options=parse_commands_options(data),
        auth=_parse_auth_options(data.get("auth")),
        rate_limit=_parse_rate_limit(data.get("rate_limit")),
        superuser=str(superuser) if superuser else None,
    )


def _load_env_file(path: Path) -> None:
    if not path.exists():
        LOGGER.warning("No .env file found at %s; relying on shell environment.", path)
        return
    load_dotenv(dotenv_path=path, override=False)


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigError(f"{name} is not set")
    return value


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"{COMMANDER_FILE} not found at {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {COMMANDER_FILE} structure at {path}")
    return data


def parse_commands_options(data: Dict[str, Any]) -> CommandsOptions:
    bot_type_raw = str(data.get("bot_type", BotType.NORMAL.value)).lower()
    try:
        bot_type = BotType(bot_type_raw)
    except ValueError as exc:
        valid = ", ".join(item.value for item in BotType)
        raise ConfigError(f"Unknown bot_type '{bot_type_raw}' (expected one of: {valid})") from exc

    return CommandsOptions(
        bot_type=bot_type,
        delete_command_message=bool(data.get("delete_command_message", False)),
        delete_message_delay=_parse_delay(data.get("delete_message_delay", 0), "delete_message_delay"),
    )


def _parse_auth_options(raw: Any) -> AuthOptions:
    if raw is None:
        return AuthOptions()
    if not isinstance(raw, dict):
        raise ConfigError("auth must be a mapping")
    return AuthOptions(
        delete_messages=bool(raw.get("delete_messages", False)),
        delete_message_delay=_parse_delay(raw.get("delete_message_delay", 0), "auth.delete_message_delay"),
    )


def _parse_rate_limit(raw: Any) -> Optional[RateLimitOptions]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigError("rate_limit must be a mapping")
    try:
        messages = int(raw.get("messages", RateLimitOptions.messages))
        window = float(raw.get("window_seconds", RateLimitOptions.window_seconds))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid rate_limit values: {exc}") from exc
    if messages < 1 or window <= 0:
        raise ConfigError("rate_limit.messages must be >= 1 and window_seconds > 0")
    return RateLimitOptions(messages=messages, window_seconds=window)


def _parse_delay(value: Any, name: str) -> int:
    try:
        delay = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be an integer number of milliseconds") from exc
    if delay < 0:
        raise ConfigError(f"{name} must not be negative")
    return delay
