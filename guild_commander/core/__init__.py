"""Core domain logic for Guild Commander."""

from .config import Config, load_config
from .errors import (
    CommandError,
    CommanderError,
    ConfigError,
    MalformedRequest,
    MiddlewareRejected,
    ParameterMismatch,
    PrefixRequired,
    RoleStoreError,
    SlackError,
    TransportError,
    Unauthorized,
    UnknownCommand,
)
from .models import (
    AuthLevel,
    AuthOptions,
    BotType,
    CommandDefinition,
    CommandDescription,
    CommandsOptions,
    GuildInfo,
    InboundMessage,
    ParameterResult,
    Prefix,
    RateLimitOptions,
    RegisteredCommand,
    RoleRecord,
)

__all__ = [
    "Config",
    "load_config",
    "AuthLevel",
    "AuthOptions",
    "BotType",
    "CommandDefinition",
    "CommandDescription",
    "CommandsOptions",
    "GuildInfo",
    "InboundMessage",
    "ParameterResult",
    "Prefix",
    "RateLimitOptions",
    "RegisteredCommand",
    "RoleRecord",
    "CommanderError",
    "CommandError",
    "MalformedRequest",
    "UnknownCommand",
    "PrefixRequired",
    "MiddlewareRejected",
    "ParameterMismatch",
    "Unauthorized",
    "ConfigError",
    "TransportError",
    "SlackError",
    "RoleStoreError",
]
