"""Guild Commander - prefix command dispatch for chat bots."""

from .core.commands import Commander
from .core.confirm import ConfirmOptions, ConfirmStatus, confirm
from .core.errors import (
    CommandError,
    MalformedRequest,
    MiddlewareRejected,
    ParameterMismatch,
    Unauthorized,
    UnknownCommand,
)
from .core.models import AuthLevel, BotType, CommandDefinition, CommandDescription, CommandsOptions
from .middleware import Authorizer, Middleware, MiddlewareContext, RateLimiter

__all__ = [
    "Commander",
    "CommandDefinition",
    "CommandDescription",
    "CommandsOptions",
    "AuthLevel",
    "BotType",
    "Authorizer",
    "Middleware",
    "MiddlewareContext",
    "RateLimiter",
    "confirm",
    "ConfirmOptions",
    "ConfirmStatus",
    "CommandError",
    "MalformedRequest",
    "UnknownCommand",
    "MiddlewareRejected",
    "ParameterMismatch",
    "Unauthorized",
]
