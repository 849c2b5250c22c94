"""Middleware run before every command invocation."""

from .auth import ASSIGNABLE_LEVELS, Authorizer, parse_assignable_level
from .base import FunctionMiddleware, Middleware, MiddlewareContext, MiddlewarePipeline
from .rate_limiter import RateLimiter

__all__ = [
    "ASSIGNABLE_LEVELS",
    "Authorizer",
    "parse_assignable_level",
    "FunctionMiddleware",
    "Middleware",
    "MiddlewareContext",
    "MiddlewarePipeline",
    "RateLimiter",
]
