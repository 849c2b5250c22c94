"""Command parsing, lookup and dispatch."""

from .dispatcher import Commander
from .parser import ParsedRequest, parse_request
from .registry import CommandRegistry
from .template import create_parameters, match_template, render_template

__all__ = [
    "Commander",
    "CommandRegistry",
    "ParsedRequest",
    "parse_request",
    "create_parameters",
    "match_template",
    "render_template",
]
