"""Reverse templating: recover named fields from argument text.

A template such as ``{{action}} with {{value}}`` is compiled into an anchored
regular expression. Literal text is matched verbatim and each placeholder
captures one whitespace-free run up to the next literal separator, so the
argument tokens must cover the template exactly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Mapping, Optional, Pattern, Sequence, Tuple

from ..errors import ParameterMismatch
from ..models import ParameterResult

PLACEHOLDER = re.compile(r"{{\s*([A-Za-z_][A-Za-z0-9_]*)\s*}}")
BRACED = re.compile(r"{{(.*?)}}")
WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class CompiledTemplate:
    source: str
    regex: Pattern[str]
    names: Tuple[str, ...]


@lru_cache(maxsize=256)
def compile_template(template: str) -> CompiledTemplate:
    for braced in BRACED.finditer(template):
        if not PLACEHOLDER.fullmatch(braced.group(0)):
            raise ValueError(f"Invalid placeholder {braced.group(0)!r} in template {template!r}")

    parts = []
    names: list[str] = []
    position = 0
    for match in PLACEHOLDER.finditer(template):
        parts.append(_literal(template[position : match.start()]))
        name = match.group(1)
        if name in names:
            # Repeated placeholders must capture the same text each time.
            parts.append(f"(?P={name})")
        else:
            names.append(name)
            parts.append(rf"(?P<{name}>\S+?)")
        position = match.end()
    parts.append(_literal(template[position:]))
    regex = re.compile("^" + "".join(parts) + "$")
    return CompiledTemplate(source=template, regex=regex, names=tuple(names))


def _literal(text: str) -> str:
    # Whitespace in a template matches exactly one space, since arguments are
    # rejoined with single spaces before matching.
    chunks = WHITESPACE.split(text)
    return " ".join(re.escape(chunk) for chunk in chunks)


def match_template(template: str, content: str) -> Dict[str, str]:
    """Return the named captures of ``content`` against ``template``."""

    compiled = compile_template(template.strip())
    match = compiled.regex.match(content)
    if not match:
        raise ParameterMismatch(template, content)
    return {name: match.group(name) for name in compiled.names}


def create_parameters(args: Sequence[str], template: Optional[str]) -> ParameterResult:
    """Build the parameter result handed to a command action."""

    if not template:
        return ParameterResult(args=tuple(args))
    return ParameterResult(args=tuple(args), named=match_template(template, " ".join(args)))


def render_template(template: str, values: Mapping[str, str]) -> str:
    """Substitute ``{{name}}`` placeholders; unknown names render empty."""
    return PLACEHOLDER.sub(lambda match: str(values.get(match.group(1), "")), template)
