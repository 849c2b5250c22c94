"""Domain models for Guild Commander."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Pattern, Tuple, Union

if TYPE_CHECKING:
    from ..chat_adapters.i_chat_adapter import IChatAdapter
    from .commands.dispatcher import Commander


class BotType(str, Enum):
    NORMAL = "normal"
    SELF = "self"
    GUILD_ONLY = "guildonly"


class AuthLevel(IntEnum):
    """Ordered authorization levels; a level satisfies every requirement at or below it."""

    NONE = 0
    MODERATOR = 1
    ADMIN = 2
    OWNER = 3
    SUPERUSER = 4


@dataclass(frozen=True)
class Prefix:
    literal: str
    pattern: Pattern[str]

    @classmethod
    def from_literal(cls, literal: str) -> "Prefix":
        if not literal:
            raise ValueError("Command prefix must not be empty")
        return cls(literal=literal, pattern=re.compile(f"({re.escape(literal)})?(.+)"))


@dataclass(frozen=True)
class GuildInfo:
    id: str
    owner_id: Optional[str] = None
    name: Optional[str] = None


@dataclass(frozen=True)
class InboundMessage:
    """A chat message as delivered by the transport."""

    id: str
    channel_id: str
    author_id: str
    content: str
    guild: Optional[GuildInfo] = None
    thread_ts: Optional[str] = None
    role_mentions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CommandDescription:
    message: str
    example: Optional[str] = None


@dataclass(frozen=True)
class ParameterResult:
    args: Tuple[str, ...]
    named: Optional[Dict[str, str]] = None


CommandFunction = Callable[
    [InboundMessage, "CommandDefinition", ParameterResult, "IChatAdapter", "Commander"],
    Union[Awaitable[Any], Any],
]


@dataclass(frozen=True)
class CommandDefinition:
    """Describes one invokable action.

    A definition is either alias-based (``names``) or pattern-based
    (``pattern``). When a pattern is given, the names are only used for help
    output and are never bound in the alias index.
    """

    action: CommandFunction
    names: Tuple[str, ...] = ()
    parameters: Optional[str] = None
    no_prefix: bool = False
    pattern: Optional[Union[str, Pattern[str]]] = None
    authentication: Optional[AuthLevel] = None
    description: Optional[CommandDescription] = None
    custom: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", tuple(self.names))
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", re.compile(self.pattern))
        if self.pattern is None and not self.names:
            raise ValueError("Command definition needs at least one name or a pattern")
        if not callable(self.action):
            raise ValueError("Command definition action must be callable")

    @property
    def is_pattern(self) -> bool:
        return self.pattern is not None


@dataclass(frozen=True)
class RegisteredCommand:
    handle: int
    definition: CommandDefinition
    aliases: Tuple[str, ...]
    is_pattern: bool = False

    @property
    def requires_prefix(self) -> bool:
        return not (self.definition.no_prefix or self.is_pattern)


@dataclass(frozen=True)
class CommandsOptions:
    bot_type: BotType = BotType.NORMAL
    delete_command_message: bool = False
    delete_message_delay: int = 0


@dataclass(frozen=True)
class RoleRecord:
    id: str
    guild_id: str
    level: AuthLevel


@dataclass
class AuthOptions:
    delete_messages: bool = False
    delete_message_delay: int = 0


@dataclass
class RateLimitOptions:
    messages: int = 5
    window_seconds: float = 10.0

