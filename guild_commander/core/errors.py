"""Custom exception hierarchy for Guild Commander."""


class CommanderError(Exception):
    """Base error type."""


class CommandError(CommanderError):
    """Expected dispatch failure; ends processing of a single candidate."""


class MalformedRequest(CommandError):
    pass


class UnknownCommand(CommandError):
    """Raised when neither an alias nor a pattern matches the message."""

    def __init__(self, command_word: str) -> None:
        super().__init__(f"Command isn't valid: {command_word!r}")
        self.command_word = command_word


class PrefixRequired(CommandError):
    """A prefix-only command was named without the prefix."""


class MiddlewareRejected(CommandError):
    pass


class ParameterMismatch(CommandError):
    """Raised when the argument text does not fit a parameter template."""

    def __init__(self, template: str, content: str) -> None:
        super().__init__(f"{content!r} does not match {template!r}")
        self.template = template
        self.content = content


class Unauthorized(CommandError):
    pass


class ConfigError(CommanderError):
    pass


class TransportError(CommanderError):
    pass


class SlackError(TransportError):
    pass


class RoleStoreError(CommanderError):
    pass
