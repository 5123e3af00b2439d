"""Error taxonomy for the command pipeline."""

from datetime import timedelta
from typing import Any

import hikari


class CommandGateError(Exception):
    """Base class for every error raised by commandgate."""


class CommandSpecError(CommandGateError, ValueError):
    """A command or argument declaration is malformed."""


class RegistryFrozenError(CommandGateError):
    """Raised when registering commands after the registry was frozen."""


class Rejection(CommandGateError):
    """An invocation was refused before its handler could run."""

    message = "This command cannot be run right now."

    def __str__(self) -> str:
        return self.message


class StructuralRejection(Rejection):
    """A precondition of the command was not met."""


class NotInGuild(StructuralRejection):
    message = "This command can only be used in servers."


class NsfwOnly(StructuralRejection):
    message = "This command can only be run in NSFW channels."


class MissingPermission(StructuralRejection):
    def __init__(self, permissions: hikari.Permissions) -> None:
        super().__init__(permissions)
        self.permissions = permissions

    @property
    def message(self) -> str:
        from .permissions.checks import format_permissions

        names = ", ".join(f"`{name}`" for name in format_permissions(self.permissions))
        return f"You're missing the following permissions: {names}"


class MissingSelfPermission(MissingPermission):
    @property
    def message(self) -> str:
        from .permissions.checks import format_permissions

        names = ", ".join(f"`{name}`" for name in format_permissions(self.permissions))
        return f"I'm missing the following permissions: {names}"


class PermissionsUnavailable(StructuralRejection):
    """The permission source failed, so the requirement could not be checked."""

    message = "Permissions could not be checked right now, try again later."

    def __init__(self, cause: BaseException) -> None:
        super().__init__(cause)
        self.cause = cause


class OnCooldown(StructuralRejection):
    def __init__(self, scope: Any, remaining: timedelta) -> None:
        super().__init__(scope, remaining)
        self.scope = scope
        self.remaining = remaining

    @property
    def message(self) -> str:
        seconds = max(self.remaining.total_seconds(), 0.0)
        return f"This command is on {self.scope.value} cooldown, try again in {seconds:.1f}s."


class ParseFailure(Rejection):
    """The raw input could not be turned into the declared arguments."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


class MissingArgument(ParseFailure):
    @property
    def message(self) -> str:
        return f"Missing required argument `{self.name}`."


class InvalidArgument(ParseFailure):
    def __init__(self, name: str, raw: str, cause: BaseException | None = None) -> None:
        super().__init__(name)
        self.args = (name, raw, cause)
        self.raw = raw
        self.cause = cause

    @property
    def message(self) -> str:
        return f"Invalid value `{self.raw}` for argument `{self.name}`."
