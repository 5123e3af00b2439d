"""Inbound invocation and the context handed to command handlers."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ..commands.context import ResolutionContext
from ..commands.parsers import ParsedArguments
from ..commands.spec import CommandSpec


@dataclass(frozen=True)
class Invocation:
    """One inbound chat event, either a text line or a structured interaction."""

    context: ResolutionContext
    raw_text: str | None = None
    options: Mapping[str, Any] | None = None
    command_name: str | None = None
    channel_nsfw: bool = False
    author_is_bot: bool = False

    @property
    def subject_id(self) -> int:
        return self.context.subject_id

    @property
    def channel_id(self) -> int:
        return self.context.channel_id

    @property
    def guild_id(self) -> int | None:
        return self.context.guild_id

    @property
    def structured(self) -> bool:
        return self.options is not None


@dataclass
class CommandContext:
    invocation: Invocation
    spec: CommandSpec
    arguments: ParsedArguments
    prefix: str = ""
    _revoke: Callable[[], None] | None = field(default=None, repr=False)

    @property
    def author_id(self) -> int:
        return self.invocation.subject_id

    @property
    def guild_id(self) -> int | None:
        return self.invocation.guild_id

    @property
    def channel_id(self) -> int:
        return self.invocation.channel_id

    def revoke_cooldown(self) -> None:
        """Drop the cooldown windows this invocation started."""
        if self._revoke is not None:
            self._revoke()
