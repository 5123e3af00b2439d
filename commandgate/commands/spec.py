"""Command declarations."""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import timedelta
from types import MappingProxyType
from typing import Any

import hikari

from ..errors import CommandSpecError
from .argument_types import ArgumentSpec


@dataclass(frozen=True)
class Cooldowns:
    """Cooldown length per scope; zero disables that scope."""

    user: timedelta = timedelta(0)
    channel: timedelta = timedelta(0)
    guild: timedelta = timedelta(0)

    def __post_init__(self) -> None:
        for scope in ("user", "channel", "guild"):
            value = getattr(self, scope)
            if not isinstance(value, timedelta):
                value = timedelta(seconds=value)
                object.__setattr__(self, scope, value)
            if value < timedelta(0):
                raise CommandSpecError("Cooldown cannot be negative.")


@dataclass(frozen=True)
class CommandSpec:
    """Everything needed to gate and parse one command.

    Built once at registration time and never mutated afterwards.
    """

    name: str
    args: tuple[ArgumentSpec, ...] = ()
    aliases: frozenset[str] = frozenset()
    description: str = "No description provided"
    guild_only: bool = False
    nsfw: bool = False
    required_permissions: hikari.Permissions | None = None
    required_self_permissions: hikari.Permissions | None = None
    cooldowns: Cooldowns = field(default_factory=Cooldowns)
    callback: Callable[..., Any] | None = field(default=None, compare=False)
    subcommands: Mapping[str, "CommandSpec"] | Iterable["CommandSpec"] = field(default_factory=dict, compare=False)
    parent: str | None = None

    def __post_init__(self) -> None:
        if not self.name or any(ch.isspace() for ch in self.name):
            raise CommandSpecError(f"Invalid command name: {self.name!r}")
        object.__setattr__(self, "name", self.name.lower())
        object.__setattr__(self, "aliases", frozenset(alias.lower() for alias in self.aliases))
        object.__setattr__(self, "args", tuple(self.args))

        seen: set[str] = set()
        for index, arg in enumerate(self.args):
            if arg.name in seen:
                raise CommandSpecError(f"Duplicate argument '{arg.name}' in command '{self.name}'")
            seen.add(arg.name)
            if arg.multiplicity.variadic and index != len(self.args) - 1:
                raise CommandSpecError(
                    f"Argument '{arg.name}' of command '{self.name}' consumes all remaining tokens "
                    "and must be declared last"
                )

        # Subcommands are re-parented so their qualified name carries the full path
        subcommands: dict[str, CommandSpec] = {}
        for sub in unique_specs(self.subcommands):
            if sub.parent != self.qualified_name:
                sub = replace(sub, parent=self.qualified_name, subcommands=dict(sub.subcommands))
            for key in sub.names:
                subcommands[key] = sub
        object.__setattr__(self, "subcommands", MappingProxyType(subcommands))

    @property
    def names(self) -> frozenset[str]:
        return frozenset({self.name, *self.aliases})

    @property
    def qualified_name(self) -> str:
        """Full invocation path, e.g. ``tag add``; cooldowns are keyed by it."""
        if self.parent:
            return f"{self.parent} {self.name}"
        return self.name

    def with_callback(self, callback: Callable[..., Any]) -> "CommandSpec":
        return replace(self, callback=callback, subcommands=dict(self.subcommands))


def unique_specs(specs: Mapping[str, CommandSpec] | Iterable[CommandSpec]) -> list[CommandSpec]:
    """Distinct specs in declaration order; a mapping lists a spec once per alias."""
    declared = specs.values() if isinstance(specs, Mapping) else specs
    seen: dict[int, CommandSpec] = {}
    for spec in declared:
        seen.setdefault(id(spec), spec)
    return list(seen.values())
