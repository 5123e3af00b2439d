"""Command registration system."""

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import replace
from types import MappingProxyType
from typing import Any

from ..errors import CommandSpecError, RegistryFrozenError
from .spec import CommandSpec, unique_specs

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Name and alias lookup for registered commands.

    Commands are registered once during startup; :meth:`freeze` then hands
    out a read-only view and rejects further registration, so lookups need
    no synchronisation.
    """

    def __init__(self, specs: Iterable[CommandSpec] | None = None) -> None:
        self._commands: dict[str, CommandSpec] = {}
        self._specs: list[CommandSpec] = []
        self._frozen = False
        if specs:
            self.register_all(specs)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, spec: CommandSpec) -> CommandSpec:
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register '{spec.name}' after the registry was frozen")

        for key in spec.names:
            existing = self._commands.get(key)
            if existing is not None:
                raise CommandSpecError(f"'{key}' of command '{spec.name}' is already taken by '{existing.name}'")

        for key in spec.names:
            self._commands[key] = spec
        self._specs.append(spec)
        logger.debug(f"Registered command: {spec.name} (aliases: {sorted(spec.aliases)})")
        return spec

    def register_all(self, specs: Iterable[CommandSpec]) -> None:
        for spec in specs:
            self.register(spec)

    def register_from(self, plugin: Any) -> list[CommandSpec]:
        """Register every ``@command``-decorated method found on ``plugin``.

        Methods whose spec is nested as a subcommand of another decorated
        method are only reachable through their parent; their callbacks are
        bound to ``plugin`` like the top-level ones.
        """
        decorated = []
        for attr_name in dir(plugin):
            if attr_name.startswith("__"):
                continue
            attr = getattr(plugin, attr_name)
            spec = getattr(attr, "_command_spec", None)
            if isinstance(spec, CommandSpec):
                decorated.append((attr, spec))

        nested = {id(sub.callback) for _, spec in decorated for sub in _walk_subcommands(spec)}
        registered = []
        for attr, spec in decorated:
            if id(getattr(attr, "__func__", attr)) in nested:
                continue
            registered.append(self.register(_bind_subcommands(plugin, spec.with_callback(attr))))

        logger.info(f"Registered {len(registered)} command(s) from {type(plugin).__name__}")
        return registered

    def unregister(self, name: str) -> None:
        if self._frozen:
            raise RegistryFrozenError(f"Cannot unregister '{name}' after the registry was frozen")

        spec = self._commands.get(name.lower())
        if spec is None:
            return
        for key in spec.names:
            self._commands.pop(key, None)
        self._specs.remove(spec)
        logger.debug(f"Removed command: {spec.name}")

    def freeze(self) -> Mapping[str, CommandSpec]:
        self._frozen = True
        return MappingProxyType(self._commands)

    def get(self, name: str) -> CommandSpec | None:
        return self._commands.get(name.lower())

    def resolve(self, name: str, tokens: Sequence[str]) -> tuple[CommandSpec, list[str]] | None:
        """Look ``name`` up and descend into subcommands named by leading tokens."""
        spec = self.get(name)
        if spec is None:
            return None

        remaining = list(tokens)
        while remaining and remaining[0].lower() in spec.subcommands:
            spec = spec.subcommands[remaining.pop(0).lower()]
        return spec, remaining

    def names(self) -> frozenset[str]:
        """Every registered name and alias."""
        return frozenset(self._commands)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._commands

    def __iter__(self) -> Iterator[CommandSpec]:
        return iter(list(self._specs))

    def __len__(self) -> int:
        return len(self._specs)


def _walk_subcommands(spec: CommandSpec) -> Iterator[CommandSpec]:
    for sub in unique_specs(spec.subcommands):
        yield sub
        yield from _walk_subcommands(sub)


def _bind_subcommands(plugin: Any, spec: CommandSpec) -> CommandSpec:
    """Replace plain-function subcommand callbacks with ``plugin``'s bound methods."""
    if not spec.subcommands:
        return spec

    subcommands = []
    for sub in unique_specs(spec.subcommands):
        callback = sub.callback
        method = getattr(plugin, getattr(callback, "__name__", ""), None) if callback is not None else None
        if method is not None and getattr(method, "__func__", None) is callback:
            callback = method
        subcommands.append(replace(_bind_subcommands(plugin, sub), callback=callback))
    return replace(spec, subcommands=subcommands)
