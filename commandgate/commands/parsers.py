"""Argument parsing against a command's declared arguments."""

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from ..errors import InvalidArgument, MissingArgument
from .argument_types import ArgumentSpec, Multiplicity
from .context import ResolutionContext
from .spec import CommandSpec

logger = logging.getLogger(__name__)


class ParsedArguments(Mapping[str, Any]):
    """Immutable bag of converted argument values keyed by argument name."""

    __slots__ = ("_values", "_supplied")

    def __init__(self, values: Mapping[str, Any] | None = None, supplied: frozenset[str] = frozenset()) -> None:
        self._values = dict(values or {})
        self._supplied = frozenset(supplied)

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def is_supplied(self, name: str) -> bool:
        """Whether the invoker actually provided a value for ``name``."""
        return name in self._supplied

    def __repr__(self) -> str:
        return f"ParsedArguments({self._values!r})"


class ArgumentParser:
    """Sequences raw-string to typed-value conversion for one command.

    The parser knows nothing about what a value is; converters own that, and
    may consult the resolution context for entity lookups.
    """

    async def parse(
        self, tokens: Sequence[str], spec: CommandSpec, context: ResolutionContext
    ) -> ParsedArguments:
        values: dict[str, Any] = {}
        supplied: set[str] = set()
        position = 0

        for arg in spec.args:
            if arg.multiplicity.variadic:
                raw_tokens = list(tokens[position:])
                position = len(tokens)
                if not raw_tokens:
                    values[arg.name] = self._absent(arg)
                    continue
                if arg.multiplicity is Multiplicity.REMAINDER:
                    values[arg.name] = await self._convert(arg, " ".join(raw_tokens), context)
                else:
                    values[arg.name] = tuple([await self._convert(arg, raw, context) for raw in raw_tokens])
            else:
                if position >= len(tokens):
                    values[arg.name] = self._absent(arg)
                    continue
                values[arg.name] = await self._convert(arg, tokens[position], context)
                position += 1
            supplied.add(arg.name)

        if position < len(tokens):
            logger.debug(f"Ignoring {len(tokens) - position} extra token(s) for command '{spec.name}'")

        return ParsedArguments(values, frozenset(supplied))

    async def parse_options(
        self, options: Mapping[str, Any], spec: CommandSpec, context: ResolutionContext
    ) -> ParsedArguments:
        """Parse a structured invocation whose options are already keyed by name."""
        values: dict[str, Any] = {}
        supplied: set[str] = set()

        for arg in spec.args:
            if arg.name not in options or options[arg.name] is None:
                values[arg.name] = self._absent(arg)
                continue

            value = options[arg.name]
            if isinstance(value, (list, tuple)) and arg.multiplicity is Multiplicity.REMAINDER:
                value = " ".join(str(item) for item in value)

            if isinstance(value, str):
                if arg.multiplicity is Multiplicity.LIST:
                    values[arg.name] = tuple([await self._convert(arg, raw, context) for raw in value.split()])
                else:
                    values[arg.name] = await self._convert(arg, value, context)
            elif isinstance(value, (list, tuple)):
                converted = []
                for item in value:
                    if isinstance(item, str):
                        converted.append(await self._convert(arg, item, context))
                    else:
                        self._check_choice(arg, item)
                        converted.append(item)
                values[arg.name] = tuple(converted)
            else:
                # The platform already resolved this option to a typed value
                self._check_choice(arg, value)
                values[arg.name] = value
            supplied.add(arg.name)

        return ParsedArguments(values, frozenset(supplied))

    def _absent(self, arg: ArgumentSpec) -> Any:
        if arg.required:
            raise MissingArgument(arg.name)
        return arg.absent_value()

    def _check_choice(self, arg: ArgumentSpec, value: Any) -> None:
        # Typed values are compared by their string form
        raw = str(value)
        if arg.choices is not None and raw not in arg.choices:
            raise InvalidArgument(arg.name, raw, ValueError(f"'{raw}' is not one of {sorted(arg.choices)}"))

    async def _convert(self, arg: ArgumentSpec, raw: str, context: ResolutionContext) -> Any:
        self._check_choice(arg, raw)

        try:
            return await arg.converter.convert(raw, context)
        except Exception as e:
            logger.debug(f"Converter for argument '{arg.name}' rejected '{raw}': {e!r}")
            raise InvalidArgument(arg.name, raw, e) from e


default_parser = ArgumentParser()
