"""Command argument types and definitions."""

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import hikari

from ..errors import CommandSpecError
from .converters import Converter, ConverterFactory, as_converter


class Multiplicity(enum.Enum):
    """How many raw tokens an argument consumes."""

    ONE = "one"
    OPTIONAL = "optional"
    LIST = "list"
    REMAINDER = "remainder"

    @property
    def variadic(self) -> bool:
        return self in (Multiplicity.LIST, Multiplicity.REMAINDER)


@dataclass(frozen=True)
class ArgumentSpec:
    """Defines one named argument of a command."""

    name: str
    multiplicity: Multiplicity = Multiplicity.ONE
    validate: Converter[Any] | Callable[[str], Any] | None = None
    required: bool | None = None
    default: Any = hikari.UNDEFINED
    choices: frozenset[str] | None = None
    description: str = ""
    option_type: hikari.OptionType = hikari.OptionType.STRING
    converter: Converter[Any] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.name.isidentifier():
            raise CommandSpecError(f"Argument name '{self.name}' is not a valid identifier")

        required = self.required
        if required is None:
            required = self.multiplicity in (Multiplicity.ONE, Multiplicity.REMAINDER)
        elif self.multiplicity is Multiplicity.ONE and not required:
            raise CommandSpecError(f"Argument '{self.name}' is ONE but not required; use OPTIONAL")
        elif self.multiplicity is Multiplicity.OPTIONAL and required:
            raise CommandSpecError(f"Argument '{self.name}' is OPTIONAL but marked required")
        object.__setattr__(self, "required", required)

        if self.choices is not None:
            object.__setattr__(self, "choices", frozenset(self.choices))

        if self.validate is None:
            converter = ConverterFactory.get_converter(self.option_type)
        else:
            converter = as_converter(self.validate)
        object.__setattr__(self, "converter", converter)

    @property
    def has_default(self) -> bool:
        return self.default is not hikari.UNDEFINED

    def absent_value(self) -> Any:
        """Value used when the argument was not supplied at all."""
        if self.has_default:
            return self.default
        if self.multiplicity is Multiplicity.LIST:
            return ()
        return hikari.UNDEFINED


def argument(name: str, validate: Converter[Any] | Callable[[str], Any] | None = None, **kwargs: Any) -> ArgumentSpec:
    """A required single-token argument."""
    return ArgumentSpec(name, Multiplicity.ONE, validate, **kwargs)


def optional(name: str, validate: Converter[Any] | Callable[[str], Any] | None = None, **kwargs: Any) -> ArgumentSpec:
    return ArgumentSpec(name, Multiplicity.OPTIONAL, validate, **kwargs)


def many(name: str, validate: Converter[Any] | Callable[[str], Any] | None = None, **kwargs: Any) -> ArgumentSpec:
    """Every remaining token, each converted separately."""
    return ArgumentSpec(name, Multiplicity.LIST, validate, **kwargs)


def remainder(name: str, validate: Converter[Any] | Callable[[str], Any] | None = None, **kwargs: Any) -> ArgumentSpec:
    """Every remaining token joined back into one string before conversion."""
    return ArgumentSpec(name, Multiplicity.REMAINDER, validate, **kwargs)
