"""Command system: argument specs, converters, parsing and registration."""

from .argument_types import ArgumentSpec, Multiplicity, argument, many, optional, remainder
from .context import EntityKind, ResolutionContext, ResolutionStrategy, StaticResolutionStrategy
from .converters import Converter, ConverterFactory
from .decorators import command
from .parsers import ArgumentParser, ParsedArguments
from .registry import CommandRegistry
from .spec import CommandSpec, Cooldowns
from .suggestions import SuggestionAccuracy, suggest
from .tokenizer import split_command, tokenize

__all__ = [
    "ArgumentSpec",
    "Multiplicity",
    "argument",
    "optional",
    "many",
    "remainder",
    "EntityKind",
    "ResolutionContext",
    "ResolutionStrategy",
    "StaticResolutionStrategy",
    "Converter",
    "ConverterFactory",
    "command",
    "ArgumentParser",
    "ParsedArguments",
    "CommandRegistry",
    "CommandSpec",
    "Cooldowns",
    "SuggestionAccuracy",
    "suggest",
    "split_command",
    "tokenize",
]
