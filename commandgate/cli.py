import asyncio
import importlib
import logging
from typing import List, Optional

import typer

from config.settings import settings

from .commands.context import ResolutionContext
from .commands.parsers import ArgumentParser
from .commands.registry import CommandRegistry
from .commands.suggestions import rank
from .commands.tokenizer import tokenize as split_tokens
from .errors import ParseFailure

app = typer.Typer(
    name="commandgate",
    help="Command parsing and execution gating for chat bots",
    add_completion=False,
)


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def load_registry(target: str) -> CommandRegistry:
    """Load ``module:attribute`` naming a registry or an iterable of command specs."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise typer.BadParameter("Expected MODULE:ATTRIBUTE", param_hint="target")

    try:
        obj = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise typer.BadParameter(f"Cannot load {target}: {e}", param_hint="target") from e

    if isinstance(obj, CommandRegistry):
        return obj
    return CommandRegistry(obj)


@app.command()
def tokenize(line: str = typer.Argument(..., help="Raw command line")) -> None:
    """Show how a line is split into tokens."""
    for token in split_tokens(line):
        typer.echo(token)


@app.command()
def suggest(
    name: str = typer.Argument(..., help="Unrecognised command name"),
    commands: List[str] = typer.Option(..., "--command", "-c", help="Known command name"),
    max_distance: Optional[int] = typer.Option(None, "--max-distance", help="Maximum edit distance"),
    max_results: Optional[int] = typer.Option(None, "--max-results", help="Maximum number of suggestions"),
) -> None:
    """Suggest known command names close to NAME."""
    distance = max_distance if max_distance is not None else settings.suggestion_accuracy.max_distance
    matches = rank(name, commands, distance, max_results, settings.suggestion_input_cutoff)
    if not matches:
        typer.echo(f"No commands similar to '{name}'")
        raise typer.Exit(1)

    for match in matches:
        typer.echo(f"{match.name}\t{match.distance}")


@app.command()
def parse(
    target: str = typer.Argument(..., help="MODULE:ATTRIBUTE of a registry or list of command specs"),
    line: str = typer.Argument(..., help="Command line without prefix"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Set log level"),
) -> None:
    """Parse LINE against the commands in TARGET and print the arguments."""
    setup_logging(log_level or settings.log_level)
    registry = load_registry(target)

    tokens = split_tokens(line)
    if not tokens:
        raise typer.BadParameter("Line is empty", param_hint="line")

    resolved = registry.resolve(tokens[0], tokens[1:])
    if resolved is None:
        typer.echo(f"❌ Unknown command '{tokens[0]}'")
        raise typer.Exit(1)

    spec, args = resolved
    context = ResolutionContext(subject_id=0, channel_id=0)
    try:
        arguments = asyncio.run(ArgumentParser().parse(args, spec, context))
    except ParseFailure as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    typer.echo(f"✅ {spec.name}")
    for arg_name, value in arguments.items():
        typer.echo(f"  {arg_name} = {value!r}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
