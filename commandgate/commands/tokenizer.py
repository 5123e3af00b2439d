"""Splitting raw command lines into tokens."""


def tokenize(line: str) -> list[str]:
    """Split on runs of whitespace. Quotes are not interpreted."""
    return line.split()


def split_command(content: str | None, prefix: str, *, lowercase: bool = True) -> tuple[str, list[str]] | None:
    """Strip ``prefix`` and separate the command name from its argument tokens.

    Returns ``None`` when the content does not start with the prefix or has
    nothing after it.
    """
    if not content or not content.startswith(prefix):
        return None

    parts = tokenize(content[len(prefix):])
    if not parts:
        return None

    name = parts[0].lower() if lowercase else parts[0]
    return name, parts[1:]
