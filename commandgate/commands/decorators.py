"""Command decorator for declaring commands on plugin classes."""

from collections.abc import Iterable
from datetime import timedelta

import hikari

from .argument_types import ArgumentSpec
from .spec import CommandSpec, Cooldowns


def command(
    name: str,
    description: str = "No description provided",
    aliases: Iterable[str] | None = None,
    arguments: Iterable[ArgumentSpec] | None = None,
    guild_only: bool = False,
    nsfw: bool = False,
    permissions: hikari.Permissions | None = None,
    self_permissions: hikari.Permissions | None = None,
    user_cooldown: timedelta | float = 0,
    channel_cooldown: timedelta | float = 0,
    guild_cooldown: timedelta | float = 0,
    subcommands: Iterable[CommandSpec] | None = None,
):
    """
    Declare a command on a function or method.

    The CommandSpec is built and validated immediately and stored on the
    function; it is only picked up when the owning object is passed to
    :meth:`CommandRegistry.register_from`.
    """
    spec = CommandSpec(
        name=name,
        args=tuple(arguments or ()),
        aliases=frozenset(aliases or ()),
        description=description,
        guild_only=guild_only,
        nsfw=nsfw,
        required_permissions=permissions,
        required_self_permissions=self_permissions,
        cooldowns=Cooldowns(user=user_cooldown, channel=channel_cooldown, guild=guild_cooldown),
        subcommands=tuple(subcommands or ()),
    )

    def decorator(func):
        func._command_spec = spec.with_callback(func)
        return func

    return decorator
