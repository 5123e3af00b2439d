"""Execution gate: preconditions, cooldowns, then argument parsing."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta

import hikari

from ..commands.parsers import ArgumentParser, ParsedArguments, default_parser
from ..commands.spec import CommandSpec
from ..errors import (
    MissingPermission,
    MissingSelfPermission,
    NotInGuild,
    NsfwOnly,
    OnCooldown,
    ParseFailure,
    PermissionsUnavailable,
    Rejection,
)
from ..permissions.checks import PermissionSource, missing_permissions
from .cooldowns import CooldownKey, CooldownScope, CooldownTracker
from .invocation import Invocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Proceed:
    arguments: ParsedArguments
    started_cooldowns: tuple[CooldownKey, ...] = ()

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Rejected:
    reason: Rejection

    @property
    def ok(self) -> bool:
        return False


GateOutcome = Proceed | Rejected


class ExecutionGate:
    """
    Runs the checks for one invocation in a fixed order and stops at the first
    failure: guild-only, NSFW, user permissions, bot permissions, guild
    cooldown, user cooldown, channel cooldown, argument parsing.

    Each cooldown window starts as soon as its tier passes, even if a later
    tier rejects the invocation or the handler fails.
    """

    def __init__(
        self,
        tracker: CooldownTracker | None = None,
        permissions: PermissionSource | None = None,
        parser: ArgumentParser | None = None,
    ) -> None:
        self.tracker = tracker if tracker is not None else CooldownTracker()
        self.permissions = permissions
        self.parser = parser or default_parser

    def precheck(self, spec: CommandSpec, invocation: Invocation) -> Rejected | None:
        """Checks that hold before any interceptor runs; currently guild-only."""
        if spec.guild_only and invocation.guild_id is None:
            return Rejected(NotInGuild())
        return None

    async def evaluate(
        self, spec: CommandSpec, invocation: Invocation, tokens: Sequence[str] | None = None
    ) -> GateOutcome:
        try:
            return await self._evaluate(spec, invocation, tokens)
        except Rejection as e:
            logger.debug(f"Gate rejected {spec.qualified_name} for {invocation.subject_id}: {type(e).__name__}")
            return Rejected(e)

    async def _evaluate(
        self, spec: CommandSpec, invocation: Invocation, tokens: Sequence[str] | None
    ) -> Proceed:
        rejected = self.precheck(spec, invocation)
        if rejected is not None:
            raise rejected.reason

        if spec.nsfw and not invocation.channel_nsfw:
            raise NsfwOnly()

        if invocation.guild_id is not None:
            await self._check_permissions(spec, invocation)

        started = self._check_cooldowns(spec, invocation)

        context = invocation.context
        if invocation.options is not None:
            arguments = await self.parser.parse_options(invocation.options, spec, context)
        else:
            arguments = await self.parser.parse(list(tokens or ()), spec, context)
        return Proceed(arguments, started)

    async def _check_permissions(self, spec: CommandSpec, invocation: Invocation) -> None:
        if not spec.required_permissions and not spec.required_self_permissions:
            return

        if self.permissions is None:
            logger.warning(f"Permission check skipped for {spec.name}: no permission source configured")
            return

        guild_id = invocation.guild_id
        if spec.required_permissions:
            try:
                granted = await self.permissions.member_permissions(
                    guild_id, invocation.channel_id, invocation.subject_id
                )
            except Exception as e:
                logger.error(f"Error fetching permissions of {invocation.subject_id} in {guild_id}: {e}", exc_info=e)
                raise PermissionsUnavailable(e) from e
            missing = missing_permissions(granted, spec.required_permissions)
            if missing != hikari.Permissions.NONE:
                raise MissingPermission(missing)

        if spec.required_self_permissions:
            try:
                granted = await self.permissions.self_permissions(guild_id, invocation.channel_id)
            except Exception as e:
                logger.error(f"Error fetching bot permissions in {guild_id}: {e}", exc_info=e)
                raise PermissionsUnavailable(e) from e
            missing = missing_permissions(granted, spec.required_self_permissions)
            if missing != hikari.Permissions.NONE:
                raise MissingSelfPermission(missing)

    def _check_cooldowns(self, spec: CommandSpec, invocation: Invocation) -> tuple[CooldownKey, ...]:
        tiers: list[tuple[CooldownScope, timedelta, int | None]] = [
            (CooldownScope.GUILD, spec.cooldowns.guild, invocation.guild_id),
            (CooldownScope.USER, spec.cooldowns.user, invocation.subject_id),
            (CooldownScope.CHANNEL, spec.cooldowns.channel, invocation.channel_id),
        ]

        started = []
        for scope, duration, subject_id in tiers:
            if duration <= timedelta(0) or subject_id is None:
                continue
            remaining = self.tracker.acquire(scope, spec.qualified_name, subject_id, duration)
            if remaining is not None:
                raise OnCooldown(scope, remaining)
            started.append((scope, spec.qualified_name, subject_id))
        return tuple(started)

    def revoke(self, started: Sequence[CooldownKey]) -> None:
        for scope, command, subject_id in started:
            self.tracker.reset(scope, command, subject_id)


def is_parse_failure(outcome: GateOutcome) -> bool:
    return isinstance(outcome, Rejected) and isinstance(outcome.reason, ParseFailure)
