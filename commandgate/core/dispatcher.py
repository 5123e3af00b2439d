import asyncio
import inspect
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from config.settings import GateSettings, settings as default_settings

from ..commands.registry import CommandRegistry
from ..commands.spec import CommandSpec
from ..commands.suggestions import suggest
from ..commands.tokenizer import split_command
from ..errors import OnCooldown, ParseFailure
from .gate import ExecutionGate, GateOutcome, Proceed, Rejected
from .invocation import CommandContext, Invocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandNotFound:
    name: str
    suggestions: tuple[str, ...] = ()


@dataclass
class DispatchHooks:
    """Optional callbacks, sync or async, fired at each dispatch outcome.

    ``on_cooldown`` and ``on_parse_error`` take precedence over
    ``on_rejected`` for their kind of rejection. ``interceptors`` are keyed by
    command name and veto the invocation by returning ``False``.
    """

    on_rejected: Callable[..., Any] | None = None
    on_cooldown: Callable[..., Any] | None = None
    on_parse_error: Callable[..., Any] | None = None
    on_error: Callable[..., Any] | None = None
    on_not_found: Callable[..., Any] | None = None
    on_completed: Callable[..., Any] | None = None
    interceptors: dict[str, Callable[..., Any]] = field(default_factory=dict)


DispatchResult = GateOutcome | CommandNotFound | None


class CommandDispatcher:
    def __init__(
        self,
        registry: CommandRegistry,
        gate: ExecutionGate | None = None,
        settings: GateSettings | None = None,
        hooks: DispatchHooks | None = None,
    ) -> None:
        self.registry = registry
        self.gate = gate or ExecutionGate()
        self.settings = settings or default_settings
        self.hooks = hooks or DispatchHooks()
        self.prefix = self.settings.command_prefix
        self._tasks: set[asyncio.Task] = set()

    async def handle_message(self, invocation: Invocation) -> DispatchResult:
        """Dispatch a text invocation; returns ``None`` when it was not a command."""
        if invocation.author_is_bot and self.settings.ignore_bot_authors:
            return None

        parsed = split_command(invocation.raw_text, self.prefix)
        if parsed is None:
            return None

        command_name, args = parsed
        resolved = self.registry.resolve(command_name, args)
        if resolved is None:
            return await self._not_found(invocation, command_name)

        spec, tokens = resolved
        logger.info(f"Prefix command called: {self.prefix}{command_name} by {invocation.subject_id}")
        return await self._dispatch(spec, invocation, tokens)

    async def handle_interaction(self, invocation: Invocation) -> DispatchResult:
        """Dispatch a structured invocation that names its command directly."""
        if not invocation.command_name:
            return None

        names = invocation.command_name.split()
        resolved = self.registry.resolve(names[0], names[1:])
        if resolved is None or resolved[1]:
            return await self._not_found(invocation, invocation.command_name)

        spec = resolved[0]
        logger.info(f"Slash command called: /{invocation.command_name} by {invocation.subject_id}")
        return await self._dispatch(spec, invocation, None)

    async def _dispatch(
        self, spec: CommandSpec, invocation: Invocation, tokens: Sequence[str] | None
    ) -> DispatchResult:
        rejected = self.gate.precheck(spec, invocation)
        if rejected is not None:
            await self._rejected(invocation, spec, rejected)
            return rejected

        interceptor = self.hooks.interceptors.get(spec.name)
        if interceptor is not None:
            allowed = await self._call_maybe_async(interceptor, invocation, spec)
            if allowed is False:
                logger.debug(f"Command {spec.name} stopped by interceptor")
                return None

        outcome = await self.gate.evaluate(spec, invocation, tokens)
        if isinstance(outcome, Rejected):
            await self._rejected(invocation, spec, outcome)
            return outcome

        self._spawn(spec, invocation, outcome)
        return outcome

    async def _rejected(self, invocation: Invocation, spec: CommandSpec, outcome: Rejected) -> None:
        reason = outcome.reason
        logger.warning(f"Command {spec.qualified_name} rejected for {invocation.subject_id}: {reason}")

        handler = self.hooks.on_rejected
        if isinstance(reason, OnCooldown) and self.hooks.on_cooldown is not None:
            handler = self.hooks.on_cooldown
        elif isinstance(reason, ParseFailure) and self.hooks.on_parse_error is not None:
            handler = self.hooks.on_parse_error

        if handler is not None:
            await self._run_hook(handler, invocation, spec, reason)

    async def _not_found(self, invocation: Invocation, name: str) -> CommandNotFound:
        suggestions: list[str] = []
        if self.settings.enable_command_suggestions:
            suggestions = suggest(
                name,
                self.registry.names(),
                self.settings.suggestion_accuracy.max_distance,
                self.settings.suggestion_max_results,
                self.settings.suggestion_input_cutoff,
            )

        result = CommandNotFound(name, tuple(suggestions))
        if self.hooks.on_not_found is not None:
            await self._run_hook(self.hooks.on_not_found, invocation, result)
        return result

    def _spawn(self, spec: CommandSpec, invocation: Invocation, outcome: Proceed) -> None:
        if spec.callback is None:
            logger.debug(f"Command {spec.name} has no handler attached")
            return

        ctx = CommandContext(
            invocation=invocation,
            spec=spec,
            arguments=outcome.arguments,
            prefix="/" if invocation.structured else self.prefix,
            _revoke=lambda: self.gate.revoke(outcome.started_cooldowns),
        )
        task = asyncio.create_task(self._run_handler(ctx), name=f"command:{spec.qualified_name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_handler(self, ctx: CommandContext) -> None:
        spec = ctx.spec
        try:
            await self._call_maybe_async(spec.callback, ctx, **ctx.arguments)
        except Exception as e:
            logger.error(f"Error executing command {spec.qualified_name}: {e}", exc_info=e)
            if self.hooks.on_error is not None:
                await self._run_hook(self.hooks.on_error, ctx, e)
            return

        if self.hooks.on_completed is not None:
            await self._run_hook(self.hooks.on_completed, ctx)

    async def _run_hook(self, hook: Callable[..., Any], *args: Any) -> None:
        try:
            await self._call_maybe_async(hook, *args)
        except Exception as e:
            logger.error(f"Error in dispatch hook {getattr(hook, '__name__', hook)!r}: {e}", exc_info=e)

    async def _call_maybe_async(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        result = func(*args, **kwargs)
        if inspect.isawaitable(result):
            return await result
        return result

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def wait_closed(self) -> None:
        """Wait for every running handler task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        await self.wait_closed()
