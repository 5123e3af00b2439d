from .cooldowns import CooldownScope, CooldownTracker
from .dispatcher import CommandDispatcher, CommandNotFound, DispatchHooks
from .gate import ExecutionGate, Proceed, Rejected
from .invocation import CommandContext, Invocation

__all__ = [
    "CooldownScope",
    "CooldownTracker",
    "CommandDispatcher",
    "CommandNotFound",
    "DispatchHooks",
    "ExecutionGate",
    "Proceed",
    "Rejected",
    "CommandContext",
    "Invocation",
]
