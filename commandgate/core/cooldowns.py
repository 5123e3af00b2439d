"""In-memory cooldown tracking per user, channel and guild."""

import enum
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta

logger = logging.getLogger(__name__)


class CooldownScope(enum.Enum):
    USER = "user"
    CHANNEL = "channel"
    GUILD = "guild"


@dataclass(frozen=True, slots=True)
class CooldownEntry:
    scope: CooldownScope
    command: str
    subject_id: int
    start_time: float
    end_time: float

    def remaining(self, now: float) -> timedelta | None:
        if now < self.end_time:
            return timedelta(seconds=self.end_time - now)
        return None


CooldownKey = tuple[CooldownScope, str, int]


class CooldownTracker:
    """
    Sliding expiry map of cooldown windows.

    One entry per ``(scope, command, subject)``; restarting a window overwrites
    it. Expired entries are not evicted, expiry is judged when queried. The
    check-then-start sequence in :meth:`acquire` holds a per-key lock, so two
    concurrent invocations for the same key cannot both pass.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock
        self._entries: dict[CooldownKey, CooldownEntry] = {}
        self._locks: dict[CooldownKey, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: CooldownKey) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _now(self, now: float | None) -> float:
        return self.clock() if now is None else now

    def get_entry(self, scope: CooldownScope, command: str, subject_id: int) -> CooldownEntry | None:
        return self._entries.get((scope, command, subject_id))

    def is_on_cooldown(self, scope: CooldownScope, command: str, subject_id: int, now: float | None = None) -> bool:
        return self.get_remaining(scope, command, subject_id, now) is not None

    def get_remaining(
        self, scope: CooldownScope, command: str, subject_id: int, now: float | None = None
    ) -> timedelta | None:
        entry = self._entries.get((scope, command, subject_id))
        if entry is None:
            return None
        return entry.remaining(self._now(now))

    def start_cooldown(
        self,
        scope: CooldownScope,
        command: str,
        subject_id: int,
        duration: timedelta,
        now: float | None = None,
    ) -> CooldownEntry:
        key = (scope, command, subject_id)
        with self._lock_for(key):
            return self._start(key, duration, self._now(now))

    def _start(self, key: CooldownKey, duration: timedelta, now: float) -> CooldownEntry:
        scope, command, subject_id = key
        entry = CooldownEntry(scope, command, subject_id, now, now + duration.total_seconds())
        self._entries[key] = entry
        logger.debug(f"Started {scope.value} cooldown for {command} ({subject_id}): {duration}")
        return entry

    def acquire(
        self,
        scope: CooldownScope,
        command: str,
        subject_id: int,
        duration: timedelta,
        now: float | None = None,
    ) -> timedelta | None:
        """Atomically check the key and start a fresh window if it is free.

        Returns the remaining time when the key is still on cooldown, otherwise
        starts a new window and returns ``None``.
        """
        key = (scope, command, subject_id)
        with self._lock_for(key):
            current = self._now(now)
            entry = self._entries.get(key)
            if entry is not None:
                remaining = entry.remaining(current)
                if remaining is not None:
                    return remaining
            self._start(key, duration, current)
            return None

    def reset(self, scope: CooldownScope, command: str, subject_id: int) -> None:
        key = (scope, command, subject_id)
        with self._lock_for(key):
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._locks_guard:
            self._entries.clear()
            self._locks.clear()

    def __len__(self) -> int:
        return len(self._entries)
