"""Per-invocation resolution context handed to converters."""

import enum
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

_MENTION_MARKUP = re.compile(r"^<(?:@[!&]?|#)(\d+)>$")


class EntityKind(enum.Enum):
    USER = "user"
    CHANNEL = "channel"
    ROLE = "role"
    MESSAGE = "message"
    EMOJI = "emoji"


@runtime_checkable
class ResolutionStrategy(Protocol):
    """A place to look entities up in, e.g. the current guild or mutual guilds."""

    name: str
    fallback: bool

    async def find(self, kind: EntityKind, token: str) -> Any | None: ...


def extract_id(token: str) -> int | None:
    """Return the snowflake inside a raw id or a mention like ``<@!123>``."""
    match = _MENTION_MARKUP.match(token)
    if match:
        return int(match.group(1))
    if token.isdigit():
        return int(token)
    return None


class StaticResolutionStrategy:
    """In-memory strategy matching ids, mentions and case-insensitive names.

    Entities only need an ``id`` attribute; they are matched by name through
    ``username``, ``display_name`` or ``name``, whichever they carry.
    """

    def __init__(
        self,
        name: str = "static",
        *,
        users: Iterable[Any] = (),
        channels: Iterable[Any] = (),
        roles: Iterable[Any] = (),
        messages: Iterable[Any] = (),
        emojis: Iterable[Any] = (),
        fallback: bool = False,
    ) -> None:
        self.name = name
        self.fallback = fallback
        self._entities: dict[EntityKind, list[Any]] = {
            EntityKind.USER: list(users),
            EntityKind.CHANNEL: list(channels),
            EntityKind.ROLE: list(roles),
            EntityKind.MESSAGE: list(messages),
            EntityKind.EMOJI: list(emojis),
        }

    async def find(self, kind: EntityKind, token: str) -> Any | None:
        entities = self._entities.get(kind, [])
        entity_id = extract_id(token)
        if entity_id is not None:
            for entity in entities:
                if getattr(entity, "id", None) == entity_id:
                    return entity

        lowered = token.lower()
        for entity in entities:
            for attr in ("username", "display_name", "name"):
                value = getattr(entity, attr, None)
                if isinstance(value, str) and value.lower() == lowered:
                    return entity
        return None


@dataclass(frozen=True)
class ResolutionContext:
    """Who is invoking, where, and how entities can be looked up."""

    subject_id: int
    channel_id: int
    guild_id: int | None = None
    strategies: Sequence[ResolutionStrategy] = field(default_factory=tuple)

    @property
    def in_guild(self) -> bool:
        return self.guild_id is not None

    async def resolve(self, kind: EntityKind, token: str, *, include_fallbacks: bool = False) -> Any | None:
        """Try each strategy in order until one finds the entity."""
        for strategy in self.strategies:
            if strategy.fallback and not include_fallbacks:
                continue
            found = await strategy.find(kind, token)
            if found is not None:
                logger.debug(f"Resolved {kind.value} '{token}' via {strategy.name}")
                return found
        return None
