"""Typed converters turning raw argument strings into values."""

import enum
import inspect
import logging
import re
import unicodedata
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from datetime import date, datetime, timedelta
from typing import Any, Generic, TypeVar
from urllib.parse import urlparse

import hikari

from .context import EntityKind, ResolutionContext, extract_id

logger = logging.getLogger(__name__)

T = TypeVar("T")

DURATION_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)\s*([a-zA-Z]+)$")

DURATION_UNITS: dict[str, int] = {
    "mo": 2_592_000, "month": 2_592_000, "months": 2_592_000,
    "w": 604_800, "week": 604_800, "weeks": 604_800,
    "d": 86_400, "day": 86_400, "days": 86_400,
    "h": 3_600, "hour": 3_600, "hours": 3_600,
    "m": 60, "min": 60, "mins": 60, "minute": 60, "minutes": 60,
    "s": 1, "sec": 1, "secs": 1, "second": 1, "seconds": 1,
}

DATE_FORMATS = (
    "%d.%m.%Y", "%d-%m-%Y", "%d/%m/%Y",
    "%Y.%m.%d", "%Y-%m-%d", "%Y/%m/%d",
    "%d %m %Y", "%d %b %Y", "%b %d %Y",
)
# Tried after DATE_FORMATS; the year defaults to the current one
YEARLESS_DATE_FORMATS = (
    "%d.%m", "%d-%m", "%d/%m",
    "%m.%d", "%m-%d", "%m/%d",
    "%d %m", "%d %b", "%b %d",
)
TIME_SUFFIX = " %H:%M:%S"

MESSAGE_LINK = re.compile(
    r"^https?://(?:(?:ptb|canary)\.)?discord(?:app)?\.com/channels/"
    r"(?P<guild>\d+|@me)/(?P<channel>\d+)/(?P<message>\d+)$"
)

TRUE_WORDS = frozenset({"true", "1", "yes", "on", "y", "enable", "enabled"})
FALSE_WORDS = frozenset({"false", "0", "no", "off", "n", "disable", "disabled"})


class Converter(ABC, Generic[T]):
    """Turns one raw string into a typed value or raises."""

    @abstractmethod
    async def convert(self, raw: str, context: ResolutionContext) -> T:
        """Convert ``raw``; any exception marks the value as invalid."""


class FunctionConverter(Converter[T]):
    """Adapts a plain ``raw -> value`` callable, sync or async."""

    def __init__(self, func: Callable[[str], Any]) -> None:
        self.func = func

    async def convert(self, raw: str, context: ResolutionContext) -> T:
        result = self.func(raw)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"FunctionConverter({getattr(self.func, '__name__', self.func)!r})"


def as_converter(validate: "Converter[Any] | Callable[[str], Any]") -> Converter[Any]:
    if isinstance(validate, Converter):
        return validate
    if callable(validate):
        return FunctionConverter(validate)
    raise TypeError(f"Expected a Converter or a callable, got {type(validate).__name__}")


class StringConverter(Converter[str]):
    async def convert(self, raw: str, context: ResolutionContext) -> str:
        return raw


class IntegerConverter(Converter[int]):
    async def convert(self, raw: str, context: ResolutionContext) -> int:
        return int(raw)


class NonNegativeIntegerConverter(Converter[int]):
    async def convert(self, raw: str, context: ResolutionContext) -> int:
        value = int(raw)
        if value < 0:
            raise ValueError(f"{value} is negative")
        return value


class UnsignedIntegerConverter(NonNegativeIntegerConverter):
    """Integers in ``[0, 2**bits)``; 32 bits by default, 64 for the wide variant."""

    def __init__(self, bits: int = 32) -> None:
        if bits <= 0:
            raise ValueError("bits must be positive")
        self.bits = bits

    async def convert(self, raw: str, context: ResolutionContext) -> int:
        value = await super().convert(raw, context)
        if value >= 1 << self.bits:
            raise OverflowError(f"{value} does not fit in {self.bits} unsigned bits")
        return value


class FloatConverter(Converter[float]):
    async def convert(self, raw: str, context: ResolutionContext) -> float:
        return float(raw)


class BooleanConverter(Converter[bool]):
    async def convert(self, raw: str, context: ResolutionContext) -> bool:
        lowered = raw.lower()
        if lowered in TRUE_WORDS:
            return True
        if lowered in FALSE_WORDS:
            return False
        raise ValueError(f"'{raw}' is not a boolean")


class SnowflakeConverter(Converter[hikari.Snowflake]):
    async def convert(self, raw: str, context: ResolutionContext) -> hikari.Snowflake:
        value = extract_id(raw)
        if value is None or value <= 0:
            raise ValueError(f"'{raw}' is not a valid id")
        return hikari.Snowflake(value)


class URLConverter(Converter[str]):
    async def convert(self, raw: str, context: ResolutionContext) -> str:
        parsed = urlparse(raw)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"'{raw}' is not an absolute URL")
        return raw


def parse_duration(raw: str) -> timedelta:
    """Parse inputs like ``10s``, ``1.5h`` or ``2 weeks``."""
    match = DURATION_PATTERN.match(raw.strip())
    if not match:
        raise ValueError(f"'{raw}' is not a duration")

    amount, unit = match.groups()
    seconds = DURATION_UNITS.get(unit.lower())
    if seconds is None:
        raise ValueError(f"Unknown duration unit '{unit}'")
    return timedelta(seconds=float(amount) * seconds)


def parse_datetime(raw: str, *, today: date | None = None) -> datetime:
    """
    Parse a date with an optional ``HH:MM:SS`` time using the known formats.

    The year may be left out (``24.12``, ``Dec 24 18:00:00``); it then
    defaults to the year of ``today``, which is the current date unless given.
    """
    text = raw.strip()
    for fmt in DATE_FORMATS:
        for pattern in (fmt + TIME_SUFFIX, fmt):
            try:
                return datetime.strptime(text, pattern)
            except ValueError:
                continue

    # The year is prepended so 29 February parses in leap years
    year = (today or date.today()).year
    for fmt in YEARLESS_DATE_FORMATS:
        for pattern in (fmt + TIME_SUFFIX, fmt):
            try:
                return datetime.strptime(f"{year} {text}", "%Y " + pattern)
            except ValueError:
                continue
    raise ValueError(f"'{raw}' is not a recognised date")


class DurationConverter(Converter[timedelta]):
    async def convert(self, raw: str, context: ResolutionContext) -> timedelta:
        return parse_duration(raw)


class DateTimeConverter(Converter[datetime]):
    async def convert(self, raw: str, context: ResolutionContext) -> datetime:
        return parse_datetime(raw)


class DateConverter(Converter[date]):
    async def convert(self, raw: str, context: ResolutionContext) -> date:
        return parse_datetime(raw).date()


class ColorConverter(Converter[hikari.Color]):
    async def convert(self, raw: str, context: ResolutionContext) -> hikari.Color:
        return hikari.Color.from_hex_code(raw)


class EnumConverter(Converter[Any]):
    """Looks members up by name; case-insensitive, spaces become underscores."""

    def __init__(self, enum_type: type[enum.Enum]) -> None:
        self.enum_type = enum_type

    async def convert(self, raw: str, context: ResolutionContext) -> Any:
        return self.enum_type[raw.upper().replace(" ", "_")]


class MappingConverter(Converter[Any]):
    def __init__(self, values: Mapping[str, Any], *, ignore_case: bool = False) -> None:
        self.ignore_case = ignore_case
        self.values = {k.lower(): v for k, v in values.items()} if ignore_case else dict(values)

    async def convert(self, raw: str, context: ResolutionContext) -> Any:
        key = raw.lower() if self.ignore_case else raw
        return self.values[key]


class EntityConverter(Converter[Any]):
    """Resolves an entity through the context's ordered strategies.

    With ``search_fallbacks`` the wider strategies (such as mutual guilds when
    invoked from a DM) are consulted once the primary ones come up empty.
    """

    kind: EntityKind = EntityKind.USER

    def __init__(self, *, search_fallbacks: bool = False) -> None:
        self.search_fallbacks = search_fallbacks

    async def convert(self, raw: str, context: ResolutionContext) -> Any:
        entity = await context.resolve(self.kind, raw, include_fallbacks=self.search_fallbacks)
        if entity is None:
            raise LookupError(f"No {self.kind.value} matching '{raw}'")
        return entity


class UserConverter(EntityConverter):
    kind = EntityKind.USER


class RoleConverter(EntityConverter):
    kind = EntityKind.ROLE


class MessageConverter(EntityConverter):
    """Messages by id or by jump link.

    A link is checked against its channel: the channel must be visible to the
    invoker and the message must belong to it. Links into direct messages
    (``/channels/@me/...``) are refused unless ``include_private_channels``.
    """

    kind = EntityKind.MESSAGE

    def __init__(self, *, search_fallbacks: bool = False, include_private_channels: bool = False) -> None:
        super().__init__(search_fallbacks=search_fallbacks)
        self.include_private_channels = include_private_channels

    async def convert(self, raw: str, context: ResolutionContext) -> Any:
        match = MESSAGE_LINK.match(raw.strip())
        if match is None:
            return await super().convert(raw, context)

        channel_id = int(match.group("channel"))
        if match.group("guild") == "@me":
            if not self.include_private_channels:
                raise PermissionError("Links to direct messages are not accepted")
        else:
            channel = await context.resolve(
                EntityKind.CHANNEL, str(channel_id), include_fallbacks=self.search_fallbacks
            )
            if channel is None:
                raise LookupError(f"No channel matching '{channel_id}'")

        message = await super().convert(match.group("message"), context)
        if getattr(message, "channel_id", channel_id) != channel_id:
            raise LookupError(f"Message {match.group('message')} is not in channel {channel_id}")
        return message


class ChannelConverter(EntityConverter):
    kind = EntityKind.CHANNEL

    def __init__(self, *types: type, search_fallbacks: bool = False) -> None:
        super().__init__(search_fallbacks=search_fallbacks)
        self.types = types

    async def convert(self, raw: str, context: ResolutionContext) -> Any:
        channel = await super().convert(raw, context)
        if self.types and not isinstance(channel, self.types):
            expected = ", ".join(t.__name__ for t in self.types)
            raise TypeError(f"Channel '{raw}' is not one of: {expected}")
        return channel


class MentionableConverter(EntityConverter):
    """Users first, then roles."""

    async def convert(self, raw: str, context: ResolutionContext) -> Any:
        for kind in (EntityKind.USER, EntityKind.ROLE):
            entity = await context.resolve(kind, raw, include_fallbacks=self.search_fallbacks)
            if entity is not None:
                return entity
        raise LookupError(f"No user or role matching '{raw}'")


_EMOJI_CATEGORIES = frozenset({"So", "Sk", "Mn", "Me", "Cf"})
_KEYCAP = "\u20e3"


def is_unicode_emoji(text: str) -> bool:
    """Loose check that ``text`` is made of emoji codepoints, modifiers and joiners only."""
    if not any(unicodedata.category(ch) == "So" or ch == _KEYCAP for ch in text):
        return False

    keycap = _KEYCAP in text
    for ch in text:
        if ch in "#*0123456789":
            if not keycap:
                return False
        elif unicodedata.category(ch) not in _EMOJI_CATEGORIES:
            return False
    return True


class UnicodeEmojiConverter(Converter[hikari.UnicodeEmoji]):
    async def convert(self, raw: str, context: ResolutionContext) -> hikari.UnicodeEmoji:
        if not is_unicode_emoji(raw):
            raise ValueError(f"'{raw}' is not an emoji")
        return hikari.UnicodeEmoji.parse(raw)


class CustomEmojiConverter(Converter[Any]):
    """Custom emoji markup like ``<:name:123>``.

    With ``require_known`` the emoji must also be found through the context's
    strategies, and the found entity is returned instead of the parsed markup.
    """

    def __init__(self, *, require_known: bool = True, search_fallbacks: bool = False) -> None:
        self.require_known = require_known
        self.search_fallbacks = search_fallbacks

    async def convert(self, raw: str, context: ResolutionContext) -> Any:
        emoji = hikari.CustomEmoji.parse(raw)
        if not self.require_known:
            return emoji

        found = await context.resolve(EntityKind.EMOJI, str(emoji.id), include_fallbacks=self.search_fallbacks)
        if found is None:
            raise LookupError(f"No emoji matching '{raw}'")
        return found


class EmojiConverter(Converter[hikari.Emoji]):
    """Either kind of emoji; custom emoji are returned as parsed, without a lookup."""

    async def convert(self, raw: str, context: ResolutionContext) -> hikari.Emoji:
        emoji = hikari.Emoji.parse(raw)
        if not isinstance(emoji, hikari.CustomEmoji) and not is_unicode_emoji(raw):
            raise ValueError(f"'{raw}' is not an emoji")
        return emoji


class ConverterFactory:
    """Default converters for slash option types."""

    _converters: dict[hikari.OptionType, Converter[Any]] = {
        hikari.OptionType.STRING: StringConverter(),
        hikari.OptionType.INTEGER: IntegerConverter(),
        hikari.OptionType.FLOAT: FloatConverter(),
        hikari.OptionType.BOOLEAN: BooleanConverter(),
        hikari.OptionType.USER: UserConverter(),
        hikari.OptionType.CHANNEL: ChannelConverter(),
        hikari.OptionType.ROLE: RoleConverter(),
        hikari.OptionType.MENTIONABLE: MentionableConverter(),
    }

    @classmethod
    def get_converter(cls, option_type: hikari.OptionType) -> Converter[Any]:
        return cls._converters.get(option_type, cls._converters[hikari.OptionType.STRING])
