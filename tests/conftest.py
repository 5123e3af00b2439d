"""Pytest configuration and shared fixtures."""

import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock

import hikari
import pytest

from commandgate.commands.context import ResolutionContext, StaticResolutionStrategy
from commandgate.core.cooldowns import CooldownTracker
from commandgate.core.gate import ExecutionGate
from commandgate.core.invocation import Invocation
from config.settings import GateSettings

# Disable logging during tests
logging.disable(logging.CRITICAL)

GUILD_ID = 123456789
CHANNEL_ID = 444444444
USER_ID = 111111111


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker(clock):
    return CooldownTracker(clock=clock)


@pytest.fixture
def mock_user():
    return SimpleNamespace(id=USER_ID, username="testuser", display_name="Test User")


@pytest.fixture
def other_user():
    return SimpleNamespace(id=222222222, username="otheruser", display_name="Other")


@pytest.fixture
def mock_channel():
    return SimpleNamespace(id=CHANNEL_ID, name="test-channel")


@pytest.fixture
def mock_role():
    return SimpleNamespace(id=333333333, name="Moderator")


@pytest.fixture
def mock_message():
    return SimpleNamespace(id=555555555, channel_id=CHANNEL_ID, content="hello")


@pytest.fixture
def mock_emoji():
    return SimpleNamespace(id=777777777, name="blobwave")


@pytest.fixture
def guild_strategy(mock_user, mock_channel, mock_role, mock_message, mock_emoji):
    return StaticResolutionStrategy(
        "guild",
        users=[mock_user],
        channels=[mock_channel],
        roles=[mock_role],
        messages=[mock_message, SimpleNamespace(id=666666666, channel_id=999999999, content="elsewhere")],
        emojis=[mock_emoji],
    )


@pytest.fixture
def mutual_strategy(other_user):
    return StaticResolutionStrategy("mutual_guilds", users=[other_user], fallback=True)


@pytest.fixture
def resolution_context(guild_strategy, mutual_strategy):
    return ResolutionContext(
        subject_id=USER_ID,
        channel_id=CHANNEL_ID,
        guild_id=GUILD_ID,
        strategies=(guild_strategy, mutual_strategy),
    )


@pytest.fixture
def dm_context(guild_strategy, mutual_strategy):
    return ResolutionContext(
        subject_id=USER_ID,
        channel_id=CHANNEL_ID,
        guild_id=None,
        strategies=(guild_strategy, mutual_strategy),
    )


@pytest.fixture
def mock_permission_source():
    """Permission source granting common member permissions."""
    source = AsyncMock()
    source.member_permissions = AsyncMock(
        return_value=hikari.Permissions.SEND_MESSAGES | hikari.Permissions.READ_MESSAGE_HISTORY
    )
    source.self_permissions = AsyncMock(
        return_value=hikari.Permissions.SEND_MESSAGES | hikari.Permissions.EMBED_LINKS
    )
    return source


@pytest.fixture
def gate(tracker, mock_permission_source):
    return ExecutionGate(tracker=tracker, permissions=mock_permission_source)


@pytest.fixture
def make_invocation(resolution_context):
    """Factory for invocations in the test guild."""

    def factory(raw_text=None, *, context=None, **kwargs):
        return Invocation(context=context or resolution_context, raw_text=raw_text, **kwargs)

    return factory


@pytest.fixture
def gate_settings():
    return GateSettings(command_prefix="!", suggestion_max_results=3)
