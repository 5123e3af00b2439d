"""Tests for commandgate/permissions/checks.py"""

from datetime import timedelta

import hikari

from commandgate.core.cooldowns import CooldownScope
from commandgate.errors import MissingArgument, MissingPermission, MissingSelfPermission, OnCooldown
from commandgate.permissions.checks import format_permissions, has_permissions, missing_permissions


class TestMissingPermissions:
    def test_reports_only_missing_flags(self):
        granted = hikari.Permissions.SEND_MESSAGES
        required = hikari.Permissions.SEND_MESSAGES | hikari.Permissions.KICK_MEMBERS

        assert missing_permissions(granted, required) == hikari.Permissions.KICK_MEMBERS
        assert not has_permissions(granted, required)

    def test_all_granted(self):
        granted = hikari.Permissions.SEND_MESSAGES | hikari.Permissions.KICK_MEMBERS

        assert missing_permissions(granted, hikari.Permissions.KICK_MEMBERS) == hikari.Permissions.NONE
        assert has_permissions(granted, hikari.Permissions.KICK_MEMBERS)

    def test_administrator_grants_everything(self):
        required = hikari.Permissions.BAN_MEMBERS | hikari.Permissions.MANAGE_GUILD
        assert has_permissions(hikari.Permissions.ADMINISTRATOR, required)


class TestFormatPermissions:
    def test_title_cases_flag_names(self):
        permissions = hikari.Permissions.KICK_MEMBERS | hikari.Permissions.BAN_MEMBERS

        assert format_permissions(permissions) == ["Kick Members", "Ban Members"]

    def test_uses_labels(self):
        assert format_permissions(hikari.Permissions.MANAGE_GUILD) == ["Manage Server"]

    def test_empty(self):
        assert format_permissions(hikari.Permissions.NONE) == []

    def test_every_known_flag_has_a_name(self):
        permissions = hikari.Permissions.all_permissions()

        names = format_permissions(permissions)

        assert len(names) == bin(int(permissions)).count("1")
        assert not any(name.startswith("Unknown") for name in names)

    def test_title_cased_fallback(self):
        assert format_permissions(hikari.Permissions.START_EMBEDDED_ACTIVITIES) == ["Start Embedded Activities"]


class TestRejectionMessages:
    def test_missing_permission(self):
        error = MissingPermission(hikari.Permissions.KICK_MEMBERS)
        assert str(error) == "You're missing the following permissions: `Kick Members`"

    def test_missing_self_permission(self):
        error = MissingSelfPermission(hikari.Permissions.EMBED_LINKS | hikari.Permissions.ATTACH_FILES)
        assert str(error) == "I'm missing the following permissions: `Embed Links`, `Attach Files`"

    def test_on_cooldown(self):
        error = OnCooldown(CooldownScope.CHANNEL, timedelta(seconds=2.5))
        assert str(error) == "This command is on channel cooldown, try again in 2.5s."

    def test_missing_argument(self):
        assert str(MissingArgument("target")) == "Missing required argument `target`."
