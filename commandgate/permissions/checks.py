"""Permission helpers for the execution gate."""

from typing import Protocol, runtime_checkable

import hikari


@runtime_checkable
class PermissionSource(Protocol):
    """Supplies effective permissions; normally backed by the platform client."""

    async def member_permissions(self, guild_id: int, channel_id: int, user_id: int) -> hikari.Permissions: ...

    async def self_permissions(self, guild_id: int, channel_id: int) -> hikari.Permissions: ...


def missing_permissions(granted: hikari.Permissions, required: hikari.Permissions) -> hikari.Permissions:
    """
    Work out which of the required permissions are not granted.

    Args:
        granted: The effective permissions of the member
        required: The permissions the command needs

    Returns:
        The missing permissions; ``NONE`` when the member is an administrator
    """
    if granted & hikari.Permissions.ADMINISTRATOR:
        return hikari.Permissions.NONE
    return required & ~granted


def has_permissions(granted: hikari.Permissions, required: hikari.Permissions) -> bool:
    return missing_permissions(granted, required) == hikari.Permissions.NONE


_PERMISSION_LABELS = {
    hikari.Permissions.ADMINISTRATOR: "Administrator",
    hikari.Permissions.MANAGE_GUILD: "Manage Server",
    hikari.Permissions.VIEW_AUDIT_LOG: "View Audit Log",
    hikari.Permissions.MENTION_ROLES: "Mention @everyone, @here, and All Roles",
    hikari.Permissions.STREAM: "Video",
    hikari.Permissions.MODERATE_MEMBERS: "Timeout Members",
}


def format_permissions(permissions: hikari.Permissions) -> list[str]:
    """
    Format permissions into a human-readable list of permission names.

    Flags without a dedicated label are title-cased from their enum name,
    e.g. ``KICK_MEMBERS`` becomes ``Kick Members``.
    """
    names = []
    value = int(permissions.value)
    bit = 1
    while bit <= value:
        if value & bit:
            flag = hikari.Permissions(bit)
            label = _PERMISSION_LABELS.get(flag)
            if label is None:
                label = (flag.name or f"Unknown ({bit})").replace("_", " ").title()
            names.append(label)
        bit <<= 1
    return names
