from .checks import PermissionSource, format_permissions, has_permissions, missing_permissions

__all__ = [
    "PermissionSource",
    "format_permissions",
    "has_permissions",
    "missing_permissions",
]
