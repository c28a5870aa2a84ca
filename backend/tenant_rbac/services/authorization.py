"""
Authorization helpers - yes/no decisions over a resolved user context.

Decisions default closed: no user, no permission list, or a role whose
permission data could not be parsed all mean "no access". The only implicit
grant is the tenant-admin flag, which allows everything.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from ..config import get_settings
from ..errors import ConflictError, PermissionError
from ..schemas.role import Role
from ..schemas.user import UserContext

logger = logging.getLogger(__name__)


def check_permission(user: UserContext | None, permission_name: str) -> bool:
    """Check whether a user holds a permission.

    Args:
        user: Resolved user context, or None for an anonymous request
        permission_name: Full permission path, e.g. ``crm.contacts.read``

    Returns:
        bool: True for tenant admins; otherwise True only on an exact name match
    """
    if user is None:
        return False
    if user.is_tenant_admin:
        return True
    return permission_name in user.permissions


def has_any_permission(user: UserContext | None, permission_names: Iterable[str]) -> bool:
    return any(check_permission(user, name) for name in permission_names)


def has_all_permissions(user: UserContext | None, permission_names: Iterable[str]) -> bool:
    if user is None:
        return False
    return all(check_permission(user, name) for name in permission_names)


def has_role(user: UserContext | None, role_name: str) -> bool:
    """True iff one of the user's resolved roles has exactly this name."""
    if user is None:
        return False
    return any(role.role_name == role_name for role in user.roles)


def require_permission(user: UserContext | None, permission_name: str) -> None:
    """Raise PermissionError unless the user holds the permission.

    Raises:
        PermissionError: 403 when the permission is missing
    """
    if check_permission(user, permission_name):
        return
    logger.warning(
        "permission_denied user_id=%s permission=%s",
        user.user_id if user is not None else None,
        permission_name,
    )
    raise PermissionError(
        f"Permission denied: {permission_name} required",
        details={"required_permissions": [permission_name]},
    )


def is_super_admin_role(role: Role, super_admin_role_name: str | None = None) -> bool:
    name = super_admin_role_name or get_settings().super_admin_role_name
    return role.role_name == name


def can_edit_role(role: Role, super_admin_role_name: str | None = None) -> bool:
    """Custom roles are editable; system roles too, except the super-admin role."""
    if not role.is_system_role:
        return True
    return not is_super_admin_role(role, super_admin_role_name)


def can_delete_role(role: Role, super_admin_role_name: str | None = None) -> bool:
    """Whether a role may be deleted before any deletion is attempted upstream.

    System roles never; the super-admin role (by name or by priority) never;
    custom roles only while no user is assigned.
    """
    if role.is_system_role:
        return False
    if is_super_admin_role(role, super_admin_role_name):
        return False
    if role.priority >= get_settings().super_admin_priority:
        return False
    return role.user_count <= 0


def ensure_role_editable(role: Role, super_admin_role_name: str | None = None) -> None:
    """
    Raises:
        PermissionError: For the super-admin system role
    """
    if not can_edit_role(role, super_admin_role_name):
        raise PermissionError(
            "Super Administrator role cannot be edited. "
            "This role has predefined comprehensive permissions.",
            details={"role_id": role.role_id, "role_name": role.role_name},
        )


def ensure_role_deletable(role: Role, super_admin_role_name: str | None = None) -> None:
    """
    Raises:
        PermissionError: For system and super-admin roles
        ConflictError: For roles still assigned to users
    """
    details = {"role_id": role.role_id, "role_name": role.role_name}
    if role.is_system_role:
        raise PermissionError("Cannot delete system roles", details=details)
    if is_super_admin_role(role, super_admin_role_name) or (
        role.priority >= get_settings().super_admin_priority
    ):
        raise PermissionError(
            "Cannot delete Super Administrator role - "
            "this is the primary admin role for the organization",
            details=details,
        )
    if role.user_count > 0:
        raise ConflictError(
            f"Cannot delete role that is assigned to {role.user_count} user(s)",
            details={**details, "user_count": role.user_count},
        )
