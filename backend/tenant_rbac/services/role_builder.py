"""
Role builder helpers - pure edits on a role's canonical module map.

Every helper returns a new value and keeps each module's level consistent
with its operations: toggles re-derive the level, explicit levels re-select
the operations from the module catalog.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Literal

from ..auth.permission_contract import RESTRICTION_TYPES, AccessLevel, parse_level
from ..domain.invariants import validate_role_for_save
from ..errors import ValidationError
from ..schemas.catalog import ApplicationDescriptor, ModuleDescriptor, OperationDescriptor
from ..schemas.role import ModulePermission, Restrictions, Role
from .classification import derive_level, operations_for_level
from .normalizer import parse_permissions, to_canonical_dict

PermissionTemplate = Literal["viewer", "editor", "admin"]

EMPTY_ENTRY = ModulePermission()


def toggle_operation(entry: ModulePermission | None, operation: str) -> ModulePermission:
    """Add or remove one operation and recompute the module level."""
    current = entry or EMPTY_ENTRY
    operations = list(current.operations)
    if operation in operations:
        operations.remove(operation)
    else:
        operations.append(operation)
    return current.model_copy(
        update={"operations": tuple(operations), "level": derive_level(operations)}
    )


def set_module_level(
    entry: ModulePermission | None,
    level: AccessLevel | str,
    available_operations: Iterable[OperationDescriptor | str],
) -> ModulePermission:
    """Set a module to a level, selecting the catalog operations that level grants.

    A level whose selection comes out empty is stored as NONE.

    Raises:
        ValidationError: If level is not a known access level
    """
    parsed = parse_level(level)
    if parsed is None:
        raise ValidationError(f"Invalid access level '{level}'", details={"level": str(level)})

    current = entry or EMPTY_ENTRY
    operations = tuple(operations_for_level(parsed, available_operations))
    return current.model_copy(
        update={
            "level": parsed if operations else AccessLevel.NONE,
            "operations": operations,
        }
    )


def apply_application_level(
    permissions: Mapping[str, ModulePermission],
    application: ApplicationDescriptor,
    level: AccessLevel | str,
) -> dict[str, ModulePermission]:
    """Set every module of an application to the same level."""
    updated = dict(permissions)
    for module in application.modules:
        updated[module.key] = set_module_level(
            permissions.get(module.key), level, module.operations
        )
    return updated


def application_level(
    permissions: Mapping[str, ModulePermission],
    application: ApplicationDescriptor,
) -> AccessLevel | Literal["mixed"]:
    """The level shared by all of an application's modules, or ``"mixed"``."""
    levels = {
        (permissions.get(module.key) or EMPTY_ENTRY).level for module in application.modules
    }
    if not levels:
        return AccessLevel.NONE
    if len(levels) == 1:
        return levels.pop()
    return "mixed"


def _template_operations(module: ModuleDescriptor, template: PermissionTemplate) -> list[str]:
    ids = [operation.id for operation in module.operations]
    if template == "viewer":
        return [op for op in ids if "view" in op.lower()]
    if template == "editor":
        return [
            op for op in ids if "delete" not in op.lower() and "approve" not in op.lower()
        ]
    return ids


TEMPLATE_LEVELS: dict[str, AccessLevel] = {
    "viewer": AccessLevel.READ,
    "editor": AccessLevel.WRITE,
    "admin": AccessLevel.ADMIN,
}


def apply_permission_template(
    applications: Iterable[ApplicationDescriptor],
    template: PermissionTemplate,
) -> dict[str, ModulePermission]:
    """Build a full module map from a quick-start template.

    Raises:
        ValidationError: For an unknown template name
    """
    if template not in TEMPLATE_LEVELS:
        raise ValidationError(
            f"Unknown permission template '{template}'",
            details={"allowed": sorted(TEMPLATE_LEVELS)},
        )

    permissions: dict[str, ModulePermission] = {}
    for application in applications:
        for module in application.modules:
            operations = tuple(_template_operations(module, template))
            permissions[module.key] = ModulePermission(
                level=TEMPLATE_LEVELS[template] if operations else AccessLevel.NONE,
                operations=operations,
            )
    return permissions


def update_module_restrictions(
    entry: ModulePermission | None,
    restriction_type: str,
    value: Any,
) -> ModulePermission:
    """Replace one restriction category on a module entry.

    Raises:
        ValidationError: If restriction_type is not a known category
    """
    if restriction_type not in RESTRICTION_TYPES:
        raise ValidationError(
            f"Unknown restriction type '{restriction_type}'",
            details={"allowed": sorted(RESTRICTION_TYPES)},
        )
    current = entry or EMPTY_ENTRY
    existing = (
        current.restrictions.model_dump(by_alias=True, exclude_none=True)
        if current.restrictions is not None
        else {}
    )
    existing[restriction_type] = value
    return current.model_copy(update={"restrictions": Restrictions.model_validate(existing)})


def prepare_role_for_save(role: Role) -> dict[str, dict[str, Any]]:
    """Normalize a role's permissions and validate it before it is persisted.

    Returns:
        dict: The canonical module map to store

    Raises:
        InvariantViolation: If the role fails a domain invariant
    """
    parsed = parse_permissions(role.permissions)
    validate_role_for_save(role, parsed.entries)
    return to_canonical_dict(parsed)
