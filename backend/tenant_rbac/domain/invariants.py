"""
Domain invariants module.

Checks run on a role before it is handed back to the persistence layer for
saving. They never mutate the role.

INVARIANTS:
1. Level consistency - a module's level is NONE iff it holds no operations
2. Module keys - every key is "<application>.<module>"
3. Role shape - a named role grants access to at least one module
4. Inheritance - parent chains are acyclic
"""

import logging
from collections.abc import Mapping
from typing import Any

from ..auth.permission_contract import PATH_SEPARATOR, AccessLevel
from ..schemas.role import ModulePermission, Role

logger = logging.getLogger(__name__)

MAX_ROLE_NAME_LENGTH = 100


class InvariantViolation(Exception):
    """
    Raised when a domain invariant is violated.

    This is a domain-level error that should be handled explicitly,
    never silently ignored.
    """

    def __init__(self, message: str, *, invariant: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.invariant = invariant
        self.details = details or {}

        logger.error(
            "invariant_violation invariant=%s message=%s details=%s",
            invariant,
            message,
            details,
        )


def validate_module_key(module_key: str) -> None:
    """
    INVARIANT-2: Module keys are "<application>.<module>".

    Raises:
        InvariantViolation: If either part is empty
    """
    application, _, module = module_key.partition(PATH_SEPARATOR)
    if not application or not module:
        raise InvariantViolation(
            f"Module key '{module_key}' must look like '<application>.<module>'",
            invariant="INVARIANT-2.module_key_shape",
            details={"module_key": module_key},
        )


def validate_module_permission(module_key: str, entry: ModulePermission) -> None:
    """
    INVARIANT-1: Level and operations agree.

    Args:
        module_key: Key the entry is stored under
        entry: Module entry to check

    Raises:
        InvariantViolation: If level is NONE with operations, or not NONE without
    """
    validate_module_key(module_key)

    if entry.level is AccessLevel.NONE and entry.operations:
        raise InvariantViolation(
            f"Module '{module_key}' has level 'none' but grants operations",
            invariant="INVARIANT-1.level_consistency",
            details={"module_key": module_key, "operations": list(entry.operations)},
        )
    if entry.level is not AccessLevel.NONE and not entry.operations:
        raise InvariantViolation(
            f"Module '{module_key}' has level '{entry.level.value}' but no operations",
            invariant="INVARIANT-1.level_consistency",
            details={"module_key": module_key, "level": entry.level.value},
        )


def validate_role_for_save(role: Role, entries: Mapping[str, ModulePermission]) -> None:
    """
    INVARIANT-3: A role about to be saved is named and grants something.

    Args:
        role: The role being saved
        entries: The role's canonical module entries (from the normalizer)

    Raises:
        InvariantViolation: On the first violated check
    """
    name = role.role_name.strip()
    if not name:
        raise InvariantViolation(
            "Role name is required",
            invariant="INVARIANT-3.role_name_required",
            details={"role_id": role.role_id},
        )
    if len(name) > MAX_ROLE_NAME_LENGTH:
        raise InvariantViolation(
            f"Role name must be at most {MAX_ROLE_NAME_LENGTH} characters",
            invariant="INVARIANT-3.role_name_length",
            details={"role_id": role.role_id, "length": len(name)},
        )

    for module_key, entry in entries.items():
        validate_module_permission(module_key, entry)

    if not any(entry.has_access() for entry in entries.values()):
        raise InvariantViolation(
            "No applications selected. Please select at least one application.",
            invariant="INVARIANT-3.role_grants_access",
            details={"role_id": role.role_id, "role_name": role.role_name},
        )


def validate_acyclic_inheritance(role_id: str, chain: tuple[str, ...]) -> None:
    """
    INVARIANT-4: A role never inherits from itself, directly or transitively.

    Raises:
        InvariantViolation: If role_id already appears in the chain being resolved
    """
    if role_id in chain:
        raise InvariantViolation(
            f"Circular role inheritance: {' -> '.join((*chain, role_id))}",
            invariant="INVARIANT-4.acyclic_inheritance",
            details={"role_id": role_id, "chain": list(chain)},
        )
