"""
Permission Contract - access levels, operation-type catalogs and keyword lists.

This module defines the fixed vocabulary the permission core works with:
- The four access levels and their total ordering
- The operation types each level grants (nested: read ⊆ write ⊆ admin)
- The keyword lists used to classify individual operation codes

Operation codes themselves are opaque strings. The only interpretation the
core ever applies to them is case-insensitive substring matching against the
keyword lists below.

The catalog is validated at import time (fail-fast).
"""
from __future__ import annotations

from enum import Enum
from typing import Final


# ============================================================================
# ACCESS LEVELS - TOTALLY ORDERED
# ============================================================================

class AccessLevel(str, Enum):
    """
    Coarse access tier for one module of a role.

    Ordered: NONE < READ < WRITE < ADMIN.
    """
    NONE = "none"
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return LEVEL_ORDER.index(self)


LEVEL_ORDER: Final[tuple[AccessLevel, ...]] = (
    AccessLevel.NONE,
    AccessLevel.READ,
    AccessLevel.WRITE,
    AccessLevel.ADMIN,
)

ALLOWED_LEVELS: Final[frozenset[str]] = frozenset(level.value for level in LEVEL_ORDER)


def max_level(*levels: AccessLevel) -> AccessLevel:
    """Return the most capable level; NONE for no input."""
    return max(levels, key=lambda level: level.rank, default=AccessLevel.NONE)


def min_level(*levels: AccessLevel) -> AccessLevel:
    """Return the least capable level; NONE for no input."""
    return min(levels, key=lambda level: level.rank, default=AccessLevel.NONE)


# ============================================================================
# OPERATION CATEGORIES
# ============================================================================

class OperationCategory(str, Enum):
    """Bucket an individual operation code is classified into."""
    ADMIN = "admin"
    WRITE = "write"
    READ = "read"


# ============================================================================
# LEVEL -> OPERATION TYPES (forward derivation)
# ============================================================================

READ_OPERATION_TYPES: Final[tuple[str, ...]] = ("view", "list", "search", "export")

WRITE_OPERATION_TYPES: Final[tuple[str, ...]] = (
    *READ_OPERATION_TYPES,
    "create",
    "edit",
    "update",
)

ADMIN_OPERATION_TYPES: Final[tuple[str, ...]] = (
    *WRITE_OPERATION_TYPES,
    "delete",
    "manage",
    "configure",
    "admin",
)

LEVEL_OPERATION_TYPES: Final[dict[AccessLevel, tuple[str, ...]]] = {
    AccessLevel.NONE: (),
    AccessLevel.READ: READ_OPERATION_TYPES,
    AccessLevel.WRITE: WRITE_OPERATION_TYPES,
    AccessLevel.ADMIN: ADMIN_OPERATION_TYPES,
}

# An operation type also matches operation ids containing any of its synonyms
OPERATION_TYPE_SYNONYMS: Final[dict[str, tuple[str, ...]]] = {
    "view": ("get", "list", "read"),
    "edit": ("update",),
    "admin": ("manage",),
}


# ============================================================================
# KEYWORD CATALOG (operation classification)
# ============================================================================

# Checked first. Anything that destroys, approves or moves money is admin.
ADMIN_KEYWORDS: Final[tuple[str, ...]] = (
    "delete",
    "admin",
    "manage",
    "approve",
    "assign",
    "change_role",
    "change_status",
    "process",
    "calculate",
    "pay",
    "dispute",
    "close",
    "reject",
    "cancel",
)

# Checked second.
READ_KEYWORDS: Final[tuple[str, ...]] = (
    "read",
    "view",
    "list",
    "read_all",
    "view_salary",
    "view_contacts",
    "view_invoices",
    "export",
    "dashboard",
)

# Checked last. Codes matching nothing also land in write.
WRITE_KEYWORDS: Final[tuple[str, ...]] = (
    "create",
    "update",
    "import",
    "send",
    "generate_pdf",
    "customize",
)

CLASSIFICATION_ORDER: Final[tuple[tuple[OperationCategory, tuple[str, ...]], ...]] = (
    (OperationCategory.ADMIN, ADMIN_KEYWORDS),
    (OperationCategory.READ, READ_KEYWORDS),
    (OperationCategory.WRITE, WRITE_KEYWORDS),
)

DEFAULT_CATEGORY: Final[OperationCategory] = OperationCategory.WRITE


# ============================================================================
# LEVEL TOKENS (reverse derivation after a toggle)
# ============================================================================

ADMIN_LEVEL_TOKENS: Final[tuple[str, ...]] = ("delete", "approve", "admin")

WRITE_LEVEL_TOKENS: Final[tuple[str, ...]] = ("create", "edit", "manage", "update")


# ============================================================================
# WIRE FORMAT CONSTANTS
# ============================================================================

# Top-level key of hierarchical permission objects that is never an application
METADATA_KEY: Final[str] = "metadata"

# Operation recorded for flat permissions with only two segments ("crm.contacts")
DEFAULT_OPERATION: Final[str] = "access"

PATH_SEPARATOR: Final[str] = "."

RESTRICTION_TYPES: Final[frozenset[str]] = frozenset({
    "timeRestrictions",
    "ipRestrictions",
    "dataRestrictions",
    "featureRestrictions",
})


def parse_level(value: object) -> AccessLevel | None:
    """Coerce a wire value into an AccessLevel, or None if it is not one."""
    if isinstance(value, AccessLevel):
        return value
    if isinstance(value, str) and value.strip().lower() in ALLOWED_LEVELS:
        return AccessLevel(value.strip().lower())
    return None


# Validate the catalog at module load time (fail-fast)
def _validate_contract() -> None:
    """Validate level nesting and keyword lists at module import time."""
    errors = []

    for lower, higher in zip(LEVEL_ORDER, LEVEL_ORDER[1:]):
        missing = set(LEVEL_OPERATION_TYPES[lower]) - set(LEVEL_OPERATION_TYPES[higher])
        if missing:
            errors.append(
                f"Level '{higher.value}' does not include operation types of "
                f"'{lower.value}': {sorted(missing)}"
            )

    for category, keywords in CLASSIFICATION_ORDER:
        for keyword in keywords:
            if keyword != keyword.lower() or PATH_SEPARATOR in keyword:
                errors.append(f"Invalid {category.value} keyword: {keyword!r}")

    for operation_type in OPERATION_TYPE_SYNONYMS:
        if operation_type not in ADMIN_OPERATION_TYPES:
            errors.append(f"Synonyms defined for unknown operation type: {operation_type}")

    if errors:
        raise RuntimeError(
            "Permission contract validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )


# Run validation on import
_validate_contract()
