"""
Operation classification and access-level inference.

Three pure helpers built on the keyword lists of the permission contract:

- ``classify_operation`` buckets one operation code into admin/write/read.
- ``derive_level`` infers a module's level from the operations it holds
  (run after every toggle so the level always matches the operations).
- ``operations_for_level`` picks, from a module's available operations, the
  ones a given level grants (run when a level is set explicitly).

These are heuristics over substrings, not a grammar: ``read_and_delete_log``
is admin because admin keywords are checked first.
"""
from __future__ import annotations

from collections.abc import Iterable

from ..auth.permission_contract import (
    ADMIN_LEVEL_TOKENS,
    CLASSIFICATION_ORDER,
    DEFAULT_CATEGORY,
    LEVEL_OPERATION_TYPES,
    OPERATION_TYPE_SYNONYMS,
    PATH_SEPARATOR,
    WRITE_LEVEL_TOKENS,
    AccessLevel,
    OperationCategory,
    parse_level,
)
from ..schemas.catalog import OperationDescriptor


def operation_code(operation: str) -> str:
    """Return the lowercased final path segment: ``crm.leads.Delete`` -> ``delete``."""
    return operation.rsplit(PATH_SEPARATOR, 1)[-1].lower()


def classify_operation(operation: str) -> OperationCategory:
    """Classify an operation code into the first matching keyword bucket.

    Buckets are checked admin, read, write; a code matching none is write.

    Args:
        operation: Bare code (``delete``) or full path (``hr.employees.delete``)

    Returns:
        OperationCategory: ADMIN, READ or WRITE
    """
    code = operation_code(operation)
    for category, keywords in CLASSIFICATION_ORDER:
        if any(keyword in code for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def derive_level(operations: Iterable[str]) -> AccessLevel:
    """Infer a module's access level from the operations it holds.

    Returns:
        AccessLevel: NONE for no operations, else ADMIN/WRITE/READ by the
        strongest token found
    """
    codes = [operation_code(operation) for operation in operations]
    if not codes:
        return AccessLevel.NONE
    if any(token in code for code in codes for token in ADMIN_LEVEL_TOKENS):
        return AccessLevel.ADMIN
    if any(token in code for code in codes for token in WRITE_LEVEL_TOKENS):
        return AccessLevel.WRITE
    return AccessLevel.READ


def _operation_id(operation: OperationDescriptor | str) -> str:
    if isinstance(operation, OperationDescriptor):
        return operation.id
    return str(operation)


def _matches_operation_type(operation_id: str, operation_type: str) -> bool:
    if operation_type in operation_id:
        return True
    return any(
        synonym in operation_id for synonym in OPERATION_TYPE_SYNONYMS.get(operation_type, ())
    )


def operations_for_level(
    level: AccessLevel | str,
    available_operations: Iterable[OperationDescriptor | str],
) -> list[str]:
    """Select the available operations a level grants.

    Args:
        level: Target level
        available_operations: The module's full catalog, descriptors or plain ids

    Returns:
        list[str]: Matching operation ids in catalog order; empty for NONE

    Raises:
        ValueError: If level is not a known access level
    """
    parsed = parse_level(level)
    if parsed is None:
        raise ValueError(f"Invalid access level '{level}'")

    operation_types = LEVEL_OPERATION_TYPES[parsed]
    if not operation_types:
        return []

    selected: list[str] = []
    for operation in available_operations:
        operation_id = _operation_id(operation)
        lowered = operation_code(operation_id)
        if any(_matches_operation_type(lowered, op_type) for op_type in operation_types):
            if operation_id not in selected:
                selected.append(operation_id)
    return selected
