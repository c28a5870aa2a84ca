"""
Permission normalizer - one parse step for every historical wire shape.

Roles reach the core with permissions stored in several formats:

- JSON-encoded strings of any of the shapes below
- flat arrays of dot paths: ``["crm.contacts.read", "crm.contacts.create"]``
- hierarchical objects: ``{"crm": {"contacts": ["read", "create"]}, "metadata": {...}}``
- the canonical module map: ``{"crm.contacts": {"level": "write", "operations": [...]}}``

``parse_permissions`` sniffs the shape exactly once and returns a
``ParsedPermissions`` holding the canonical module map plus the ordered grant
list the summary counts from. Nothing downstream looks at the raw value again.

Malformed JSON never raises: the parse result carries a
``MalformedPermissionData`` and behaves as "no permissions".
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..auth.permission_contract import (
    DEFAULT_OPERATION,
    METADATA_KEY,
    PATH_SEPARATOR,
    AccessLevel,
    parse_level,
)
from ..errors import MalformedPermissionData
from ..schemas.role import ModulePermission, Restrictions
from .classification import derive_level


class PermissionShape(str, Enum):
    FLAT = "flat"
    HIERARCHICAL = "hierarchical"
    CANONICAL = "canonical"
    EMPTY = "empty"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ParsedPermissions:
    shape: PermissionShape
    entries: dict[str, ModulePermission] = field(default_factory=dict)
    # Per-module operation lists as the summary shows them
    module_operations: dict[str, list[str]] = field(default_factory=dict)
    # Every counted grant as "app.module.op", input order and multiplicity kept
    grants: tuple[str, ...] = ()
    total: int = 0
    error: MalformedPermissionData | None = None

    @property
    def module_names(self) -> list[str]:
        return list(self.module_operations)

    @property
    def application_names(self) -> list[str]:
        return list(dict.fromkeys(application_of(key) for key in self.module_operations))


def application_of(module_key: str) -> str:
    return module_key.split(PATH_SEPARATOR, 1)[0]


def split_module_key(module_key: str) -> tuple[str, str]:
    application, _, module = module_key.partition(PATH_SEPARATOR)
    return application, module


class _Accumulator:
    """Collects modules in first-appearance order while a value is walked."""

    def __init__(self) -> None:
        self.operations: dict[str, list[str]] = {}
        self.explicit: dict[str, ModulePermission] = {}
        self.grants: list[str] = []

    def add(self, module_key: str, operation: str, *, unique: bool = False) -> None:
        operations = self.operations.setdefault(module_key, [])
        self.grants.append(f"{module_key}{PATH_SEPARATOR}{operation}")
        if unique and operation in operations:
            return
        operations.append(operation)

    def add_entry(self, module_key: str, entry: ModulePermission) -> None:
        self.explicit[module_key] = entry
        operations = self.operations.setdefault(module_key, [])
        for operation in entry.operations:
            self.grants.append(f"{module_key}{PATH_SEPARATOR}{operation}")
            operations.append(operation)

    def build(self, shape: PermissionShape, total: int) -> ParsedPermissions:
        entries: dict[str, ModulePermission] = {}
        for module_key, operations in self.operations.items():
            entry = self.explicit.get(module_key)
            if entry is not None and list(entry.operations) == operations:
                entries[module_key] = entry
                continue
            entries[module_key] = ModulePermission(
                level=derive_level(operations),
                operations=operations,
                restrictions=entry.restrictions if entry is not None else None,
            )
        return ParsedPermissions(
            shape=shape,
            entries=entries,
            module_operations={key: list(ops) for key, ops in self.operations.items()},
            grants=tuple(self.grants),
            total=total,
        )


def _is_canonical_entry(key: Any, value: Any) -> bool:
    if not isinstance(key, str) or PATH_SEPARATOR not in key:
        return False
    if isinstance(value, ModulePermission):
        return True
    return isinstance(value, Mapping) and ("level" in value or "operations" in value)


def _coerce_entry(value: ModulePermission | Mapping[str, Any]) -> ModulePermission:
    """Build a canonical entry that satisfies the level/operations invariant."""
    if isinstance(value, ModulePermission):
        level, operations, restrictions = value.level, value.operations, value.restrictions
    else:
        raw_operations = value.get("operations") or ()
        if isinstance(raw_operations, (str, bytes)) or not isinstance(
            raw_operations, (list, tuple, set, frozenset)
        ):
            raw_operations = ()
        operations = ModulePermission(operations=raw_operations).operations
        level = parse_level(value.get("level"))
        raw_restrictions = value.get("restrictions")
        restrictions = (
            Restrictions.model_validate(raw_restrictions)
            if isinstance(raw_restrictions, Mapping) and raw_restrictions
            else None
        )

    if not operations:
        level = AccessLevel.NONE
    elif level is None or level is AccessLevel.NONE:
        level = derive_level(operations)
    return ModulePermission(level=level, operations=operations, restrictions=restrictions)


def _parse_mapping(value: Mapping[Any, Any]) -> ParsedPermissions:
    acc = _Accumulator()
    total = 0
    saw_canonical = False

    for app_key, app_value in value.items():
        if app_key == METADATA_KEY:
            continue
        if _is_canonical_entry(app_key, app_value):
            entry = _coerce_entry(app_value)
            acc.add_entry(app_key, entry)
            total += len(entry.operations)
            saw_canonical = True
            continue
        if not isinstance(app_value, Mapping):
            continue
        for module_key, module_operations in app_value.items():
            if not isinstance(module_operations, (list, tuple)):
                continue
            key = f"{app_key}{PATH_SEPARATOR}{module_key}"
            for operation in module_operations:
                acc.add(key, str(operation))
            if not module_operations:
                acc.operations.setdefault(key, [])
            total += len(module_operations)

    if saw_canonical:
        shape = PermissionShape.CANONICAL
    elif acc.operations:
        shape = PermissionShape.HIERARCHICAL
    else:
        shape = PermissionShape.EMPTY
    return acc.build(shape, total)


def _parse_flat(value: list[Any] | tuple[Any, ...]) -> ParsedPermissions:
    acc = _Accumulator()
    for permission in value:
        if not isinstance(permission, str):
            continue
        parts = permission.split(PATH_SEPARATOR)
        if len(parts) < 2:
            continue
        application, module = parts[0], parts[1]
        operation = parts[2] if len(parts) > 2 else DEFAULT_OPERATION
        acc.add(f"{application}{PATH_SEPARATOR}{module}", operation, unique=True)

    # Every listed permission counts once, even when it collapses into a set
    shape = PermissionShape.FLAT if value else PermissionShape.EMPTY
    return acc.build(shape, len(value))


def _parse_decoded(value: Any) -> ParsedPermissions:
    if isinstance(value, Mapping):
        return _parse_mapping(value)
    if isinstance(value, (list, tuple)):
        return _parse_flat(value)
    return ParsedPermissions(shape=PermissionShape.EMPTY)


def _malformed(details: dict[str, Any]) -> ParsedPermissions:
    return ParsedPermissions(
        shape=PermissionShape.MALFORMED,
        error=MalformedPermissionData(details=details),
    )


def parse_permissions(raw: Any) -> ParsedPermissions:
    """Parse a raw permission value of any supported shape.

    Args:
        raw: JSON string, flat list, hierarchical or canonical mapping, or
            anything else (treated as "no permissions")

    Returns:
        ParsedPermissions: canonical entries and grant list; for undecodable
        strings ``shape`` is MALFORMED and ``error`` is set
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            return _malformed({"reason": exc.msg, "position": exc.pos})
        except RecursionError:
            return _malformed({"reason": "Nesting too deep", "position": None})
        return _parse_decoded(decoded)
    return _parse_decoded(raw)


def to_canonical_dict(parsed: ParsedPermissions) -> dict[str, dict[str, Any]]:
    """Render canonical entries as JSON-compatible dicts (the stored role format)."""
    return {
        key: entry.model_dump(mode="json", by_alias=True, exclude_none=True)
        for key, entry in parsed.entries.items()
    }


def to_flat_permissions(raw: Any) -> list[str]:
    """Render any permission value as a sorted list of ``app.module.op`` paths."""
    parsed = parse_permissions(raw)
    return sorted(
        {
            f"{key}{PATH_SEPARATOR}{operation}"
            for key, entry in parsed.entries.items()
            for operation in entry.operations
        }
    )


def to_hierarchical_permissions(raw: Any) -> dict[str, dict[str, list[str]]]:
    """Render any permission value as ``{app: {module: [ops]}}``."""
    parsed = parse_permissions(raw)
    hierarchy: dict[str, dict[str, list[str]]] = {}
    for key, entry in parsed.entries.items():
        application, module = split_module_key(key)
        hierarchy.setdefault(application, {})[module] = list(entry.operations)
    return hierarchy
