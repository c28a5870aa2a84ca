"""
Role inheritance - resolve a role's effective module map from its parents.

Merge policy, chosen per child role via ``inheritance.inheritance_mode``
(DEFAULT_INHERITANCE_MODE when the role leaves it unset):

- additive:    child and parents are united per module (max level)
- restrictive: only modules the child grants, narrowed to what parents grant
- override:    child modules replace the parents'; parent-only modules remain

Parents are folded highest ``inheritance.priority`` first; ties keep the
order of ``parent_roles``. The whole policy lives in this module so it can
change without touching normalization or classification.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from ..auth.permission_contract import AccessLevel, max_level, min_level
from ..config import get_settings
from ..domain.invariants import validate_acyclic_inheritance
from ..schemas.role import ModulePermission, Role
from .classification import derive_level
from .normalizer import parse_permissions

logger = logging.getLogger(__name__)


def _union(first: ModulePermission, second: ModulePermission) -> ModulePermission:
    operations = tuple(dict.fromkeys((*first.operations, *second.operations)))
    level = max_level(first.level, second.level) if operations else AccessLevel.NONE
    return ModulePermission(
        level=level,
        operations=operations,
        restrictions=first.restrictions or second.restrictions,
    )


def _narrow(child: ModulePermission, parent: ModulePermission) -> ModulePermission:
    allowed = set(parent.operations)
    operations = tuple(op for op in child.operations if op in allowed)
    if not operations:
        return ModulePermission(restrictions=child.restrictions)
    level = min_level(child.level, parent.level)
    if level is AccessLevel.NONE:
        level = derive_level(operations)
    return ModulePermission(
        level=level,
        operations=operations,
        restrictions=child.restrictions or parent.restrictions,
    )


def merge_permissions(
    child: Mapping[str, ModulePermission],
    parent: Mapping[str, ModulePermission],
    mode: str,
) -> dict[str, ModulePermission]:
    """Merge one child module map with an already-folded parent map.

    Raises:
        ValueError: For an unknown inheritance mode
    """
    if mode == "additive":
        merged = dict(parent)
        for key, entry in child.items():
            merged[key] = _union(entry, parent[key]) if key in parent else entry
        return merged

    if mode == "restrictive":
        return {
            key: _narrow(entry, parent.get(key, ModulePermission()))
            for key, entry in child.items()
        }

    if mode == "override":
        merged = dict(parent)
        merged.update(child)
        return merged

    raise ValueError(f"Unknown inheritance mode '{mode}'")


def _role_key(role: Role) -> str:
    return role.role_id or role.role_name


def _fold_parents(
    parents: list[Role],
    chain: tuple[str, ...],
    roles_by_id: Mapping[str, Role],
) -> dict[str, ModulePermission]:
    ordered = sorted(
        enumerate(parents),
        key=lambda item: (-item[1].inheritance.priority, item[0]),
    )
    folded: dict[str, ModulePermission] = {}
    for _, parent in ordered:
        resolved = _resolve(parent, roles_by_id, chain)
        for key, entry in resolved.items():
            folded[key] = _union(folded[key], entry) if key in folded else entry
    return folded


def _resolve(
    role: Role,
    roles_by_id: Mapping[str, Role],
    chain: tuple[str, ...],
) -> dict[str, ModulePermission]:
    key = _role_key(role)
    validate_acyclic_inheritance(key, chain)
    chain = (*chain, key)

    own = parse_permissions(role.permissions).entries
    parents: list[Role] = []
    for parent_id in role.inheritance.parent_roles:
        parent = roles_by_id.get(parent_id)
        if parent is None:
            logger.warning("inheritance_parent_missing role=%s parent=%s", key, parent_id)
            continue
        parents.append(parent)

    if not parents:
        return dict(own)

    mode = role.inheritance.inheritance_mode or get_settings().default_inheritance_mode
    return merge_permissions(own, _fold_parents(parents, chain, roles_by_id), mode)


def resolve_effective_permissions(
    role: Role,
    roles_by_id: Mapping[str, Role],
) -> dict[str, ModulePermission]:
    """Resolve the module map a role effectively grants.

    Args:
        role: The role to resolve
        roles_by_id: Every role a parent id may refer to

    Returns:
        dict[str, ModulePermission]: Effective canonical module map

    Raises:
        InvariantViolation: If the parent chain is circular
    """
    return _resolve(role, roles_by_id, ())
