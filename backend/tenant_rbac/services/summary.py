"""
Permission summary - the single place that counts a role's grants.

Counts by category, module and application names, and per-module operation
lists are all produced here from one ``ParsedPermissions``. UI and
authorization code read these numbers; they never recount.
"""
from __future__ import annotations

import logging
from typing import Any

from ..auth.permission_contract import OperationCategory
from ..schemas.role import Role
from ..schemas.summary import EMPTY_SUMMARY, PermissionSummary
from .classification import classify_operation
from .normalizer import ParsedPermissions, PermissionShape, parse_permissions

logger = logging.getLogger(__name__)


def summarize(parsed: ParsedPermissions) -> PermissionSummary:
    """Aggregate a parsed permission value.

    Args:
        parsed: Output of ``parse_permissions``

    Returns:
        PermissionSummary: EMPTY_SUMMARY for empty or malformed input
    """
    if parsed.shape in (PermissionShape.EMPTY, PermissionShape.MALFORMED):
        return EMPTY_SUMMARY

    by_category: dict[str, list[str]] = {category.value: [] for category in OperationCategory}
    for grant in parsed.grants:
        by_category[classify_operation(grant).value].append(grant)

    module_names = parsed.module_names
    application_names = parsed.application_names

    return PermissionSummary(
        total=parsed.total,
        admin=len(by_category[OperationCategory.ADMIN.value]),
        write=len(by_category[OperationCategory.WRITE.value]),
        read=len(by_category[OperationCategory.READ.value]),
        modules=len(module_names),
        main_modules=len(application_names),
        application_count=len(application_names),
        module_count=len(module_names),
        module_names=module_names,
        application_names=application_names,
        module_operations={key: list(ops) for key, ops in parsed.module_operations.items()},
        operations_by_category=by_category,
    )


def normalize_and_summarize(raw_permissions: Any) -> PermissionSummary:
    """Normalize a raw permission value and summarize it.

    Never raises for bad input: undecodable JSON is logged and summarized as
    no permissions, so authorization built on the result fails closed.
    """
    parsed = parse_permissions(raw_permissions)
    if parsed.error is not None:
        logger.warning(
            "malformed_permission_data code=%s details=%s",
            parsed.error.code,
            parsed.error.details,
        )
    return summarize(parsed)


def summarize_role(role: Role) -> PermissionSummary:
    return normalize_and_summarize(role.permissions)


def summarize_roles(roles: list[Role]) -> dict[str, PermissionSummary]:
    """Summaries for a role list view, keyed by role id (or name when unsaved)."""
    return {(role.role_id or role.role_name): summarize_role(role) for role in roles}
