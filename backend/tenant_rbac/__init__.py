"""
Tenant RBAC permission core.

Parses role permissions from any stored shape into one canonical module map,
classifies operations, summarizes grants and answers authorization questions.
Everything here is pure and synchronous; persistence and sessions belong to
the host application.
"""

from .auth.permission_contract import AccessLevel, OperationCategory
from .domain.invariants import InvariantViolation
from .errors import AppError, MalformedPermissionData
from .log_config import configure_logging
from .schemas import (
    EMPTY_SUMMARY,
    ApplicationDescriptor,
    ModuleDescriptor,
    ModulePermission,
    OperationDescriptor,
    PermissionSummary,
    Restrictions,
    Role,
    UserContext,
)
from .services.authorization import (
    can_delete_role,
    can_edit_role,
    check_permission,
    has_all_permissions,
    has_any_permission,
    has_role,
)
from .services.classification import classify_operation, derive_level, operations_for_level
from .services.inheritance import resolve_effective_permissions
from .services.normalizer import (
    parse_permissions,
    to_flat_permissions,
    to_hierarchical_permissions,
)
from .services.role_builder import (
    apply_application_level,
    apply_permission_template,
    prepare_role_for_save,
    set_module_level,
    toggle_operation,
    update_module_restrictions,
)
from .services.summary import normalize_and_summarize, summarize_role

__all__ = [
    "AccessLevel",
    "OperationCategory",
    "InvariantViolation",
    "AppError",
    "MalformedPermissionData",
    "EMPTY_SUMMARY",
    "ApplicationDescriptor",
    "ModuleDescriptor",
    "ModulePermission",
    "OperationDescriptor",
    "PermissionSummary",
    "Restrictions",
    "Role",
    "UserContext",
    "check_permission",
    "has_any_permission",
    "has_all_permissions",
    "has_role",
    "can_edit_role",
    "can_delete_role",
    "classify_operation",
    "derive_level",
    "operations_for_level",
    "resolve_effective_permissions",
    "parse_permissions",
    "to_flat_permissions",
    "to_hierarchical_permissions",
    "toggle_operation",
    "set_module_level",
    "apply_application_level",
    "apply_permission_template",
    "update_module_restrictions",
    "prepare_role_for_save",
    "normalize_and_summarize",
    "summarize_role",
    "configure_logging",
]
