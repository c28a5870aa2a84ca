from .catalog import ApplicationDescriptor, ModuleDescriptor, OperationDescriptor
from .role import ModulePermission, Restrictions, Role, RoleInheritance, RoleMetadata
from .summary import EMPTY_SUMMARY, PermissionSummary
from .user import RoleAssignment, UserContext

__all__ = [
    "ApplicationDescriptor",
    "ModuleDescriptor",
    "OperationDescriptor",
    "ModulePermission",
    "Restrictions",
    "Role",
    "RoleInheritance",
    "RoleMetadata",
    "PermissionSummary",
    "EMPTY_SUMMARY",
    "RoleAssignment",
    "UserContext",
]
