"""
Business suite permission matrix - applications, modules and their operations.

Reference catalog for the role builder: the operations a module offers are
what ``operations_for_level`` selects from. Hosts with their own catalog pass
their own ``ApplicationDescriptor``s instead.

Entries are (code, display name). Codes are opaque; their category comes from
keyword classification only.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Final

from ..schemas.catalog import ApplicationDescriptor, ModuleDescriptor, OperationDescriptor

_CRUD: Final[tuple[tuple[str, str], ...]] = (
    ("read", "View"),
    ("read_all", "View All"),
    ("create", "Create"),
    ("update", "Edit"),
    ("delete", "Delete"),
)

BUSINESS_SUITE_MATRIX: Final[dict[str, dict[str, Any]]] = {
    "crm": {
        "name": "Customer Relationship Management",
        "modules": {
            "leads": ("Lead Management", (
                *_CRUD,
                ("export", "Export"),
                ("import", "Import"),
                ("assign", "Assign"),
                ("convert", "Convert to Opportunity"),
            )),
            "accounts": ("Account Management", (
                *_CRUD,
                ("view_contacts", "View Contacts"),
                ("export", "Export"),
                ("import", "Import"),
                ("assign", "Assign"),
            )),
            "contacts": ("Contact Management", (
                *_CRUD,
                ("export", "Export"),
                ("import", "Import"),
                ("assign", "Assign"),
            )),
            "opportunities": ("Opportunity Management", (
                *_CRUD,
                ("export", "Export"),
                ("import", "Import"),
                ("close", "Close"),
                ("assign", "Assign"),
            )),
            "quotations": ("Quote Management", (
                *_CRUD,
                ("generate_pdf", "Generate PDF"),
                ("send", "Send"),
                ("approve", "Approve"),
                ("assign", "Assign"),
            )),
            "invoices": ("Invoice Management", (
                *_CRUD,
                ("export", "Export"),
                ("send", "Send"),
                ("mark_paid", "Mark as Paid"),
                ("generate_pdf", "Generate PDF"),
            )),
            "dashboard": ("Dashboard", (
                ("view", "View Dashboard"),
                ("customize", "Customize Dashboard"),
                ("export", "Export Reports"),
            )),
        },
    },
    "hr": {
        "name": "Human Resources Management",
        "modules": {
            "employees": ("Employee Management", (
                *_CRUD,
                ("view_salary", "View Salary Information"),
                ("export", "Export"),
            )),
            "payroll": ("Payroll Management", (
                ("read", "View Payroll"),
                ("process", "Process Payroll"),
                ("approve", "Approve Payroll"),
                ("export", "Export Payroll"),
                ("generate_reports", "Generate Reports"),
            )),
            "leave": ("Leave Management", (
                ("read", "View Leave Requests"),
                ("create", "Create Leave Requests"),
                ("approve", "Approve Leave"),
                ("reject", "Reject Leave"),
                ("cancel", "Cancel Leave"),
                ("export", "Export Leave Data"),
            )),
            "dashboard": ("HR Dashboard", (
                ("view", "View Dashboard"),
                ("customize", "Customize Dashboard"),
                ("export", "Export Reports"),
            )),
        },
    },
    "system": {
        "name": "System Administration",
        "modules": {
            "users": ("User Management", (
                ("view", "View Users"),
                ("create", "Create Users"),
                ("edit", "Edit Users"),
                ("delete", "Delete Users"),
                ("change_role", "Change Role"),
                ("change_status", "Change Status"),
                ("export", "Export Users"),
            )),
            "roles": ("Role Management", (
                ("view", "View Roles"),
                ("create", "Create Roles"),
                ("edit", "Edit Roles"),
                ("delete", "Delete Roles"),
                ("assign", "Assign Roles"),
                ("export", "Export Roles"),
            )),
        },
    },
}


def _build_application(app_key: str, definition: dict[str, Any]) -> ApplicationDescriptor:
    modules = []
    for module_code, (module_name, operations) in definition["modules"].items():
        modules.append(
            ModuleDescriptor(
                key=f"{app_key}.{module_code}",
                code=module_code,
                name=module_name,
                operations=tuple(
                    OperationDescriptor(id=code, name=label)
                    for code, label in operations
                ),
            )
        )
    return ApplicationDescriptor(key=app_key, name=definition["name"], modules=tuple(modules))


@lru_cache(maxsize=1)
def load_catalog() -> tuple[ApplicationDescriptor, ...]:
    return tuple(
        _build_application(app_key, definition) for app_key, definition in BUSINESS_SUITE_MATRIX.items()
    )


def find_application(app_key: str) -> ApplicationDescriptor | None:
    for application in load_catalog():
        if application.key == app_key:
            return application
    return None


def find_module(module_key: str) -> ModuleDescriptor | None:
    application = find_application(module_key.split(".", 1)[0])
    return application.module(module_key) if application is not None else None


def available_operations(module_key: str) -> tuple[OperationDescriptor, ...]:
    """Operations a catalog module offers; empty for unknown modules."""
    module = find_module(module_key)
    return module.operations if module is not None else ()


def super_admin_permissions() -> dict[str, Any]:
    """Every catalog operation in the hierarchical shape seeded for the super-admin role."""
    hierarchy: dict[str, Any] = {
        application.key: {
            module.code: [operation.id for operation in module.operations]
            for module in application.modules
        }
        for application in load_catalog()
    }
    hierarchy["metadata"] = {"source": "business_suite_matrix", "fullAccess": True}
    return hierarchy
