from typing import Final

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PermissionSummary(BaseModel):
    """Read-only aggregate of one role's permissions.

    ``modules``/``module_count`` and ``main_modules``/``application_count`` carry
    the same numbers under the names the role list and the detail view use.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    total: int = 0
    admin: int = 0
    write: int = 0
    read: int = 0
    modules: int = 0
    main_modules: int = 0
    application_count: int = 0
    module_count: int = 0
    module_names: list[str] = Field(default_factory=list)
    application_names: list[str] = Field(default_factory=list)
    module_operations: dict[str, list[str]] = Field(default_factory=dict)
    operations_by_category: dict[str, list[str]] = Field(default_factory=dict)

    def is_empty(self) -> bool:
        return self.total == 0 and self.module_count == 0


EMPTY_SUMMARY: Final[PermissionSummary] = PermissionSummary()
