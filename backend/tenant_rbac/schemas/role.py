import json
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..auth.permission_contract import AccessLevel, parse_level


InheritanceMode = Literal["additive", "restrictive", "override"]


def _unique_operations(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return tuple(sorted(str(op) for op in value))
    if isinstance(value, (list, tuple)):
        return tuple(dict.fromkeys(str(op) for op in value))
    return value


class Restrictions(BaseModel):
    """Policy objects narrowing a grant; interpreted by the enforcement layer only."""

    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel, extra="allow"
    )

    time_restrictions: dict[str, Any] | None = None
    ip_restrictions: dict[str, Any] | None = None
    data_restrictions: dict[str, Any] | None = None
    feature_restrictions: dict[str, Any] | None = None

    def is_empty(self) -> bool:
        values = [
            self.time_restrictions,
            self.ip_restrictions,
            self.data_restrictions,
            self.feature_restrictions,
            *(self.model_extra or {}).values(),
        ]
        return not any(values)


class ModulePermission(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    level: AccessLevel = AccessLevel.NONE
    operations: tuple[str, ...] = ()
    restrictions: Restrictions | None = None

    @field_validator("level", mode="before")
    @classmethod
    def _coerce_level(cls, value: Any) -> Any:
        return parse_level(value) or value

    @field_validator("operations", mode="before")
    @classmethod
    def _dedupe_operations(cls, value: Any) -> Any:
        if value is None:
            return ()
        return _unique_operations(value)

    def has_access(self) -> bool:
        return self.level is not AccessLevel.NONE


class RoleInheritance(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    parent_roles: list[str] = Field(default_factory=list)
    # None defers to DEFAULT_INHERITANCE_MODE when inheritance is resolved
    inheritance_mode: InheritanceMode | None = None
    priority: int = 0


class RoleMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="allow")

    tags: list[str] = Field(default_factory=list)
    department: str | None = None
    level: Literal["entry", "intermediate", "senior", "executive"] = "entry"
    is_template: bool = False
    icon: str | None = None


class Role(BaseModel):
    """A role as delivered by the persistence/API layer.

    ``permissions`` is kept raw: any of the wire shapes the normalizer accepts.

    ``priority`` ranks the role itself and drives delete protection only.
    ``inheritance.priority`` ranks the role as a parent: parents are folded in
    that order when a child role is resolved.
    """

    model_config = ConfigDict(
        populate_by_name=True, alias_generator=to_camel, from_attributes=True
    )

    role_id: str | None = None
    role_name: str = Field(
        default="", validation_alias=AliasChoices("roleName", "role_name", "name")
    )
    description: str | None = None
    color: str = "#6b7280"
    icon: str = "👤"
    permissions: Any = Field(default_factory=dict)
    restrictions: Restrictions = Field(default_factory=Restrictions)
    inheritance: RoleInheritance = Field(default_factory=RoleInheritance)
    metadata: RoleMetadata = Field(default_factory=RoleMetadata)
    is_system_role: bool = False
    user_count: int = 0
    priority: int = 0

    @field_validator("role_id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @field_validator("restrictions", mode="before")
    @classmethod
    def _decode_restrictions(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, str):
            try:
                decoded = json.loads(value)
            except json.JSONDecodeError:
                return {}
            return decoded if isinstance(decoded, dict) else {}
        return value

    @field_validator("user_count", mode="before")
    @classmethod
    def _default_user_count(cls, value: Any) -> Any:
        return 0 if value is None else value
