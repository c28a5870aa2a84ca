from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class RoleAssignment(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    role_id: str | None = None
    role_name: str = Field(..., validation_alias=AliasChoices("roleName", "role_name", "name"))


class UserContext(BaseModel):
    """Resolved user as supplied by the session layer."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    user_id: str | None = None
    is_tenant_admin: bool = False
    permissions: list[str] = Field(default_factory=list)
    roles: list[RoleAssignment] = Field(default_factory=list)

    @field_validator("roles", mode="before")
    @classmethod
    def _accept_role_names(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return value
        return [{"role_name": item} if isinstance(item, str) else item for item in value]
