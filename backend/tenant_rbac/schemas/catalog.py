from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OperationDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str = Field(..., min_length=1, validation_alias=AliasChoices("id", "code"))
    name: str = ""
    description: str | None = None


class ModuleDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    key: str = Field(..., min_length=3)
    code: str
    name: str
    description: str | None = None
    is_core: bool = False
    operations: tuple[OperationDescriptor, ...] = ()

    @property
    def application(self) -> str:
        return self.key.split(".", 1)[0]


class ApplicationDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    key: str = Field(..., min_length=1)
    name: str
    description: str | None = None
    modules: tuple[ModuleDescriptor, ...] = ()

    def module(self, module_key: str) -> ModuleDescriptor | None:
        for module in self.modules:
            if module.key == module_key:
                return module
        return None
