"""Pydantic models for Bamboo API requests and responses."""

from enum import Enum
from typing import Any

from pydantic import (
    BaseModel,
    Field,
    ValidationInfo,
    field_validator,
    model_serializer,
    model_validator,
)

# Role names the project plan permissions endpoint accepts
ANONYMOUS_ROLE = "ANONYMOUS"
LOGGED_IN_ROLE = "LOGGED_IN"

# Permission names understood by the server (not validated locally)
READ_PERMISSION = "READ"
WRITE_PERMISSION = "WRITE"
BUILD_PERMISSION = "BUILD"
CLONE_PERMISSION = "CLONE"
ADMIN_PERMISSION = "ADMINISTRATION"


def null_as_default(model: type[BaseModel], value: Any, info: ValidationInfo) -> Any:
    """Read a JSON null as the field's empty value."""
    if value is None:
        return model.model_fields[info.field_name].get_default(call_default_factory=True)
    return value


class Link(BaseModel):
    """Resource link attached to REST entities."""

    href: str = ""
    rel: str = ""

    model_config = {"extra": "allow", "frozen": True}


class PlanKey(BaseModel):
    """Key identifying a plan or plan branch, e.g. PROJ-PLAN0."""

    key: str

    model_config = {"frozen": True}


class ResourceMetadata(BaseModel):
    """Metadata the server attaches to a single resource."""

    expand: str = ""
    link: Link | None = None

    model_config = {"extra": "allow", "frozen": True, "populate_by_name": True}

    @field_validator("expand", mode="before")
    @classmethod
    def _null_expand(cls, value: Any, info: ValidationInfo) -> Any:
        return null_as_default(cls, value, info)


class CollectionMetadata(BaseModel):
    """Paging metadata the server attaches to a collection."""

    size: int = 0
    start_index: int = Field(0, alias="start-index")
    max_result: int = Field(0, alias="max-result")
    expand: str = ""

    model_config = {"extra": "allow", "frozen": True, "populate_by_name": True}

    @field_validator("size", "start_index", "max_result", "expand", mode="before")
    @classmethod
    def _null_fields(cls, value: Any, info: ValidationInfo) -> Any:
        return null_as_default(cls, value, info)


class Branch(BaseModel):
    """A single plan branch.

    On the wire the branch's own plan key is flattened into the branch
    object as ``key``; here it is held as a composed ``plan_key``.
    """

    description: str = ""
    short_name: str = Field("", alias="shortName")
    short_key: str = Field("", alias="shortKey")
    enabled: bool = False
    link: Link | None = None
    workflow_type: str = Field("", alias="workflowType")
    plan_key: PlanKey | None = None
    name: str | None = None

    model_config = {"extra": "allow", "frozen": True, "populate_by_name": True}

    @field_validator(
        "description", "short_name", "short_key", "enabled", "workflow_type", mode="before"
    )
    @classmethod
    def _null_fields(cls, value: Any, info: ValidationInfo) -> Any:
        return null_as_default(cls, value, info)

    @model_validator(mode="before")
    @classmethod
    def _compose_plan_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and "key" in data and "plan_key" not in data:
            data = dict(data)
            data["plan_key"] = {"key": data.pop("key")}
        return data

    @model_serializer(mode="wrap")
    def _flatten_plan_key(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        plan_key = data.pop("plan_key", None)
        if plan_key:
            data.update(plan_key)
        return data

    @property
    def key(self) -> str | None:
        """The branch's plan key as a string."""
        return self.plan_key.key if self.plan_key else None


class Branches(CollectionMetadata):
    """Collection of branches in a plan response."""

    branch: list[Branch] = Field(default_factory=list)

    @field_validator("branch", mode="before")
    @classmethod
    def _null_branch_list(cls, value: Any, info: ValidationInfo) -> Any:
        return null_as_default(cls, value, info)


class PlanBranchResponse(ResourceMetadata):
    """Plan resource requested with its branches expanded."""

    branches: Branches | None = None


class PlanBranchExpandOptions(BaseModel):
    """Optional sections to expand when requesting a plan."""

    actions: bool = False
    stages: bool = False
    branches: bool = False
    variable_context: bool = False

    def to_query(self) -> str:
        """Render the comma separated value of the ``expand`` query parameter."""
        names = {
            "actions": self.actions,
            "stages": self.stages,
            "branches": self.branches,
            "variableContext": self.variable_context,
        }
        return ",".join(name for name, enabled in names.items() if enabled)


class Role(BaseModel):
    """A role and the plan permissions it holds on a project."""

    name: str
    permissions: list[str] = Field(default_factory=list)

    model_config = {"extra": "allow", "frozen": True}

    @field_validator("permissions", mode="before")
    @classmethod
    def _null_fields(cls, value: Any, info: ValidationInfo) -> Any:
        return null_as_default(cls, value, info)


class RoleListResponse(BaseModel):
    """Roles listing, either ``{"results": [...]}`` or a bare array."""

    results: list[Role] = Field(default_factory=list)

    model_config = {"extra": "allow", "frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _wrap_bare_list(cls, data: Any) -> Any:
        if isinstance(data, list):
            return {"results": data}
        return data

    @field_validator("results", mode="before")
    @classmethod
    def _null_fields(cls, value: Any, info: ValidationInfo) -> Any:
        return null_as_default(cls, value, info)


class PermissionAction(str, Enum):
    """Direction of a permission mutation."""

    GRANT = "grant"
    REVOKE = "revoke"


class MutationOutcome(str, Enum):
    """Outcome of a permission mutation, keyed off the response status."""

    CHANGED = "changed"
    UNCHANGED = "unchanged"
    FORBIDDEN = "forbidden"
    REJECTED = "rejected"
    UNEXPECTED = "unexpected"


class PermissionChange(BaseModel):
    """Result of a successful grant or revoke."""

    project_key: str
    role: str
    action: PermissionAction
    permissions: list[str]
    outcome: MutationOutcome

    model_config = {"frozen": True}

    @property
    def changed(self) -> bool:
        """True if the server applied the change, False if it was already in place."""
        return self.outcome == MutationOutcome.CHANGED
