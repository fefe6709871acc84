"""Bamboo REST API client.

This module provides a Python client for the plan branch and project plan
permission endpoints of the Bamboo REST API.

Example:
    Basic usage:

    >>> from src.bamboo import BambooClient
    >>>
    >>> with BambooClient("https://bamboo.example.com", auth=("admin", "secret")) as client:
    ...     for branch in client.plan_branches.list_plan_branches("PROJ-PLAN"):
    ...         print(branch.short_name, branch.key)
    ...
    ...     change = client.project_plan.set_anonymous_read_permission("PROJ")
    ...     if not change.changed:
    ...         print("Anonymous users could already view PROJ")
"""

from .api import (
    BambooAPIError,
    BambooAuthorizationError,
    BambooClient,
    BambooRejectedError,
    BambooStatusError,
    BambooUnexpectedStatusError,
)
from .branches import PlanBranchService
from .models import (
    ADMIN_PERMISSION,
    ANONYMOUS_ROLE,
    BUILD_PERMISSION,
    CLONE_PERMISSION,
    LOGGED_IN_ROLE,
    READ_PERMISSION,
    WRITE_PERMISSION,
    Branch,
    Branches,
    CollectionMetadata,
    Link,
    MutationOutcome,
    PermissionAction,
    PermissionChange,
    PlanBranchExpandOptions,
    PlanBranchResponse,
    PlanKey,
    ResourceMetadata,
    Role,
    RoleListResponse,
)
from .roles import ProjectPlanService

__all__ = [
    # API Client
    "BambooClient",
    "BambooAPIError",
    "BambooStatusError",
    "BambooAuthorizationError",
    "BambooRejectedError",
    "BambooUnexpectedStatusError",
    # Services
    "PlanBranchService",
    "ProjectPlanService",
    # Constants
    "ANONYMOUS_ROLE",
    "LOGGED_IN_ROLE",
    "READ_PERMISSION",
    "WRITE_PERMISSION",
    "BUILD_PERMISSION",
    "CLONE_PERMISSION",
    "ADMIN_PERMISSION",
    # Models - Request
    "PlanBranchExpandOptions",
    # Models - Response
    "Branch",
    "Branches",
    "PlanBranchResponse",
    "PlanKey",
    "Link",
    "ResourceMetadata",
    "CollectionMetadata",
    "Role",
    "RoleListResponse",
    "PermissionChange",
    "PermissionAction",
    "MutationOutcome",
]
