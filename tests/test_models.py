"""Tests for Bamboo API models.

These cover wire-format quirks that don't need an HTTP round trip.
"""

import pytest
from pydantic import ValidationError

from src.bamboo.models import (
    Branch,
    MutationOutcome,
    PermissionAction,
    PermissionChange,
    PlanBranchExpandOptions,
    PlanBranchResponse,
    PlanKey,
    RoleListResponse,
)
from src.bamboo.roles import ANONYMOUS_REVOKE_OUTCOMES, MUTATION_OUTCOMES, classify_status


class TestBranch:
    """Tests for the Branch model and its embedded plan key."""

    def test_flattened_key_is_composed(self):
        """The wire-level key field becomes a PlanKey."""
        branch = Branch.model_validate({"shortName": "master", "key": "PROJ-PLAN0"})
        assert branch.plan_key == PlanKey(key="PROJ-PLAN0")
        assert branch.key == "PROJ-PLAN0"

    def test_dump_flattens_key_back(self):
        """Serialising restores the flattened wire shape."""
        branch = Branch.model_validate({"shortName": "master", "shortKey": "0", "key": "PROJ-PLAN0"})
        data = branch.model_dump(by_alias=True, exclude_none=True)
        assert data["key"] == "PROJ-PLAN0"
        assert "plan_key" not in data
        assert data["shortName"] == "master"

    def test_key_is_optional(self):
        """Branches without a key have no plan key."""
        branch = Branch.model_validate({"shortName": "master"})
        assert branch.plan_key is None
        assert branch.key is None

    def test_unknown_fields_tolerated(self):
        """Newer servers may send fields we don't model."""
        branch = Branch.model_validate({"shortName": "dev", "latestResult": {"state": "Successful"}})
        assert branch.short_name == "dev"

    def test_frozen(self):
        """Branches are snapshots and can't be modified."""
        branch = Branch.model_validate({"shortName": "master"})
        with pytest.raises(ValidationError):
            branch.short_name = "main"

    def test_defaults(self):
        """Missing fields fall back to empty values."""
        branch = Branch.model_validate({})
        assert branch.description == ""
        assert branch.enabled is False
        assert branch.name is None


class TestPlanBranchResponse:
    """Tests for the plan response envelope."""

    def test_collection_metadata(self):
        """Paging metadata uses the server's hyphenated names."""
        response = PlanBranchResponse.model_validate({
            "expand": "branches",
            "branches": {"size": 2, "start-index": 0, "max-result": 2, "branch": [{}, {}]},
        })
        assert response.branches.size == 2
        assert response.branches.max_result == 2
        assert len(response.branches.branch) == 2


class TestPlanBranchExpandOptions:
    """Tests for the expand query value."""

    def test_empty(self):
        assert PlanBranchExpandOptions().to_query() == ""

    def test_all(self):
        options = PlanBranchExpandOptions(actions=True, stages=True, branches=True, variable_context=True)
        assert options.to_query() == "actions,stages,branches,variableContext"


class TestRoleListResponse:
    """Tests for the role listing envelope."""

    def test_results_key(self):
        response = RoleListResponse.model_validate({"results": [{"name": "LOGGED_IN", "permissions": ["READ"]}]})
        assert response.results[0].name == "LOGGED_IN"

    def test_bare_list(self):
        response = RoleListResponse.model_validate([{"name": "ANONYMOUS"}])
        assert response.results[0].permissions == []

    def test_role_requires_name(self):
        with pytest.raises(ValidationError):
            RoleListResponse.model_validate({"results": [{"permissions": ["READ"]}]})


class TestStatusMapping:
    """Tests for the mutation status -> outcome mapping."""

    @pytest.mark.parametrize("status, outcome", [
        (204, MutationOutcome.CHANGED),
        (304, MutationOutcome.UNCHANGED),
        (401, MutationOutcome.FORBIDDEN),
        (400, MutationOutcome.UNEXPECTED),
        (500, MutationOutcome.UNEXPECTED),
    ])
    def test_default_mapping(self, status, outcome):
        assert classify_status(status, MUTATION_OUTCOMES) == outcome

    def test_anonymous_revoke_mapping_adds_rejected(self):
        assert classify_status(400, ANONYMOUS_REVOKE_OUTCOMES) == MutationOutcome.REJECTED
        assert classify_status(204, ANONYMOUS_REVOKE_OUTCOMES) == MutationOutcome.CHANGED

    def test_permission_change_flag(self):
        change = PermissionChange(
            project_key="PROJ",
            role="ANONYMOUS",
            action=PermissionAction.GRANT,
            permissions=["READ"],
            outcome=MutationOutcome.UNCHANGED,
        )
        assert change.changed is False


class TestNullFields:
    """JSON null reads as the field's empty value."""

    def test_branch_null_description(self):
        response = PlanBranchResponse.model_validate(
            {"branches": {"branch": [{"shortName": "m", "description": None, "key": "P-P0"}]}}
        )
        (branch,) = response.branches.branch
        assert branch.description == ""
        assert branch.key == "P-P0"

    def test_branch_null_scalars(self):
        branch = Branch.model_validate({
            "shortName": None,
            "shortKey": None,
            "enabled": None,
            "workflowType": None,
            "name": None,
        })
        assert branch.short_name == ""
        assert branch.short_key == ""
        assert branch.enabled is False
        assert branch.workflow_type == ""
        assert branch.name is None

    def test_null_branch_list_and_metadata(self):
        response = PlanBranchResponse.model_validate(
            {"expand": None, "branches": {"size": None, "start-index": None, "branch": None}}
        )
        assert response.expand == ""
        assert response.branches.size == 0
        assert response.branches.start_index == 0
        assert response.branches.branch == []

    def test_null_results(self):
        assert RoleListResponse.model_validate({"results": None}).results == []

    def test_null_permissions(self):
        response = RoleListResponse.model_validate(
            {"results": [{"name": "ANONYMOUS", "permissions": None}]}
        )
        assert response.results[0].permissions == []

    def test_null_defaults_are_not_shared(self):
        first = RoleListResponse.model_validate({"results": [{"name": "A", "permissions": None}]})
        second = RoleListResponse.model_validate({"results": [{"name": "B", "permissions": None}]})
        assert first.results[0].permissions is not second.results[0].permissions

    def test_null_name_still_rejected(self):
        with pytest.raises(ValidationError):
            RoleListResponse.model_validate({"results": [{"name": None}]})
