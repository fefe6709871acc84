"""Project plan role permissions: listing, granting and revoking."""

import logging
from typing import TYPE_CHECKING, Mapping

from .api import (
    BambooAPIError,
    BambooAuthorizationError,
    BambooRejectedError,
    BambooStatusError,
    BambooUnexpectedStatusError,
    status_text,
)
from .models import (
    ANONYMOUS_ROLE,
    LOGGED_IN_ROLE,
    READ_PERMISSION,
    MutationOutcome,
    PermissionAction,
    PermissionChange,
    Role,
    RoleListResponse,
)

if TYPE_CHECKING:
    import httpx

    from .api import BambooClient

logger = logging.getLogger(__name__)

ADMIN_REQUIRED_READ = "You must be an admin to access this information"
ADMIN_REQUIRED_WRITE = "You must be an admin to perform this action"
REJECTED_MESSAGE = (
    "Group doesn't exist or one of the requested permission isn't supported "
    "for the given endpoint."
)

# Status codes a grant/revoke can answer with; anything else is UNEXPECTED
MUTATION_OUTCOMES: dict[int, MutationOutcome] = {
    204: MutationOutcome.CHANGED,
    304: MutationOutcome.UNCHANGED,
    401: MutationOutcome.FORBIDDEN,
}

# Revoking from the anonymous role can also be rejected outright
ANONYMOUS_REVOKE_OUTCOMES: dict[int, MutationOutcome] = {
    **MUTATION_OUTCOMES,
    400: MutationOutcome.REJECTED,
}

ROLE_LABELS = {
    ANONYMOUS_ROLE: "Anonymous Role",
    LOGGED_IN_ROLE: "Logged In Users Role",
}


def classify_status(status_code: int, outcomes: Mapping[int, MutationOutcome]) -> MutationOutcome:
    """Map a mutation response status to its outcome."""
    return outcomes.get(status_code, MutationOutcome.UNEXPECTED)


class ProjectPlanService:
    """Manages which roles may view and administer a project's plans.

    Only the anonymous and logged in users roles can be changed through
    this endpoint.

    Args:
        client: BambooClient the requests are sent through
    """

    def __init__(self, client: "BambooClient"):
        self.client = client

    def role_permissions_list(self, project_key: str) -> list[Role]:
        """List the roles holding plan permissions on a project.

        Args:
            project_key: Project key (forwarded verbatim)

        Returns:
            Roles with their permissions

        Raises:
            BambooAuthorizationError: If the caller is not an admin
            BambooStatusError: On any other non-200 status
        """
        request = self.client.new_request("GET", f"permissions/projectplan/{project_key}/roles")

        logger.debug(f"Listing roles for project: {project_key}")
        response, data = self.client.do(request, RoleListResponse)

        if response.status_code == 401:
            logger.error(ADMIN_REQUIRED_READ)
            raise BambooAuthorizationError(ADMIN_REQUIRED_READ, response)
        if response.status_code != 200:
            error_msg = (
                f"Retrieving role information for project {project_key} "
                f"returned {status_text(response)}"
            )
            logger.error(error_msg)
            raise BambooStatusError(error_msg, response)

        if data is None:
            return []
        return list(data.results)

    def set_logged_in_user_permissions(
        self, project_key: str, permissions: list[str]
    ) -> PermissionChange:
        """Grant the given plan permissions (a list of names, e.g. ["READ"]) to logged in users."""
        return self._mutate(project_key, LOGGED_IN_ROLE, PermissionAction.GRANT, permissions)

    def remove_logged_in_users_permissions(
        self, project_key: str, permissions: list[str]
    ) -> PermissionChange:
        """Revoke the given plan permissions (a list of names) from logged in users."""
        return self._mutate(project_key, LOGGED_IN_ROLE, PermissionAction.REVOKE, permissions)

    def set_anonymous_read_permission(self, project_key: str) -> PermissionChange:
        """Allow anonymous users to view the project's plans."""
        return self._mutate(
            project_key, ANONYMOUS_ROLE, PermissionAction.GRANT, [READ_PERMISSION]
        )

    def remove_anonymous_read_permission(self, project_key: str) -> PermissionChange:
        """Stop anonymous users from viewing the project's plans.

        Raises:
            BambooRejectedError: If the group doesn't exist or READ isn't
                supported for the anonymous role
        """
        return self._mutate(
            project_key,
            ANONYMOUS_ROLE,
            PermissionAction.REVOKE,
            [READ_PERMISSION],
            outcomes=ANONYMOUS_REVOKE_OUTCOMES,
        )

    def _mutate(
        self,
        project_key: str,
        role: str,
        action: PermissionAction,
        permissions: list[str],
        outcomes: Mapping[int, MutationOutcome] | None = None,
    ) -> PermissionChange:
        """Send a grant (PUT) or revoke (DELETE) and interpret the status.

        Returns:
            The change, with ``changed`` False when the server answered 304

        Raises:
            BambooAuthorizationError: On 401
            BambooRejectedError: On 400, where the endpoint documents it
            BambooUnexpectedStatusError: On any other status
            TypeError: If permissions is a bare string rather than a sequence of names
        """
        if isinstance(permissions, str):
            raise TypeError(f"permissions must be a list of names, not a string: {permissions!r}")
        if outcomes is None:
            outcomes = MUTATION_OUTCOMES

        method = "PUT" if action == PermissionAction.GRANT else "DELETE"
        request = self.client.new_request(
            method,
            f"permissions/projectplan/{project_key}/roles/{role}",
            body=list(permissions),
        )

        logger.debug(f"{action.value} {permissions} for {role} on project {project_key}")
        response, _ = self.client.do(request)

        outcome = classify_status(response.status_code, outcomes)
        if outcome in (MutationOutcome.CHANGED, MutationOutcome.UNCHANGED):
            change = PermissionChange(
                project_key=project_key,
                role=role,
                action=action,
                permissions=list(permissions),
                outcome=outcome,
            )
            self._log_change(change)
            self.client.notify(change)
            return change

        raise self._error_for(outcome, response)

    @staticmethod
    def _error_for(outcome: MutationOutcome, response: "httpx.Response") -> BambooAPIError:
        if outcome == MutationOutcome.FORBIDDEN:
            error: BambooAPIError = BambooAuthorizationError(ADMIN_REQUIRED_WRITE, response)
        elif outcome == MutationOutcome.REJECTED:
            error = BambooRejectedError(REJECTED_MESSAGE, response)
        else:
            error = BambooUnexpectedStatusError(
                f"Server responded with unexpected return code {response.status_code}",
                response,
            )
        logger.error(str(error))
        return error

    @staticmethod
    def _log_change(change: PermissionChange) -> None:
        label = ROLE_LABELS.get(change.role, change.role)
        if change.changed:
            verb = "granted" if change.action == PermissionAction.GRANT else "revoked"
            logger.info(f"{label}'s permissions were {verb}.")
        else:
            state = "had" if change.action == PermissionAction.GRANT else "lacked"
            logger.info(
                f"{label} already {state} requested permissions and permission "
                "state is unchanged."
            )
