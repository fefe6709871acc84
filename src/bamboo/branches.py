"""Plan branch queries."""

import logging
from typing import TYPE_CHECKING

from .api import BambooStatusError, status_text
from .models import Branch, PlanBranchExpandOptions, PlanBranchResponse

if TYPE_CHECKING:
    from .api import BambooClient

# High enough that the server never paginates a plan's branches
MAX_RESULTS = 10000

logger = logging.getLogger(__name__)


class PlanBranchService:
    """Queries the branches of a plan.

    Args:
        client: BambooClient the requests are sent through
    """

    def __init__(self, client: "BambooClient"):
        self.client = client

    def list_plan_branches(
        self,
        plan_key: str,
        expand: PlanBranchExpandOptions | None = None,
    ) -> list[Branch]:
        """List all branches of a plan.

        Args:
            plan_key: Plan key, e.g. "PROJ-PLAN" (forwarded verbatim)
            expand: Extra sections to expand; branches are always expanded

        Returns:
            Branches in the order the server returned them

        Raises:
            BambooStatusError: If the server does not answer 200
        """
        options = (expand or PlanBranchExpandOptions()).model_copy(update={"branches": True})
        request = self.client.new_request(
            "GET",
            f"plan/{plan_key}/.json",
            params={"max-results": str(MAX_RESULTS), "expand": options.to_query()},
        )

        logger.debug(f"Listing branches of plan: {plan_key}")
        response, data = self.client.do(request, PlanBranchResponse)

        if response.status_code != 200:
            error_msg = f"Listing plan branches for {plan_key} returned {status_text(response)}"
            logger.error(error_msg)
            raise BambooStatusError(error_msg, response)

        if data is None or data.branches is None:
            return []
        return list(data.branches.branch)
