"""Synchronous HTTP client for the Bamboo REST API."""

import logging
import os
from typing import Any, Callable

import httpx
from pydantic import TypeAdapter

from .models import PermissionChange

DEFAULT_BAMBOO_URL = "http://localhost:8085"
API_PATH = "rest/api/latest/"

logger = logging.getLogger(__name__)


class BambooAPIError(Exception):
    """Base exception for Bamboo API errors."""

    def __init__(self, message: str, response: httpx.Response | None = None):
        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None


class BambooStatusError(BambooAPIError):
    """A request for a resource came back with a non-success status."""


class BambooAuthorizationError(BambooAPIError):
    """The caller lacks admin rights for the requested resource (HTTP 401)."""


class BambooRejectedError(BambooAPIError):
    """The server rejected the request as malformed for the endpoint (HTTP 400)."""


class BambooUnexpectedStatusError(BambooAPIError):
    """The server answered with a status code outside the documented set."""


def status_text(response: httpx.Response) -> str:
    """Format a response status the way the server reports it, e.g. ``404 Not Found``."""
    return f"{response.status_code} {response.reason_phrase}".strip()


class BambooClient:
    """HTTP client for the Bamboo REST API.

    Requests are resolved against ``{base_url}/rest/api/latest/``. The
    underlying transport is an ``httpx.Client``; pass one in to control
    authentication, TLS, timeouts and pooling, or let the client build one.

    Args:
        base_url: Server URL (default: http://localhost:8085)
        http_client: Preconfigured httpx client to send requests through
        transport: httpx transport for a client built here (ignored with http_client)
        auth: httpx auth for a client built here (ignored with http_client)
        timeout: Request timeout in seconds for a client built here (default: 30)
        on_permission_change: Called with every PermissionChange a mutation produces
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BAMBOO_URL,
        http_client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
        auth: httpx.Auth | tuple[str, str] | None = None,
        timeout: float = 30.0,
        on_permission_change: Callable[[PermissionChange], None] | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/{API_PATH}"
        self.on_permission_change = on_permission_change

        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(
                timeout=timeout,
                transport=transport,
                auth=auth,
                headers={"Accept": "application/json"},
            )
        self._client = http_client

        # Deferred: both service modules import from this one
        from .branches import PlanBranchService
        from .roles import ProjectPlanService

        self.plan_branches = PlanBranchService(self)
        self.project_plan = ProjectPlanService(self)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "BambooClient":
        """Build a client from BAMBOO_URL, BAMBOO_USERNAME, BAMBOO_PASSWORD and BAMBOO_TIMEOUT."""
        username = os.environ.get("BAMBOO_USERNAME", "")
        password = os.environ.get("BAMBOO_PASSWORD", "")
        auth = (username, password) if username else None
        return cls(
            base_url=os.environ.get("BAMBOO_URL", DEFAULT_BAMBOO_URL),
            auth=auth,
            timeout=float(os.environ.get("BAMBOO_TIMEOUT", "30")),
            **kwargs,
        )

    def __enter__(self) -> "BambooClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def new_request(
        self,
        method: str,
        path: str,
        body: Any = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Request:
        """Build a request for a path relative to the API root.

        Args:
            method: HTTP method
            path: Route relative to rest/api/latest/ (e.g. "plan/PROJ-PLAN/.json")
            body: JSON-serialisable request body, if any
            params: Query parameters

        Returns:
            The unsent request
        """
        url = f"{self.api_url}{path.lstrip('/')}"
        return self._client.build_request(
            method,
            url,
            params=params,
            json=body,
            headers={"Accept": "application/json"},
        )

    def do(self, request: httpx.Request, model: Any = None) -> tuple[httpx.Response, Any]:
        """Send a request and decode a successful JSON body into ``model``.

        The body is only decoded for 2xx responses that carry content. Network
        and decoding errors propagate unchanged.

        Args:
            request: Request from new_request()
            model: Pydantic model or type to validate the JSON body against

        Returns:
            Tuple of (response, parsed body or None)
        """
        logger.debug(f"{request.method} {request.url}")
        response = self._client.send(request)
        logger.debug(f"{request.method} {request.url} -> {status_text(response)}")

        if model is None or not response.is_success or not response.content:
            return response, None

        data = response.json()
        return response, TypeAdapter(model).validate_python(data)

    def notify(self, change: PermissionChange) -> None:
        """Pass a permission change to the on_permission_change callback, if any."""
        if self.on_permission_change is not None:
            self.on_permission_change(change)
