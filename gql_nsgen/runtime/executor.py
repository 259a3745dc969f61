"""Request execution for generated clients.

Generated accessors send every request through
:meth:`GraphQLExecutor.execute`: a GraphQL document, optional variables and an
optional branch. Branch requests go to ``{base}/graphql/{branch}``, everything
else to ``{base}/graphql``.
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, TypeAdapter

from .auth import Auth, NoAuth

logger = logging.getLogger(__name__)

_JSON = TypeAdapter(Any)


class GraphQLError(Exception):
    """Exception raised for GraphQL errors and failed HTTP responses."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None, status: int | None = None):
        self.message = message
        self.errors = errors or []
        self.status = status
        super().__init__(message)


def serialize_variables(value: Any) -> Any:
    """Convert variables to JSON-ready data, dropping None entries.

    Handles Pydantic models by dumping them with aliases.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, dict):
        return {key: serialize_variables(item) for key, item in value.items() if item is not None}
    if isinstance(value, (list, tuple)):
        return [serialize_variables(item) for item in value]
    return _JSON.dump_python(value, mode="json")


class GraphQLExecutor:
    """Executes GraphQL documents against a server.

    Examples:
        executor = GraphQLExecutor("http://localhost:8000", auth=TokenAuth(token))

        async with GraphQLExecutor(url, default_branch="feature-x") as executor:
            data = await executor.execute("query { BuiltinTag { count } }")
    """

    def __init__(
        self,
        url: str,
        auth: Auth | None = None,
        *,
        default_branch: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the executor.

        Args:
            url: Server base URL (without the ``/graphql`` suffix)
            auth: Authentication handler (implements Auth protocol)
            default_branch: Branch used when a call does not name one
            timeout: Request timeout in seconds
            transport: Optional httpx transport, e.g. for testing
        """
        self.url = url.rstrip("/")
        self.default_branch = default_branch
        self.timeout = timeout
        self._auth = auth if auth is not None else NoAuth()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def endpoint(self, branch: str | None = None) -> str:
        branch = branch or self.default_branch
        if branch:
            return f"{self.url}/graphql/{branch}"
        return f"{self.url}/graphql"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            headers.update(self._auth.get_headers())
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GraphQLExecutor":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        branch: str | None = None,
    ) -> dict[str, Any]:
        """Execute a GraphQL document.

        Args:
            query: GraphQL query or mutation document
            variables: Operation variables; None values are omitted
            branch: Branch to run against, overriding ``default_branch``

        Returns:
            The 'data' portion of the response

        Raises:
            GraphQLError: If the response is not 2xx or contains errors
        """
        client = await self._get_client()

        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = serialize_variables(variables)

        url = self.endpoint(branch)
        logger.debug("POST %s", url)
        response = await client.post(url, json=payload)

        try:
            result = response.json()
        except ValueError:
            result = {}
        if "errors" in result and result["errors"]:
            error_messages = "; ".join(e.get("message", str(e)) for e in result["errors"])
            raise GraphQLError(f"GraphQL errors: {error_messages}", result["errors"], response.status_code)
        if response.is_error:
            raise GraphQLError(
                f"HTTP {response.status_code} from {url}", status=response.status_code
            )

        return result.get("data") or {}
