"""Authentication handlers for generated clients.

Provides pluggable authentication via the Auth protocol.
Users can implement custom auth or use built-in handlers.
"""

from typing import Dict, Protocol, runtime_checkable

TOKEN_HEADER = "X-INFRAHUB-KEY"


@runtime_checkable
class Auth(Protocol):
    """Protocol for authentication handlers.

    Example:
        class TenantAuth:
            def __init__(self, token: str, tenant: str):
                self.token = token
                self.tenant = tenant

            def get_headers(self) -> dict[str, str]:
                return {"X-INFRAHUB-KEY": self.token, "X-Tenant": self.tenant}
    """

    def get_headers(self) -> Dict[str, str]:
        """Return headers to include in requests."""
        ...


class TokenAuth:
    """API token sent in a custom header.

    Args:
        token: The API token
        header_name: Header name (default: "X-INFRAHUB-KEY")

    Example:
        auth = TokenAuth("06438eb2-8019-4776-878c-0941b1f1d1ec")
    """

    def __init__(self, token: str, header_name: str = TOKEN_HEADER):
        self.token = token
        self.header_name = header_name

    def get_headers(self) -> Dict[str, str]:
        return {self.header_name: self.token}


class BearerAuth:
    """Bearer token authentication.

    Example:
        auth = BearerAuth("eyJhbGciOiJIUzI1NiIs...")
    """

    def __init__(self, token: str):
        self.token = token

    def get_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class NoAuth:
    """No authentication (for public endpoints or testing)."""

    def get_headers(self) -> Dict[str, str]:
        return {}
