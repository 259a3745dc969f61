"""Schema loading from a file or a live server.

Fetching is a single attempt: a transport failure or a non-2xx response is a
SchemaLoadError and is not retried.
"""

import logging
from pathlib import Path
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, model_validator

from .errors import SchemaLoadError

logger = logging.getLogger(__name__)

SCHEMA_ENDPOINT = "schema.graphql"
TOKEN_HEADER = "X-INFRAHUB-KEY"


class SchemaSource(BaseModel):
    """Where the schema comes from: a file path XOR a server URL."""

    model_config = ConfigDict(extra="forbid")

    path: Optional[Path] = None
    url: Optional[str] = None
    token: Optional[str] = None
    branch: Optional[str] = None

    @model_validator(mode="after")
    def _check_selector(self) -> "SchemaSource":
        if (self.path is None) == (self.url is None):
            raise ValueError("exactly one of 'path' or 'url' is required")
        if self.path is not None and (self.token or self.branch):
            raise ValueError("'token' and 'branch' are only valid with 'url'")
        return self

    @property
    def label(self) -> str:
        return str(self.path) if self.path is not None else str(self.url)


def load_schema_file(path: str | Path) -> str:
    """Read a schema file as UTF-8 text."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaLoadError(str(path), e) from e


def fetch_schema(
    url: str,
    token: Optional[str] = None,
    branch: Optional[str] = None,
    *,
    timeout: float = 30.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> str:
    """Download the schema document from ``{url}/schema.graphql``."""
    endpoint = f"{url.rstrip('/')}/{SCHEMA_ENDPOINT}"
    params = {"branch": branch} if branch else None
    headers = {TOKEN_HEADER: token} if token else {}

    logger.debug("Fetching schema from %s (branch=%s)", endpoint, branch)
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.get(endpoint, params=params, headers=headers)
            response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise SchemaLoadError(endpoint, f"HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise SchemaLoadError(endpoint, e) from e
    return response.text


def load_schema(source: SchemaSource, transport: Optional[httpx.BaseTransport] = None) -> str:
    """Load the schema text for a validated source."""
    if source.path is not None:
        return load_schema_file(source.path)
    return fetch_schema(source.url, source.token, source.branch, transport=transport)
