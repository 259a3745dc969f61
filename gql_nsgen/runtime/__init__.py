"""Runtime support imported by generated clients."""

from .auth import Auth, BearerAuth, NoAuth, TokenAuth
from .executor import GraphQLError, GraphQLExecutor, serialize_variables
from .pagination import (
    CURSOR,
    OFFSET,
    Page,
    PageRequest,
    Paginator,
    PaginatorBusyError,
    read_connection_page,
)

__all__ = [
    # Auth
    "Auth",
    "TokenAuth",
    "BearerAuth",
    "NoAuth",
    # Executor
    "GraphQLError",
    "GraphQLExecutor",
    "serialize_variables",
    # Pagination
    "CURSOR",
    "OFFSET",
    "Page",
    "PageRequest",
    "Paginator",
    "PaginatorBusyError",
    "read_connection_page",
]
