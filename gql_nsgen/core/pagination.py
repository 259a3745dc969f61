"""Paginator descriptors for list-capable models.

Two strategies are chosen per model from the shape found in the schema:

cursor
    The connection exposes ``pageInfo { hasNextPage endCursor }``, each edge
    exposes a ``cursor`` and the list query accepts ``after``. Each fetch
    passes the previous page's end cursor; paging stops when
    ``hasNextPage`` is false or a page comes back empty.

offset
    Fallback for everything else. Each fetch advances ``offset`` by the number
    of nodes returned; paging stops when a page holds fewer nodes than the
    requested ``limit``. Without a ``limit`` argument the first page is final.
"""

from dataclasses import dataclass
from enum import Enum

from .ir import ConnectionShape, Field

CURSOR_ARGUMENT = "after"
CURSOR_SIZE_ARGUMENT = "first"
OFFSET_ARGUMENT = "offset"
OFFSET_SIZE_ARGUMENT = "limit"


class PaginationMode(Enum):
    CURSOR = "cursor"
    OFFSET = "offset"


@dataclass(frozen=True)
class PaginatorDescriptor:
    """How the generated paginator for one model fetches and advances."""
    mode: PaginationMode
    query_field: str
    connection: str
    edges_field: str
    node_field: str
    cursor_argument: str | None = None
    offset_argument: str | None = None
    size_argument: str | None = None
    page_info_field: str | None = None
    has_next_field: str | None = None
    end_cursor_field: str | None = None
    edge_cursor_field: str | None = None

    @property
    def control_arguments(self) -> tuple[str, ...]:
        """Query arguments driven by the paginator rather than the caller."""
        names = (self.cursor_argument, self.offset_argument, self.size_argument)
        return tuple(name for name in names if name)

    @property
    def sends_page_size(self) -> bool:
        """True when every request carries a page size argument.

        Without one the generated ``paginate`` takes no ``page_size``: an
        offset paginator then fetches a single page and a cursor paginator
        lets the server choose page lengths.
        """
        return self.size_argument is not None


def build_paginator(query: Field, shape: ConnectionShape) -> PaginatorDescriptor:
    """Pick the pagination strategy for a list query over ``shape``."""
    common = dict(
        query_field=query.name,
        connection=shape.name,
        edges_field=shape.edges_field,
        node_field=shape.node_field,
    )
    if shape.supports_cursor and query.argument(CURSOR_ARGUMENT) is not None:
        return PaginatorDescriptor(
            mode=PaginationMode.CURSOR,
            cursor_argument=CURSOR_ARGUMENT,
            size_argument=CURSOR_SIZE_ARGUMENT if query.argument(CURSOR_SIZE_ARGUMENT) else None,
            page_info_field=shape.page_info_field,
            has_next_field=shape.has_next_field,
            end_cursor_field=shape.end_cursor_field,
            edge_cursor_field=shape.edge_cursor_field,
            **common,
        )
    # A limit without an offset would refetch the first page forever
    has_offset = query.argument(OFFSET_ARGUMENT) is not None
    has_limit = query.argument(OFFSET_SIZE_ARGUMENT) is not None
    return PaginatorDescriptor(
        mode=PaginationMode.OFFSET,
        offset_argument=OFFSET_ARGUMENT if has_offset and has_limit else None,
        size_argument=OFFSET_SIZE_ARGUMENT if has_offset and has_limit else None,
        **common,
    )
