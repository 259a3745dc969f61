"""Paginator used by generated ``paginate`` accessors.

A paginator walks one list query forward, one page per :meth:`Paginator.next_page`
call, until the terminal signal (``None``). It supports two modes:

``cursor``
    Each request carries the previous page's end cursor. Paging stops when the
    server reports no next page or returns no cursor.

``offset``
    Each request carries an offset advanced by the number of nodes already
    returned. Paging stops when a page holds fewer nodes than ``page_size``.
    With ``page_size=None`` the first page is the only one.

In both modes a page without nodes is the terminal signal. A paginator is
single-use and forward-only; only one advance may be in flight at a time.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

CURSOR = "cursor"
OFFSET = "offset"


class PaginatorBusyError(RuntimeError):
    """An advance was requested while another one is still in flight."""


@dataclass(frozen=True)
class PageRequest:
    """What the paginator asks the fetch callable for."""
    offset: int | None = None
    cursor: str | None = None
    page_size: int | None = None


@dataclass(frozen=True)
class Page(Generic[T]):
    """One fetched page of nodes."""
    nodes: list[T] = field(default_factory=list)
    has_next_page: bool | None = None
    end_cursor: str | None = None


def read_connection_page(
    connection: dict[str, Any] | None,
    *,
    edges_field: str = "edges",
    node_field: str = "node",
    page_info_field: str | None = None,
    has_next_field: str = "hasNextPage",
    end_cursor_field: str = "endCursor",
    parse: Callable[[Any], T] | None = None,
) -> Page[T]:
    """Extract the nodes and page info from a connection in a response."""
    if not connection:
        return Page()
    nodes = []
    for edge in connection.get(edges_field) or ():
        node = (edge or {}).get(node_field)
        if node is None:
            continue
        nodes.append(parse(node) if parse else node)

    if page_info_field is None:
        return Page(nodes=nodes)
    info = connection.get(page_info_field) or {}
    return Page(
        nodes=nodes,
        has_next_page=bool(info.get(has_next_field)),
        end_cursor=info.get(end_cursor_field),
    )


class Paginator(Generic[T]):
    """Forward-only pager over one list query.

    Args:
        fetch: Coroutine function returning the page for a PageRequest
        mode: ``"cursor"`` or ``"offset"``
        page_size: Nodes requested per page. None leaves the page length to
            the server; in offset mode it also makes the first page the last

    Example:
        paginator = api.procurement.contract.paginate(page_size=100)
        async for page in paginator:
            ...
    """

    def __init__(
        self,
        fetch: Callable[[PageRequest], Awaitable[Page[T]]],
        mode: str = OFFSET,
        page_size: int | None = None,
    ):
        if mode not in (CURSOR, OFFSET):
            raise ValueError(f"Unknown pagination mode: {mode!r}")
        if page_size is not None and page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self._fetch = fetch
        self.mode = mode
        self.page_size = page_size
        self._offset = 0
        self._cursor: str | None = None
        self._exhausted = False
        self._busy = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def _request(self) -> PageRequest:
        if self.mode == CURSOR:
            return PageRequest(cursor=self._cursor, page_size=self.page_size)
        return PageRequest(offset=self._offset, page_size=self.page_size)

    async def next_page(self) -> list[T] | None:
        """Fetch the next page.

        Returns:
            The page's nodes, or None once the query is exhausted

        Raises:
            PaginatorBusyError: If another advance is in flight
        """
        if self._busy:
            raise PaginatorBusyError("Paginator is already fetching a page")
        if self._exhausted:
            return None

        self._busy = True
        try:
            page = await self._fetch(self._request())
        finally:
            self._busy = False

        nodes = list(page.nodes)
        if not nodes:
            self._exhausted = True
            return None

        if self.mode == CURSOR:
            if not page.has_next_page or not page.end_cursor:
                self._exhausted = True
            else:
                self._cursor = page.end_cursor
        else:
            self._offset += len(nodes)
            if self.page_size is None or len(nodes) < self.page_size:
                self._exhausted = True
        logger.debug("Fetched %d nodes (%s mode, exhausted=%s)", len(nodes), self.mode, self._exhausted)
        return nodes

    async def collect_all(self) -> list[T]:
        """Drain the paginator, concatenating pages in order."""
        items: list[T] = []
        while (page := await self.next_page()) is not None:
            items.extend(page)
        return items

    async def __aiter__(self) -> AsyncIterator[list[T]]:
        while (page := await self.next_page()) is not None:
            yield page
