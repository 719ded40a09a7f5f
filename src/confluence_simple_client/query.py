"""Single and paged queries against the Confluence REST API."""

import logging
from collections.abc import AsyncIterator, Iterator
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from .config import DEFAULT_PAGE_SIZE, validate_page_size
from .connection import ConfluenceConnection
from .exceptions import ConfluenceQueryError
from .utils.address import append_limit, make_address, next_page_address
from .utils.validation import ensure_json_body

logger = logging.getLogger("confluence-simple-client")

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass(frozen=True)
class QueryOptions:
    """Options for one request or one series of paged requests.

    ``method`` defaults to POST when a body is given and GET otherwise;
    ``page_size`` values of zero or less fall back to the query's default.
    """

    body: Any = None
    method: str | None = None
    page_size: int = 0

    @property
    def http_method(self) -> str:
        if self.method:
            return self.method.upper()
        return "POST" if self.body is not None else "GET"

    @property
    def payload(self) -> bytes:
        return ensure_json_body(self.body).encode("utf-8")

    def effective_page_size(self, default: int) -> int:
        return self.page_size if self.page_size > 0 else default


def failure_message(status_code: int, reason: str | None) -> str:
    """Message for a failed response: the reason phrase, or one built from the code."""
    if reason and reason.strip():
        return reason
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        phrase = "Unknown"
    return f"Failed with code {status_code}: {phrase}"


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class ConfluenceQuery:
    """Issues requests for a :class:`ConfluenceConnection`.

    Address fragments are expanded with :func:`make_address`, so
    ``query.query("content/123")`` requests ``{server}/rest/api/content/123``.
    Blocking calls use the connection's requests session; the ``a``-prefixed
    coroutine variants use its httpx client.

    Example:
        >>> connection = ConfluenceConnection("user", "pass", "https://wiki.example.com")
        >>> query = connection.create_query()
        >>> for page in query.query_paged("space"):
        ...     print(len(page["results"]))
    """

    def __init__(self, connection: ConfluenceConnection) -> None:
        if connection is None:
            raise ValueError("connection must not be None")
        self.connection = connection
        self._default_page_size = DEFAULT_PAGE_SIZE
        if connection.default_page_size is not None:
            self.default_page_size = connection.default_page_size

    @property
    def default_page_size(self) -> int:
        """Page size used when a call does not give one (1..999)."""
        return self._default_page_size

    @default_page_size.setter
    def default_page_size(self, value: int) -> None:
        self._default_page_size = validate_page_size(value)

    def make_address(self, address: str) -> str:
        """Expand an address fragment against the connection's server."""
        return make_address(address, self.connection.server)

    def _first_url(self, address: str, page_size: int) -> str:
        if address is None:
            raise ValueError("address must not be None")
        return append_limit(self.make_address(address), page_size)

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": self.connection.auth,
            "Content-Type": JSON_CONTENT_TYPE,
        }

    def _check_status(
        self, method: str, url: str, status_code: int, reason: str | None
    ) -> None:
        if is_success(status_code):
            self.connection.is_connected = True
            return
        message = failure_message(status_code, reason)
        logger.error(f"Confluence {method} {url} failed: {message}")
        raise ConfluenceQueryError(message, status_code=status_code, reason=reason)

    # Blocking API (requests)

    def _send(self, url: str, options: QueryOptions) -> Any:
        method = options.http_method
        logger.debug(f"Confluence {method} {url}")
        response = self.connection.session.request(
            method,
            url,
            data=options.payload,
            headers=self._headers(),
            timeout=self.connection.timeout,
        )
        self._check_status(method, url, response.status_code, response.reason)
        return response.json()

    def query(self, address: str, body: Any = None, method: str | None = None) -> Any:
        """Run a single request and return the parsed JSON response.

        Args:
            address: Address fragment or ``rest/...`` path
            body: JSON text or document to send, defaults to ``{}``
            method: HTTP method, defaults to POST with a body and GET without

        Returns:
            The parsed JSON document

        Raises:
            ValueError: If address is None
            ConfluenceQueryError: If the server answers with a non-success status
            requests.exceptions.RequestException: On transport failures
        """
        options = QueryOptions(body=body, method=method)
        url = self._first_url(address, self.default_page_size)
        return self._send(url, options)

    def query_paged(
        self,
        address: str,
        body: Any = None,
        method: str | None = None,
        page_size: int = 0,
    ) -> Iterator[Any]:
        """Lazily fetch every page of a paged resource.

        Follows ``_links.next`` until a response carries none. Pages are
        requested one at a time, only when the previous one has been consumed.

        Args:
            address: Address fragment or ``rest/...`` path
            body: JSON text or document to send with every request
            method: HTTP method, defaults to POST with a body and GET without
            page_size: Page size for the first request, <= 0 for the default

        Returns:
            Iterator over the parsed JSON page documents

        Raises:
            ValueError: If address is None
            ConfluenceQueryError: While iterating, if a page request fails
        """
        options = QueryOptions(body=body, method=method, page_size=page_size)
        url = self._first_url(
            address, options.effective_page_size(self.default_page_size)
        )
        return self._iter_pages(url, options)

    def _iter_pages(self, url: str, options: QueryOptions) -> Iterator[Any]:
        next_url: str | None = url
        while next_url is not None:
            document = self._send(next_url, options)
            next_url = next_page_address(document, self.connection.server)
            yield document

    # Asynchronous API (httpx)

    async def _asend(self, url: str, options: QueryOptions) -> Any:
        method = options.http_method
        logger.debug(f"Confluence {method} {url} (async)")
        response = await self.connection.async_client.request(
            method,
            url,
            content=options.payload,
            headers=self._headers(),
        )
        self._check_status(method, url, response.status_code, response.reason_phrase)
        return response.json()

    async def aquery(
        self, address: str, body: Any = None, method: str | None = None
    ) -> Any:
        """Coroutine version of :meth:`query`.

        Cancelling the awaiting task aborts the in-flight request and raises
        :class:`asyncio.CancelledError` to the caller.

        Raises:
            ValueError: If address is None
            ConfluenceQueryError: If the server answers with a non-success status
            httpx.HTTPError: On transport failures
        """
        options = QueryOptions(body=body, method=method)
        url = self._first_url(address, self.default_page_size)
        return await self._asend(url, options)

    def aquery_paged(
        self,
        address: str,
        body: Any = None,
        method: str | None = None,
        page_size: int = 0,
    ) -> AsyncIterator[Any]:
        """Asynchronous version of :meth:`query_paged`.

        Use with ``async for``. Cancellation while a page is in flight
        propagates :class:`asyncio.CancelledError` without yielding that page.
        """
        options = QueryOptions(body=body, method=method, page_size=page_size)
        url = self._first_url(
            address, options.effective_page_size(self.default_page_size)
        )
        return self._aiter_pages(url, options)

    async def _aiter_pages(
        self, url: str, options: QueryOptions
    ) -> AsyncIterator[Any]:
        next_url: str | None = url
        while next_url is not None:
            document = await self._asend(next_url, options)
            next_url = next_page_address(document, self.connection.server)
            yield document

    def __repr__(self) -> str:
        return f"ConfluenceQuery({self.connection}, default_page_size={self._default_page_size})"
