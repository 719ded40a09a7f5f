"""Connection to a Confluence server: credentials plus HTTP transports."""

import base64
import logging
import threading
from typing import TYPE_CHECKING, Any

import httpx
from requests import Session

from .config import ConfluenceConfig
from .utils.transport import create_async_client, create_session

if TYPE_CHECKING:
    from .query import ConfluenceQuery

logger = logging.getLogger("confluence-simple-client")


def basic_auth_header(login: str, password: str) -> str:
    """Build the ``Authorization`` header value for basic authentication."""
    token = base64.b64encode(f"{login}:{password}".encode()).decode("ascii")
    return f"Basic {token}"


class ConfluenceConnection:
    """Credentials, server URL and HTTP transports for Confluence queries.

    The ``Authorization`` header is computed once here and shared by every
    :class:`ConfluenceQuery` created from this connection. Transports can be
    injected; otherwise the connection builds its own and closes them in
    :meth:`close` / :meth:`aclose`.
    """

    def __init__(
        self,
        login: str,
        password: str,
        server: str,
        *,
        session: Session | None = None,
        async_client: httpx.AsyncClient | None = None,
        ssl_verify: bool = True,
        timeout: float | None = None,
        proxies: dict[str, str] | None = None,
    ) -> None:
        """Initialize the connection.

        Args:
            login: Login used for basic authentication
            password: Password or API token
            server: Base URL of the Confluence server
            session: Optional requests session used for blocking calls
            async_client: Optional httpx client used for asynchronous calls
            ssl_verify: Whether SSL certificates are verified by owned transports
            timeout: Request timeout in seconds, None for no timeout
            proxies: Optional requests-style proxy mapping for owned transports

        Raises:
            ValueError: If login, password or server is None
        """
        if login is None:
            raise ValueError("login must not be None")
        if password is None:
            raise ValueError("password must not be None")
        if server is None:
            raise ValueError("server must not be None")

        self._login = login
        self._password = password
        self._server = server.strip().rstrip("/")
        self._auth = basic_auth_header(login, password)

        self.ssl_verify = ssl_verify
        self.timeout = timeout
        self.proxies = proxies

        self._owns_session = session is None
        self._session = session
        self._owns_async_client = async_client is None
        self._async_client = async_client
        self._transport_lock = threading.Lock()

        # Default page size for queries on this connection, None keeps theirs
        self.default_page_size: int | None = None
        self.is_connected = False
        logger.debug(f"Confluence connection created for {self}")

    @classmethod
    def from_config(
        cls, config: ConfluenceConfig, **transports: Any
    ) -> "ConfluenceConnection":
        """Create a connection from a :class:`ConfluenceConfig`.

        Args:
            config: The configuration to use
            **transports: Optional ``session`` and ``async_client`` to inject
        """
        connection = cls(
            config.username,
            config.password,
            config.url,
            ssl_verify=config.ssl_verify,
            timeout=config.timeout,
            proxies=config.proxies or None,
            **transports,
        )
        connection.default_page_size = config.page_size
        return connection

    @classmethod
    def from_connection_string(
        cls, connection_string: str, **kwargs: Any
    ) -> "ConfluenceConnection":
        """Create a connection from ``Data Source=<url>;User ID=<login>;password=<password>;``.

        Raises:
            ValueError: If the connection string is malformed
        """
        if connection_string is None:
            raise ValueError("connection_string must not be None")
        config = ConfluenceConfig.from_connection_string(connection_string)
        return cls(config.username, config.password, config.url, **kwargs)

    @classmethod
    def from_env(cls, **transports: Any) -> "ConfluenceConnection":
        """Create a connection from environment variables."""
        return cls.from_config(ConfluenceConfig.from_env(), **transports)

    @property
    def login(self) -> str:
        return self._login

    @property
    def password(self) -> str:
        return self._password

    @property
    def server(self) -> str:
        """Server base URL without trailing slash."""
        return self._server

    @property
    def auth(self) -> str:
        """Precomputed ``Authorization`` header value."""
        return self._auth

    @property
    def session(self) -> Session:
        """The requests session used for blocking calls."""
        with self._transport_lock:
            if self._session is None:
                self._session = create_session(
                    self._server, ssl_verify=self.ssl_verify, proxies=self.proxies
                )
        return self._session

    @property
    def async_client(self) -> httpx.AsyncClient:
        """The httpx client used for asynchronous calls."""
        with self._transport_lock:
            if self._async_client is None:
                self._async_client = create_async_client(
                    ssl_verify=self.ssl_verify,
                    timeout=self.timeout,
                    proxies=self.proxies,
                )
        return self._async_client

    def create_query(self, page_size: int | None = None) -> "ConfluenceQuery":
        """Create a query bound to this connection.

        Args:
            page_size: Optional default page size for the new query
        """
        from .query import ConfluenceQuery

        query = ConfluenceQuery(self)
        if page_size is not None:
            query.default_page_size = page_size
        return query

    def close(self) -> None:
        """Close the requests session if this connection created it.

        An owned httpx client can only be closed from a coroutine; it is left
        to :meth:`aclose` and a warning is logged.
        """
        if self._owns_session and self._session is not None:
            self._session.close()
            self._session = None
        if self._owns_async_client and self._async_client is not None:
            logger.warning(
                f"Confluence async client for {self} is still open, "
                "use aclose() or 'async with' to close it"
            )

    async def aclose(self) -> None:
        """Close all transports this connection created."""
        if self._owns_async_client and self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None
        self.close()

    def __enter__(self) -> "ConfluenceConnection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    async def __aenter__(self) -> "ConfluenceConnection":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"ConfluenceConnection({self._login!r}, server={self._server!r})"

    def __str__(self) -> str:
        return f"{self._login}@{self._server}"
