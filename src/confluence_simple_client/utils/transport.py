"""HTTP transport construction for Confluence connections.

Blocking calls go through a :class:`requests.Session`; asynchronous calls go
through an :class:`httpx.AsyncClient`. Both are created here with the same
SSL and proxy settings.
"""

import logging
import ssl
from typing import Any
from urllib.parse import urlparse

import httpx
from requests.adapters import HTTPAdapter
from requests.sessions import Session
from urllib3.poolmanager import PoolManager

logger = logging.getLogger("confluence-simple-client")


class SSLIgnoreAdapter(HTTPAdapter):
    """HTTP adapter that skips certificate verification.

    Mounted on a session for the Confluence server's domain only, when
    verification is explicitly disabled. Legacy renegotiation is enabled for
    older on-premise servers.
    """

    def init_poolmanager(
        self, connections: int, maxsize: int, block: bool = False, **pool_kwargs: Any
    ) -> None:
        """Initialize the connection pool manager with verification disabled.

        Args:
            connections: Number of connections to save in the pool
            maxsize: Maximum number of connections in the pool
            block: Whether to block when the pool is full
            pool_kwargs: Additional arguments for the pool manager
        """
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

        context.options |= 0x4  # SSL_OP_LEGACY_SERVER_CONNECT
        context.options |= 0x40000  # SSL_OP_ALLOW_UNSAFE_LEGACY_RENEGOTIATION

        self.poolmanager = PoolManager(
            num_pools=connections,
            maxsize=maxsize,
            block=block,
            ssl_context=context,
            **pool_kwargs,
        )

    def cert_verify(self, conn: Any, url: str, verify: bool, cert: Any | None) -> None:
        super().cert_verify(conn, url, verify=False, cert=cert)


def configure_ssl_verification(url: str, session: Session, ssl_verify: bool) -> None:
    """Mount :class:`SSLIgnoreAdapter` for the server's domain if verification is off.

    Args:
        url: The Confluence server URL
        session: The requests session to configure
        ssl_verify: Whether SSL verification should be enabled
    """
    if ssl_verify:
        return

    logger.warning(
        "Confluence SSL verification disabled. This is insecure and should only be used in testing environments."
    )

    domain = urlparse(url).netloc
    adapter = SSLIgnoreAdapter()
    session.mount(f"https://{domain}", adapter)
    session.mount(f"http://{domain}", adapter)


def configure_proxies(session: Session, proxies: dict[str, str] | None) -> None:
    """Apply proxy settings to a requests session."""
    if not proxies:
        return
    session.proxies.update(proxies)
    logger.debug(f"Confluence proxies configured: {sorted(proxies)}")


def create_session(
    url: str, ssl_verify: bool = True, proxies: dict[str, str] | None = None
) -> Session:
    """Create a requests session for blocking Confluence calls.

    Args:
        url: The Confluence server URL
        ssl_verify: Whether SSL verification should be enabled
        proxies: Optional requests-style proxy mapping (scheme -> proxy URL)

    Returns:
        The configured session
    """
    session = Session()
    configure_ssl_verification(url, session, ssl_verify)
    configure_proxies(session, proxies)
    return session


def create_async_client(
    ssl_verify: bool = True,
    timeout: float | None = None,
    proxies: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Create an httpx client for asynchronous Confluence calls.

    Args:
        ssl_verify: Whether SSL verification should be enabled
        timeout: Request timeout in seconds, None for no timeout
        proxies: Optional requests-style proxy mapping (scheme -> proxy URL)

    Returns:
        The configured async client
    """
    if not ssl_verify:
        logger.warning(
            "Confluence SSL verification disabled for async client. This is insecure and should only be used in testing environments."
        )

    proxy = None
    if proxies:
        proxy = proxies.get("https") or proxies.get("http")

    return httpx.AsyncClient(
        verify=ssl_verify,
        timeout=httpx.Timeout(timeout),
        proxy=proxy,
    )
