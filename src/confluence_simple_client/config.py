"""Configuration module for the Confluence client."""

import logging
import os
from dataclasses import dataclass

from .utils.connection_string import credentials_from_connection_string
from .utils.logging import log_config_param

logger = logging.getLogger("confluence-simple-client")

DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 999


def validate_page_size(page_size: int) -> int:
    """Check that a page size lies in the accepted 1..999 range.

    Raises:
        ValueError: If the page size is out of range
    """
    if page_size <= 0 or page_size > MAX_PAGE_SIZE:
        raise ValueError(
            f"Page size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}"
        )
    return page_size


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).lower() not in ("false", "0", "no")


@dataclass
class ConfluenceConfig:
    """Confluence connection configuration.

    Only basic authentication is supported: the password may be the account
    password (Server/Data Center) or an API token (Cloud).
    """

    url: str  # Base URL for Confluence
    username: str  # Login used for basic auth
    password: str  # Password or API token
    ssl_verify: bool = True  # Whether to verify SSL certificates
    timeout: float | None = None  # Request timeout in seconds, None waits forever
    page_size: int = DEFAULT_PAGE_SIZE  # Default page size for queries
    http_proxy: str | None = None  # HTTP proxy URL
    https_proxy: str | None = None  # HTTPS proxy URL
    no_proxy: str | None = None  # Comma-separated list of hosts to bypass proxy

    @property
    def proxies(self) -> dict[str, str]:
        """Proxy mapping in the form expected by requests."""
        proxies = {}
        if self.http_proxy:
            proxies["http"] = self.http_proxy
        if self.https_proxy:
            proxies["https"] = self.https_proxy
        if self.no_proxy:
            proxies["no_proxy"] = self.no_proxy
        return proxies

    @classmethod
    def from_connection_string(
        cls, connection_string: str, **overrides: object
    ) -> "ConfluenceConfig":
        """Create configuration from a ``Data Source=...;User ID=...;password=...;`` string.

        Args:
            connection_string: The connection string
            **overrides: Extra field values (ssl_verify, timeout, ...)

        Raises:
            ValueError: If the connection string is malformed
        """
        creds = credentials_from_connection_string(connection_string)
        return cls(
            url=creds.server,
            username=creds.login,
            password=creds.password,
            **overrides,
        )

    @classmethod
    def from_env(cls) -> "ConfluenceConfig":
        """Create configuration from environment variables.

        Credentials come either from ``CONFLUENCE_CONNECTION_STRING`` or from
        ``CONFLUENCE_URL``, ``CONFLUENCE_USERNAME`` and ``CONFLUENCE_API_TOKEN``
        (``CONFLUENCE_PASSWORD`` is accepted in place of the token).

        Returns:
            ConfluenceConfig with values from environment variables

        Raises:
            ValueError: If any required environment variable is missing or invalid
        """
        ssl_verify = _env_flag("CONFLUENCE_SSL_VERIFY")

        timeout: float | None = None
        timeout_env = os.getenv("CONFLUENCE_TIMEOUT")
        if timeout_env:
            try:
                timeout = float(timeout_env)
            except ValueError as e:
                raise ValueError(
                    f"CONFLUENCE_TIMEOUT must be a number, got {timeout_env!r}"
                ) from e

        page_size = DEFAULT_PAGE_SIZE
        page_size_env = os.getenv("CONFLUENCE_PAGE_SIZE")
        if page_size_env:
            if not page_size_env.isdigit():
                raise ValueError(
                    f"CONFLUENCE_PAGE_SIZE must be an integer, got {page_size_env!r}"
                )
            page_size = validate_page_size(int(page_size_env))

        # Proxy settings
        proxy_settings = {
            "http_proxy": os.getenv("CONFLUENCE_HTTP_PROXY", os.getenv("HTTP_PROXY")),
            "https_proxy": os.getenv(
                "CONFLUENCE_HTTPS_PROXY", os.getenv("HTTPS_PROXY")
            ),
            "no_proxy": os.getenv("CONFLUENCE_NO_PROXY", os.getenv("NO_PROXY")),
        }

        connection_string = os.getenv("CONFLUENCE_CONNECTION_STRING")
        if connection_string:
            config = cls.from_connection_string(
                connection_string,
                ssl_verify=ssl_verify,
                timeout=timeout,
                page_size=page_size,
                **proxy_settings,
            )
        else:
            url = os.getenv("CONFLUENCE_URL")
            if not url:
                error_msg = "Missing required CONFLUENCE_URL or CONFLUENCE_CONNECTION_STRING environment variable"
                raise ValueError(error_msg)

            username = os.getenv("CONFLUENCE_USERNAME")
            password = os.getenv("CONFLUENCE_API_TOKEN") or os.getenv(
                "CONFLUENCE_PASSWORD"
            )
            if not username or not password:
                error_msg = "Confluence authentication requires CONFLUENCE_USERNAME and CONFLUENCE_API_TOKEN (or CONFLUENCE_PASSWORD)"
                raise ValueError(error_msg)

            config = cls(
                url=url,
                username=username,
                password=password,
                ssl_verify=ssl_verify,
                timeout=timeout,
                page_size=page_size,
                **proxy_settings,
            )

        config.log_settings()
        return config

    def log_settings(self) -> None:
        """Log the effective configuration with credentials masked."""
        log_config_param(logger, "URL", self.url)
        log_config_param(logger, "username", self.username)
        log_config_param(logger, "password", self.password, sensitive=True)
        log_config_param(logger, "SSL verify", self.ssl_verify)
        log_config_param(logger, "timeout", self.timeout)
        log_config_param(logger, "page size", self.page_size)
