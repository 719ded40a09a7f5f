"""
Utility functions for the Confluence client.
"""

from .address import append_limit, make_address, next_page_address
from .connection_string import (
    credentials_from_connection_string,
    parse_connection_string,
)
from .logging import mask_sensitive, setup_logging
from .transport import (
    SSLIgnoreAdapter,
    configure_ssl_verification,
    create_async_client,
    create_session,
)
from .validation import ensure_json_body

__all__ = [
    "SSLIgnoreAdapter",
    "append_limit",
    "configure_ssl_verification",
    "create_async_client",
    "create_session",
    "credentials_from_connection_string",
    "ensure_json_body",
    "make_address",
    "mask_sensitive",
    "next_page_address",
    "parse_connection_string",
    "setup_logging",
]
