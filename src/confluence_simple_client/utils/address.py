"""Address helpers for building Confluence REST URLs.

Callers may pass terse address fragments instead of full URLs:

- ``"content/123"`` becomes ``{server}/rest/api/content/123``
- ``"greenhopper:1/foo"`` becomes ``{server}/rest/greenhopper/1/foo``
- ``"rest/experimental/..."`` is used verbatim under the server root
"""

import re
from typing import Any

# Leading API name followed by one or more of ';' ',' ':'; \w is wider than
# letters and ASCII digits, so matches are narrowed by _is_api_name
API_PREFIX_PATTERN = re.compile(r"^\s*([^\W_]*)\s*[;,:]+\s*")

DEFAULT_API = "api"

_ASCII_DIGITS = "0123456789"

_TRIM_CHARS = "/ "


def _is_api_name(name: str) -> bool:
    """API names hold Unicode letters and ASCII digits only."""
    return all(ch.isalpha() or ch in _ASCII_DIGITS for ch in name)


def make_address(address: str | None, server: str) -> str:
    """Expand an address fragment into an absolute REST URL.

    Args:
        address: The address fragment supplied by the caller
        server: The server base URL, without a trailing slash

    Returns:
        The absolute URL, or an empty string for blank input
    """
    if not address or not address.strip():
        return ""

    address = address.strip(_TRIM_CHARS)

    if address.lower().startswith("rest/"):
        return "/".join([server, address])

    match = API_PREFIX_PATTERN.match(address)
    if match and _is_api_name(match.group(1)):
        api = match.group(1)
        if not api.strip():
            api = DEFAULT_API
        remainder = address[match.end() :].strip(_TRIM_CHARS)
        return "/".join([server, f"rest/{api}", remainder])

    return "/".join([server, f"rest/{DEFAULT_API}", address])


def append_limit(url: str, page_size: int) -> str:
    """Append the ``limit`` query parameter to a URL."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}limit={page_size}"


def next_page_address(document: Any, server: str) -> str | None:
    """Resolve the address of the next page from a paged response.

    Confluence sends the cursor as ``_links.next``, normally a
    server-relative path string. An object carrying ``href`` is accepted too.

    Args:
        document: The parsed JSON response
        server: The server base URL, without a trailing slash

    Returns:
        The absolute URL of the next page, or None on the last page
    """
    if not isinstance(document, dict):
        return None

    links = document.get("_links")
    if not isinstance(links, dict) or "next" not in links:
        return None

    next_link = links["next"]
    if isinstance(next_link, dict):
        next_link = next_link.get("href")
    if next_link is None:
        return None

    return "/".join([server.rstrip("/"), str(next_link).strip(_TRIM_CHARS)])
