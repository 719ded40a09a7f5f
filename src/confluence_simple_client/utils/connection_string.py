"""Connection string parsing for Confluence credentials.

The accepted format is a list of ``key=value`` pairs separated by
semicolons, for example::

    Data Source=https://wiki.example.com;User ID=me;password=secret;

Keys are case-insensitive. Values may be wrapped in single or double quotes,
which allows semicolons inside a value; a doubled quote inside a quoted value
stands for a literal quote.
"""

from typing import NamedTuple

SERVER_KEY = "data source"
LOGIN_KEY = "user id"
PASSWORD_KEY = "password"


class ConnectionStringCredentials(NamedTuple):
    """Credentials extracted from a connection string."""

    server: str
    login: str
    password: str


def _read_value(text: str, pos: int) -> tuple[str, int]:
    """Read a value starting at ``pos``; returns the value and the next position."""
    length = len(text)
    while pos < length and text[pos].isspace():
        pos += 1

    if pos < length and text[pos] in ("'", '"'):
        quote = text[pos]
        pos += 1
        chars = []
        while True:
            if pos >= length:
                raise ValueError("Invalid connection string: unterminated quote")
            if text[pos] == quote:
                if pos + 1 < length and text[pos + 1] == quote:
                    chars.append(quote)
                    pos += 2
                    continue
                pos += 1
                break
            chars.append(text[pos])
            pos += 1

        while pos < length and text[pos].isspace():
            pos += 1
        if pos < length and text[pos] != ";":
            raise ValueError("Invalid connection string: text after quoted value")
        return "".join(chars), pos + 1

    end = text.find(";", pos)
    if end == -1:
        end = length
    return text[pos:end].strip(), end + 1


def parse_connection_string(connection_string: str) -> dict[str, str]:
    """Split a connection string into a dictionary of lower-cased keys.

    Args:
        connection_string: The raw connection string

    Returns:
        Mapping of normalized key to value

    Raises:
        ValueError: If the text is not a well formed connection string
    """
    if connection_string is None:
        raise ValueError("connection_string must not be None")

    values: dict[str, str] = {}
    pos = 0
    length = len(connection_string)

    while pos < length:
        # Skip empty segments such as a trailing ';'
        if connection_string[pos] == ";" or connection_string[pos].isspace():
            pos += 1
            continue

        eq = connection_string.find("=", pos)
        semi = connection_string.find(";", pos)
        if eq == -1 or (semi != -1 and semi < eq):
            raise ValueError(
                f"Invalid connection string: missing '=' near position {pos}"
            )

        key = " ".join(connection_string[pos:eq].split()).lower()
        if not key:
            raise ValueError("Invalid connection string: empty key")

        value, pos = _read_value(connection_string, eq + 1)
        values[key] = value

    return values


def credentials_from_connection_string(
    connection_string: str,
) -> ConnectionStringCredentials:
    """Extract server, login and password from a connection string.

    Raises:
        ValueError: If the connection string is malformed or lacks a required key
    """
    values = parse_connection_string(connection_string)

    missing = [
        key for key in (SERVER_KEY, LOGIN_KEY, PASSWORD_KEY) if key not in values
    ]
    if missing:
        raise ValueError(
            f"Invalid connection string: missing {', '.join(missing)}"
        )

    return ConnectionStringCredentials(
        server=values[SERVER_KEY],
        login=values[LOGIN_KEY],
        password=values[PASSWORD_KEY],
    )
