class ConfluenceClientError(Exception):
    """Base class for errors raised by the Confluence client."""

    pass


class ConfluenceQueryError(ConfluenceClientError):
    """Raised when Confluence answers a request with a non-success status.

    Attributes:
        status_code: The HTTP status code of the failed response
        reason: The reason phrase sent by the server (may be empty)
    """

    def __init__(self, message: str, status_code: int, reason: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason or ""
