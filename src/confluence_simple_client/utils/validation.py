"""Request body validation for the Confluence client."""

import json
from typing import Any

EMPTY_BODY = "{}"


def ensure_json_body(body: Any) -> str:
    """
    Turn a request body into the JSON text sent on the wire.

    Strings are passed through untouched, already-parsed documents (dict or
    list) are dumped back to text and None becomes an empty JSON object.

    Raises:
        ValueError: If the body cannot be serialized
    """
    if body is None:
        return EMPTY_BODY
    if isinstance(body, str):
        return body
    if isinstance(body, list | dict):
        try:
            return json.dumps(body)
        except TypeError as e:
            raise ValueError(f"Could not serialize request body to JSON: {e}") from e
    raise ValueError(f"Unexpected body type: {type(body)}. Expected str, list, or dict.")
