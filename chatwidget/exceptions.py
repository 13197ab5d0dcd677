"""Exception hierarchy for the chat widget SDK.

These are raised inside the client's request helpers and converted into
failure envelopes at the boundary of each public operation.
"""

from typing import Any, Dict, Optional


class ChatWidgetError(Exception):
    """Base class for every error raised by the SDK."""


class APIException(ChatWidgetError):
    """Raised for non-2xx responses from the chat service.

    Attributes:
        status_code: HTTP status code returned by the API.
        response_body: Raw response body as a dict, when available.
    """

    def __init__(
        self,
        status_code: int,
        response_body: Optional[Dict[str, Any]] = None,
        reason: Optional[str] = None,
    ) -> None:
        """Initialise with the HTTP status code, optional body and reason phrase."""
        self.status_code = status_code
        self.response_body = response_body or {}
        description = (
            self.response_body.get("message")
            or self.response_body.get("error")
            or self.response_body.get("description")
            or reason
            or "Unknown error"
        )
        super().__init__(f"API error {status_code}: {description}")


class ResponseParseError(ChatWidgetError):
    """Raised when a 2xx response body is not JSON or not in the expected shape."""
