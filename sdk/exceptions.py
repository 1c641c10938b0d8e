"""Exception hierarchy for the Rubika Bot API SDK."""

from typing import Any, Dict, Optional


class APIRequestError(Exception):
    """Base exception for failed calls to the Rubika Bot API.

    Attributes:
        status_code: HTTP status code returned by the API, when one was received.
        response_body: Parsed response body, when available.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body or {}
        super().__init__(f"API request failed: {message}")


class TransportError(APIRequestError):
    """The HTTP request itself failed (connection reset, timeout, DNS …)."""

    def __init__(self, method: str, cause: Exception) -> None:
        self.method = method
        self.cause = cause
        super().__init__(f"{method}: {cause}")


class InvalidJSONError(APIRequestError):
    """The API answered with a body that is not a JSON object."""

    def __init__(self, method: str, status_code: Optional[int] = None) -> None:
        self.method = method
        super().__init__(f"{method}: invalid JSON response", status_code=status_code)
