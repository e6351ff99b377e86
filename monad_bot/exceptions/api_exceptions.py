from typing import Any


class APIClientError(Exception):
    """Basic exception for all errors BaseAPIClient"""


class APIConnectionError(APIClientError):
    """Connection to the remote host could not be established"""


class APITimeoutError(APIClientError):
    """Request timed out"""


class APISessionError(APIClientError):
    """HTTP session was closed or broken"""


class APISSLError(APIClientError):
    """SSL handshake error"""


class APIResponseError(APIClientError):
    """Response could not be interpreted"""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response or {}


class APIClientSideError(APIResponseError):
    """4xx response"""


class APIServerSideError(APIResponseError):
    """5xx response or retries exhausted"""


class APIRateLimitError(APIClientError):
    """429 response"""
