from typing import Optional


class APIError(Exception):
    """
    Raised when a call to the config service fails.

    Carries the HTTP status (503 for network failures) and the correlation id
    sent with the request so the matching server log line can be found.
    """

    def __init__(
        self, detail: str, status_code: int, correlation_id: Optional[str] = None
    ):
        self.detail = detail
        self.status_code = status_code
        self.correlation_id = correlation_id
        message = f"API Error: [Status={status_code}] [CorrelationID={correlation_id}] - {detail}"
        super().__init__(message)

    def __str__(self):
        return f"APIError(status_code={self.status_code}, detail='{self.detail}', correlation_id='{self.correlation_id}')"


class AuthenticationError(APIError):
    """The config service rejected the API token."""

    def __init__(self, correlation_id: Optional[str] = None):
        super().__init__(
            detail="Authentication failed: check that the API token is correct",
            status_code=401,
            correlation_id=correlation_id,
        )


class ConfigUnavailableError(APIError):
    """Neither the config service nor the default config file could be read."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, status_code=503)
