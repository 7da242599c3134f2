class ServiceError(Exception):
    """Base exception for all service-layer errors.

    Rendered as ``{"error": ..., "message": ...}`` with ``status_code``.
    """

    def __init__(self, error: str, message: str | None = None, status_code: int = 500):
        self.error = error
        self.message = message
        self.status_code = status_code
        super().__init__(message or error)

    def to_content(self) -> dict[str, str]:
        content = {"error": self.error}
        if self.message is not None:
            content["message"] = self.message
        return content


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, error: str = "Not Found", message: str | None = None):
        super().__init__(error, message, status_code=404)


class BadRequestError(ServiceError):
    """Raised for invalid client requests (e.g., bad input)."""

    def __init__(self, error: str = "Bad Request", message: str | None = None):
        super().__init__(error, message, status_code=400)


class UnauthorizedError(ServiceError):
    """Raised when a write request carries a missing or wrong API token."""

    def __init__(self, error: str = "Unauthorized", message: str | None = None):
        super().__init__(error, message, status_code=401)


class StoreError(ServiceError):
    """Raised when the key-value store fails an operation."""

    def __init__(self, error: str, message: str | None = None):
        super().__init__(error, message, status_code=500)
