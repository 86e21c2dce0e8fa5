"""
Error taxonomy for the Canvas API client.

Every client operation either returns its declared type or raises one of the
CanvasAPIError subclasses below. Construction problems raise ConfigurationError.
"""

from typing import Optional


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


class CanvasAPIError(Exception):
    """Base class for all failures raised by CanvasClient operations."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidResponseError(CanvasAPIError):
    """Raised when no usable HTTP response could be obtained."""
    pass


class CanvasTransportError(InvalidResponseError):
    """Raised when the request failed before a response arrived (DNS, TLS, timeout)."""
    pass


class HTTPStatusError(CanvasAPIError):
    """Raised when Canvas answers with a status outside 200-299."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        super().__init__(
            message or f"Canvas API returned HTTP {status_code}",
            status_code=status_code,
        )


class CanvasDecodingError(CanvasAPIError):
    """
    Raised when a response body cannot be decoded into the expected shape.

    The underlying parse or field error is kept on ``cause``.
    """

    def __init__(self, cause: Exception, target: str = "response"):
        super().__init__(f"Failed to decode {target}: {cause}")
        self.cause = cause
        self.target = target


class UnsupportedItemTypeError(CanvasAPIError):
    """Raised when a module item type has no known content endpoint."""

    def __init__(self, item_type: str):
        super().__init__(f"Unsupported module item type: {item_type!r}")
        self.item_type = item_type
