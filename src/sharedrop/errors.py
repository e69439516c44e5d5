"""Error taxonomy shared by the core and the HTTP boundary."""

from __future__ import annotations


class ShareError(Exception):
    """Base class for errors that map 1:1 to a response outcome."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PathUnsafeError(ShareError):
    """Raised when a client path escapes the root or cannot be resolved."""

    status_code = 403


class NotFoundError(ShareError):
    status_code = 404


class InvalidInputError(ShareError):
    """Raised for malformed aliases, encodings or missing parameters."""

    status_code = 400


class ConflictError(ShareError):
    status_code = 409


class RateLimitedError(ShareError):
    """Raised when a client exceeds its request quota."""

    status_code = 429

    def __init__(self, key: str, limit: int, window: float) -> None:
        self.key = key
        self.limit = limit
        self.window = window
        super().__init__(
            f"Rate limit exceeded. Maximum {limit} requests per {window:g} seconds."
        )


class IOFailureError(ShareError):
    """Raised when reading or writing files fails on the server side."""

    status_code = 500
