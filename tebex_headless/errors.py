"""Error types raised by the Tebex Headless client."""

from typing import Optional


class HeadlessError(Exception):
    """Base class for every error raised by the client."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class HeadlessValidationError(HeadlessError, ValueError):
    """A required argument was missing. Raised before any network call."""


class HeadlessRequestError(HeadlessError):
    """The Headless API answered with a non-success status."""

    def __init__(
        self,
        status_code: int,
        reason_phrase: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(f"Request failed with status {status_code}: {reason_phrase}")
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        self.method = method
        self.url = url
