"""Exception types raised across the adapter boundary."""

from typing import Any


class AdapterError(Exception):
    """Base class for all changebridge errors."""


class TransportError(AdapterError):
    """The transport could not complete a request.

    Covers network failures, non-2xx responses and rejected credentials.
    The failing response, when there was one, is kept on ``response``.
    """

    def __init__(self, message: str, response: Any = None):
        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> int | None:
        return getattr(self.response, "status_code", None)


class MalformedPayloadError(AdapterError, ValueError):
    """A response body is missing or does not have the expected JSON shape."""
