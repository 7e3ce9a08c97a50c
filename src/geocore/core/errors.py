from __future__ import annotations

from enum import IntEnum
from typing import Optional


class ServerResponse(IntEnum):
    """Sentinel status codes for responses that carry no usable HTTP status."""

    UNAVAILABLE = -1
    UNEXPECTED_RESPONSE = -2


class GeocoreError(Exception):
    """Base error for every failure surfaced by the client."""


class InvalidStateError(GeocoreError):
    """Unexpected internal state, e.g. login succeeded but no token came back."""

    def __init__(self, message: str = "Invalid client state"):
        super().__init__(message)
        self.message = message


class InvalidServerResponseError(GeocoreError):
    def __init__(self, status_code: int):
        super().__init__(f"Invalid server response (status {int(status_code)})")
        self.status_code = int(status_code)


class UnexpectedResponseError(GeocoreError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ServerError(GeocoreError):
    """Backend answered with an envelope whose status is not ``success``."""

    def __init__(self, code: str, message: str):
        super().__init__(f"{code}: {message}" if code else message)
        self.code = code
        self.message = message


class TokenUndefinedError(GeocoreError):
    def __init__(self, message: str = "Access token is not available; login first"):
        super().__init__(message)


class UnauthorizedAccessError(GeocoreError):
    def __init__(self, message: str = "Access to the resource is forbidden"):
        super().__init__(message)


class InvalidParameterError(GeocoreError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(GeocoreError):
    """Transport-level failure; the original exception is kept on ``error``."""

    def __init__(self, error: BaseException, message: Optional[str] = None):
        super().__init__(message or f"Network error: {error}")
        self.error = error
        self.__cause__ = error


__all__ = [
    "ServerResponse",
    "GeocoreError",
    "InvalidStateError",
    "InvalidServerResponseError",
    "UnexpectedResponseError",
    "ServerError",
    "TokenUndefinedError",
    "UnauthorizedAccessError",
    "InvalidParameterError",
    "NetworkError",
]
