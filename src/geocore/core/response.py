"""Classifies a raw transport response into a result node or a GeocoreError."""

from __future__ import annotations

from typing import Any, Optional

from .errors import (
    InvalidServerResponseError,
    NetworkError,
    ServerError,
    ServerResponse,
    UnauthorizedAccessError,
)
from .nodes import get_node, get_str, parse_json
from .result import Result

SUCCESS_STATUS = "success"


def decode_envelope(envelope: Any) -> Result[Any]:
    """Interpret an already-parsed ``{"status": ..., ...}`` envelope from a 200 response."""
    status = get_str(envelope, "status")
    if status is None:
        return Result.failure(
            InvalidServerResponseError(ServerResponse.UNEXPECTED_RESPONSE)
        )
    if status == SUCCESS_STATUS:
        return Result.success(get_node(envelope, "result"))
    return Result.failure(
        ServerError(
            code=get_str(envelope, "code") or "",
            message=get_str(envelope, "message") or "",
        )
    )


def decode_response(
    status_code: Optional[int],
    body: Optional[bytes],
    error: Optional[BaseException] = None,
) -> Result[Any]:
    """
    Pure classification, checked in this order:
    - transport error            -> NetworkError
    - no body / no status        -> InvalidServerResponseError(UNAVAILABLE)
    - 200 + envelope             -> result node, ServerError, or UNEXPECTED_RESPONSE
    - 403                        -> UnauthorizedAccessError
    - anything else              -> InvalidServerResponseError(status_code)
    """
    if error is not None:
        return Result.failure(NetworkError(error))
    if body is None or status_code is None:
        return Result.failure(InvalidServerResponseError(ServerResponse.UNAVAILABLE))
    if status_code == 200:
        return decode_envelope(parse_json(body))
    if status_code == 403:
        return Result.failure(UnauthorizedAccessError())
    return Result.failure(InvalidServerResponseError(status_code))


__all__ = ["SUCCESS_STATUS", "decode_envelope", "decode_response"]
