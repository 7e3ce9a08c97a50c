from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from .request import RequestDescriptor


@dataclass(frozen=True)
class TransportResponse:
    """What a transport hands back: a status and body, or the error that prevented one."""

    status_code: Optional[int] = None
    body: Optional[bytes] = None
    error: Optional[BaseException] = None


@runtime_checkable
class Transport(Protocol):
    """
    Sends one request, once. Implementations must not retry and must report
    network failures through ``TransportResponse.error`` instead of raising.
    """

    async def send(self, request: RequestDescriptor) -> TransportResponse: ...


__all__ = ["Transport", "TransportResponse"]
