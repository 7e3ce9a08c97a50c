from __future__ import annotations

import logging
from typing import Optional

import httpx

from geocore.core.config import DEFAULT_TIMEOUT_SECONDS
from geocore.core.request import RequestDescriptor
from geocore.core.transport import TransportResponse


class HttpxTransport:
    """
    Sends RequestDescriptors with ``httpx.AsyncClient``.
    - One attempt per call; no retries
    - httpx errors (timeouts, connection failures) are returned, not raised
    - So are requests httpx cannot encode: malformed URLs, non-ASCII header values
    - The client's own timeout applies; cancel the awaiting task to abort
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.timeout_seconds = timeout_seconds
        self.log = logger or logging.getLogger("geocore.transports.http")

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(timeout=timeout_seconds)

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def send(self, request: RequestDescriptor) -> TransportResponse:
        try:
            resp = await self.http.request(
                request.method,
                request.url,
                headers=dict(request.headers),
                content=request.body,
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            self.log.debug(
                "transport.error",
                extra={
                    "method": request.method,
                    "error_type": type(exc).__name__,
                },
            )
            return TransportResponse(error=exc)

        self.log.debug(
            "transport.response",
            extra={"method": request.method, "status": resp.status_code},
        )
        return TransportResponse(status_code=resp.status_code, body=resp.content)


__all__ = ["HttpxTransport"]
