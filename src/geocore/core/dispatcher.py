from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Coroutine, Mapping, Optional, Set, Type

from .errors import (
    InvalidParameterError,
    InvalidStateError,
    TokenUndefinedError,
    UnexpectedResponseError,
)
from .observability import log_event
from .request import (
    FIELD_NAME_KEY,
    FILE_CONTENTS_KEY,
    FILE_NAME_KEY,
    MIME_TYPE_KEY,
    BodyInput,
    RequestDescriptor,
    build_request,
)
from .response import decode_response
from .result import Result
from .session import Session
from .transport import Transport

Callback = Callable[[Result[Any]], Any]
Params = Optional[Mapping[str, Any]]


class Dispatcher:
    """
    Generic request pipeline: build -> send -> decode -> convert.

    Every operation exists in three shapes sharing one code path:
    - ``await request(...)`` returns a ``Result`` (never raises a GeocoreError)
    - ``get/post/put/delete/upload_post(..., callback=fn)`` schedule the
      request on the running loop and call ``fn(result)`` once
    - ``promised_*`` return an ``asyncio.Future`` built on the callback form,
      resolving to the value or raising the GeocoreError
    """

    def __init__(
        self,
        session: Session,
        transport: Transport,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self.session = session
        self.transport = transport
        self.log = logger or logging.getLogger("geocore.dispatcher")
        self._tasks: Set[asyncio.Task] = set()

    async def request(
        self,
        method: str,
        path: str,
        model: Type[Any],
        *,
        params: Params = None,
        body: BodyInput = None,
        many: bool = False,
        requires_auth: bool = False,
    ) -> Result[Any]:
        """
        Dispatch one call and decode its result node into ``model``
        (or a list of ``model`` when ``many`` is set).
        """
        method = method.upper()
        url = self.session.url_for(path)
        if url is None:
            return Result.failure(
                InvalidStateError("Base URL is not configured; call setup() first.")
            )

        token = self.session.token
        if requires_auth and token is None:
            return Result.failure(TokenUndefinedError())

        try:
            descriptor = build_request(
                method, url, parameters=params, body=body, token=token
            )
        except InvalidParameterError as exc:
            return Result.failure(exc)

        decoded = await self._send(descriptor, endpoint=path)
        if decoded.is_failure:
            return decoded
        return self._convert(decoded.value, model, many)

    async def _send(self, descriptor: RequestDescriptor, *, endpoint: str) -> Result[Any]:
        start = time.perf_counter()
        response = await self.transport.send(descriptor)
        duration_ms = int((time.perf_counter() - start) * 1000)

        if response.error is not None:
            log_event(
                "network_error",
                self.log,
                level=logging.WARNING,
                method=descriptor.method,
                endpoint=endpoint,
                error_type=type(response.error).__name__,
            )

        log_event(
            "geocore_call",
            method=descriptor.method,
            endpoint=endpoint,
            status=response.status_code if response.error is None else "exception",
            duration_ms=duration_ms,
        )
        return decode_response(response.status_code, response.body, response.error)

    @staticmethod
    def _convert(node: Any, model: Type[Any], many: bool) -> Result[Any]:
        try:
            if many:
                items = node if isinstance(node, list) else []
                return Result.success([model.from_json(item) for item in items])
            return Result.success(model.from_json(node))
        except Exception as exc:
            return Result.failure(
                UnexpectedResponseError(
                    f"Response did not match {model.__name__}: {exc}"
                )
            )

    # --- Callback form ------------------------------------------------------ #

    def _schedule(
        self, operation: Coroutine[Any, Any, Result[Any]], callback: Callback
    ) -> asyncio.Task:
        async def run() -> None:
            callback(await operation)

        task = asyncio.get_running_loop().create_task(run())
        # Keep a strong reference until the task finishes
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def get(
        self,
        path: str,
        model: Type[Any],
        *,
        params: Params = None,
        many: bool = False,
        callback: Callback,
    ) -> asyncio.Task:
        return self._schedule(
            self.request("GET", path, model, params=params, many=many), callback
        )

    def post(
        self,
        path: str,
        model: Type[Any],
        *,
        params: Params = None,
        body: BodyInput = None,
        many: bool = False,
        callback: Callback,
    ) -> asyncio.Task:
        return self._schedule(
            self.request("POST", path, model, params=params, body=body, many=many),
            callback,
        )

    def put(
        self,
        path: str,
        model: Type[Any],
        *,
        params: Params = None,
        body: BodyInput = None,
        many: bool = False,
        callback: Callback,
    ) -> asyncio.Task:
        return self._schedule(
            self.request("PUT", path, model, params=params, body=body, many=many),
            callback,
        )

    def delete(
        self,
        path: str,
        model: Type[Any],
        *,
        params: Params = None,
        many: bool = False,
        callback: Callback,
    ) -> asyncio.Task:
        return self._schedule(
            self.request("DELETE", path, model, params=params, many=many), callback
        )

    def upload_post(
        self,
        path: str,
        model: Type[Any],
        *,
        field_name: str,
        file_name: str,
        mime_type: str,
        file_contents: bytes,
        params: Params = None,
        callback: Callback,
    ) -> asyncio.Task:
        body = {
            FILE_CONTENTS_KEY: file_contents,
            FILE_NAME_KEY: file_name,
            FIELD_NAME_KEY: field_name,
            MIME_TYPE_KEY: mime_type,
        }
        return self._schedule(
            self.request("POST", path, model, params=params, body=body),
            callback,
        )

    # --- Promise form ------------------------------------------------------- #

    def _promise(
        self, operation: Callable[..., asyncio.Task], *args: Any, **kwargs: Any
    ) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()

        def settle(result: Result[Any]) -> None:
            if not future.done():
                result.propagate_to(future.set_result, future.set_exception)

        task = operation(*args, callback=settle, **kwargs)

        def on_task_done(done: asyncio.Task) -> None:
            if future.done():
                return
            if done.cancelled():
                future.cancel()
            elif done.exception() is not None:
                future.set_exception(done.exception())

        task.add_done_callback(on_task_done)
        future.add_done_callback(lambda f: task.cancel() if f.cancelled() else None)
        return future

    def promised_get(
        self, path: str, model: Type[Any], *, params: Params = None, many: bool = False
    ) -> asyncio.Future:
        return self._promise(self.get, path, model, params=params, many=many)

    def promised_post(
        self,
        path: str,
        model: Type[Any],
        *,
        params: Params = None,
        body: BodyInput = None,
        many: bool = False,
    ) -> asyncio.Future:
        return self._promise(self.post, path, model, params=params, body=body, many=many)

    def promised_put(
        self,
        path: str,
        model: Type[Any],
        *,
        params: Params = None,
        body: BodyInput = None,
        many: bool = False,
    ) -> asyncio.Future:
        return self._promise(self.put, path, model, params=params, body=body, many=many)

    def promised_delete(
        self, path: str, model: Type[Any], *, params: Params = None, many: bool = False
    ) -> asyncio.Future:
        return self._promise(self.delete, path, model, params=params, many=many)

    def promised_upload_post(
        self,
        path: str,
        model: Type[Any],
        *,
        field_name: str,
        file_name: str,
        mime_type: str,
        file_contents: bytes,
        params: Params = None,
    ) -> asyncio.Future:
        return self._promise(
            self.upload_post,
            path,
            model,
            field_name=field_name,
            file_name=file_name,
            mime_type=mime_type,
            file_contents=file_contents,
            params=params,
        )


__all__ = ["Callback", "Dispatcher"]
