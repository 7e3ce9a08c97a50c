import asyncio
import json
import logging

import httpx
import pytest
import respx
from geocore.core.dispatcher import Dispatcher
from geocore.core.errors import (
    GeocoreError,
    InvalidParameterError,
    InvalidServerResponseError,
    InvalidStateError,
    NetworkError,
    ServerError,
    TokenUndefinedError,
    UnauthorizedAccessError,
    UnexpectedResponseError,
)
from geocore.core.request import ACCESS_TOKEN_HEADER, FILE_CONTENTS_KEY
from geocore.core.session import Session
from geocore.core.transport import TransportResponse
from geocore.models import GenericCountResult, GenericResult, Identifiable, Point
from geocore.transports.http import HttpxTransport

BASE = "https://geocore.test/api"


class FakeTransport:
    def __init__(self, *responses: TransportResponse):
        self.responses = list(responses)
        self.requests = []

    async def send(self, request):
        self.requests.append(request)
        return self.responses.pop(0)


def ok(result) -> TransportResponse:
    return TransportResponse(
        status_code=200,
        body=json.dumps({"status": "success", "result": result}).encode(),
    )


def fail(code: str, message: str) -> TransportResponse:
    return TransportResponse(
        status_code=200,
        body=json.dumps({"status": "fail", "code": code, "message": message}).encode(),
    )


@pytest.fixture
def session():
    return Session(base_url=BASE, project_id="PRO-1")


@pytest.mark.asyncio
async def test_single_object_success(session):
    transport = FakeTransport(ok({"id": "u1"}))
    dispatcher = Dispatcher(session, transport)

    result = await dispatcher.request("GET", "/users/u1", Identifiable)

    assert not result.is_failure
    assert result.value == Identifiable(id="u1")
    assert transport.requests[0].url == f"{BASE}/users/u1"
    assert transport.requests[0].method == "GET"


@pytest.mark.asyncio
async def test_list_mode_decodes_each_element(session):
    transport = FakeTransport(ok([{"id": "a"}, {"id": "b", "sid": 2}]))
    result = await Dispatcher(session, transport).request(
        "GET", "/objs", Identifiable, many=True
    )
    assert result.value == [Identifiable(id="a"), Identifiable(id="b", sid=2)]


@pytest.mark.asyncio
@pytest.mark.parametrize("node", [None, {"id": "x"}, "text"])
async def test_list_mode_non_array_is_empty_list(session, node):
    transport = FakeTransport(ok(node))
    result = await Dispatcher(session, transport).request(
        "GET", "/objs", Identifiable, many=True
    )
    assert not result.is_failure
    assert result.value == []


@pytest.mark.asyncio
async def test_server_error_passes_through(session):
    transport = FakeTransport(fail("Auth.0001", "not registered"))
    result = await Dispatcher(session, transport).request("POST", "/auth", GenericResult)
    assert isinstance(result.error, ServerError)
    assert (result.error.code, result.error.message) == ("Auth.0001", "not registered")


@pytest.mark.asyncio
async def test_forbidden_passes_through(session):
    transport = FakeTransport(TransportResponse(status_code=403, body=b"{}"))
    result = await Dispatcher(session, transport).request("GET", "/objs", GenericResult)
    assert isinstance(result.error, UnauthorizedAccessError)


@pytest.mark.asyncio
async def test_invalid_model_payload_is_unexpected_response(session):
    transport = FakeTransport(ok({"count": "many"}))
    result = await Dispatcher(session, transport).request(
        "GET", "/objs/count", GenericCountResult
    )
    assert isinstance(result.error, UnexpectedResponseError)
    assert "GenericCountResult" in result.error.message


class StrictRecord:
    def __init__(self, record_id):
        self.record_id = record_id

    @classmethod
    def from_json(cls, node):
        return cls(node["id"])


@pytest.mark.asyncio
async def test_model_lookup_error_rejects_promise_as_unexpected_response(session):
    dispatcher = Dispatcher(session, FakeTransport(ok({"a": 1})))
    with pytest.raises(UnexpectedResponseError) as exc:
        await asyncio.wait_for(dispatcher.promised_get("/objs/1", StrictRecord), 1.0)
    assert "StrictRecord" in exc.value.message


@pytest.mark.asyncio
async def test_incomplete_multipart_never_reaches_transport(session):
    transport = FakeTransport()
    result = await Dispatcher(session, transport).request(
        "POST", "/upload", GenericResult, body={FILE_CONTENTS_KEY: b"data"}
    )
    assert isinstance(result.error, InvalidParameterError)
    assert transport.requests == []


@pytest.mark.asyncio
async def test_unconfigured_session_is_invalid_state():
    transport = FakeTransport()
    result = await Dispatcher(Session(), transport).request("GET", "/objs", GenericResult)
    assert isinstance(result.error, InvalidStateError)
    assert transport.requests == []


@pytest.mark.asyncio
async def test_requires_auth_without_token(session):
    transport = FakeTransport()
    result = await Dispatcher(session, transport).request(
        "GET", "/objs", GenericResult, requires_auth=True
    )
    assert isinstance(result.error, TokenUndefinedError)
    assert transport.requests == []


@pytest.mark.asyncio
async def test_session_token_is_sent(session):
    session.authenticate("alice", "tok-1")
    transport = FakeTransport(ok({}))
    await Dispatcher(session, transport).request(
        "GET", "/objs", GenericResult, requires_auth=True
    )
    assert transport.requests[0].headers[ACCESS_TOKEN_HEADER] == "tok-1"


@pytest.mark.asyncio
async def test_network_error_is_wrapped_and_traced(session, caplog):
    caplog.set_level(logging.INFO)
    boom = httpx.ConnectTimeout("boom")
    transport = FakeTransport(TransportResponse(error=boom))

    result = await Dispatcher(session, transport).request("GET", "/objs", GenericResult)

    assert isinstance(result.error, NetworkError)
    assert result.error.error is boom
    warning = next(r for r in caplog.records if r.getMessage() == "network_error")
    assert warning.levelno == logging.WARNING
    assert warning.error_type == "ConnectTimeout"
    call = next(r for r in caplog.records if r.getMessage() == "geocore_call")
    assert call.status == "exception"
    assert call.endpoint == "/objs"


@pytest.mark.asyncio
async def test_callback_form_delivers_result_once(session):
    transport = FakeTransport(ok({"latitude": 1.0, "longitude": 2.0}))
    dispatcher = Dispatcher(session, transport)
    received = []

    task = dispatcher.get("/objs/PLA-1/point", Point, callback=received.append)
    await task

    assert len(received) == 1
    assert received[0].value == Point(latitude=1.0, longitude=2.0)


@pytest.mark.asyncio
async def test_promise_form_resolves_value(session):
    transport = FakeTransport(ok([{"id": "a"}]))
    value = await Dispatcher(session, transport).promised_get(
        "/objs", Identifiable, params={"page": 1}, many=True
    )
    assert value == [Identifiable(id="a")]
    assert transport.requests[0].url == f"{BASE}/objs?page=1"


@pytest.mark.asyncio
async def test_promise_form_rejects_with_same_error(session):
    transport = FakeTransport(TransportResponse(status_code=500, body=b""))
    with pytest.raises(InvalidServerResponseError) as exc:
        await Dispatcher(session, transport).promised_delete("/objs/PLA-1", GenericResult)
    assert exc.value.status_code == 500


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        ok({"id": "x"}),
        fail("Obj.0002", "gone"),
        TransportResponse(status_code=403, body=b""),
        TransportResponse(status_code=200, body=None),
        TransportResponse(error=httpx.ReadTimeout("slow")),
    ],
)
async def test_callback_and_promise_forms_agree(session, response):
    callback_results = []
    await Dispatcher(session, FakeTransport(response)).post(
        "/objs", Identifiable, body={"name": "x"}, callback=callback_results.append
    )
    expected = callback_results[0]

    promise = Dispatcher(session, FakeTransport(response)).promised_post(
        "/objs", Identifiable, body={"name": "x"}
    )
    if expected.is_failure:
        with pytest.raises(GeocoreError) as exc:
            await promise
        assert type(exc.value) is type(expected.error)
    else:
        assert await promise == expected.value


@pytest.mark.asyncio
async def test_put_sends_query_and_json_body(session):
    transport = FakeTransport(ok({"id": "PLA-1"}))
    value = await Dispatcher(session, transport).promised_put(
        "/objs/PLA-1", Identifiable, params={"b": 2, "a": 1}, body={"name": "Cafe"}
    )
    assert value.id == "PLA-1"
    sent = transport.requests[0]
    assert sent.method == "PUT"
    assert sent.url == f"{BASE}/objs/PLA-1?a=1&b=2"
    assert json.loads(sent.body) == {"name": "Cafe"}


@pytest.mark.asyncio
async def test_upload_post_sends_multipart(session):
    transport = FakeTransport(ok({"url": "https://cdn.test/a.png"}))
    value = await Dispatcher(session, transport).promised_upload_post(
        "/objs/PLA-1/bins/photo",
        GenericResult,
        field_name="data",
        file_name="a.png",
        mime_type="image/png",
        file_contents=b"PNG",
    )
    assert value.json == {"url": "https://cdn.test/a.png"}
    sent = transport.requests[0]
    assert sent.method == "POST"
    assert sent.is_multipart
    assert b'name="data"; filename="a.png"' in sent.body


@pytest.mark.asyncio
async def test_upload_post_with_blank_file_name_rejects_without_io(session):
    transport = FakeTransport()
    with pytest.raises(InvalidParameterError):
        await Dispatcher(session, transport).promised_upload_post(
            "/upload",
            GenericResult,
            field_name="data",
            file_name="",
            mime_type="image/png",
            file_contents=b"PNG",
        )
    assert transport.requests == []


@pytest.mark.asyncio
async def test_cancelling_promise_cancels_request(session):
    started = asyncio.Event()

    class SlowTransport:
        async def send(self, request):
            started.set()
            await asyncio.sleep(10)

    dispatcher = Dispatcher(session, SlowTransport())
    promise = dispatcher.promised_get("/objs", GenericResult)
    await started.wait()
    (task,) = dispatcher._tasks
    promise.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


@pytest.mark.asyncio
async def test_unexpected_transport_exception_rejects_promise(session):
    class BrokenTransport:
        async def send(self, request):
            raise RuntimeError("transport bug")

    dispatcher = Dispatcher(session, BrokenTransport())
    with pytest.raises(RuntimeError, match="transport bug"):
        await asyncio.wait_for(dispatcher.promised_get("/objs", GenericResult), 1.0)


@pytest.mark.asyncio
@respx.mock
async def test_non_ascii_token_rejects_promise_as_network_error(session):
    route = respx.get(f"{BASE}/objs").mock(return_value=httpx.Response(200))
    session.authenticate("alice", "tök")

    async with HttpxTransport() as transport:
        dispatcher = Dispatcher(session, transport)
        with pytest.raises(NetworkError) as exc:
            await asyncio.wait_for(dispatcher.promised_get("/objs", GenericResult), 1.0)

    assert isinstance(exc.value.error, UnicodeEncodeError)
    assert route.call_count == 0
