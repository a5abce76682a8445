"""Integration tests: client → HTTP → server roundtrip.

The transport is a throwaway Starlette app driven through
``httpx.ASGITransport``, so no process or socket is involved.
"""

import httpx
import pytest
from rpcclient import Call, Client
from rpcwire import METHOD_NOT_FOUND, RpcError
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route


def make_app(server) -> Starlette:
    async def rpc_endpoint(request: Request) -> Response:
        reply = await server.handle_json(await request.body())
        if reply is None:
            return Response(status_code=204)
        return Response(reply, media_type="application/json")

    return Starlette(routes=[Route("/rpc", rpc_endpoint, methods=["POST"])])


@pytest.fixture
async def http(server):
    transport = httpx.ASGITransport(app=make_app(server))  # type: ignore[arg-type]
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def remote(methods, http) -> Client:
    async def send(payload, options):
        resp = await http.post("/rpc", json=payload)
        resp.raise_for_status()
        return resp.json() if resp.content else None

    return Client(methods, send)


@pytest.mark.anyio
async def test_full_unary_roundtrip(remote):
    assert await remote("echo", {"arg": "roundtrip"}) == "roundtrip"


@pytest.mark.anyio
async def test_notification_gets_no_content(http):
    resp = await http.post("/rpc", json={"jsonrpc": "2.0", "method": "hello"})
    assert resp.status_code == 204
    assert resp.content == b""


@pytest.mark.anyio
async def test_parse_error(http):
    resp = await http.post(
        "/rpc",
        content=b"not json",
        headers={"content-type": "application/json"},
    )
    data = resp.json()
    assert data["error"]["code"] == -32700
    assert data["id"] is None


@pytest.mark.anyio
async def test_batch_roundtrip(remote):
    result = await remote.many(
        [
            Call("add", {"a": 1, "b": 2}),
            Call("hello", notify=True),
            Call("echo", {}),
            Call("add", {"a": 100, "b": 200}),
        ]
    )
    assert result[0] == 3
    assert result[1] is None
    assert isinstance(result[2], RpcError)
    assert result[3] == 300


@pytest.mark.anyio
async def test_error_does_not_corrupt_connection(remote, http):
    """A failed call should not break subsequent calls."""
    resp = await http.post("/rpc", json={"jsonrpc": "2.0", "id": 1, "method": "nope"})
    assert resp.json()["error"]["code"] == METHOD_NOT_FOUND

    with pytest.raises(RpcError):
        await remote("fail")

    assert await remote("echo", {"arg": "still works"}) == "still works"
