"""Tests for the stub daemon's ``/`` endpoint.

Uses ``httpx.ASGITransport`` to test Starlette in-process without
starting a real server.
"""

import httpx
import pytest
from stub_daemon.dispatcher import MethodNotFoundError, Registry, RpcFault
from stub_daemon.server import create_app
from wire.codec import loads

AUTH = ("rpc", "secret")


@pytest.fixture
def client():
    """In-process async test client against a fresh wallet."""
    transport = httpx.ASGITransport(app=create_app(*AUTH))  # type: ignore[arg-type]
    return httpx.AsyncClient(transport=transport, base_url="http://test", auth=AUTH)


async def _rpc(client, method, params=(), req_id="1"):
    resp = await client.post("/", json={"jsonrpc": "1.0", "id": req_id, "method": method, "params": list(params)})
    return resp.status_code, loads(resp.content)


# ── Envelope handling ────────────────────────────────────────────────


@pytest.mark.anyio
async def test_success_envelope(client):
    resp = await client.post("/", json={"jsonrpc": "1.0", "id": "1", "method": "getblockcount", "params": []})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/json")
    assert resp.content == b'{"result":227000,"error":null,"id":"1"}'


@pytest.mark.anyio
async def test_wallet_route(client):
    resp = await client.post("/wallet/main", json={"id": 2, "method": "getbalance", "params": []})
    assert resp.content == b'{"result":10.00000000,"error":null,"id":2}'


@pytest.mark.anyio
async def test_method_not_found(client):
    status, data = await _rpc(client, "nonexistent")
    assert status == 404
    assert data["error"] == {"code": -32601, "message": "Method not found"}
    assert data["result"] is None


@pytest.mark.anyio
async def test_parse_error(client):
    resp = await client.post("/", content=b"not json", headers={"content-type": "application/json"})
    assert resp.status_code == 500
    assert loads(resp.content)["error"]["code"] == -32700  # PARSE_ERROR


@pytest.mark.anyio
async def test_invalid_request(client):
    resp = await client.post("/", json={"jsonrpc": "1.0", "id": "9", "params": []})
    assert resp.status_code == 400
    data = loads(resp.content)
    assert data["error"]["code"] == -32600  # INVALID_REQUEST
    assert data["id"] == "9"


@pytest.mark.anyio
async def test_wrong_parameter_count(client):
    status, data = await _rpc(client, "validateaddress")
    assert status == 500
    assert data["error"] == {"code": -1, "message": "validateaddress <address>"}


@pytest.mark.anyio
async def test_unauthorized():
    transport = httpx.ASGITransport(app=create_app(*AUTH))  # type: ignore[arg-type]
    async with httpx.AsyncClient(transport=transport, base_url="http://test", auth=("rpc", "wrong")) as client:
        resp = await client.post("/", json={"method": "getinfo", "params": []})
    assert resp.status_code == 401
    assert resp.content == b""
    assert resp.headers["www-authenticate"] == 'Basic realm="jsonrpc"'


@pytest.mark.anyio
async def test_open_when_no_credentials_configured():
    transport = httpx.ASGITransport(app=create_app())  # type: ignore[arg-type]
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.post("/", json={"method": "getblockcount", "params": []})
    assert resp.status_code == 200


# ── Wallet behaviour ─────────────────────────────────────────────────


@pytest.mark.anyio
async def test_send_and_fetch_transaction(client):
    status, data = await _rpc(client, "sendtoaddress", ["mprSidR7coMDYzfnTXdq6taxDZyEb3fopo", 1.5])
    assert status == 200
    txid = data["result"]

    _, data = await _rpc(client, "gettransaction", [txid])
    assert data["result"]["amount"] == -1.5
    assert data["result"]["details"][0]["category"] == "send"

    _, data = await _rpc(client, "getbalance")
    assert str(data["result"]) == "8.50000000"


@pytest.mark.anyio
async def test_invalid_address(client):
    status, data = await _rpc(client, "sendtoaddress", ["not-an-address", 1])
    assert status == 500
    assert data["error"]["code"] == -5


@pytest.mark.anyio
async def test_insufficient_funds(client):
    _, data = await _rpc(client, "sendtoaddress", ["mprSidR7coMDYzfnTXdq6taxDZyEb3fopo", 1000])
    assert data["error"]["code"] == -6


@pytest.mark.anyio
async def test_validateaddress(client):
    _, data = await _rpc(client, "validateaddress", ["mj3QxNUyp4Ry2pbbP19tznUAAPqFvDbRFq"])
    assert data["result"]["isvalid"] is True
    assert data["result"]["ismine"] is True
    _, data = await _rpc(client, "validateaddress", ["xyz"])
    assert data["result"] == {"isvalid": False}


@pytest.mark.anyio
async def test_encryption_lifecycle(client):
    status, data = await _rpc(client, "walletlock")
    assert (status, data["error"]["code"]) == (500, -15)

    _, data = await _rpc(client, "encryptwallet", ["pw"])
    assert data["error"] is None

    _, data = await _rpc(client, "sendtoaddress", ["mprSidR7coMDYzfnTXdq6taxDZyEb3fopo", 1])
    assert data["error"]["code"] == -13

    _, data = await _rpc(client, "walletpassphrase", ["nope", 60])
    assert data["error"]["code"] == -14

    _, data = await _rpc(client, "walletpassphrase", ["pw", 60])
    assert data == {"result": None, "error": None, "id": "1"}

    _, data = await _rpc(client, "walletpassphrase", ["pw", 60])
    assert data["error"]["code"] == -17

    _, data = await _rpc(client, "getinfo")
    assert data["result"]["unlocked_until"] > 0

    _, data = await _rpc(client, "walletlock")
    assert data["error"] is None


@pytest.mark.anyio
async def test_help_lists_usage(client):
    _, data = await _rpc(client, "help")
    assert "sendtoaddress <address> <amount> [comment] [comment_to]" in data["result"].splitlines()
    _, data = await _rpc(client, "help", ["bogus"])
    assert data["result"] == "help: unknown command: bogus"


# ── Registry ─────────────────────────────────────────────────────────


@pytest.mark.anyio
async def test_registry_dispatch():
    registry = Registry()

    @registry.handler("echo")
    async def echo(wallet, value, suffix="!"):
        return f"{wallet}:{value}{suffix}"

    assert registry.is_registered("echo")
    assert registry.methods == ["echo"]
    assert await registry.dispatch("echo", ["hi"], "w") == "w:hi!"
    assert registry.usage("echo") == "echo <value> [suffix]"

    with pytest.raises(MethodNotFoundError):
        await registry.dispatch("missing", [], "w")
    with pytest.raises(RpcFault) as exc_info:
        await registry.dispatch("echo", [1, 2, 3], "w")
    assert exc_info.value.code == -1
