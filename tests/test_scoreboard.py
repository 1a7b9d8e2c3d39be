import asyncio
import json

import httpx
import pytest

from sweepscore.errors import ScoreboardError
from sweepscore.scoreboard.http import HttpScoreboardClient
from sweepscore.scoreboard.null import NullScoreboardClient


def _client(handler, url="https://scores.example/"):
    return HttpScoreboardClient(base_url=url, api_key="secret", transport=httpx.MockTransport(handler))


def test_start_posts_contestant_and_returns_id():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(201, json={"id": "abc123"})

    async def scenario():
        client = _client(handler)
        try:
            return await client.start("Ada", "unlimited")
        finally:
            await client.aclose()

    assert asyncio.run(scenario()) == "abc123"
    req = seen[0]
    assert req.method == "POST"
    assert str(req.url) == "https://scores.example/admin/score"
    assert req.headers["authorization"] == "Bearer secret"
    assert req.headers["content-type"] == "application/json"
    assert json.loads(req.content) == {"name": "Ada", "class": "unlimited"}


def test_start_includes_email_when_given():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"id": "x"})

    async def scenario():
        client = _client(handler)
        try:
            await client.start("Ada", "open", "ada@example.com")
        finally:
            await client.aclose()

    asyncio.run(scenario())
    assert seen == [{"name": "Ada", "class": "open", "email": "ada@example.com"}]


def test_update_and_cancel_hit_score_resource():
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path, request.content))
        return httpx.Response(200)

    async def scenario():
        client = _client(handler, url="https://scores.example/api")
        try:
            await client.update("abc", 50.0, finalize=True)
            await client.cancel("abc")
        finally:
            await client.aclose()

    asyncio.run(scenario())
    method, path, body = seen[0]
    assert (method, path) == ("POST", "/api/admin/score/abc")
    assert json.loads(body) == {"score": 50.0, "finalize": True}
    assert seen[1][:2] == ("DELETE", "/api/admin/score/abc")


def test_error_status_raises_with_body():
    def handler(request):
        return httpx.Response(409, text="already finalized")

    async def scenario():
        client = _client(handler)
        try:
            await client.update("abc", 1.0, finalize=False)
        finally:
            await client.aclose()

    with pytest.raises(ScoreboardError) as exc:
        asyncio.run(scenario())
    assert exc.value.status_code == 409
    assert "already finalized" in str(exc.value)


def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        client = _client(handler)
        try:
            await client.cancel("abc")
        finally:
            await client.aclose()

    with pytest.raises(ScoreboardError, match="connection refused"):
        asyncio.run(scenario())


@pytest.mark.parametrize("url", ["http://scores.example:notaport", "http://scores\x00.example"])
def test_malformed_url_is_wrapped(url):
    async def scenario():
        client = _client(lambda request: httpx.Response(200, json={"id": "x"}), url=url)
        try:
            await client.start("Ada", "open")
        finally:
            await client.aclose()

    with pytest.raises(ScoreboardError, match="Communication error"):
        asyncio.run(scenario())


def test_start_rejects_response_without_id():
    def handler(request):
        return httpx.Response(200, json={"ok": True})

    async def scenario():
        client = _client(handler)
        try:
            await client.start("Ada", "open")
        finally:
            await client.aclose()

    with pytest.raises(ScoreboardError, match="Unexpected start response"):
        asyncio.run(scenario())


def test_null_client_records_updates():
    async def scenario():
        client = NullScoreboardClient()
        sid = await client.start("", "")
        await client.update(sid, 1.0, finalize=False)
        await client.update(sid, 2.0, finalize=True)
        await client.cancel(sid)
        return client, sid

    client, sid = asyncio.run(scenario())
    assert sid.startswith("offline-")
    assert client.final_score == 2.0
    assert client.cancelled == [sid]
