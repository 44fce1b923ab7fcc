"""Tests for the ActivityWatch REST client."""

import json
from datetime import UTC, datetime

import httpx
import pytest

from aw_watcher_network.sink import ActivityWatchSink, Event, SinkError


def _sink(handler) -> ActivityWatchSink:
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        base_url="http://localhost:5600/api/0",
    )
    return ActivityWatchSink(client_name="aw-watcher-network", hostname="laptop", client=client)


class TestEvent:
    def test_to_json(self):
        ts = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        event = Event(data={"title": "offline"}, timestamp=ts)
        assert event.to_json() == {
            "timestamp": "2024-05-01T12:00:00+00:00",
            "duration": 0.0,
            "data": {"title": "offline"},
        }

    def test_default_timestamp_is_utc(self):
        assert Event(data={}).timestamp.tzinfo is UTC


class TestEnsureBucket:
    @pytest.mark.asyncio
    async def test_creates_bucket(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        sink = _sink(handler)
        await sink.ensure_bucket("aw-watcher-network", "network-status")
        await sink.aclose()

        assert seen[0].method == "POST"
        assert seen[0].url.path == "/api/0/buckets/aw-watcher-network"
        assert json.loads(seen[0].content) == {
            "client": "aw-watcher-network",
            "type": "network-status",
            "hostname": "laptop",
        }

    @pytest.mark.asyncio
    async def test_existing_bucket_is_ok(self):
        sink = _sink(lambda request: httpx.Response(304))
        await sink.ensure_bucket("aw-watcher-network", "network-status")
        await sink.aclose()

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        sink = _sink(lambda request: httpx.Response(500, text="internal error"))
        with pytest.raises(SinkError, match="HTTP 500"):
            await sink.ensure_bucket("aw-watcher-network", "network-status")
        await sink.aclose()

    @pytest.mark.asyncio
    async def test_unreachable_server_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        sink = _sink(handler)
        with pytest.raises(SinkError, match="connection refused"):
            await sink.ensure_bucket("aw-watcher-network", "network-status")
        await sink.aclose()


class TestHeartbeat:
    @pytest.mark.asyncio
    async def test_posts_event_with_pulsetime(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        sink = _sink(handler)
        await sink.heartbeat("aw-watcher-network", Event(data={"title": "online "}), pulsetime=10)
        await sink.aclose()

        request = seen[0]
        assert request.url.path == "/api/0/buckets/aw-watcher-network/heartbeat"
        assert request.url.params["pulsetime"] == "10"
        body = json.loads(request.content)
        assert body["data"] == {"title": "online "}
        assert body["duration"] == 0.0

    @pytest.mark.asyncio
    async def test_rejected_heartbeat_raises(self):
        sink = _sink(lambda request: httpx.Response(404))
        with pytest.raises(SinkError):
            await sink.heartbeat("missing", Event(data={"title": "offline"}), pulsetime=10)
        await sink.aclose()
