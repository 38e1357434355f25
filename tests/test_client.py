from datetime import datetime, timedelta, timezone

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from aqdash.shared.errors import TransportError
from aqdash.telemetry.client import ThingSpeakClient, format_range_bound
from aqdash.telemetry.config import ThingSpeakConfig

START = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
END = datetime(2024, 1, 2, 0, 0, 0, tzinfo=timezone.utc)


def _make_app(routes: dict, seen: list) -> web.Application:
    """Serve canned (status, body) pairs keyed by request path."""

    async def handler(request: web.Request) -> web.Response:
        seen.append(dict(request.query))
        status, body = routes[request.path]
        if isinstance(body, str):
            return web.Response(status=status, text=body)
        return web.json_response(body, status=status)

    app = web.Application()
    for path in routes:
        app.router.add_get(path, handler)
    return app


def _config(server: TestServer, **overrides) -> ThingSpeakConfig:
    return ThingSpeakConfig(
        channel_id="12345",
        read_api_key="READKEY",
        base_url=str(server.make_url("/")),
        **overrides,
    )


@pytest.mark.asyncio
async def test_get_latest_normalizes_entry() -> None:
    seen: list = []
    routes = {
        "/channels/12345/feeds/last.json": (200, {"created_at": "2024-01-01T10:00:00Z", "field2": "21.5"}),
    }
    async with TestServer(_make_app(routes, seen)) as server:
        sample = await ThingSpeakClient(_config(server)).get_latest()

    assert sample.timestamp == "2024-01-01T10:00:00Z"
    assert sample.temperature == 21.5
    assert sample.pm25 is None
    assert seen[0]["api_key"] == "READKEY"


@pytest.mark.asyncio
async def test_get_latest_keeps_empty_entry() -> None:
    routes = {"/channels/12345/feeds/last.json": (200, {"created_at": "2024-01-01T10:00:00Z"})}
    async with TestServer(_make_app(routes, [])) as server:
        sample = await ThingSpeakClient(_config(server)).get_latest()

    assert sample is not None
    assert sample.is_empty()


@pytest.mark.asyncio
async def test_get_latest_with_unexpected_body_returns_none() -> None:
    routes = {"/channels/12345/feeds/last.json": (200, "-1")}
    async with TestServer(_make_app(routes, [])) as server:
        assert await ThingSpeakClient(_config(server)).get_latest() is None


@pytest.mark.asyncio
async def test_http_error_status_raises_transport_error() -> None:
    routes = {"/channels/12345/feeds/last.json": (404, {"error": "not found"})}
    async with TestServer(_make_app(routes, [])) as server:
        with pytest.raises(TransportError, match="HTTP error! status: 404"):
            await ThingSpeakClient(_config(server)).get_latest()


@pytest.mark.asyncio
async def test_unreachable_host_raises_transport_error() -> None:
    routes = {"/channels/12345/feeds/last.json": (200, {})}
    async with TestServer(_make_app(routes, [])) as server:
        config = _config(server)
    # Server is closed now
    with pytest.raises(TransportError):
        await ThingSpeakClient(config).get_latest()


@pytest.mark.asyncio
async def test_get_range_sends_bounds_and_filters_empty_records() -> None:
    seen: list = []
    feeds = {
        "channel": {"id": 12345},
        "feeds": [
            {"created_at": "2024-01-01T10:00:00Z", "field2": "20", "field5": "0"},
            {"created_at": "2024-01-01T10:00:15Z"},
            {"created_at": "2024-01-01T10:00:30Z", "field5": "12.5"},
        ],
    }
    routes = {"/channels/12345/feeds.json": (200, feeds)}
    async with TestServer(_make_app(routes, seen)) as server:
        samples = await ThingSpeakClient(_config(server)).get_range(START, END)

    assert [s.timestamp for s in samples] == ["2024-01-01T10:00:00Z", "2024-01-01T10:00:30Z"]
    assert samples[0].pm25 == 0.0
    query = seen[0]
    assert query["start"] == "2024-01-01 00:00:00"
    assert query["end"] == "2024-01-02 00:00:00"
    assert query["results"] == "8000"
    assert query["api_key"] == "READKEY"


@pytest.mark.asyncio
async def test_get_range_clamps_limit_to_cap() -> None:
    seen: list = []
    routes = {"/channels/12345/feeds.json": (200, {"feeds": []})}
    async with TestServer(_make_app(routes, seen)) as server:
        client = ThingSpeakClient(_config(server, results_cap=500))
        await client.get_range(START, END, limit=100000)
        await client.get_range(START, END, limit=50)

    assert [q["results"] for q in seen] == ["500", "50"]


@pytest.mark.asyncio
async def test_get_range_without_feeds_is_empty() -> None:
    routes = {"/channels/12345/feeds.json": (200, {"channel": {}})}
    async with TestServer(_make_app(routes, [])) as server:
        assert await ThingSpeakClient(_config(server)).get_range(START, END) == []


@pytest.mark.asyncio
async def test_get_range_server_error_raises() -> None:
    routes = {"/channels/12345/feeds.json": (500, "boom")}
    async with TestServer(_make_app(routes, [])) as server:
        with pytest.raises(TransportError, match="HTTP error! status: 500"):
            await ThingSpeakClient(_config(server)).get_range(START, END)


def test_format_range_bound_converts_to_utc() -> None:
    plus_two = timezone(timedelta(hours=2))
    assert format_range_bound(datetime(2024, 1, 1, 12, 30, 5, tzinfo=plus_two)) == "2024-01-01 10:30:05"


@pytest.mark.asyncio
async def test_get_latest_with_unreadable_timestamp_returns_none() -> None:
    routes = {"/channels/12345/feeds/last.json": (200, {"created_at": "garbage", "field2": "21"})}
    async with TestServer(_make_app(routes, [])) as server:
        assert await ThingSpeakClient(_config(server)).get_latest() is None
