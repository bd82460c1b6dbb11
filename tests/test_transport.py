from __future__ import annotations

from typing import Any

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from canhealth._transport import HttpTransport
from canhealth.client import CanHealthClient
from canhealth.config import CanHealthConfig
from canhealth.exceptions import CanHealthError, CanHealthTransportError, TransientFetchError
from canhealth.models.filters import FilterState
from canhealth.query import compose, compose_export


def _app(seen: list[dict[str, Any]]) -> web.Application:
    async def listing(request: web.Request) -> web.Response:
        seen.append({"method": request.method, "path": request.path, "query": dict(request.query)})
        return web.json_response({"items": [{"vehicle_id": "V1"}], "total": 1, "pages": 1})

    async def broken(_request: web.Request) -> web.Response:
        return web.Response(status=503, text="warming up")

    async def garbage(_request: web.Request) -> web.Response:
        return web.Response(text="<html>nope</html>")

    async def refresh(request: web.Request) -> web.Response:
        seen.append({"method": request.method, "path": request.path, "query": {}})
        return web.Response(status=202)

    app = web.Application()
    app.router.add_get("/oem/can-health", listing)
    app.router.add_get("/oem/can-health/export", broken)
    app.router.add_get("/oem/can-health/data-quality", garbage)
    app.router.add_post("/oem/can-health/refresh", refresh)
    return app


def _config(server: TestServer) -> CanHealthConfig:
    return CanHealthConfig(base_url=f"http://{server.host}:{server.port}", request_timeout=5.0)


@pytest.mark.asyncio
async def test_get_json_sends_query_params() -> None:
    seen: list[dict[str, Any]] = []
    async with TestServer(_app(seen)) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(_config(server), http)

        payload = await transport.get_json("", {"page": "2", "oem": "Bajaj"})

    assert payload["total"] == 1
    assert seen == [{"method": "GET", "path": "/oem/can-health", "query": {"page": "2", "oem": "Bajaj"}}]


@pytest.mark.asyncio
async def test_non_2xx_raises_transport_error() -> None:
    async with TestServer(_app([])) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(_config(server), http)

        with pytest.raises(CanHealthTransportError) as excinfo:
            await transport.get_json("/export")

    assert excinfo.value.status_code == 503
    assert excinfo.value.endpoint == "/export"


@pytest.mark.asyncio
async def test_invalid_json_raises_transport_error() -> None:
    async with TestServer(_app([])) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(_config(server), http)

        with pytest.raises(CanHealthTransportError, match="Invalid JSON"):
            await transport.get_json("/data-quality")


@pytest.mark.asyncio
async def test_empty_post_body_returns_none() -> None:
    seen: list[dict[str, Any]] = []
    async with TestServer(_app(seen)) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(_config(server), http)

        assert await transport.post_json("/refresh") is None

    assert seen[0]["method"] == "POST"


@pytest.mark.asyncio
async def test_unreachable_server_raises_transport_error() -> None:
    config = CanHealthConfig(base_url="http://127.0.0.1:1", request_timeout=2.0)
    async with aiohttp.ClientSession() as http:
        transport = HttpTransport(config, http)

        with pytest.raises(CanHealthTransportError):
            await transport.get_json("")


@pytest.mark.asyncio
async def test_client_maps_failures_to_transient_fetch_error() -> None:
    async with TestServer(_app([])) as server, CanHealthClient(_config(server)) as client:
        listing = await client.get_listing(compose(FilterState()))
        assert [item.vehicle_id for item in listing.items] == ["V1"]

        with pytest.raises(TransientFetchError):
            await client.get_export(compose_export(FilterState()))


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = CanHealthClient()

    with pytest.raises(CanHealthError, match="not initialized"):
        await client.get_listing(compose(FilterState()))


@pytest.mark.asyncio
async def test_client_rejects_mismatched_route() -> None:
    async with CanHealthClient() as client:
        with pytest.raises(ValueError):
            await client.get_listing(compose_export(FilterState()))
