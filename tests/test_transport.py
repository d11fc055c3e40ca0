from __future__ import annotations

import asyncio

import aiohttp
import pytest
from aiohttp import test_utils, web

from pylazarillo._transport import HttpTransport
from pylazarillo.exceptions import ExternalServiceTimeout, LazarilloTransportError


async def _echo(request: web.Request) -> web.Response:
    if request.method == "POST":
        form = await request.post()
        return web.json_response({"form": dict(form), "auth": request.headers.get("Authorization", "")})
    return web.json_response({"query": dict(request.query)})


async def _server_error(_request: web.Request) -> web.Response:
    return web.Response(status=500, text="boom")


async def _not_json(_request: web.Request) -> web.Response:
    return web.Response(text="<html>maintenance</html>")


async def _json_list(_request: web.Request) -> web.Response:
    return web.json_response([1, 2, 3])


async def _slow(_request: web.Request) -> web.Response:
    await asyncio.sleep(1.0)
    return web.json_response({})


def _app() -> web.Application:
    app = web.Application()
    app.router.add_get("/echo", _echo)
    app.router.add_post("/echo", _echo)
    app.router.add_get("/error", _server_error)
    app.router.add_get("/html", _not_json)
    app.router.add_get("/list", _json_list)
    app.router.add_get("/slow", _slow)
    return app


@pytest.mark.asyncio
async def test_get_and_post_decode_json_objects() -> None:
    async with test_utils.TestServer(_app()) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(http, timeout=5.0)

        got = await transport.get_json(str(server.make_url("/echo")), {"address": "Plaza Urquiza"})
        posted = await transport.post_form(str(server.make_url("/echo")), {"Body": "ayuda"}, auth=("AC1", "tok"))

    assert got == {"query": {"address": "Plaza Urquiza"}}
    assert posted["form"] == {"Body": "ayuda"}
    assert posted["auth"].startswith("Basic ")


@pytest.mark.asyncio
@pytest.mark.parametrize(("path", "status"), [("/error", 500), ("/html", 200), ("/list", 200)])
async def test_bad_responses_raise_transport_error(path: str, status: int) -> None:
    async with test_utils.TestServer(_app()) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(http, timeout=5.0)

        with pytest.raises(LazarilloTransportError) as exc_info:
            await transport.get_json(str(server.make_url(path)), {})

    assert exc_info.value.status_code == status


@pytest.mark.asyncio
async def test_slow_service_times_out() -> None:
    async with test_utils.TestServer(_app()) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(http, timeout=0.1)

        with pytest.raises(ExternalServiceTimeout):
            await transport.get_json(str(server.make_url("/slow")), {})
