import asyncio

import pytest
from aiohttp import web

from dirprobe.models import ScanConfig
from dirprobe.probe import build_session


def make_app(seen):
    """Test site; every request is appended to `seen` as (method, path)."""

    async def no_head(request):
        if request.method == "HEAD":
            return web.Response(status=405)
        return web.Response(text="hello")

    async def moved(request):
        return web.Response(status=301, headers={"Location": "/new"})

    async def gone(request):
        return web.Response(status=404)

    async def slow(request):
        await asyncio.sleep(1)
        return web.Response(text="late")

    async def no_head_slow_get(request):
        if request.method == "HEAD":
            return web.Response(status=405)
        await asyncio.sleep(1)
        return web.Response(text="late")

    async def plain(request):
        return web.Response(text="12345")

    @web.middleware
    async def record(request, handler):
        seen.append((request.method, request.path))
        return await handler(request)

    app = web.Application(middlewares=[record])
    app.router.add_route("*", "/no-head", no_head)
    app.router.add_route("*", "/moved", moved)
    app.router.add_route("*", "/gone", gone)
    app.router.add_route("*", "/slow", slow)
    app.router.add_route("*", "/no-head-slow", no_head_slow_get)
    app.router.add_route("*", "/file.txt", plain)
    app.router.add_route("*", "/admin", plain)
    return app


@pytest.fixture
def seen():
    return []


@pytest.fixture
async def server(aiohttp_server, seen):
    return await aiohttp_server(make_app(seen))


@pytest.fixture
async def session():
    async with build_session(ScanConfig()) as s:
        yield s
