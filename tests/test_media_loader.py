"""Progressive media loader: deduplication, failures, prefetch and disposal."""
import asyncio

import httpx

from masterplan.media.loader import MediaLoader

BASE_URL = "http://storage.test"
IMAGE = b"\x89PNG\r\n\x1a\nfake"


class CountingHandler:
    def __init__(self, responses=None):
        self.calls = []
        self.responses = responses or {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request.url.path)
        response = self.responses.get(request.url.path)
        if isinstance(response, Exception):
            raise response
        return response or httpx.Response(200, content=IMAGE, headers={"content-type": "image/png"})


def _run(handler, scenario, **loader_kwargs):
    async def main():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL) as client:
            loader = MediaLoader(client, **loader_kwargs)
            return await scenario(loader)
    return asyncio.run(main())


def test_concurrent_requests_share_one_fetch():
    handler = CountingHandler()

    async def scenario(loader):
        first, second = await asyncio.gather(loader.request("/a.png"), loader.request("/a.png"))
        third = await loader.request("/a.png")
        return first, second, third

    first, second, third = _run(handler, scenario)
    assert handler.calls == ["/a.png"]
    assert first is second is third
    assert first.object_url.startswith("blob:masterplan/")
    assert first.content == IMAGE
    assert first.content_type == "image/png"


def test_distinct_urls_get_distinct_handles():
    handler = CountingHandler()

    async def scenario(loader):
        return await asyncio.gather(loader.request("/a.png"), loader.request("/b.png"))

    a, b = _run(handler, scenario)
    assert sorted(handler.calls) == ["/a.png", "/b.png"]
    assert a.object_url != b.object_url


def test_http_error_resolves_to_none_and_is_not_cached():
    handler = CountingHandler({"/missing.png": httpx.Response(404)})

    async def scenario(loader):
        first = await loader.request("/missing.png")
        second = await loader.request("/missing.png")
        return first, second, loader.cached("/missing.png")

    first, second, cached = _run(handler, scenario)
    assert first is None and second is None
    assert cached is None
    assert handler.calls == ["/missing.png", "/missing.png"]


def test_empty_body_is_a_failure():
    handler = CountingHandler({"/empty.png": httpx.Response(200, content=b"")})
    assert _run(handler, lambda loader: loader.request("/empty.png")) is None


def test_transport_error_is_a_failure():
    handler = CountingHandler({"/down.png": httpx.ConnectError("connection refused")})
    assert _run(handler, lambda loader: loader.request("/down.png")) is None


def test_release_revokes_handle():
    handler = CountingHandler()

    async def scenario(loader):
        handle = await loader.request("/a.png")
        loader.release("/a.png")
        loader.release("/a.png")
        again = await loader.request("/a.png")
        return handle, again

    handle, again = _run(handler, scenario)
    assert handle.revoked
    assert handle.content == b""
    assert again is not handle
    assert len(handler.calls) == 2


def test_prefetch_runs_after_delay_and_skips_cached():
    handler = CountingHandler()

    async def scenario(loader):
        await loader.request("/a.png")
        tasks = loader.prefetch(["/a.png", "/b.png", "/b.png", None], delay=0.01)
        assert len(tasks) == 1
        assert loader.cached("/b.png") is None
        await asyncio.gather(*tasks)
        return loader.cached("/b.png")

    prefetched = _run(handler, scenario)
    assert prefetched is not None
    assert handler.calls == ["/a.png", "/b.png"]


def test_dispose_cancels_pending_prefetch_and_revokes_everything():
    handler = CountingHandler()

    async def scenario(loader):
        handle = await loader.request("/a.png")
        loader.prefetch(["/later.png"], delay=10)
        await loader.dispose()
        after = await loader.request("/b.png")
        return handle, after, loader

    handle, after, loader = _run(handler, scenario)
    assert handler.calls == ["/a.png"]
    assert handle.revoked
    assert after is None
    assert loader.cached("/a.png") is None


def test_dispose_cancels_in_flight_request():
    async def main():
        started = asyncio.Event()
        gate = asyncio.Event()

        async def handler(request):
            started.set()
            await gate.wait()
            return httpx.Response(200, content=IMAGE)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL) as client:
            loader = MediaLoader(client)
            pending = asyncio.create_task(loader.request("/slow.png"))
            await started.wait()
            await loader.dispose()
            return await pending, loader

    result, loader = asyncio.run(main())
    assert result is None
    assert loader.cached("/slow.png") is None


def test_loaders_do_not_share_caches():
    handler = CountingHandler()

    async def main():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL) as client:
            one, two = MediaLoader(client), MediaLoader(client)
            return await one.request("/a.png"), await two.request("/a.png")

    a, b = asyncio.run(main())
    assert a is not b
    assert len(handler.calls) == 2
