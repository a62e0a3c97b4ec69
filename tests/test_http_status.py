# tests/test_http_status.py

from __future__ import annotations

import asyncio

import httpx
import pytest

from pollwatch import CancellationSource, Channel, Poller, TaskContext
from pollwatch.checks.http_status import http_status_task

from .fakes import settle


def _context(source: CancellationSource, results: list[int]) -> TaskContext[int]:
    return TaskContext(done=results.append, signal=source.signal)


def _client(*statuses: int) -> httpx.AsyncClient:
    remaining = list(statuses)

    def handler(request: httpx.Request) -> httpx.Response:
        status = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        return httpx.Response(status, request=request)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_expected_status_calls_done() -> None:
    results: list[int] = []
    async with _client(204) as client:
        task = http_status_task("http://svc.local/health", expect=[200, 204], client=client)
        await task(_context(CancellationSource(), results))

    assert results == [204]


@pytest.mark.asyncio
async def test_unexpected_status_settles_without_done() -> None:
    results: list[int] = []
    async with _client(503) as client:
        task = http_status_task("http://svc.local/health", client=client)
        await task(_context(CancellationSource(), results))

    assert results == []


@pytest.mark.asyncio
async def test_transport_error_propagates() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        task = http_status_task("http://svc.local/health", client=client)
        with pytest.raises(httpx.ConnectError):
            await task(_context(CancellationSource(), []))


@pytest.mark.asyncio
async def test_abort_abandons_in_flight_request() -> None:
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(60)
        return httpx.Response(200, request=request)

    source = CancellationSource()
    results: list[int] = []
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        task = http_status_task("http://svc.local/health", client=client)
        attempt = asyncio.create_task(task(_context(source, results)))

        await asyncio.wait_for(started.wait(), timeout=1)
        source.abort()
        await asyncio.wait_for(attempt, timeout=1)

    assert results == []


@pytest.mark.asyncio
async def test_already_aborted_skips_request() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, request=request)

    source = CancellationSource()
    source.abort()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        task = http_status_task("http://svc.local/health", client=client)
        await task(_context(source, []))

    assert calls == []


def test_empty_expect_is_rejected() -> None:
    with pytest.raises(ValueError):
        http_status_task("http://svc.local/health", expect=[])


@pytest.mark.asyncio
async def test_poller_retries_until_service_is_up(loop, recorder) -> None:
    async with _client(503, 503, 200) as client:
        poller: Poller[int] = Poller(
            http_status_task("http://svc.local/health", client=client),
            delay=1,
            timeout=10,
            loop=loop,
        )
        recorder.attach(poller)

        poller.start()
        await settle(50)
        loop.advance(1)
        await settle(50)
        loop.advance(1)
        await settle(50)

    assert recorder.names(skip_seconds=True) == ["start", "success", "close"]
    assert recorder.args_of(Channel.SUCCESS.value) == [(200,)]


@pytest.mark.asyncio
async def test_cancelled_attempt_cancels_its_request() -> None:
    started = asyncio.Event()
    request_cancelled: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            request_cancelled.append(str(request.url))
            raise
        return httpx.Response(200, request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        task = http_status_task("http://svc.local/health", client=client)
        attempt = asyncio.create_task(task(_context(CancellationSource(), [])))

        await asyncio.wait_for(started.wait(), timeout=1)
        attempt.cancel()
        with pytest.raises(asyncio.CancelledError):
            await attempt

    assert request_cancelled == ["http://svc.local/health"]
