# src/pollwatch/checks/http_status.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Awaitable, Callable

import httpx

from ..core.models import TaskContext

logger = logging.getLogger(__name__)


def http_status_task(
    url: str,
    *,
    expect: Iterable[int] = (200,),
    request_timeout: float = 5.0,
    client: httpx.AsyncClient | None = None,
) -> Callable[[TaskContext[int]], Awaitable[None]]:
    """
    Build a polling task that GETs `url` once per attempt.

    - status in `expect`  -> done(status_code)
    - any other status    -> return quietly, the poller retries after its delay
    - transport errors    -> propagate, the poller publishes them on `error`
    - run cancelled       -> the in-flight request is abandoned

    Pass `client` to reuse a connection pool (the caller then owns it);
    otherwise a short-lived AsyncClient is opened per attempt.
    """
    expected = frozenset(int(code) for code in expect)
    if not expected:
        raise ValueError("expect must contain at least one status code")

    async def check(ctx: TaskContext[int]) -> None:
        if ctx.signal.aborted:
            return

        owned = client is None
        http = client if client is not None else httpx.AsyncClient(timeout=request_timeout)
        try:
            response = await _get_unless_cancelled(http, url, ctx)
        finally:
            if owned:
                await http.aclose()

        if response is None:
            logger.debug("GET %s abandoned: polling closed", url)
            return

        logger.debug("GET %s -> %s", url, response.status_code)
        if response.status_code in expected:
            ctx.done(response.status_code)

    return check


async def _get_unless_cancelled(
    http: httpx.AsyncClient,
    url: str,
    ctx: TaskContext[int],
) -> httpx.Response | None:
    request = asyncio.ensure_future(http.get(url))
    aborted = asyncio.ensure_future(ctx.signal.wait())
    try:
        await asyncio.wait({request, aborted}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        aborted.cancel()
        # Covers both the abort and the attempt itself being cancelled: the
        # request must be gone before an owned client gets closed.
        if not request.done():
            request.cancel()
            await asyncio.wait({request})

    if request.cancelled():
        return None

    return request.result()
