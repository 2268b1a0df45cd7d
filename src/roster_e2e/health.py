"""HTTP readiness polling for worker servers."""

import asyncio
import logging
import time
from typing import Callable

import httpx

from roster_e2e.exceptions import HealthCheckError

logger = logging.getLogger(__name__)

FRONTEND_MARKERS = ("<app-root>", "angular", "<!doctype html>")


def api_ready(response: httpx.Response) -> bool:
    return response.is_success


def frontend_ready(response: httpx.Response) -> bool:
    if not response.is_success:
        return False
    body = response.text.lower()
    return any(marker in body for marker in FRONTEND_MARKERS)


async def check_http(
    url: str,
    accept: Callable[[httpx.Response], bool] = api_ready,
    client: httpx.AsyncClient | None = None,
    request_timeout: float = 5.0,
) -> bool:
    """Single check; connection errors count as not ready."""
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=request_timeout)
    try:
        response = await client.get(url, timeout=request_timeout)
        return accept(response)
    except httpx.HTTPError as e:
        logger.debug("Health check of %s failed: %s", url, e)
        return False
    finally:
        if owns_client:
            await client.aclose()


async def wait_for_http(  # NOQA: PLR0913
    url: str,
    *,
    timeout: float = 60.0,
    poll_interval: float = 0.5,
    accept: Callable[[httpx.Response], bool] = api_ready,
    is_alive: Callable[[], bool] | None = None,
    client: httpx.AsyncClient | None = None,
    request_timeout: float = 5.0,
) -> float:
    """
    Poll ``url`` until ``accept`` approves a response.

    Parameters
    ----------
    is_alive
        Checked before every poll. When it returns False the server process
        has exited and waiting any longer is pointless.

    Returns
    -------
    Seconds waited.

    Raises
    ------
    HealthCheckError
        On timeout or when the process exits first.
    """
    started = time.monotonic()
    deadline = started + timeout
    attempts = 0

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=request_timeout)
    try:
        while True:
            if is_alive is not None and not is_alive():
                msg = f"Process exited before {url} became healthy"
                raise HealthCheckError(msg)

            attempts += 1
            if await check_http(url, accept, client, request_timeout):
                elapsed = time.monotonic() - started
                logger.debug(
                    "%s healthy after %d attempt(s), %.1fs",
                    url,
                    attempts,
                    elapsed,
                )
                return elapsed

            if time.monotonic() + poll_interval > deadline:
                msg = f"{url} not healthy after {timeout:.0f}s ({attempts} attempts)"
                raise HealthCheckError(msg)
            await asyncio.sleep(poll_interval)
    finally:
        if owns_client:
            await client.aclose()
