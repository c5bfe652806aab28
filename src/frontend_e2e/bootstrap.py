"""Readiness check for the application under test."""
from __future__ import annotations

import logging

import anyio
import httpx

logger = logging.getLogger(__name__)


async def wait_for_application(
    base_url: str,
    timeout: float = 120.0,
    interval: float = 2.0,
    client: httpx.AsyncClient | None = None,
) -> int:
    """Poll ``base_url`` until it answers with a 2xx or 3xx status.

    Returns the status code. Raises ``TimeoutError`` when the application is
    still unreachable after ``timeout`` seconds.
    """
    owns_client = client is None
    client = client or httpx.AsyncClient(follow_redirects=False, timeout=interval)
    deadline = anyio.current_time() + timeout
    last_error = ""
    try:
        while True:
            try:
                response = await client.get(base_url)
                if response.status_code < 400:
                    logger.info("Application ready at %s (HTTP %d)", base_url, response.status_code)
                    return response.status_code
                last_error = f"HTTP {response.status_code}"
            except httpx.HTTPError as exc:
                last_error = f"{type(exc).__name__}: {exc}"

            if anyio.current_time() >= deadline:
                break
            logger.debug("Waiting for %s (%s)", base_url, last_error)
            await anyio.sleep(interval)
    finally:
        if owns_client:
            await client.aclose()

    raise TimeoutError(f"Application at {base_url} not ready after {timeout}s (last: {last_error})")
