"""The heartbeat loop: wait, send, classify, log, repeat."""

from __future__ import annotations

import asyncio
import logging
import time

import aiohttp

from uptime_heartbeat.config import HeartbeatConfig
from uptime_heartbeat.outcome import TickOutcome, log_outcome

logger = logging.getLogger(__name__)


async def send_heartbeat(session: aiohttp.ClientSession, config: HeartbeatConfig) -> TickOutcome:
    """Send one GET to the heartbeat URL and classify the result.

    The whole request (connect, headers, body) is bounded by
    `config.timeout`. Errors come back as a transport failure outcome;
    only cancellation propagates.

    Args:
        session: HTTP session owned by the calling loop.
        config: Target URL and timeout.

    Returns:
        The classified outcome of this send.
    """
    start = time.monotonic()
    try:
        async with asyncio.timeout(config.timeout):
            async with session.get(config.url) as response:
                # Drain the body so the connection goes back to the pool
                await response.read()
                status_code = response.status
    except Exception as exc:
        return TickOutcome.from_error(exc, time.monotonic() - start)

    return TickOutcome.from_status_code(status_code, time.monotonic() - start)


async def _wait_interval(interval: float, stop: asyncio.Event | None) -> bool:
    """Sleep for one interval. Returns True if a stop was requested."""
    if stop is None:
        await asyncio.sleep(interval)
        return False

    if stop.is_set():
        return True

    try:
        async with asyncio.timeout(interval):
            await stop.wait()
    except TimeoutError:
        return False
    return True


async def heartbeat_loop(config: HeartbeatConfig, *, stop: asyncio.Event | None = None) -> None:
    """Run heartbeats until cancelled or until `stop` is set.

    Scheduling is fixed-delay: each wait starts after the previous send has
    concluded, so a slow endpoint stretches the cadence instead of piling up
    requests. The first heartbeat goes out one interval after start.

    Never returns because of a failed heartbeat. Failures are logged and the
    loop moves on to the next wait.
    """
    client_timeout = aiohttp.ClientTimeout(total=config.timeout)

    # Private session, never shared with host traffic
    async with aiohttp.ClientSession(timeout=client_timeout) as session:
        while True:
            if await _wait_interval(config.interval, stop):
                break

            try:
                log_outcome(await send_heartbeat(session, config))
            except Exception:
                logger.warning("Unexpected error during heartbeat tick", exc_info=True)

    logger.info("Heartbeat loop stopped")
