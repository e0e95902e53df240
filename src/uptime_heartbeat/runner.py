"""Starting the heartbeat loop in the background of a host process.

Typical use at service startup, after logging is configured:

    from uptime_heartbeat import spawn_from_env

    spawn_from_env()

Async hosts that want a clean shutdown can use `heartbeat_lifespan` inside
their own lifespan handler instead.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager

import dotenv

from uptime_heartbeat.config import EnvKey, HeartbeatConfig, resolve_config
from uptime_heartbeat.loop import heartbeat_loop

logger = logging.getLogger(__name__)

# Strong references to running tasks so callers can drop the handle
_background_tasks: set[asyncio.Task[None]] = set()
_background_threads: set[threading.Thread] = set()


def _log_started(config: HeartbeatConfig) -> None:
    logger.info(
        "Heartbeat started: interval=%ss timeout=%ss",
        config.interval,
        config.timeout,
    )
    if config.timeout > config.interval:
        logger.warning(
            "Heartbeat timeout (%ss) exceeds interval (%ss); "
            "slow requests will stretch the time between heartbeats",
            config.timeout,
            config.interval,
        )


def _log_disabled() -> None:
    logger.info("%s not configured, heartbeat disabled", EnvKey.URL.value)


def _heartbeat_running() -> bool:
    """True while any loop started here (task or thread) is still alive."""
    if any(not task.done() for task in _background_tasks):
        return True
    return any(thread.is_alive() for thread in _background_threads)


def spawn(config: HeartbeatConfig, *, stop: asyncio.Event | None = None) -> asyncio.Task[None]:
    """Schedule the heartbeat loop on the running event loop.

    Returns immediately; the first heartbeat goes out one interval later.

    Args:
        config: Resolved heartbeat settings.
        stop: Optional event that ends the loop at its next wait when set.

    Returns:
        The background task. Keeping it is optional.

    Raises:
        RuntimeError: If called with no running event loop.
    """
    task = asyncio.get_running_loop().create_task(
        heartbeat_loop(config, stop=stop), name="uptime-heartbeat"
    )
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    _log_started(config)
    return task


async def _run_until_stopped(config: HeartbeatConfig, stop: threading.Event | None) -> None:
    if stop is None:
        await heartbeat_loop(config)
        return

    # Bridge the thread-level event onto this loop's own stop event
    loop_stop = asyncio.Event()
    if stop.is_set():
        loop_stop.set()
    watcher = asyncio.get_running_loop().run_in_executor(None, stop.wait)
    watcher.add_done_callback(lambda _: loop_stop.set())
    await heartbeat_loop(config, stop=loop_stop)


def spawn_thread(config: HeartbeatConfig, *, stop: threading.Event | None = None) -> threading.Thread:
    """Run the heartbeat loop on a daemon thread with its own event loop.

    For synchronous hosts. Without `stop` the thread lives until the process
    exits; setting `stop` ends the loop at its next wait.
    """
    thread = threading.Thread(
        target=asyncio.run,
        args=(_run_until_stopped(config, stop),),
        name="uptime-heartbeat",
        daemon=True,
    )
    _background_threads.difference_update([t for t in _background_threads if not t.is_alive()])
    _background_threads.add(thread)
    thread.start()
    _log_started(config)
    return thread


def spawn_from_env(source: Mapping[str, str] | None = None, *, load_env_file: bool = True) -> bool:
    """Start heartbeats if HEARTBEAT_URL is configured.

    Uses the running event loop when there is one, otherwise a daemon thread.
    At most one loop runs per process: while a loop started by this module
    is alive, further calls log a warning and start nothing.

    Args:
        source: Key/value pairs to read instead of `os.environ`.
        load_env_file: Load the nearest `.env` file, searching upward from
            the working directory. Existing environment variables win over
            values in the file. Ignored when `source` is given.

    Returns:
        True if a heartbeat loop was started, False if disabled or one is
        already running.
    """
    if load_env_file and source is None:
        dotenv.load_dotenv(dotenv.find_dotenv(usecwd=True))

    config = resolve_config(source)
    if config is None:
        _log_disabled()
        return False

    if _heartbeat_running():
        logger.warning("Heartbeat already running, not starting another")
        return False

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        spawn_thread(config)
    else:
        spawn(config)
    return True


@asynccontextmanager
async def heartbeat_lifespan(
    config: HeartbeatConfig | None, *, shutdown_grace: float = 1.0
) -> AsyncIterator[asyncio.Task[None] | None]:
    """Run heartbeats for the duration of the context.

    Yields the background task, or None when `config` is None (disabled).
    On exit the loop is asked to stop. If it is still busy with a request
    after `shutdown_grace` seconds, the request is abandoned.
    """
    if config is None:
        _log_disabled()
        yield None
        return

    stop = asyncio.Event()
    task = spawn(config, stop=stop)
    try:
        yield task
    finally:
        stop.set()
        _, pending = await asyncio.wait({task}, timeout=shutdown_grace)
        if pending:
            task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Heartbeat task stopped")
