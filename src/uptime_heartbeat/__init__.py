"""Periodic liveness pings to an uptime monitor (Better Uptime style heartbeats)."""

from uptime_heartbeat.config import (
    DEFAULT_INTERVAL_SECS,
    DEFAULT_TIMEOUT_SECS,
    EnvKey,
    HeartbeatConfig,
    resolve_config,
)
from uptime_heartbeat.logging_config import setup_logging
from uptime_heartbeat.loop import heartbeat_loop, send_heartbeat
from uptime_heartbeat.outcome import TickOutcome, TickStatus
from uptime_heartbeat.runner import heartbeat_lifespan, spawn, spawn_from_env, spawn_thread

__all__ = [
    "DEFAULT_INTERVAL_SECS",
    "DEFAULT_TIMEOUT_SECS",
    "EnvKey",
    "HeartbeatConfig",
    "TickOutcome",
    "TickStatus",
    "heartbeat_lifespan",
    "heartbeat_loop",
    "resolve_config",
    "send_heartbeat",
    "setup_logging",
    "spawn",
    "spawn_from_env",
    "spawn_thread",
]
