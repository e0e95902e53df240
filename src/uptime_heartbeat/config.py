"""Heartbeat configuration and its resolution from environment variables."""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECS = 60.0
DEFAULT_TIMEOUT_SECS = 10.0


class EnvKey(str, Enum):
    """Environment variables read by `resolve_config`."""

    URL = "HEARTBEAT_URL"
    INTERVAL_SECS = "HEARTBEAT_INTERVAL_SECS"
    TIMEOUT_SECS = "HEARTBEAT_TIMEOUT_SECS"


class HeartbeatConfig(BaseModel):
    """Resolved heartbeat settings, immutable once built.

    Example:
        HeartbeatConfig(
            url="https://uptime.betterstack.com/api/v1/heartbeat/TOKEN",
            interval=60,
            timeout=10,
        )

    A timeout longer than the interval is accepted. Ticks never overlap, so
    it only stretches the time between heartbeats.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    interval: float = Field(default=DEFAULT_INTERVAL_SECS, gt=0, allow_inf_nan=False)
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECS, gt=0, allow_inf_nan=False)

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("url must not be empty")
        return value


def _parse_seconds(source: Mapping[str, str], key: EnvKey, default: float) -> float:
    """Parse a positive number of seconds, falling back to `default` on bad input."""
    raw = source.get(key.value)
    if raw is None or not raw.strip():
        return default

    try:
        value = float(raw)
    except ValueError:
        value = math.nan

    if not math.isfinite(value) or value <= 0:
        logger.warning(
            "Invalid %s=%r, using default %ss", key.value, raw, default
        )
        return default

    return value


def resolve_config(source: Mapping[str, str] | None = None) -> HeartbeatConfig | None:
    """Build a HeartbeatConfig from environment-style key/value pairs.

    Args:
        source: Mapping to read from. Defaults to `os.environ`.

    Returns:
        The resolved config, or None when HEARTBEAT_URL is missing or blank.
        None means heartbeats are disabled; callers log that once.
    """
    if source is None:
        source = os.environ

    url = (source.get(EnvKey.URL.value) or "").strip()
    if not url:
        return None

    return HeartbeatConfig(
        url=url,
        interval=_parse_seconds(source, EnvKey.INTERVAL_SECS, DEFAULT_INTERVAL_SECS),
        timeout=_parse_seconds(source, EnvKey.TIMEOUT_SECS, DEFAULT_TIMEOUT_SECS),
    )
