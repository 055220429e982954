"""Threshold sources for the admission gate.

The threshold (minimum minutes between accepted writes) is read fresh on
every append so operators can retune it without a redeploy. Any failure or
nonsense value from a source resolves to the configured safe default; the
gate is never disabled by a broken source.
"""

import logging
import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Protocol, runtime_checkable

import redis
from botocore.exceptions import BotoCoreError, ClientError

from textappend.exceptions import ThresholdSourceError

logger = logging.getLogger(__name__)


@runtime_checkable
class ThresholdSource(Protocol):
    """Supplies the currently configured threshold in minutes."""

    def get(self) -> float | str:
        """Return the raw threshold value. May raise ThresholdSourceError."""
        ...


class StaticThresholdSource:
    """Fixed threshold from configuration."""

    def __init__(self, minutes: float) -> None:
        self._minutes = minutes

    def get(self) -> float:
        return self._minutes


class SsmThresholdSource:
    """Threshold kept in an SSM Parameter Store parameter."""

    def __init__(self, client: Any, parameter_name: str) -> None:
        """Create a source reading ``parameter_name``.

        Args:
            client: A boto3 SSM client (already configured with timeouts).
            parameter_name: Name of the parameter holding the minutes.
        """
        self._client = client
        self._parameter_name = parameter_name

    def get(self) -> str:
        try:
            response = self._client.get_parameter(Name=self._parameter_name)
        except (BotoCoreError, ClientError) as e:
            raise ThresholdSourceError(
                f"SSM get_parameter({self._parameter_name}) failed: {e}"
            ) from e
        return str(response["Parameter"]["Value"])


class RedisThresholdSource:
    """Threshold kept under a Redis key."""

    def __init__(self, client: Any, key: str) -> None:
        """Create a source reading ``key``.

        Args:
            client: A redis.Redis (or compatible) instance.
            key: Key holding the minutes as a string.
        """
        self._client = client
        self._key = key

    def get(self) -> str:
        try:
            raw = self._client.get(self._key)
        except redis.RedisError as e:
            raise ThresholdSourceError(f"Redis GET {self._key} failed: {e}") from e
        if raw is None:
            raise ThresholdSourceError(f"Redis key {self._key} is not set")
        return raw.decode() if isinstance(raw, bytes) else str(raw)


@dataclass(frozen=True)
class Threshold:
    """Threshold in effect for one admission check."""

    minutes: float
    fell_back: bool = False
    reason: str | None = None

    @property
    def duration(self) -> timedelta:
        """Microsecond-exact duration used by the gate."""
        return timedelta(minutes=self.minutes)


def parse_minutes(raw: object) -> float | None:
    """Parse a raw threshold value.

    Returns None unless the value is a number whose duration is positive at
    microsecond resolution and fits in a ``timedelta``.
    """
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    try:
        duration = timedelta(minutes=value)
    except OverflowError:
        return None
    if duration <= timedelta(0):
        return None
    return value


def resolve_threshold(source: ThresholdSource, default_minutes: float) -> Threshold:
    """Fetch the threshold, falling back to ``default_minutes`` on any failure.

    Args:
        source: Where the threshold lives.
        default_minutes: Safe default, must be positive.

    Returns:
        The threshold in effect, flagged when the default was used.
    """
    try:
        raw = source.get()
    except Exception as e:
        logger.error(
            "Failed to fetch threshold (%s), using default: %s minutes",
            e,
            default_minutes,
        )
        return Threshold(minutes=default_minutes, fell_back=True, reason=str(e))

    minutes = parse_minutes(raw)
    if minutes is None:
        logger.error(
            "Invalid threshold value: %r, using default: %s minutes",
            raw,
            default_minutes,
        )
        return Threshold(
            minutes=default_minutes,
            fell_back=True,
            reason=f"invalid value {raw!r}",
        )

    logger.info(f"Threshold loaded: {minutes} minutes")
    return Threshold(minutes=minutes)
