"""Admission gate: decides whether a write may proceed.

The gate is a pure function of three values. Durations are kept as
``timedelta`` (integer microseconds) so the boundary comparison is exact;
a write exactly ``threshold`` after the previous one is allowed.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class AdmissionDecision:
    """Outcome of one admission check. Never persisted."""

    elapsed: timedelta
    threshold: timedelta
    allowed: bool

    @property
    def elapsed_minutes(self) -> float:
        """Elapsed time in fractional minutes (for logs and messages)."""
        return self.elapsed.total_seconds() / 60

    @property
    def threshold_minutes(self) -> float:
        """Threshold in fractional minutes."""
        return self.threshold.total_seconds() / 60


def evaluate(
    now: datetime, last_modified_at: datetime, threshold: timedelta
) -> AdmissionDecision:
    """Compare time since the last write against the threshold.

    Args:
        now: Current wall-clock time.
        last_modified_at: Store-assigned time of the last accepted write.
        threshold: Minimum required gap between writes.

    Returns:
        Decision with ``allowed == (elapsed >= threshold)``. Clock skew that
        puts ``last_modified_at`` in the future yields a negative elapsed
        time and therefore a trip.
    """
    elapsed = now - last_modified_at
    return AdmissionDecision(
        elapsed=elapsed,
        threshold=threshold,
        allowed=elapsed >= threshold,
    )


def format_minutes(minutes: float) -> str:
    """Render a minute count for humans: '1 minute', '2.5 minutes'."""
    if minutes == int(minutes):
        value = str(int(minutes))
    else:
        value = f"{minutes:g}"
    unit = "minute" if value == "1" else "minutes"
    return f"{value} {unit}"
