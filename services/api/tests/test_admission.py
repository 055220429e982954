"""Tests for the admission gate."""

from datetime import datetime, timedelta, timezone

import pytest

from textappend.gate import evaluate, format_minutes

LAST_WRITE = datetime(2026, 1, 27, 12, 0, 0, tzinfo=timezone.utc)


class TestEvaluate:
    """Test suite for evaluate()."""

    @pytest.mark.parametrize(
        ("elapsed", "threshold", "allowed"),
        [
            (timedelta(minutes=5), timedelta(minutes=1), True),
            (timedelta(seconds=30), timedelta(minutes=1), False),
            (timedelta(minutes=1), timedelta(minutes=1), True),
            (timedelta(minutes=1) - timedelta(microseconds=1), timedelta(minutes=1), False),
            (timedelta(0), timedelta(minutes=30), False),
        ],
    )
    def test_allowed_iff_elapsed_reaches_threshold(
        self, elapsed: timedelta, threshold: timedelta, allowed: bool
    ) -> None:
        decision = evaluate(LAST_WRITE + elapsed, LAST_WRITE, threshold)
        assert decision.allowed is allowed
        assert decision.allowed == (decision.elapsed >= decision.threshold)

    def test_boundary_is_allowed(self) -> None:
        """A write exactly one threshold after the last one passes."""
        threshold = timedelta(minutes=0.1)
        decision = evaluate(LAST_WRITE + threshold, LAST_WRITE, threshold)
        assert decision.allowed is True

    def test_fractional_minutes_not_truncated(self) -> None:
        """90 seconds against a 1.5 minute threshold passes; 89 does not."""
        threshold = timedelta(minutes=1.5)
        assert evaluate(LAST_WRITE + timedelta(seconds=90), LAST_WRITE, threshold).allowed
        assert not evaluate(LAST_WRITE + timedelta(seconds=89), LAST_WRITE, threshold).allowed

    def test_clock_skew_future_timestamp_trips(self) -> None:
        """A last-modified time ahead of now gives negative elapsed and trips."""
        decision = evaluate(LAST_WRITE - timedelta(seconds=5), LAST_WRITE, timedelta(minutes=1))
        assert decision.elapsed < timedelta(0)
        assert decision.allowed is False

    def test_minutes_properties(self) -> None:
        decision = evaluate(
            LAST_WRITE + timedelta(seconds=45), LAST_WRITE, timedelta(minutes=2)
        )
        assert decision.elapsed_minutes == pytest.approx(0.75)
        assert decision.threshold_minutes == pytest.approx(2.0)


class TestFormatMinutes:
    """Test suite for format_minutes()."""

    def test_singular(self) -> None:
        assert format_minutes(1.0) == "1 minute"

    def test_plural_whole(self) -> None:
        assert format_minutes(30) == "30 minutes"

    def test_fractional(self) -> None:
        assert format_minutes(2.5) == "2.5 minutes"
        assert format_minutes(0.5) == "0.5 minutes"
