"""Append/read orchestration for the shared resource.

An append runs PROBE -> DECIDE -> (TRIP | COMMIT) -> RESPOND while holding
the append slot:

- PROBE: fetch metadata only. A missing resource answers 404 and never
  reaches the gate.
- DECIDE: fetch the threshold (safe default on failure) and run the gate.
- TRIP: best-effort disable of public access and alert, then 503. The write
  is not performed.
- COMMIT: read the whole resource, append payload plus a newline, write it
  back. The store stamps the new modification time.

Reads bypass the gate and the slot entirely.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from textappend.alerts.base import Alert, AlertPriority, AlertSink, NullAlertSink
from textappend.core.concurrency import AppendSlot
from textappend.exceptions import AppendSlotBusy, StoreError
from textappend.gate.admission import AdmissionDecision, evaluate, format_minutes
from textappend.gate.threshold import (
    Threshold,
    ThresholdSource,
    parse_minutes,
    resolve_threshold,
)
from textappend.monitoring.metrics import MetricsService
from textappend.monitoring.sentry_service import get_sentry
from textappend.routing.control import RoutingControlPlane
from textappend.store.objects import ObjectStore, utc_now

logger = logging.getLogger(__name__)

SEPARATOR = b"\n"


class Outcome(str, enum.Enum):
    """How a request ended."""

    COMMITTED = "committed"
    READ = "read"
    NOT_FOUND = "not_found"
    TRIPPED = "tripped"
    BUSY = "busy"
    STORE_FAILURE = "store_failure"


_STATUS_CODES = {
    Outcome.COMMITTED: 200,
    Outcome.READ: 200,
    Outcome.NOT_FOUND: 404,
    Outcome.TRIPPED: 503,
    Outcome.BUSY: 429,
    Outcome.STORE_FAILURE: 500,
}

APPENDED_BODY = b"Text appended successfully"
APPEND_NOT_FOUND_BODY = b"Error: Shared resource does not exist. Please create it first."
READ_NOT_FOUND_BODY = b"Error: Shared resource does not exist."
STORE_FAILURE_BODY = b"Error: Internal Server Error"
BUSY_BODY = b"Error: Too many concurrent writes, try again later."


@dataclass(frozen=True)
class HandlerResponse:
    """Plain-text response produced by the handler."""

    outcome: Outcome
    body: bytes

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.outcome]


def breaker_message(threshold: Threshold) -> str:
    """Rejection text naming the required minimum interval."""
    return (
        "Circuit breaker activated: Writes must be at least "
        f"{format_minutes(threshold.minutes)} apart. API has been disabled."
    )


class AppendReadHandler:
    """Request-level orchestrator for the single shared resource."""

    def __init__(
        self,
        store: ObjectStore,
        resource_key: str,
        threshold_source: ThresholdSource,
        routing: RoutingControlPlane,
        alert_sink: AlertSink | None = None,
        *,
        default_threshold_minutes: float = 1.0,
        slot: AppendSlot | None = None,
        clock: Callable[[], datetime] = utc_now,
        metrics: MetricsService | None = None,
    ) -> None:
        """
        Wire the handler to its collaborators.

        Args:
            store: Object store holding the resource
            resource_key: Logical name of the resource
            threshold_source: Where the minimum write interval comes from
            routing: Public access switch, disabled on trip
            alert_sink: Best-effort trip notifications
            default_threshold_minutes: Safe fallback when the source fails
            slot: Append concurrency bound (one in-flight append by default)
            clock: Wall clock, injectable for tests
            metrics: Optional Prometheus metrics
        """
        if parse_minutes(default_threshold_minutes) is None:
            raise ValueError(
                f"default_threshold_minutes must be a positive duration, got {default_threshold_minutes!r}"
            )
        self.store = store
        self.resource_key = resource_key
        self.threshold_source = threshold_source
        self.routing = routing
        self.alert_sink = alert_sink or NullAlertSink()
        self.default_threshold_minutes = default_threshold_minutes
        self.slot = slot or AppendSlot()
        self._clock = clock
        self._metrics = metrics

    # --- Read path ---

    def read(self) -> HandlerResponse:
        """Return the resource content verbatim, or 404 when it is absent."""
        try:
            content = self.store.read_all(self.resource_key)
        except StoreError as e:
            response = self._store_failure("read", e)
        else:
            if content is None:
                response = HandlerResponse(Outcome.NOT_FOUND, READ_NOT_FOUND_BODY)
            else:
                response = HandlerResponse(Outcome.READ, content)

        if self._metrics:
            self._metrics.record_read(response.outcome.value)
        return response

    # --- Append path ---

    def append(self, payload: bytes) -> HandlerResponse:
        """Append ``payload`` and a newline if the write-rate gate allows it."""
        try:
            with self.slot.hold():
                response = self._append_exclusive(payload)
        except AppendSlotBusy as e:
            logger.warning("Append rejected: %s", e)
            response = HandlerResponse(Outcome.BUSY, BUSY_BODY)

        if self._metrics:
            self._metrics.record_append(response.outcome.value)
        return response

    def _append_exclusive(self, payload: bytes) -> HandlerResponse:
        try:
            metadata = self.store.probe_metadata(self.resource_key)
        except StoreError as e:
            return self._store_failure("probe", e)
        if metadata is None:
            logger.info("Append to missing resource %s", self.resource_key)
            return HandlerResponse(Outcome.NOT_FOUND, APPEND_NOT_FOUND_BODY)

        threshold = resolve_threshold(self.threshold_source, self.default_threshold_minutes)
        if self._metrics:
            self._metrics.set_threshold_minutes(threshold.minutes, threshold.fell_back)

        decision = evaluate(self._clock(), metadata.last_modified_at, threshold.duration)
        logger.info(f"Last modified: {metadata.last_modified_at.isoformat()}")
        logger.info(f"Time difference: {decision.elapsed_minutes:.2f} minutes")

        if not decision.allowed:
            return self._trip(decision, threshold)

        logger.info(
            f"Threshold not breached ({decision.elapsed_minutes:.2f} >= "
            f"{threshold.minutes}), proceeding with append"
        )
        return self._commit(payload)

    def _commit(self, payload: bytes) -> HandlerResponse:
        try:
            content = self.store.read_all(self.resource_key)
            if content is None:
                # Deleted out of band between probe and read.
                return HandlerResponse(Outcome.NOT_FOUND, APPEND_NOT_FOUND_BODY)
            modified = self.store.write_all(self.resource_key, content + payload + SEPARATOR)
        except StoreError as e:
            return self._store_failure("commit", e)

        logger.info(
            "Appended %d bytes to %s (last modified now %s)",
            len(payload),
            self.resource_key,
            modified.isoformat() if modified else "unknown",
        )
        return HandlerResponse(Outcome.COMMITTED, APPENDED_BODY)

    def _trip(self, decision: AdmissionDecision, threshold: Threshold) -> HandlerResponse:
        logger.warning(
            f"Threshold breached! ({decision.elapsed_minutes:.2f} < {threshold.minutes}) "
            "Disabling public access"
        )
        if self._metrics:
            self._metrics.record_breaker_trip()

        # The rejection below is the guarantee; disabling access is a second line.
        try:
            self.routing.disable_public_access()
        except Exception as e:
            logger.error("Error disabling public access: %s", e)
            self._side_effect_failed("routing", e)
        else:
            logger.warning("Public access disabled")

        self._send_alert(decision, threshold)
        return HandlerResponse(Outcome.TRIPPED, breaker_message(threshold).encode())

    def _send_alert(self, decision: AdmissionDecision, threshold: Threshold) -> None:
        alert = Alert(
            title="Circuit breaker tripped",
            message="Writes arrived too frequently; public access has been disabled.",
            priority=AlertPriority.CRITICAL,
            metadata={
                "resource": self.resource_key,
                "elapsed_minutes": f"{decision.elapsed_minutes:.2f}",
                "threshold_minutes": threshold.minutes,
                "threshold_source": "default" if threshold.fell_back else "configured",
            },
        )
        try:
            sent = self.alert_sink.notify(alert)
        except Exception as e:
            logger.error("Error sending breaker alert: %s", e)
            self._side_effect_failed("alerts", e)
            return
        if not sent:
            logger.info("Breaker alert not sent by %s", type(self.alert_sink).__name__)

    def _side_effect_failed(self, collaborator: str, error: Exception) -> None:
        if self._metrics:
            self._metrics.record_side_effect_failure(collaborator)
        sentry = get_sentry()
        if sentry:
            sentry.capture_warning(
                f"{collaborator} call failed during breaker trip: {error}",
                context={"resource": self.resource_key},
            )

    def _store_failure(self, phase: str, error: StoreError) -> HandlerResponse:
        logger.error("Store failure during %s of %s: %s", phase, self.resource_key, error)
        sentry = get_sentry()
        if sentry:
            sentry.capture_error(
                error,
                context={"phase": phase, "resource": self.resource_key},
                tags={"collaborator": error.collaborator},
            )
        return HandlerResponse(Outcome.STORE_FAILURE, STORE_FAILURE_BODY)
