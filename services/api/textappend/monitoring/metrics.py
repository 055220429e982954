"""Prometheus metrics for the text append service.

Example:
    >>> from textappend.monitoring.metrics import MetricsConfig, init_metrics
    >>>
    >>> metrics = init_metrics(MetricsConfig(port=9090))
    >>> metrics.start_server()
    >>> metrics.record_append("committed")
    >>> metrics.set_threshold_minutes(1.0, fell_back=False)
"""

import logging
import threading
from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)

# Module-level singleton
_metrics: "MetricsService | None" = None


@dataclass(frozen=True)
class MetricsConfig:
    """Configuration for metrics service.

    Attributes:
        enabled: Whether metrics collection is enabled
        port: HTTP server port for Prometheus scraping
        prefix: Metric name prefix
    """

    enabled: bool = True
    port: int = 9090
    prefix: str = "textappend"


class MetricsService:
    """Prometheus metrics for the admission gate and handler.

    Each service owns its registry, so several instances (tests) never clash
    on metric names. The scrape server runs on its own port; the public API
    surface is unchanged.
    """

    def __init__(self, config: MetricsConfig | None = None) -> None:
        """Initialize metrics service.

        Args:
            config: Metrics configuration (uses defaults if not provided)
        """
        self.config = config or MetricsConfig()
        self.registry = CollectorRegistry()
        self._server_started = False
        self._lock = threading.Lock()

        prefix = self.config.prefix
        self._appends = Counter(
            f"{prefix}_appends_total",
            "Append requests by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self._reads = Counter(
            f"{prefix}_reads_total",
            "Read requests by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self._breaker_trips = Counter(
            f"{prefix}_breaker_trips_total",
            "Number of circuit breaker trips",
            registry=self.registry,
        )
        self._threshold_fallbacks = Counter(
            f"{prefix}_threshold_fallbacks_total",
            "Admission checks that used the default threshold",
            registry=self.registry,
        )
        self._side_effect_failures = Counter(
            f"{prefix}_side_effect_failures_total",
            "Swallowed failures of best-effort calls",
            ["collaborator"],
            registry=self.registry,
        )
        self._threshold_minutes = Gauge(
            f"{prefix}_threshold_minutes",
            "Threshold used by the most recent admission check",
            ["source"],
            registry=self.registry,
        )

    def start_server(self) -> bool:
        """Start the Prometheus HTTP server.

        Returns:
            True if server started successfully, False otherwise
        """
        if not self.config.enabled:
            logger.info("Metrics disabled, server not started")
            return False

        with self._lock:
            if self._server_started:
                logger.warning("Metrics server already started")
                return True

            try:
                start_http_server(self.config.port, registry=self.registry)
                self._server_started = True
                logger.info(f"Prometheus metrics server started on port {self.config.port}")
                return True
            except OSError as e:
                logger.error(f"Failed to start metrics server: {e}")
                return False

    @property
    def is_enabled(self) -> bool:
        """Check if metrics collection is enabled."""
        return self.config.enabled

    def record_append(self, outcome: str) -> None:
        if self.config.enabled:
            self._appends.labels(outcome=outcome).inc()

    def record_read(self, outcome: str) -> None:
        if self.config.enabled:
            self._reads.labels(outcome=outcome).inc()

    def record_breaker_trip(self) -> None:
        if self.config.enabled:
            self._breaker_trips.inc()

    def record_side_effect_failure(self, collaborator: str) -> None:
        """Record a swallowed failure of the disable call or an alert."""
        if self.config.enabled:
            self._side_effect_failures.labels(collaborator=collaborator).inc()

    def set_threshold_minutes(self, minutes: float, fell_back: bool) -> None:
        """Expose the threshold in effect, labelled by where it came from.

        Args:
            minutes: Threshold used by the admission check
            fell_back: True when the safe default replaced the source value
        """
        if not self.config.enabled:
            return
        source = "default" if fell_back else "configured"
        other = "configured" if fell_back else "default"
        self._threshold_minutes.labels(source=source).set(minutes)
        self._threshold_minutes.labels(source=other).set(0)
        if fell_back:
            self._threshold_fallbacks.inc()


def init_metrics(config: MetricsConfig | None = None) -> MetricsService:
    """Initialize the global metrics service.

    Args:
        config: Metrics configuration

    Returns:
        Initialized MetricsService
    """
    global _metrics
    _metrics = MetricsService(config)
    return _metrics


def get_metrics() -> MetricsService | None:
    """Get the global metrics service instance.

    Returns:
        MetricsService if initialized, None otherwise
    """
    return _metrics
