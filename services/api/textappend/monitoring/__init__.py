"""Monitoring services for the text append service.

Provides observability capabilities:
- SentryService: Error tracking
- MetricsService: Prometheus metrics for the admission gate
"""

from textappend.monitoring.metrics import (
    MetricsConfig,
    MetricsService,
    get_metrics,
    init_metrics,
)
from textappend.monitoring.sentry_service import (
    SentryConfig,
    SentryService,
    get_sentry,
    init_sentry,
)

__all__ = [
    # Metrics
    "MetricsConfig",
    "MetricsService",
    "get_metrics",
    "init_metrics",
    # Sentry
    "SentryConfig",
    "SentryService",
    "get_sentry",
    "init_sentry",
]
