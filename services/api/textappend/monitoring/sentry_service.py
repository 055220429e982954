"""Sentry integration for error tracking.

Store failures abort a request with a 500; they are the errors operators
need to see, so the handler reports them here when Sentry is configured.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

logger = logging.getLogger(__name__)


@dataclass
class SentryConfig:
    """Sentry configuration."""
    dsn: str
    environment: str = "development"
    release: str = ""
    traces_sample_rate: float = 0.0
    enabled: bool = True
    ignore_errors: list[str] = field(default_factory=lambda: [
        "ConnectionResetError",
        "AppendSlotBusy",
    ])


class SentryService:
    """Thin wrapper over the Sentry SDK.

    Example:
        >>> sentry = init_sentry(SentryConfig(dsn="https://xxx@sentry.io/123"))
        >>> sentry.capture_error(err, context={"phase": "commit"})
    """

    def __init__(self, config: SentryConfig):
        self.config = config
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> bool:
        """Initialize Sentry SDK.

        Returns:
            True if initialization successful
        """
        if not self.config.enabled or not self.config.dsn:
            return False

        try:
            sentry_sdk.init(
                dsn=self.config.dsn,
                environment=self.config.environment,
                release=self.config.release or os.environ.get("SENTRY_RELEASE") or None,
                traces_sample_rate=self.config.traces_sample_rate,
                integrations=[
                    LoggingIntegration(
                        level=None,  # Capture no logs as breadcrumbs
                        event_level=None,  # Don't send logs as events
                    ),
                ],
                before_send=self._before_send,
            )
        except Exception as e:
            logger.error("Sentry initialization failed: %s", e)
            return False
        self._initialized = True
        return True

    def _before_send(self, event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
        """Drop ignored errors and scrub secrets before sending."""
        if "exc_info" in hint:
            exc_type, _, _ = hint["exc_info"]
            if exc_type.__name__ in self.config.ignore_errors:
                return None
        return scrub_sensitive_data(event)

    def capture_error(
        self,
        error: Exception,
        context: dict[str, Any] | None = None,
        tags: dict[str, str] | None = None,
    ) -> str | None:
        """Capture an exception.

        Args:
            error: Exception to capture
            context: Additional context data
            tags: Tags for filtering

        Returns:
            Event ID if captured, None otherwise
        """
        if not self._initialized:
            return None

        if context:
            sentry_sdk.set_context("request_context", context)
        for key, value in (tags or {}).items():
            sentry_sdk.set_tag(key, value)

        return sentry_sdk.capture_exception(error)

    def capture_warning(self, message: str, context: dict[str, Any] | None = None) -> str | None:
        """Capture a warning message, e.g. a swallowed side-effect failure."""
        if not self._initialized:
            return None
        if context:
            sentry_sdk.set_context("request_context", context)
        return sentry_sdk.capture_message(message, level="warning")

    def flush(self, timeout: float = 2.0) -> None:
        if self._initialized:
            sentry_sdk.flush(timeout=timeout)


_SENSITIVE_KEYS = {
    "secret", "password", "token",
    "authorization", "auth",
    "access_key", "private_key",
}


def scrub_sensitive_data(event: dict[str, Any]) -> dict[str, Any]:
    """Replace values of secret-looking keys with a marker, recursively."""
    result: dict[str, Any] = {}
    for key, value in event.items():
        key_lower = key.lower()
        if any(s in key_lower for s in _SENSITIVE_KEYS):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = scrub_sensitive_data(value)
        elif isinstance(value, list):
            result[key] = [
                scrub_sensitive_data(v) if isinstance(v, dict) else v
                for v in value
            ]
        else:
            result[key] = value
    return result


# Convenience functions for module-level access
_service: SentryService | None = None


def init_sentry(config: SentryConfig) -> SentryService:
    """Initialize the global Sentry service."""
    global _service
    _service = SentryService(config)
    _service.initialize()
    return _service


def get_sentry() -> SentryService | None:
    """Get the global Sentry service, None if never initialized."""
    return _service
