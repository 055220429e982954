"""Telegram alert sink for operator notifications.

Sends a message when the circuit breaker trips. A burst of rejected writes
would otherwise produce one message each, so delivery is rate limited per
minute.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx

from textappend.alerts.base import Alert, AlertPriority
from textappend.exceptions import AlertError

logger = logging.getLogger(__name__)


@dataclass
class TelegramConfig:
    """Telegram bot configuration."""
    bot_token: str
    chat_id: str
    enabled: bool = True
    # Alert filtering
    min_priority: AlertPriority = AlertPriority.LOW
    # Rate limiting
    max_alerts_per_minute: int = 10
    timeout_seconds: float = 3.0


class TelegramAlerter:
    """Telegram notification sink.

    Example:
        >>> config = TelegramConfig(bot_token="xxx", chat_id="123")
        >>> alerter = TelegramAlerter(config)
        >>> alerter.notify(Alert(title="Circuit Breaker", message="API disabled"))
    """

    TELEGRAM_API_BASE = "https://api.telegram.org"

    def __init__(self, config: TelegramConfig, client: httpx.Client | None = None):
        """Initialize alerter with configuration.

        Args:
            config: Telegram bot configuration
            client: Optional preconfigured httpx client (tests inject a mock transport)
        """
        self.config = config
        self._client = client or httpx.Client(timeout=config.timeout_seconds)
        self._lock = threading.Lock()
        self._alert_timestamps: list[datetime] = []

    def close(self) -> None:
        self._client.close()

    def notify(self, alert: Alert) -> bool:
        """Send an alert to Telegram.

        Args:
            alert: Alert to send

        Returns:
            True if sent, False if disabled, filtered or rate limited

        Raises:
            AlertError: The Bot API was unreachable or rejected the message
        """
        if not self.config.enabled:
            return False

        if alert.priority.value < self.config.min_priority.value:
            return False

        with self._lock:
            if not self._check_rate_limit():
                logger.info("Telegram alert suppressed by rate limit: %s", alert.title)
                return False
            self._alert_timestamps.append(datetime.now(timezone.utc))

        return self._send_message(alert.to_telegram_message())

    def _check_rate_limit(self) -> bool:
        """Check if we're within rate limits."""
        now = datetime.now(timezone.utc)
        cutoff = now.replace(second=0, microsecond=0)  # Start of current minute

        self._alert_timestamps = [
            ts for ts in self._alert_timestamps
            if ts >= cutoff
        ]

        return len(self._alert_timestamps) < self.config.max_alerts_per_minute

    def _send_message(self, text: str) -> bool:
        """Send message via Telegram API. One attempt, bounded by the client timeout."""
        url = f"{self.TELEGRAM_API_BASE}/bot{self.config.bot_token}/sendMessage"
        payload = {
            "chat_id": self.config.chat_id,
            "text": text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": True,
        }

        try:
            response = self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise AlertError(f"Telegram send failed: {e}") from e

        if response.status_code != 200:
            raise AlertError(f"Telegram send rejected: HTTP {response.status_code}")
        return True
