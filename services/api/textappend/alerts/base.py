"""Alert model and sink protocol."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Protocol, runtime_checkable


class AlertPriority(Enum):
    """Alert priority levels."""
    LOW = auto()
    HIGH = auto()
    CRITICAL = auto()  # Circuit breaker trip


@dataclass
class Alert:
    """Alert message container."""
    title: str
    message: str
    priority: AlertPriority = AlertPriority.CRITICAL
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_text(self) -> str:
        """Plain-text rendering (SNS e-mail subscriptions)."""
        lines = [self.title, "", self.message]
        if self.metadata:
            lines.append("")
            for key, value in self.metadata.items():
                lines.append(f"{key}: {value}")
        lines.append("")
        lines.append(self.timestamp.strftime("%Y-%m-%d %H:%M:%S UTC"))
        return "\n".join(lines)

    def to_telegram_message(self) -> str:
        """Format alert as Telegram message with markdown."""
        lines = [
            f"🚨 *{self._get_priority_tag()}{self.title}*",
            "",
            self.message,
        ]

        if self.metadata:
            lines.append("")
            lines.append("_Details:_")
            for key, value in self.metadata.items():
                formatted_key = key.replace("_", " ").title()
                lines.append(f"• {formatted_key}: `{value}`")

        lines.append("")
        lines.append(f"🕐 {self.timestamp.strftime('%Y-%m-%d %H:%M:%S UTC')}")

        return "\n".join(lines)

    def _get_priority_tag(self) -> str:
        if self.priority == AlertPriority.CRITICAL:
            return "🔴 CRITICAL: "
        elif self.priority == AlertPriority.HIGH:
            return "🟠 "
        return ""


@runtime_checkable
class AlertSink(Protocol):
    """Best-effort notification channel."""

    def notify(self, alert: Alert) -> bool:
        """Deliver the alert. Return False (or raise) when it was not sent."""
        ...


class NullAlertSink:
    """Sink used when no alerting is configured."""

    def notify(self, alert: Alert) -> bool:
        return False
