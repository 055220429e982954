"""Alert sinks for breaker trip notifications.

- TelegramAlerter: notifications via Telegram bot
- SnsAlertSink: notifications via an SNS topic
- NullAlertSink: alerting disabled
"""

from textappend.alerts.base import Alert, AlertPriority, AlertSink, NullAlertSink
from textappend.alerts.sns import SnsAlertSink
from textappend.alerts.telegram import TelegramAlerter, TelegramConfig

__all__ = [
    "Alert",
    "AlertPriority",
    "AlertSink",
    "NullAlertSink",
    "SnsAlertSink",
    "TelegramAlerter",
    "TelegramConfig",
]
