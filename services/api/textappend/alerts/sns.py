"""SNS alert sink (e-mail subscriptions and the like)."""

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from textappend.alerts.base import Alert
from textappend.exceptions import AlertError

logger = logging.getLogger(__name__)

# SNS rejects e-mail subjects longer than this.
_MAX_SUBJECT = 100


class SnsAlertSink:
    """Publishes alerts to an SNS topic."""

    def __init__(self, client: Any, topic_arn: str) -> None:
        self._client = client
        self._topic_arn = topic_arn

    def notify(self, alert: Alert) -> bool:
        try:
            response = self._client.publish(
                TopicArn=self._topic_arn,
                Subject=alert.title[:_MAX_SUBJECT],
                Message=alert.to_text(),
            )
        except (BotoCoreError, ClientError) as e:
            raise AlertError(f"SNS publish to {self._topic_arn} failed: {e}") from e
        logger.info("Alert published to SNS: %s", response.get("MessageId"))
        return True
