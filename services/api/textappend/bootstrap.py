"""Build the handler and its collaborators from configuration."""

import logging
from typing import Any

import boto3
import redis
from botocore.config import Config as BotoConfig

from textappend.alerts import (
    AlertSink,
    NullAlertSink,
    SnsAlertSink,
    TelegramAlerter,
    TelegramConfig,
)
from textappend.config import ServiceConfig, resolve_service_path
from textappend.core import AppendReadHandler, AppendSlot
from textappend.gate import (
    RedisThresholdSource,
    SsmThresholdSource,
    StaticThresholdSource,
    ThresholdSource,
)
from textappend.monitoring.metrics import MetricsService
from textappend.routing import (
    ApiGatewayRoutingControlPlane,
    FileRoutingControlPlane,
    InMemoryRoutingControlPlane,
    RoutingControlPlane,
)
from textappend.store import InMemoryObjectStore, LocalFileObjectStore, ObjectStore, S3ObjectStore

logger = logging.getLogger(__name__)


def aws_client(service: str, region: str | None, timeout_seconds: float) -> Any:
    """Create a boto3 client that makes one bounded attempt per call."""
    config = BotoConfig(
        connect_timeout=timeout_seconds,
        read_timeout=timeout_seconds,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )
    return boto3.client(service, region_name=region, config=config)


def build_store(config: ServiceConfig) -> ObjectStore:
    resource = config.resource
    if resource.backend == "s3":
        client = aws_client("s3", resource.region, config.timeouts.store_seconds)
        logger.info("Store: S3 bucket %s", resource.bucket)
        return S3ObjectStore(client, resource.bucket or "")
    if resource.backend == "file":
        root = resolve_service_path(resource.directory)
        logger.info("Store: local files under %s", root)
        return LocalFileObjectStore(root)
    logger.info("Store: InMemory (single-process only)")
    return InMemoryObjectStore()


def build_threshold_source(config: ServiceConfig) -> ThresholdSource:
    threshold = config.threshold
    if threshold.source == "ssm":
        client = aws_client("ssm", threshold.region, config.timeouts.threshold_seconds)
        return SsmThresholdSource(client, threshold.parameter_name or "")
    if threshold.source == "redis":
        client = redis.Redis.from_url(
            threshold.redis_url or "",
            decode_responses=True,
            socket_timeout=config.timeouts.threshold_seconds,
            socket_connect_timeout=config.timeouts.threshold_seconds,
        )
        return RedisThresholdSource(client, threshold.redis_key)
    return StaticThresholdSource(threshold.static_minutes)


def build_routing(config: ServiceConfig) -> RoutingControlPlane:
    routing = config.routing
    if routing.backend == "apigateway":
        client = aws_client("apigatewayv2", routing.region, config.timeouts.routing_seconds)
        return ApiGatewayRoutingControlPlane(client, routing.api_id or "", routing.stage_name)
    if routing.backend == "file":
        flag_path = resolve_service_path(routing.flag_path)
        logger.info("Routing control plane: marker file %s", flag_path)
        return FileRoutingControlPlane(flag_path)
    logger.info("Routing control plane: InMemory (single-process only)")
    return InMemoryRoutingControlPlane()


def build_alert_sink(config: ServiceConfig) -> AlertSink:
    alerts = config.alerts
    if alerts.backend == "telegram":
        return TelegramAlerter(
            TelegramConfig(
                bot_token=alerts.telegram_bot_token or "",
                chat_id=alerts.telegram_chat_id or "",
                max_alerts_per_minute=alerts.max_alerts_per_minute,
                timeout_seconds=config.timeouts.alert_seconds,
            )
        )
    if alerts.backend == "sns":
        client = aws_client("sns", alerts.region, config.timeouts.alert_seconds)
        return SnsAlertSink(client, alerts.sns_topic_arn or "")
    return NullAlertSink()


def build_handler(
    config: ServiceConfig, metrics: MetricsService | None = None
) -> AppendReadHandler:
    """Assemble an AppendReadHandler for the configured backends."""
    return AppendReadHandler(
        store=build_store(config),
        resource_key=config.resource.key,
        threshold_source=build_threshold_source(config),
        routing=build_routing(config),
        alert_sink=build_alert_sink(config),
        default_threshold_minutes=config.threshold.default_minutes,
        slot=AppendSlot(
            max_inflight=config.concurrency.max_inflight_appends,
            wait_seconds=config.concurrency.slot_wait_seconds,
        ),
        metrics=metrics,
    )
