"""Pydantic configuration models with type safety and validation."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator


class ResourceConfig(BaseModel):
    """Location of the single shared text resource."""

    backend: Literal["memory", "file", "s3"] = Field(
        default="file",
        description="Object store backend: memory (tests), file (local runs), s3",
    )
    key: str = Field(
        default="shared.txt",
        min_length=1,
        description="Logical name (object key) of the shared resource",
    )
    directory: str = Field(
        default="data",
        description="Root directory for the file backend, relative to the service root",
    )
    bucket: str | None = Field(default=None, description="S3 bucket name")
    region: str | None = Field(default=None, description="AWS region for S3")

    @model_validator(mode="after")
    def _s3_needs_bucket(self) -> "ResourceConfig":
        if self.backend == "s3" and not self.bucket:
            raise ValueError("resource.bucket is required for the s3 backend")
        return self


class ThresholdConfig(BaseModel):
    """Where the minimum inter-write interval comes from."""

    source: Literal["static", "ssm", "redis"] = Field(
        default="static",
        description="static value, SSM parameter, or Redis key",
    )
    static_minutes: float = Field(
        default=1.0,
        gt=0.0,
        description="Threshold in minutes for the static source",
    )
    parameter_name: str | None = Field(
        default=None,
        description="SSM parameter holding the threshold in minutes",
    )
    redis_url: str | None = Field(default=None, description="Redis URL for the redis source")
    redis_key: str = Field(
        default="textappend:threshold_minutes",
        description="Redis key holding the threshold in minutes",
    )
    region: str | None = Field(default=None, description="AWS region for SSM")
    default_minutes: float = Field(
        default=1.0,
        gt=0.0,
        description="Safe fallback used when the source fails or returns garbage",
    )

    @model_validator(mode="after")
    def _source_settings_present(self) -> "ThresholdConfig":
        if self.source == "ssm" and not self.parameter_name:
            raise ValueError("threshold.parameter_name is required for the ssm source")
        if self.source == "redis" and not self.redis_url:
            raise ValueError("threshold.redis_url is required for the redis source")
        return self


class RoutingConfig(BaseModel):
    """Public routing control plane (the on/off switch)."""

    backend: Literal["memory", "file", "apigateway"] = Field(
        default="memory",
        description="memory (tests), file (local runs, shared with the CLI), apigateway",
    )
    flag_path: str = Field(
        default="data/public_access.disabled",
        description="Marker file for the file backend; access is disabled while it exists",
    )
    api_id: str | None = Field(default=None, description="API Gateway v2 API id")
    stage_name: str = Field(default="$default", min_length=1)
    region: str | None = Field(default=None, description="AWS region for API Gateway")

    @model_validator(mode="after")
    def _apigateway_needs_api_id(self) -> "RoutingConfig":
        if self.backend == "apigateway" and not self.api_id:
            raise ValueError("routing.api_id is required for the apigateway backend")
        return self


class AlertConfig(BaseModel):
    """Best-effort breaker trip notifications."""

    backend: Literal["none", "telegram", "sns"] = Field(default="none")
    telegram_bot_token: str | None = None
    telegram_chat_id: str | None = None
    max_alerts_per_minute: int = Field(default=10, ge=1)
    sns_topic_arn: str | None = None
    region: str | None = None

    @model_validator(mode="after")
    def _backend_settings_present(self) -> "AlertConfig":
        if self.backend == "telegram" and not (
            self.telegram_bot_token and self.telegram_chat_id
        ):
            raise ValueError(
                "alerts.telegram_bot_token and alerts.telegram_chat_id are required "
                "for the telegram backend"
            )
        if self.backend == "sns" and not self.sns_topic_arn:
            raise ValueError("alerts.sns_topic_arn is required for the sns backend")
        return self


class TimeoutConfig(BaseModel):
    """Upper bounds for each external call, in seconds."""

    store_seconds: float = Field(default=5.0, gt=0.0)
    threshold_seconds: float = Field(default=2.0, gt=0.0)
    routing_seconds: float = Field(default=5.0, gt=0.0)
    alert_seconds: float = Field(default=3.0, gt=0.0)


class ConcurrencyConfig(BaseModel):
    """Bound on in-flight append executions."""

    max_inflight_appends: int = Field(
        default=1,
        ge=1,
        description="Anything above 1 lets read-modify-write sequences interleave",
    )
    slot_wait_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="How long an append waits for a free slot before 429",
    )


class MonitoringConfig(BaseModel):
    """Sentry and Prometheus settings."""

    sentry_dsn: str = ""
    sentry_environment: str = "development"
    metrics_enabled: bool = False
    metrics_port: int = Field(default=9090, ge=1, le=65535)


class ServiceConfig(BaseModel):
    """Root configuration for the text append service."""

    resource: ResourceConfig = Field(default_factory=ResourceConfig)
    threshold: ThresholdConfig = Field(default_factory=ThresholdConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    alerts: AlertConfig = Field(default_factory=AlertConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
