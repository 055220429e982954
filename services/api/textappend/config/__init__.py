"""Configuration management for the text append service."""

from .loader import load_config, resolve_service_path
from .models import (
    AlertConfig,
    ConcurrencyConfig,
    MonitoringConfig,
    ResourceConfig,
    RoutingConfig,
    ServiceConfig,
    ThresholdConfig,
    TimeoutConfig,
)

__all__ = [
    "AlertConfig",
    "ConcurrencyConfig",
    "MonitoringConfig",
    "ResourceConfig",
    "RoutingConfig",
    "ServiceConfig",
    "ThresholdConfig",
    "TimeoutConfig",
    "load_config",
    "resolve_service_path",
]
