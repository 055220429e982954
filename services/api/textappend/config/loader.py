"""Configuration loader with JSON file and environment variable support."""

import json
import os
from pathlib import Path
from typing import Any, Callable

from .models import ServiceConfig

SERVICE_ROOT = Path(__file__).parent.parent.parent

# (env var, section, field, converter)
_ENV_OVERRIDES: list[tuple[str, str, str, Callable[[str], Any]]] = [
    ("TEXTAPPEND_RESOURCE_BACKEND", "resource", "backend", str),
    ("TEXTAPPEND_RESOURCE_KEY", "resource", "key", str),
    ("TEXTAPPEND_RESOURCE_DIRECTORY", "resource", "directory", str),
    ("TEXTAPPEND_RESOURCE_BUCKET", "resource", "bucket", str),
    ("TEXTAPPEND_THRESHOLD_SOURCE", "threshold", "source", str),
    ("TEXTAPPEND_THRESHOLD_STATIC_MINUTES", "threshold", "static_minutes", float),
    ("TEXTAPPEND_THRESHOLD_PARAMETER_NAME", "threshold", "parameter_name", str),
    ("TEXTAPPEND_THRESHOLD_REDIS_URL", "threshold", "redis_url", str),
    ("TEXTAPPEND_THRESHOLD_DEFAULT_MINUTES", "threshold", "default_minutes", float),
    ("TEXTAPPEND_ROUTING_BACKEND", "routing", "backend", str),
    ("TEXTAPPEND_ROUTING_API_ID", "routing", "api_id", str),
    ("TEXTAPPEND_ROUTING_STAGE_NAME", "routing", "stage_name", str),
    ("TEXTAPPEND_ROUTING_FLAG_PATH", "routing", "flag_path", str),
    ("TEXTAPPEND_ALERTS_BACKEND", "alerts", "backend", str),
    ("TEXTAPPEND_ALERTS_TELEGRAM_BOT_TOKEN", "alerts", "telegram_bot_token", str),
    ("TEXTAPPEND_ALERTS_TELEGRAM_CHAT_ID", "alerts", "telegram_chat_id", str),
    ("TEXTAPPEND_ALERTS_SNS_TOPIC_ARN", "alerts", "sns_topic_arn", str),
    ("TEXTAPPEND_CONCURRENCY_MAX_INFLIGHT_APPENDS", "concurrency", "max_inflight_appends", int),
    ("SENTRY_DSN", "monitoring", "sentry_dsn", str),
    ("SENTRY_ENVIRONMENT", "monitoring", "sentry_environment", str),
]

# Region applies to every AWS-backed section at once.
_REGION_SECTIONS = ("resource", "threshold", "routing", "alerts")


def load_config(config_path: str | None = None) -> ServiceConfig:
    """
    Load configuration from JSON file with environment variable overrides.

    Priority: env vars > config file > defaults

    Args:
        config_path: Path to JSON config file. If None, uses TEXTAPPEND_CONFIG_PATH
                     or defaults to 'config.json' in the service root.

    Returns:
        Validated ServiceConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        json.JSONDecodeError: If config file has invalid JSON
        pydantic.ValidationError: If config values are invalid
    """
    if config_path is None:
        config_path = os.environ.get("TEXTAPPEND_CONFIG_PATH", "config.json")

    config_file = Path(config_path)
    if not config_file.is_absolute():
        config_file = SERVICE_ROOT / config_file

    config_data: dict[str, Any] = {}
    if config_file.exists():
        with open(config_file) as f:
            config_data = json.load(f)
    else:
        raise FileNotFoundError(f"Config file not found: {config_file}")

    for env_var, section, field, convert in _ENV_OVERRIDES:
        if (raw := os.environ.get(env_var)) is not None:
            config_data.setdefault(section, {})[field] = convert(raw)

    if region := os.environ.get("AWS_REGION"):
        for section in _REGION_SECTIONS:
            config_data.setdefault(section, {}).setdefault("region", region)

    return ServiceConfig(**config_data)


def resolve_service_path(path: str) -> Path:
    """Resolve a config-relative path against the service root."""
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return SERVICE_ROOT / candidate
