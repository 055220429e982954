"""Admission gate and threshold sources."""

from .admission import AdmissionDecision, evaluate, format_minutes
from .threshold import (
    RedisThresholdSource,
    SsmThresholdSource,
    StaticThresholdSource,
    Threshold,
    ThresholdSource,
    parse_minutes,
    resolve_threshold,
)

__all__ = [
    "AdmissionDecision",
    "RedisThresholdSource",
    "SsmThresholdSource",
    "StaticThresholdSource",
    "Threshold",
    "ThresholdSource",
    "evaluate",
    "format_minutes",
    "parse_minutes",
    "resolve_threshold",
]
