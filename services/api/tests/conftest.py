import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:  # pragma: no cover
    sys.path.append(str(PROJECT_ROOT))

from textappend.core import AppendReadHandler  # noqa: E402
from textappend.gate import StaticThresholdSource  # noqa: E402
from textappend.routing import InMemoryRoutingControlPlane  # noqa: E402
from textappend.store import InMemoryObjectStore  # noqa: E402

RESOURCE_KEY = "shared.txt"


class FakeClock:
    """Manually advanced UTC clock shared by the store and the handler."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 27, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryObjectStore:
    return InMemoryObjectStore(clock=clock)


@pytest.fixture
def routing() -> InMemoryRoutingControlPlane:
    return InMemoryRoutingControlPlane()


@pytest.fixture
def handler(
    store: InMemoryObjectStore,
    routing: InMemoryRoutingControlPlane,
    clock: FakeClock,
) -> AppendReadHandler:
    """Handler with a 1 minute static threshold over in-memory collaborators."""
    return AppendReadHandler(
        store=store,
        resource_key=RESOURCE_KEY,
        threshold_source=StaticThresholdSource(1.0),
        routing=routing,
        clock=clock,
    )


@pytest.fixture(autouse=True)
def clean_config_env() -> Generator[None, None, None]:
    """Ensure TEXTAPPEND_* env vars do not interfere with tests unless explicitly set."""
    original_env = {}
    keys_to_clear = [
        key for key in os.environ
        if key.startswith("TEXTAPPEND_") or key in ("AWS_REGION", "SENTRY_DSN")
    ]

    for key in keys_to_clear:
        original_env[key] = os.environ.pop(key)

    yield

    for key, value in original_env.items():
        os.environ[key] = value
