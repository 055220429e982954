from __future__ import annotations

import json
import os
import time
from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from tests.conftest import RESOURCE_KEY, FakeClock
from textappend.api.public import get_handler, reset_handler
from textappend.core import AppendReadHandler
from textappend.main import app
from textappend.ops import main as ops_main
from textappend.routing import InMemoryRoutingControlPlane
from textappend.store import InMemoryObjectStore


@pytest.fixture
def client(handler: AppendReadHandler) -> Generator[TestClient, None, None]:
    """Test client wired to the in-memory handler fixture."""
    app.dependency_overrides[get_handler] = lambda: handler
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_read_missing_resource(client: TestClient) -> None:
    response = client.get("/read")
    assert response.status_code == 404
    assert response.headers["content-type"].startswith("text/plain")
    assert "does not exist" in response.text


def test_append_missing_resource(client: TestClient) -> None:
    response = client.put("/append", content=b"hello")
    assert response.status_code == 404
    assert "create it first" in response.text


def test_append_then_read(
    client: TestClient, store: InMemoryObjectStore, clock: FakeClock
) -> None:
    store.write_all(RESOURCE_KEY, b"a\n")
    clock.advance(minutes=5)

    response = client.put("/append", content=b"b")
    assert response.status_code == 200
    assert response.text == "Text appended successfully"

    response = client.get("/read")
    assert response.status_code == 200
    assert response.content == b"a\nb\n"


def test_rapid_second_append_trips_breaker(
    client: TestClient,
    store: InMemoryObjectStore,
    routing: InMemoryRoutingControlPlane,
    clock: FakeClock,
) -> None:
    store.write_all(RESOURCE_KEY, b"")
    clock.advance(minutes=5)

    assert client.put("/append", content=b"first").status_code == 200
    response = client.put("/append", content=b"second")

    assert response.status_code == 503
    assert response.text == (
        "Circuit breaker activated: Writes must be at least 1 minute apart. "
        "API has been disabled."
    )
    assert routing.is_public_access_enabled() is False

    for method, path in [("GET", "/read"), ("PUT", "/append")]:
        response = client.request(method, path, content=b"third")
        assert response.status_code == 404
        assert response.text == "Not Found"
    assert store.read_all(RESOURCE_KEY) == b"first\n"

    routing.enable_public_access()
    assert client.get("/read").content == b"first\n"


def test_payload_is_opaque_bytes(
    client: TestClient, store: InMemoryObjectStore, clock: FakeClock
) -> None:
    store.write_all(RESOURCE_KEY, b"")
    clock.advance(minutes=5)

    payload = b'{"not": "parsed"}\x00\xff'
    assert client.put("/append", content=payload).status_code == 200
    assert store.read_all(RESOURCE_KEY) == payload + b"\n"


def test_unknown_path_is_not_found(client: TestClient) -> None:
    response = client.get("/nope")
    assert response.status_code == 404
    assert response.text == "Not Found"


@pytest.mark.parametrize(
    "method, path",
    [("POST", "/append"), ("GET", "/append"), ("PUT", "/read"), ("DELETE", "/read")],
)
def test_unsupported_method_is_not_found(client: TestClient, method: str, path: str) -> None:
    response = client.request(method, path)
    assert response.status_code == 404
    assert response.text == "Not Found"


def test_unexpected_error_is_plain_500(handler: AppendReadHandler) -> None:
    broken = MagicMock()
    broken.routing = InMemoryRoutingControlPlane()
    broken.read.side_effect = RuntimeError("boom")
    app.dependency_overrides[get_handler] = lambda: broken
    try:
        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/read")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.text == "Error: Internal Server Error"
    assert "boom" not in response.text


def test_configured_handler_from_config_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "resource": {"backend": "file", "key": "shared.txt", "directory": str(tmp_path)},
                "threshold": {"source": "static", "static_minutes": 1.0},
            }
        )
    )
    (tmp_path / "shared.txt").write_bytes(b"seeded\n")
    monkeypatch.setenv("TEXTAPPEND_CONFIG_PATH", str(config_path))
    reset_handler()
    try:
        with TestClient(app) as test_client:
            response = test_client.get("/read")
    finally:
        reset_handler()

    assert response.status_code == 200
    assert response.content == b"seeded\n"


def test_trip_closes_surface_until_operator_enables(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
) -> None:
    """Server and operator CLI share the file-backed switch."""
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "resource": {"backend": "file", "key": "shared.txt", "directory": str(tmp_path)},
                "threshold": {"source": "static", "static_minutes": 1.0},
                "routing": {"backend": "file", "flag_path": str(tmp_path / "access.disabled")},
            }
        )
    )
    resource = tmp_path / "shared.txt"
    resource.write_bytes(b"seeded\n")
    ten_minutes_ago = time.time() - 600
    os.utime(resource, (ten_minutes_ago, ten_minutes_ago))
    monkeypatch.setenv("TEXTAPPEND_CONFIG_PATH", str(config_path))
    reset_handler()
    try:
        with TestClient(app) as test_client:
            assert test_client.put("/append", content=b"first").status_code == 200
            assert test_client.put("/append", content=b"second").status_code == 503

            after_trip = test_client.get("/read")
            assert after_trip.status_code == 404
            assert after_trip.text == "Not Found"
            assert test_client.put("/append", content=b"third").status_code == 404

            assert ops_main(["status"]) == 0
            assert "Public access: DISABLED" in capsys.readouterr().out

            assert ops_main(["enable"]) == 0
            recovered = test_client.get("/read")
    finally:
        reset_handler()

    assert recovered.status_code == 200
    assert recovered.content == b"seeded\nfirst\n"
