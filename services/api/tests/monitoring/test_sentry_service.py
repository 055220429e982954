"""Tests for Sentry service."""

from unittest.mock import patch

import pytest

from textappend.exceptions import AppendSlotBusy, StoreError
from textappend.monitoring.sentry_service import (
    SentryConfig,
    SentryService,
    scrub_sensitive_data,
)


class TestSentryConfig:
    """Test suite for SentryConfig."""

    def test_default_values(self):
        config = SentryConfig(dsn="https://test@sentry.io/123")
        assert config.environment == "development"
        assert config.traces_sample_rate == 0.0
        assert config.enabled is True

    def test_ignore_errors_default(self):
        config = SentryConfig(dsn="test")
        assert "AppendSlotBusy" in config.ignore_errors


class TestSentryService:
    """Test suite for SentryService."""

    @pytest.fixture
    def config(self) -> SentryConfig:
        return SentryConfig(dsn="https://test@sentry.io/123", environment="test")

    @pytest.fixture
    def service(self, config: SentryConfig) -> SentryService:
        return SentryService(config)

    @pytest.fixture
    def initialized_service(self, config: SentryConfig) -> SentryService:
        service = SentryService(config)
        service._initialized = True  # Simulate initialization
        return service

    def test_initialize_disabled(self, config: SentryConfig):
        config.enabled = False
        service = SentryService(config)
        assert service.initialize() is False
        assert service.is_initialized is False

    def test_initialize_no_dsn(self, config: SentryConfig):
        config.dsn = ""
        assert SentryService(config).initialize() is False

    def test_initialize_calls_sdk(self, service: SentryService):
        with patch("textappend.monitoring.sentry_service.sentry_sdk.init") as mock_init:
            assert service.initialize() is True

        assert service.is_initialized is True
        kwargs = mock_init.call_args.kwargs
        assert kwargs["environment"] == "test"
        assert kwargs["before_send"] == service._before_send

    def test_capture_error_not_initialized(self, service: SentryService):
        assert service.capture_error(StoreError("down")) is None

    def test_capture_warning_not_initialized(self, service: SentryService):
        assert service.capture_warning("routing failed") is None

    def test_capture_error_sets_context_and_tags(self, initialized_service: SentryService):
        error = StoreError("down")
        with patch("textappend.monitoring.sentry_service.sentry_sdk") as mock_sdk:
            mock_sdk.capture_exception.return_value = "event-1"
            event_id = initialized_service.capture_error(
                error, context={"phase": "commit"}, tags={"collaborator": "store"}
            )

        assert event_id == "event-1"
        mock_sdk.set_context.assert_called_once_with("request_context", {"phase": "commit"})
        mock_sdk.set_tag.assert_called_once_with("collaborator", "store")
        mock_sdk.capture_exception.assert_called_once_with(error)

    def test_capture_warning(self, initialized_service: SentryService):
        with patch("textappend.monitoring.sentry_service.sentry_sdk") as mock_sdk:
            initialized_service.capture_warning("alerts call failed")
        mock_sdk.capture_message.assert_called_once_with("alerts call failed", level="warning")

    def test_before_send_drops_ignored_errors(self, service: SentryService):
        hint = {"exc_info": (AppendSlotBusy, AppendSlotBusy(1.0), None)}
        assert service._before_send({"message": "busy"}, hint) is None

    def test_before_send_scrubs(self, service: SentryService):
        event = service._before_send({"extra": {"bot_token": "abc", "key": "shared.txt"}}, {})
        assert event == {"extra": {"bot_token": "[REDACTED]", "key": "shared.txt"}}

    def test_flush_not_initialized_is_noop(self, service: SentryService):
        with patch("textappend.monitoring.sentry_service.sentry_sdk") as mock_sdk:
            service.flush()
        mock_sdk.flush.assert_not_called()


def test_scrub_sensitive_data_nested():
    event = {
        "request": {"headers": {"Authorization": "Bearer x", "Accept": "text/plain"}},
        "breadcrumbs": [{"password": "p"}, "plain"],
    }
    scrubbed = scrub_sensitive_data(event)
    assert scrubbed["request"]["headers"] == {"Authorization": "[REDACTED]", "Accept": "text/plain"}
    assert scrubbed["breadcrumbs"] == [{"password": "[REDACTED]"}, "plain"]
