"""
Unit tests for structured logging.

Tests cover:
- Masking of password and token values
- Renderer selection for JSON and console output
- Service and environment context bound at configuration time
"""

import pytest
import structlog

from shared.logging import bind_context, configure_logging, mask_secrets, unbind_context
from shared.logging.structured_logger import MASKED, build_processors


@pytest.fixture
def clean_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


class TestMaskSecrets:
    """Test the secret-masking processor."""

    def test_masks_credentials(self):
        event = {"event": "login_attempt", "username": "alice", "password": "s3cret", "access_token": "abc"}

        result = mask_secrets(None, "info", event)

        assert result["password"] == MASKED
        assert result["access_token"] == MASKED
        assert result["username"] == "alice"

    def test_leaves_other_events_alone(self):
        event = {"event": "book_saved", "isbn": "12345"}

        assert mask_secrets(None, "info", dict(event)) == event


class TestBuildProcessors:
    """Test processor chain construction."""

    def test_json_renderer_last(self):
        assert isinstance(build_processors(True)[-1], structlog.processors.JSONRenderer)

    def test_console_renderer_last(self):
        assert isinstance(build_processors(False)[-1], structlog.dev.ConsoleRenderer)

    def test_masking_runs_before_rendering(self):
        processors = build_processors(True)

        assert processors.index(mask_secrets) < len(processors) - 1


class TestContext:
    """Test context binding."""

    def test_configure_binds_service(self, clean_context):
        configure_logging(log_level="WARNING", json_logs=False, service_name="catalog", environment="development")

        context = structlog.contextvars.get_contextvars()
        assert context["service"] == "catalog"
        assert context["environment"] == "development"

    def test_configure_skips_missing_values(self, clean_context):
        configure_logging(log_level="WARNING", json_logs=False)

        assert "service" not in structlog.contextvars.get_contextvars()

    def test_bind_and_unbind(self, clean_context):
        bind_context(correlation_id="abc")
        assert structlog.contextvars.get_contextvars()["correlation_id"] == "abc"

        unbind_context("correlation_id")
        assert "correlation_id" not in structlog.contextvars.get_contextvars()
