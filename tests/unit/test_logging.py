"""Unit tests for logging service."""

import json

import structlog

from todo_api.services.logging_service import (
    configure_logging,
    get_logger,
    redact_sensitive,
)


class TestRedactSensitive:
    """Tests for redact_sensitive processor."""

    def test_redacts_authorization(self):
        """Test authorization field is redacted."""
        event_dict = {"authorization": "Bearer token123", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["authorization"] == "REDACTED"

    def test_redacts_password_and_hash(self):
        """Test password and password_hash fields are redacted."""
        event_dict = {"password": "Secure123!", "password_hash": "$2b$12$x", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["password"] == "REDACTED"
        assert result["password_hash"] == "REDACTED"

    def test_redacts_tokens(self):
        """Test raw tokens and stored token hashes are redacted."""
        event_dict = {
            "access_token": "eyJ...",
            "refresh_token": "eyJ...",
            "token_hash": "ab12",
            "event": "test",
        }
        result = redact_sensitive(None, None, event_dict)
        assert result["access_token"] == "REDACTED"
        assert result["refresh_token"] == "REDACTED"
        assert result["token_hash"] == "REDACTED"

    def test_redacts_secret_in_key_name(self):
        """Test fields containing 'secret' are redacted."""
        event_dict = {"jwt_access_token_secret": "abc123", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["jwt_access_token_secret"] == "REDACTED"

    def test_preserves_non_sensitive_fields(self):
        """Test non-sensitive fields are preserved."""
        event_dict = {
            "correlation_id": "abc-123",
            "user_id": "u-1",
            "revoked_sessions": 2,
            "duration_ms": 100,
        }
        result = redact_sensitive(None, None, event_dict)
        assert result == {
            "correlation_id": "abc-123",
            "user_id": "u-1",
            "revoked_sessions": 2,
            "duration_ms": 100,
        }

    def test_redacts_nested_headers(self):
        """Test sensitive keys inside nested dicts and lists are redacted."""
        event_dict = {
            "event": "request_received",
            "headers": {"Authorization": "Bearer abc.def.ghi", "Accept": "application/json"},
            "payloads": [{"refreshToken": "eyJ..."}, {"refresh_token": "eyJ..."}],
        }
        result = redact_sensitive(None, None, event_dict)
        assert result["headers"] == {"Authorization": "REDACTED", "Accept": "application/json"}
        assert result["payloads"][0] == {"refreshToken": "REDACTED"}
        assert result["payloads"][1] == {"refresh_token": "REDACTED"}

    def test_masks_bearer_credentials_in_text(self):
        """Test bearer tokens embedded in free-text values are masked."""
        event_dict = {"event": "upstream_call", "detail": "sent bearer abc.def.ghi to peer"}
        result = redact_sensitive(None, None, event_dict)
        assert result["detail"] == "sent Bearer REDACTED to peer"
        assert result["event"] == "upstream_call"

    def test_case_insensitive_redaction(self):
        """Test redaction works regardless of case."""
        event_dict = {
            "Authorization": "Bearer x",
            "Password": "secret2",
            "SECRET_VALUE": "secret3",
        }
        result = redact_sensitive(None, None, event_dict)
        assert result["Authorization"] == "REDACTED"
        assert result["Password"] == "REDACTED"
        assert result["SECRET_VALUE"] == "REDACTED"


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_get_logger_returns_bound_logger(self):
        """Test get_logger returns a usable structlog logger."""
        configure_logging("INFO")
        logger = get_logger("test_module")
        assert logger is not None
        logger.info("test_event", data="value")

    def test_get_logger_without_name(self):
        """Test get_logger works without a name."""
        configure_logging("INFO")
        assert get_logger() is not None

    def test_output_is_redacted_json(self, capsys):
        """Test emitted lines are JSON with sensitive fields redacted."""
        configure_logging("INFO")
        structlog.contextvars.clear_contextvars()

        get_logger("auth").info("login_attempt", password="Secure123!", user_id="u-1")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        entry = json.loads(line)
        assert entry["event"] == "login_attempt"
        assert entry["password"] == "REDACTED"
        assert entry["user_id"] == "u-1"
        assert entry["logger_name"] == "auth"
        assert entry["level"] == "info"
        assert "Secure123!" not in line

    def test_level_filters_lower_events(self, capsys):
        """Test events below the configured level are dropped."""
        configure_logging("WARNING")

        get_logger("auth").info("should_not_appear")

        assert "should_not_appear" not in capsys.readouterr().out
        configure_logging("INFO")


class TestCorrelationIdBinding:
    """Tests for correlation ID context binding."""

    def test_correlation_id_appears_in_output(self, capsys):
        """Test a bound correlation ID is merged into every entry."""
        configure_logging("INFO")
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id="test-correlation-123")

        get_logger().info("something_happened")

        entry = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert entry["correlation_id"] == "test-correlation-123"
        structlog.contextvars.clear_contextvars()

    def test_correlation_id_clears_correctly(self):
        """Test correlation ID can be cleared from context."""
        structlog.contextvars.bind_contextvars(correlation_id="to-be-cleared")
        structlog.contextvars.clear_contextvars()

        assert "correlation_id" not in structlog.contextvars.get_contextvars()
