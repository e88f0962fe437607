"""Unit tests for logging service."""

import structlog

from videohub.services.logging_service import configure_logging, get_logger, redact_sensitive


class TestRedactSensitive:
    """Tests for redact_sensitive processor."""

    def test_redacts_password(self):
        event_dict = {"password": "mypassword", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["password"] == "REDACTED"

    def test_redacts_tokens(self):
        event_dict = {"refresh_token": "eyJ...", "accessToken": "eyJ...", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["refresh_token"] == "REDACTED"
        assert result["accessToken"] == "REDACTED"

    def test_redacts_secret_in_key_name(self):
        event_dict = {"access_token_secret": "abc123", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["access_token_secret"] == "REDACTED"

    def test_redacts_authorization_and_cookie(self):
        event_dict = {"Authorization": "Bearer x", "cookie": "refreshToken=x", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["Authorization"] == "REDACTED"
        assert result["cookie"] == "REDACTED"

    def test_preserves_non_sensitive_fields(self):
        event_dict = {"event": "user_logged_in", "user_id": "abc-123", "username": "alice"}
        result = redact_sensitive(None, None, event_dict)
        assert result == {"event": "user_logged_in", "user_id": "abc-123", "username": "alice"}

    def test_event_name_is_never_redacted(self):
        event_dict = {"event": "refresh_token_reused"}
        result = redact_sensitive(None, None, event_dict)
        assert result["event"] == "refresh_token_reused"


class TestConfigureLogging:
    def test_configure_and_get_logger(self):
        configure_logging("DEBUG")
        logger = get_logger("test")
        assert logger is not None
        structlog.reset_defaults()
