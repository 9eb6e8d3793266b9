"""Unit tests for infrastructure.logging.formatters module.

Tests cover:
- add_app_info() processor
- mask_sensitive_data() processor, including nested provider settings
- truncate_large_values() processor
- SENSITIVE_PATTERNS constant
"""

import pytest
from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    add_app_info,
    mask_sensitive_data,
    truncate_large_values,
)

MASK = "***REDACTED***"


@pytest.mark.unit
class TestAddAppInfo:
    def test_adds_name_and_version(self):
        processor = add_app_info("tracker-notify", "abc1234")

        result = processor(None, "info", {"event": "dispatch_started"})

        assert result == {
            "event": "dispatch_started",
            "app_name": "tracker-notify",
            "app_version": "abc1234",
        }

    def test_unknown_version(self):
        result = add_app_info("tracker-notify")(None, "info", {})

        assert result["app_version"] == "unknown"


@pytest.mark.unit
class TestMaskSensitiveData:
    def test_masks_secret_fields(self):
        processor = mask_sensitive_data()

        result = processor(
            None,
            "info",
            {"event": "provider_created", "api_key": "k", "provider_type": "email"},
        )

        assert result["api_key"] == MASK
        assert result["provider_type"] == "email"

    def test_masks_webhook_url(self):
        result = mask_sensitive_data()(
            None, "info", {"webhook_url": "https://hooks.slack.com/services/T/B/X"}
        )

        assert result["webhook_url"] == MASK

    def test_case_insensitive_partial_match(self):
        result = mask_sensitive_data()(
            None, "info", {"Authorization": "Bearer x", "TRACKER_TOKEN": "t"}
        )

        assert result["Authorization"] == MASK
        assert result["TRACKER_TOKEN"] == MASK

    def test_masks_nested_settings(self):
        event_dict = {
            "settings": {
                "webhook_url": "https://hooks.slack.com/services/T/B/X",
                "method": "POST",
                "secret": None,
            }
        }

        result = mask_sensitive_data()(None, "info", event_dict)

        assert result["settings"] == {
            "webhook_url": MASK,
            "method": "POST",
            "secret": None,
        }

    def test_preserves_none_values(self):
        result = mask_sensitive_data()(None, "info", {"password": None})

        assert result["password"] is None

    def test_custom_mask_and_patterns(self):
        processor = mask_sensitive_data(
            mask_value="[hidden]", additional_patterns=frozenset({"email_address"})
        )

        result = processor(None, "info", {"email_address": "team@example.com"})

        assert result["email_address"] == "[hidden]"

    def test_does_not_mutate_input(self):
        event_dict = {"api_key": "k"}

        mask_sensitive_data()(None, "info", event_dict)

        assert event_dict == {"api_key": "k"}


@pytest.mark.unit
class TestTruncateLargeValues:
    def test_truncates_long_strings(self):
        processor = truncate_large_values(max_length=10)

        result = processor(None, "info", {"rendered_text": "x" * 25})

        assert result["rendered_text"] == "x" * 10 + "...[truncated, 25 chars total]"

    def test_preserves_short_strings_and_non_strings(self):
        processor = truncate_large_values(max_length=10)

        result = processor(None, "info", {"short": "abc", "count": 12345678901})

        assert result == {"short": "abc", "count": 12345678901}


@pytest.mark.unit
class TestSensitivePatterns:
    def test_is_frozenset(self):
        assert isinstance(SENSITIVE_PATTERNS, frozenset)

    def test_covers_provider_secrets(self):
        for pattern in ("api_key", "secret", "token", "webhook_url", "authorization"):
            assert pattern in SENSITIVE_PATTERNS

    def test_only_patterns_for_known_settings(self):
        assert "pushkey" not in SENSITIVE_PATTERNS
        assert "device_key" not in SENSITIVE_PATTERNS
