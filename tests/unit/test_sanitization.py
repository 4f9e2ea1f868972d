"""Unit tests for input sanitization."""

import pytest

from hrbridge.core.exceptions import EscapeCharacterError
from hrbridge.security.sanitization import (
    REDACTED,
    SensitiveDataSanitizer,
    check_escape_characters,
    contains_escape_characters,
    find_escape_characters,
    validate_email,
)


class TestValidateEmail:
    """Tests for validate_email."""

    @pytest.mark.parametrize(
        "email", ["john@example.com", "a.b+tag@sub.example.co.uk", "x_y%z@host.io"]
    )
    def test_valid(self, email):
        assert validate_email(email)

    @pytest.mark.parametrize(
        "email", ["", "john", "john@", "@example.com", "john@example", "a b@example.com"]
    )
    def test_invalid(self, email):
        assert not validate_email(email)

    def test_too_long(self):
        assert not validate_email("a" * 250 + "@example.com")


class TestEscapeCharacters:
    """Tests for escape character detection."""

    @pytest.mark.parametrize(
        "value",
        [
            "John\\nDoe",
            "C:\\temp",
            "bell\x07",
            "esc\x1b[31m",
            "null\x00byte",
        ],
    )
    def test_detected(self, value):
        assert contains_escape_characters(value)

    @pytest.mark.parametrize("value", ["John Doe", "R&D", "O'Brien", "+1-555-0100", "José"])
    def test_clean_values(self, value):
        assert not contains_escape_characters(value)

    def test_find_reports_nested_path(self):
        data = {"personal_info": {"given_name": "Ada", "family_name": "Love\\tlace"}}

        assert find_escape_characters(data) == ("personal_info.family_name", "Love\\tlace")

    def test_find_walks_lists(self):
        assert find_escape_characters({"tags": ["ok", "bad\\x41"]}) == ("tags.1", "bad\\x41")

    def test_non_strings_ignored(self):
        assert find_escape_characters({"count": 3, "active": True, "note": None}) is None

    def test_check_raises_with_field(self):
        with pytest.raises(EscapeCharacterError) as exc_info:
            check_escape_characters({"first_name": "John\\r"})

        assert exc_info.value.field == "first_name"

    def test_check_accepts_clean_payload(self, provider1_payload):
        check_escape_characters(provider1_payload)


class TestSensitiveDataSanitizer:
    """Tests for SensitiveDataSanitizer."""

    def test_redacts_default_fields(self):
        sanitizer = SensitiveDataSanitizer()

        result = sanitizer.sanitize(
            {"client_secret": "abc", "Access_Token": "xyz", "scope": "employees:read"}
        )

        assert result == {
            "client_secret": REDACTED,
            "Access_Token": REDACTED,
            "scope": "employees:read",
        }

    def test_recurses(self):
        sanitizer = SensitiveDataSanitizer()

        result = sanitizer.sanitize({"outer": [{"authorization": "Bearer abc"}]})

        assert result == {"outer": [{"authorization": REDACTED}]}

    def test_extra_fields(self):
        sanitizer = SensitiveDataSanitizer(extra_fields=["Email"])

        assert sanitizer.is_sensitive("email")
        assert "email" in sanitizer.sensitive_fields

    def test_does_not_mutate_input(self):
        data = {"token": "abc"}

        SensitiveDataSanitizer().sanitize(data)

        assert data == {"token": "abc"}
