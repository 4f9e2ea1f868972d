"""Input sanitization utilities.

Provides:
- Escape character detection for inbound provider payloads
- Sensitive field redaction for anything written to logs
"""

import re
from collections.abc import Iterable
from typing import Any

from hrbridge.core.exceptions import EscapeCharacterError

# Regex patterns compiled once for performance
_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

_CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_LITERAL_ESCAPE_PATTERNS = [
    re.compile(r"\\n"),
    re.compile(r"\\r"),
    re.compile(r"\\t"),
    re.compile(r"\\0"),
    re.compile(r"\\x[0-9a-fA-F]{2}"),
    re.compile(r"\\u[0-9a-fA-F]{4}"),
]

REDACTED = "[REDACTED]"

DEFAULT_SENSITIVE_FIELDS = frozenset(
    {
        "password",
        "password_confirmation",
        "token",
        "access_token",
        "api_key",
        "secret",
        "client_secret",
        "authorization",
    }
)


def validate_email(email: str) -> bool:
    """Validate email address format.

    Args:
        email: Email address to validate

    Returns:
        True if the address is well formed
    """
    if not email or len(email) > 254:
        return False
    return bool(_EMAIL_PATTERN.match(email))


def contains_escape_characters(value: str) -> bool:
    """Check whether a string carries escape characters.

    Flags backslashes, control characters other than tab/newline/carriage
    return, and literal escape sequences such as ``\\n`` or ``\\x1b``.
    """
    if "\\" in value:
        return True

    if _CONTROL_CHARS_PATTERN.search(value):
        return True

    return any(pattern.search(value) for pattern in _LITERAL_ESCAPE_PATTERNS)


def find_escape_characters(data: Any, path: str = "") -> tuple[str, str] | None:
    """Walk a decoded JSON value looking for the first offending string.

    Args:
        data: Decoded JSON (dict, list, scalar)
        path: Dotted path of ``data`` within the root document

    Returns:
        ``(field_path, value)`` for the first offending string, or None
    """
    if isinstance(data, dict):
        for key, value in data.items():
            found = find_escape_characters(value, f"{path}.{key}" if path else str(key))
            if found is not None:
                return found
    elif isinstance(data, list):
        for index, value in enumerate(data):
            found = find_escape_characters(value, f"{path}.{index}" if path else str(index))
            if found is not None:
                return found
    elif isinstance(data, str) and contains_escape_characters(data):
        return path, data

    return None


def check_escape_characters(data: Any) -> None:
    """Raise if any string within ``data`` carries escape characters.

    Raises:
        EscapeCharacterError: Naming the first offending field
    """
    found = find_escape_characters(data)
    if found is not None:
        field, value = found
        raise EscapeCharacterError(field, value)


class SensitiveDataSanitizer:
    """Redacts sensitive keys from structures before they are logged.

    Matching is case-insensitive and recurses into nested dicts and lists.

    Example:
        sanitizer = SensitiveDataSanitizer()
        sanitizer.sanitize({"client_secret": "abc", "scope": "read"})
        # {"client_secret": "[REDACTED]", "scope": "read"}
    """

    def __init__(self, extra_fields: Iterable[str] = ()):
        self._sensitive_fields = set(DEFAULT_SENSITIVE_FIELDS)
        for field in extra_fields:
            self.add_sensitive_field(field)

    @property
    def sensitive_fields(self) -> frozenset[str]:
        """Field names currently redacted."""
        return frozenset(self._sensitive_fields)

    def add_sensitive_field(self, field: str) -> None:
        """Register an additional field name to redact."""
        self._sensitive_fields.add(field.lower())

    def is_sensitive(self, key: str) -> bool:
        """Check whether a key should be redacted."""
        return key.lower() in self._sensitive_fields

    def sanitize(self, data: Any) -> Any:
        """Return a copy of ``data`` with sensitive values redacted."""
        if isinstance(data, dict):
            return {
                key: REDACTED if isinstance(key, str) and self.is_sensitive(key) else self.sanitize(value)
                for key, value in data.items()
            }
        if isinstance(data, list):
            return [self.sanitize(item) for item in data]
        return data
