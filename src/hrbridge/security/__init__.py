"""Input sanitization and log redaction."""

from hrbridge.security.sanitization import (
    REDACTED,
    SensitiveDataSanitizer,
    check_escape_characters,
    contains_escape_characters,
    find_escape_characters,
    validate_email,
)

__all__ = [
    "REDACTED",
    "SensitiveDataSanitizer",
    "check_escape_characters",
    "contains_escape_characters",
    "find_escape_characters",
    "validate_email",
]
