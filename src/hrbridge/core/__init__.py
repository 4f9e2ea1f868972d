"""Core utilities: exceptions, logging, Redis."""

from hrbridge.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    EscapeCharacterError,
    HRBridgeError,
    InvalidProviderError,
)

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "EscapeCharacterError",
    "HRBridgeError",
    "InvalidProviderError",
]
