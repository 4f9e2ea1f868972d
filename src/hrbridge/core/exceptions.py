"""Core exceptions for hrbridge."""


class HRBridgeError(Exception):
    """Base exception for all hrbridge errors."""

    pass


class ConfigurationError(HRBridgeError):
    """Error in configuration or settings."""

    pass


class AuthenticationError(HRBridgeError):
    """Raised when acquiring a workforce API access token fails.

    Covers non-success responses from the token endpoint, token responses
    without an access token, and an open authentication circuit.

    Attributes:
        reason: The specific reason authentication failed
    """

    def __init__(self, reason: str = "Authentication failed"):
        super().__init__(reason)
        self.reason = reason

    def __str__(self) -> str:
        return self.reason


class InvalidProviderError(HRBridgeError):
    """Raised when a request names a provider that is not supported.

    Attributes:
        provider: The provider value as received
    """

    def __init__(self, provider: str):
        from hrbridge.employees.types import Provider

        supported = ", ".join(p.value for p in Provider)
        super().__init__(f"Invalid provider: {provider}. Supported providers are: {supported}")
        self.provider = provider


class EscapeCharacterError(HRBridgeError):
    """Raised when inbound payload strings contain escape characters.

    Attributes:
        field: Dotted path of the offending field
    """

    def __init__(self, field: str, value: str):
        super().__init__(f"Escape characters detected in field '{field}': {value[:100]}")
        self.field = field
