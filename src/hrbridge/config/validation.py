"""Configuration validation for startup checks.

Validates that required configuration is present and valid before the
application starts accepting requests.

Usage:
    from hrbridge.config.validation import validate_configuration

    # During startup
    errors = validate_configuration()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        sys.exit(1)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from hrbridge.config.settings import Settings, TokenCacheBackend, get_settings
from hrbridge.core.exceptions import ConfigurationError

logger = structlog.get_logger()


class ValidationSeverity(str, Enum):
    """Severity of configuration validation issues."""

    ERROR = "error"  # Must be fixed, app cannot start
    WARNING = "warning"  # Should be fixed, app can start but may have issues


@dataclass
class ValidationResult:
    """Result of a configuration validation check."""

    field: str
    severity: ValidationSeverity
    message: str
    suggestion: str | None = None

    def __str__(self) -> str:
        prefix = "ERROR" if self.severity == ValidationSeverity.ERROR else "WARNING"
        result = f"[{prefix}] {self.field}: {self.message}"
        if self.suggestion:
            result += f"\n  Suggestion: {self.suggestion}"
        return result


def validate_configuration(settings: Settings | None = None) -> list[ValidationResult]:
    """Validate application configuration.

    Runs all configuration checks and returns a list of validation results.

    Args:
        settings: Settings to validate (default: global settings)

    Returns:
        List of validation results (empty if all checks pass)
    """
    if settings is None:
        settings = get_settings()

    results: list[ValidationResult] = []

    results.extend(_validate_database(settings))
    results.extend(_validate_remote_api(settings))
    results.extend(_validate_token_cache(settings))
    results.extend(_validate_environment(settings))

    return results


def validate_or_raise(settings: Settings | None = None) -> None:
    """Validate configuration and raise if errors found.

    Args:
        settings: Settings to validate

    Raises:
        ConfigurationError: If any validation errors are found
    """
    results = validate_configuration(settings)
    errors = [r for r in results if r.severity == ValidationSeverity.ERROR]

    if errors:
        error_messages = "\n".join(str(e) for e in errors)
        raise ConfigurationError(f"Configuration validation failed:\n{error_messages}")

    for warning in (r for r in results if r.severity == ValidationSeverity.WARNING):
        logger.warning("configuration_warning", field=warning.field, detail=warning.message)


# =============================================================================
# Validators
# =============================================================================


def _validate_database(settings: Settings) -> list[ValidationResult]:
    """Validate database configuration."""
    results: list[ValidationResult] = []

    if not settings.DATABASE_URL:
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.ERROR,
                message="Database URL is not configured",
                suggestion="Set DATABASE_URL environment variable",
            )
        )
    elif not settings.DATABASE_URL.startswith(("postgresql", "sqlite")):
        results.append(
            ValidationResult(
                field="DATABASE_URL",
                severity=ValidationSeverity.WARNING,
                message=f"Unexpected database type in URL: {settings.DATABASE_URL[:20]}...",
                suggestion="hrbridge is tested against PostgreSQL and SQLite",
            )
        )

    return results


def _validate_remote_api(settings: Settings) -> list[ValidationResult]:
    """Validate workforce API and OAuth2 client configuration."""
    results: list[ValidationResult] = []
    production = settings.ENVIRONMENT == "production"
    missing_severity = ValidationSeverity.ERROR if production else ValidationSeverity.WARNING

    if not settings.REMOTE_CLIENT_ID:
        results.append(
            ValidationResult(
                field="REMOTE_CLIENT_ID",
                severity=missing_severity,
                message="OAuth2 client id is not configured",
                suggestion="Set REMOTE_CLIENT_ID to the workforce API client id",
            )
        )

    if settings.REMOTE_CLIENT_SECRET is None:
        results.append(
            ValidationResult(
                field="REMOTE_CLIENT_SECRET",
                severity=missing_severity,
                message="OAuth2 client secret is not configured",
                suggestion="Set REMOTE_CLIENT_SECRET to the workforce API client secret",
            )
        )

    if production:
        for field in ("REMOTE_API_BASE_URL", "REMOTE_TOKEN_URL"):
            if not getattr(settings, field).startswith("https://"):
                results.append(
                    ValidationResult(
                        field=field,
                        severity=ValidationSeverity.ERROR,
                        message="Workforce API endpoints must use HTTPS in production",
                    )
                )

    if not (1 <= settings.REMOTE_HTTP_TIMEOUT_SECONDS <= 60):
        results.append(
            ValidationResult(
                field="REMOTE_HTTP_TIMEOUT_SECONDS",
                severity=ValidationSeverity.ERROR,
                message=f"Timeout {settings.REMOTE_HTTP_TIMEOUT_SECONDS}s is outside 1-60s",
                suggestion="Use a conservative bound such as 15 seconds",
            )
        )

    return results


def _validate_token_cache(settings: Settings) -> list[ValidationResult]:
    """Validate token cache configuration."""
    results: list[ValidationResult] = []

    if settings.TOKEN_CACHE_TTL_SECONDS <= 0:
        results.append(
            ValidationResult(
                field="TOKEN_CACHE_TTL_SECONDS",
                severity=ValidationSeverity.ERROR,
                message="Token cache TTL must be positive",
            )
        )

    if settings.TOKEN_CACHE_BACKEND == TokenCacheBackend.REDIS:
        if not settings.REDIS_URL:
            results.append(
                ValidationResult(
                    field="REDIS_URL",
                    severity=ValidationSeverity.ERROR,
                    message="Redis token cache selected but REDIS_URL is empty",
                )
            )
        elif not settings.REDIS_URL.startswith(("redis://", "rediss://")):
            results.append(
                ValidationResult(
                    field="REDIS_URL",
                    severity=ValidationSeverity.WARNING,
                    message="Redis URL has unexpected format",
                    suggestion="Expected format: redis://host:port/db",
                )
            )

    return results


def _validate_environment(settings: Settings) -> list[ValidationResult]:
    """Validate environment-specific settings."""
    results: list[ValidationResult] = []

    if settings.ENVIRONMENT == "production" and settings.DEBUG:
        results.append(
            ValidationResult(
                field="DEBUG",
                severity=ValidationSeverity.ERROR,
                message="Debug mode must be disabled in production",
                suggestion="Set DEBUG=false for production",
            )
        )

    if settings.ENVIRONMENT == "production" and settings.log_level == "DEBUG":
        results.append(
            ValidationResult(
                field="log_level",
                severity=ValidationSeverity.WARNING,
                message="DEBUG log level in production may expose employee data",
                suggestion="Use INFO or WARNING for production",
            )
        )

    return results


def get_configuration_summary(settings: Settings | None = None) -> dict[str, Any]:
    """Get a summary of current configuration (safe for logging).

    Excludes secrets and connection strings.
    """
    if settings is None:
        settings = get_settings()

    return {
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "log_level": settings.log_level,
        "remote_api_base_url": settings.REMOTE_API_BASE_URL,
        "remote_timeout_seconds": settings.REMOTE_HTTP_TIMEOUT_SECONDS,
        "token_cache_backend": settings.TOKEN_CACHE_BACKEND.value,
        "token_cache_ttl_seconds": settings.TOKEN_CACHE_TTL_SECONDS,
        "auth_circuit_enabled": settings.AUTH_CIRCUIT_ENABLED,
        "provider_auth_active": settings.provider_auth_active,
        "client_secret_configured": settings.REMOTE_CLIENT_SECRET is not None,
    }
