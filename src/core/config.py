"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field

from src.core.formatter import DEFAULT_SCREEN, DEFAULT_TITLE
from src.core.geo import SOS_RADIUS_KM
from src.core.retry import RetryPolicy


NATIVE_NOTIFY_API_URL = "https://app.nativenotify.com/api/notification"


@dataclass
class PushProviderConfig:
    """Native Notify push provider settings.

    Attributes:
        api_url: Notification endpoint
        app_id: Native Notify app ID
        app_token: Native Notify app token
        title: Notification title
        screen: App screen opened when the notification is tapped
        timeout_seconds: Per-attempt HTTP timeout
    """
    api_url: str = NATIVE_NOTIFY_API_URL
    app_id: str = ""
    app_token: str = ""
    title: str = DEFAULT_TITLE
    screen: str = DEFAULT_SCREEN
    timeout_seconds: float = 10.0


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        alert_radius_km: Users within this distance of an SOS are alerted
        notify_sender: Whether the SOS sender can be one of its own recipients
        max_concurrent_sends: Upper bound on in-flight deliveries per SOS
        location_ttl_seconds: Drop locations not refreshed for this long (None keeps them)
        broadcast_timeout_seconds: Time one realtime listener gets to take an event
        retry: Delivery retry policy
        push: Push provider settings
        cors_origins: Origins allowed by the HTTP API
    """
    alert_radius_km: float = SOS_RADIUS_KM
    notify_sender: bool = False
    max_concurrent_sends: int = 50
    location_ttl_seconds: float | None = None
    broadcast_timeout_seconds: float = 5.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    push: PushProviderConfig = field(default_factory=PushProviderConfig)
    cors_origins: list[str] = field(default_factory=lambda: ["*"])


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_retry_policy(policy: RetryPolicy, field_name: str) -> list[ValidationError]:
    """Validate a retry policy.

    Pure function.
    """
    errors = []

    if policy.max_attempts < 1:
        errors.append(ValidationError(
            field=f"{field_name}.max_attempts",
            message=f"At least one attempt is required, got {policy.max_attempts}",
        ))

    if policy.backoff_seconds < 0:
        errors.append(ValidationError(
            field=f"{field_name}.backoff_seconds",
            message=f"Backoff must not be negative, got {policy.backoff_seconds}",
        ))

    if policy.backoff_multiplier < 1:
        errors.append(ValidationError(
            field=f"{field_name}.backoff_multiplier",
            message=f"Backoff multiplier must be >= 1, got {policy.backoff_multiplier}",
        ))

    if policy.max_backoff_seconds < policy.backoff_seconds:
        errors.append(ValidationError(
            field=f"{field_name}.max_backoff_seconds",
            message=(
                f"max_backoff_seconds ({policy.max_backoff_seconds}) < "
                f"backoff_seconds ({policy.backoff_seconds})"
            ),
            severity="warning",
        ))

    return errors


def _is_unresolved(value: str) -> bool:
    return not value or value.startswith("${")


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    if config.alert_radius_km <= 0:
        errors.append(ValidationError(
            field="alert_radius_km",
            message=f"Alert radius must be positive, got {config.alert_radius_km}",
        ))

    if config.max_concurrent_sends < 1:
        errors.append(ValidationError(
            field="max_concurrent_sends",
            message=f"Concurrency must be at least 1, got {config.max_concurrent_sends}",
        ))

    if config.location_ttl_seconds is not None and config.location_ttl_seconds <= 0:
        errors.append(ValidationError(
            field="location_ttl_seconds",
            message=f"Location TTL must be positive, got {config.location_ttl_seconds}",
        ))

    if config.broadcast_timeout_seconds <= 0:
        errors.append(ValidationError(
            field="broadcast_timeout_seconds",
            message=f"Broadcast timeout must be positive, got {config.broadcast_timeout_seconds}",
        ))

    errors.extend(validate_retry_policy(config.retry, "retry"))

    if config.push.timeout_seconds <= 0:
        errors.append(ValidationError(
            field="push.timeout_seconds",
            message=f"Timeout must be positive, got {config.push.timeout_seconds}",
        ))

    # Missing credentials only make every delivery fail; the API still serves
    if _is_unresolved(config.push.app_id):
        errors.append(ValidationError(
            field="push.app_id",
            message="Push app ID not configured (or still contains placeholder)",
            severity="warning",
        ))

    if _is_unresolved(config.push.app_token):
        errors.append(ValidationError(
            field="push.app_token",
            message="Push app token not configured (or still contains placeholder)",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
