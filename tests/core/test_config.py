"""Tests for configuration models and validation."""

from src.core.config import (
    Config,
    PushProviderConfig,
    validate_config,
    validate_retry_policy,
)
from src.core.retry import RetryPolicy


def _configured_push() -> PushProviderConfig:
    return PushProviderConfig(app_id="23151", app_token="token")


class TestValidateRetryPolicy:
    """Tests for validate_retry_policy()."""

    def test_default_policy_is_valid(self):
        """Defaults produce no errors."""
        assert validate_retry_policy(RetryPolicy(), "retry") == []

    def test_zero_attempts_is_error(self):
        """At least one attempt is required."""
        errors = validate_retry_policy(RetryPolicy(max_attempts=0), "retry")

        assert errors[0].field == "retry.max_attempts"
        assert errors[0].severity == "error"

    def test_shrinking_backoff_is_error(self):
        """Multiplier below 1 is rejected."""
        errors = validate_retry_policy(RetryPolicy(backoff_multiplier=0.5), "retry")

        assert [e.field for e in errors] == ["retry.backoff_multiplier"]

    def test_cap_below_base_is_warning(self):
        """A cap lower than the base backoff only warns."""
        errors = validate_retry_policy(
            RetryPolicy(backoff_seconds=5.0, max_backoff_seconds=1.0),
            "retry",
        )

        assert len(errors) == 1
        assert errors[0].severity == "warning"


class TestValidateConfig:
    """Tests for validate_config()."""

    def test_configured_defaults_are_valid(self):
        """Defaults with credentials have no errors or warnings."""
        result = validate_config(Config(push=_configured_push()))

        assert result.valid is True
        assert result.errors == []

    def test_missing_credentials_warn(self):
        """Missing push credentials are warnings, not errors."""
        result = validate_config(Config())

        assert result.valid is True
        assert {w.field for w in result.warnings} == {"push.app_id", "push.app_token"}

    def test_unresolved_placeholder_warns(self):
        """A credential still holding a placeholder is reported."""
        push = PushProviderConfig(app_id="23151", app_token="${secret:token}")

        result = validate_config(Config(push=push))

        assert [w.field for w in result.warnings] == ["push.app_token"]

    def test_non_positive_radius_is_error(self):
        """Radius must be positive."""
        result = validate_config(Config(alert_radius_km=0, push=_configured_push()))

        assert result.valid is False
        assert result.critical_errors[0].field == "alert_radius_km"

    def test_zero_concurrency_is_error(self):
        """At least one concurrent send is required."""
        result = validate_config(Config(max_concurrent_sends=0, push=_configured_push()))

        assert result.valid is False

    def test_non_positive_ttl_is_error(self):
        """TTL, when set, must be positive."""
        result = validate_config(Config(location_ttl_seconds=0, push=_configured_push()))

        assert result.valid is False
        assert result.critical_errors[0].field == "location_ttl_seconds"

    def test_non_positive_broadcast_timeout_is_error(self):
        """Realtime listeners need a positive send timeout."""
        result = validate_config(Config(broadcast_timeout_seconds=0, push=_configured_push()))

        assert result.valid is False
        assert result.critical_errors[0].field == "broadcast_timeout_seconds"

    def test_retry_errors_are_included(self):
        """Retry policy problems surface in the overall result."""
        result = validate_config(Config(
            retry=RetryPolicy(max_attempts=0),
            push=_configured_push(),
        ))

        assert result.valid is False
        assert result.critical_errors[0].field == "retry.max_attempts"
