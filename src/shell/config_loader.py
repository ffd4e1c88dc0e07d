"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, PushProviderConfig) are defined in src/core/config.py
to avoid information leakage between layers.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml

from src.core.config import Config, PushProviderConfig, NATIVE_NOTIFY_API_URL
from src.core.formatter import DEFAULT_SCREEN, DEFAULT_TITLE
from src.core.geo import SOS_RADIUS_KM
from src.core.retry import (
    DEFAULT_BACKOFF_SECONDS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_BACKOFF_SECONDS,
    RetryPolicy,
)
from src.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = "config/config.yaml"


def _get_secret_manager_client() -> Optional[SecretManagerClient]:
    """Get a Secret Manager client.

    Returns None if GCP_PROJECT is not set (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT")
    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: Optional[SecretManagerClient] = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Delegates to SecretManagerClient.resolve() when a client is available.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        var_spec = value[2:-1]
        if not var_spec.startswith("secret:"):
            env_value = os.environ.get(var_spec)
            if env_value:
                return env_value
            logger.warning("Environment variable %s not set", var_spec)

    return value


def _parse_retry(data: dict[str, Any]) -> RetryPolicy:
    """Parse the retry policy from config data."""
    return RetryPolicy(
        max_attempts=int(data.get("max_attempts", DEFAULT_MAX_ATTEMPTS)),
        backoff_seconds=float(data.get("backoff_seconds", DEFAULT_BACKOFF_SECONDS)),
        backoff_multiplier=float(data.get("backoff_multiplier", 1.0)),
        max_backoff_seconds=float(data.get("max_backoff_seconds", DEFAULT_MAX_BACKOFF_SECONDS)),
    )


def _parse_push(
    data: dict[str, Any],
    secret_client: Optional[SecretManagerClient] = None,
) -> PushProviderConfig:
    """Parse push provider settings, resolving credential placeholders."""
    return PushProviderConfig(
        api_url=data.get("api_url", NATIVE_NOTIFY_API_URL),
        app_id=str(_resolve_value(data.get("app_id", ""), secret_client)),
        app_token=str(_resolve_value(data.get("app_token", ""), secret_client)),
        title=data.get("title", DEFAULT_TITLE),
        screen=data.get("screen", DEFAULT_SCREEN),
        timeout_seconds=float(data.get("timeout_seconds", 10.0)),
    )


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only placeholder expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object

    Raises:
        ValueError: If the top level is not a mapping
    """
    if not isinstance(data, dict):
        raise ValueError(
            f"Configuration must be a mapping of keys to values, got {type(data).__name__}"
        )

    secret_client = _get_secret_manager_client()

    cors_origins = data.get("cors_origins", ["*"])
    if isinstance(cors_origins, str):
        cors_origins = [o.strip() for o in cors_origins.split(",") if o.strip()]

    return Config(
        alert_radius_km=float(data.get("alert_radius_km", SOS_RADIUS_KM)),
        notify_sender=bool(data.get("notify_sender", False)),
        max_concurrent_sends=int(data.get("max_concurrent_sends", 50)),
        location_ttl_seconds=_optional_float(data.get("location_ttl_seconds")),
        broadcast_timeout_seconds=float(data.get("broadcast_timeout_seconds", 5.0)),
        retry=_parse_retry(data.get("retry") or {}),
        push=_parse_push(data.get("push") or {}, secret_client),
        cors_origins=list(cors_origins),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using environment", path)
        return load_config_from_env()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using defaults")
        return Config()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: radius %.1f km, %d attempts per recipient",
        config.alert_radius_km,
        config.retry.max_attempts,
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        NATIVE_NOTIFY_APP_ID: Native Notify app ID
        NATIVE_NOTIFY_APP_TOKEN: Native Notify app token
        NATIVE_NOTIFY_TOKEN_SECRET: Secret name holding the token (alternative)
        NATIVE_NOTIFY_API_URL: Notification endpoint override
        ALERT_RADIUS_KM: Alert radius
        MAX_SEND_ATTEMPTS: Attempts per recipient
        RETRY_BACKOFF_SECONDS: Wait between attempts
        LOCATION_TTL_SECONDS: Drop locations older than this

    Returns:
        Config object from environment
    """
    secret_client = _get_secret_manager_client()
    app_token = None

    secret_name = os.environ.get("NATIVE_NOTIFY_TOKEN_SECRET")
    if secret_client and secret_name:
        app_token = secret_client.get_secret(secret_name)
        if app_token:
            logger.info("Using push app token from Secret Manager")

    if not app_token:
        app_token = os.environ.get("NATIVE_NOTIFY_APP_TOKEN", "")

    push = PushProviderConfig(
        api_url=os.environ.get("NATIVE_NOTIFY_API_URL", NATIVE_NOTIFY_API_URL),
        app_id=os.environ.get("NATIVE_NOTIFY_APP_ID", ""),
        app_token=app_token,
    )

    retry = RetryPolicy(
        max_attempts=int(os.environ.get("MAX_SEND_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS))),
        backoff_seconds=float(os.environ.get("RETRY_BACKOFF_SECONDS", str(DEFAULT_BACKOFF_SECONDS))),
    )

    return Config(
        alert_radius_km=float(os.environ.get("ALERT_RADIUS_KM", str(SOS_RADIUS_KM))),
        location_ttl_seconds=_optional_float(os.environ.get("LOCATION_TTL_SECONDS")),
        retry=retry,
        push=push,
    )
