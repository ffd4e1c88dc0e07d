"""Tests for the Secret Manager client.

The underlying Google client is replaced with a MagicMock.
"""

import os
from unittest.mock import MagicMock, patch

from src.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


def _client_with_secret(value: bytes | None = b"s3cret") -> SecretManagerClient:
    client = SecretManagerClient(SecretManagerConfig(project_id="my-project"))
    google_client = MagicMock()
    if value is None:
        google_client.access_secret_version.side_effect = Exception("NotFound")
    else:
        google_client.access_secret_version.return_value.payload.data = value
    client._client = google_client
    return client


class TestGetSecret:
    """Tests for SecretManagerClient.get_secret()."""

    def test_returns_decoded_secret(self):
        """Secret payload is decoded to text."""
        client = _client_with_secret(b"token-value")

        assert client.get_secret("nn-token") == "token-value"
        client.client.access_secret_version.assert_called_once_with(
            request={"name": "projects/my-project/secrets/nn-token/versions/latest"},
        )

    def test_missing_secret_returns_none(self):
        """Errors from the API are logged and give None."""
        assert _client_with_secret(None).get_secret("missing") is None

    def test_no_project_returns_none(self):
        """Without a project nothing is fetched."""
        client = SecretManagerClient()
        client._client = MagicMock()

        assert client.get_secret("nn-token") is None
        client._client.access_secret_version.assert_not_called()


class TestResolve:
    """Tests for SecretManagerClient.resolve()."""

    def test_plain_value_unchanged(self):
        """Non-placeholder values pass through."""
        assert _client_with_secret().resolve("plain") == "plain"

    def test_secret_placeholder(self):
        """${secret:name} is replaced by the secret value."""
        assert _client_with_secret(b"tok").resolve("${secret:nn-token}") == "tok"

    def test_unresolvable_secret_keeps_placeholder(self):
        """A missing secret leaves the placeholder in place."""
        assert _client_with_secret(None).resolve("${secret:missing}") == "${secret:missing}"

    def test_env_placeholder(self):
        """${VAR} is replaced from the environment."""
        with patch.dict(os.environ, {"NN_APP_ID": "23151"}):
            assert _client_with_secret().resolve("${NN_APP_ID}") == "23151"

    def test_unset_env_keeps_placeholder(self):
        """An unset variable leaves the placeholder in place."""
        with patch.dict(os.environ, {}):
            os.environ.pop("NOT_SET_ANYWHERE", None)
            assert _client_with_secret().resolve("${NOT_SET_ANYWHERE}") == "${NOT_SET_ANYWHERE}"
