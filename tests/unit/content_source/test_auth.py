"""Unit tests for content_source.auth module."""

from unittest.mock import patch

import pytest

from content_files.content_source.auth import Authenticator, Credentials
from content_files.content_source.errors import InvalidCredentialsError


@pytest.fixture
def authenticator(monkeypatch):
    """Create Authenticator without reading a real .env file."""
    monkeypatch.delenv("CONTENT_SOURCE_URL", raising=False)
    monkeypatch.delenv("CONTENT_SOURCE_TOKEN", raising=False)
    with patch("content_files.content_source.auth.load_dotenv"):
        yield Authenticator()


class TestAuthenticator:
    """Test cases for Authenticator."""

    def test_loads_dotenv(self):
        """Creating an Authenticator loads the .env file."""
        with patch("content_files.content_source.auth.load_dotenv") as mock_load:
            Authenticator()

        mock_load.assert_called_once()

    def test_source_url_from_environment(self, authenticator, monkeypatch):
        monkeypatch.setenv("CONTENT_SOURCE_URL", "  https://cms.example.com/export  ")

        assert authenticator.get_source_url() == "https://cms.example.com/export"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_source_url_unset(self, authenticator, monkeypatch, value):
        if value is not None:
            monkeypatch.setenv("CONTENT_SOURCE_URL", value)

        assert authenticator.get_source_url() is None

    def test_credentials_with_token(self, authenticator, monkeypatch):
        """The token is read from CONTENT_SOURCE_TOKEN."""
        monkeypatch.setenv("CONTENT_SOURCE_TOKEN", "secret")

        creds = authenticator.get_credentials("https://cms.example.com/export")

        assert creds == Credentials(url="https://cms.example.com/export", token="secret")

    def test_credentials_without_token(self, authenticator, monkeypatch):
        """A missing token is allowed for public sources."""
        monkeypatch.setenv("CONTENT_SOURCE_URL", "https://cms.example.com/export")

        assert authenticator.get_credentials().token is None

    def test_credentials_without_url(self, authenticator):
        """No URL at all raises InvalidCredentialsError."""
        with pytest.raises(InvalidCredentialsError) as exc_info:
            authenticator.get_credentials()

        assert "CONTENT_SOURCE_URL" in str(exc_info.value)
