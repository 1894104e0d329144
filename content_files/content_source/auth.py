"""Authentication module for loading content source settings.

This module loads the content source endpoint and token from environment
variables using python-dotenv. Unlike the snapshot path, which may be a local
file, an HTTP source needs both a URL and a token.
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

from .errors import InvalidCredentialsError


class Credentials(NamedTuple):
    """Content source endpoint and token."""
    url: str
    token: Optional[str]


class Authenticator:
    """Loads content source settings from environment variables.

    Values are loaded from a .env file using python-dotenv and are never
    logged.

    Environment variables:
        CONTENT_SOURCE_URL: Snapshot URL or local path
        CONTENT_SOURCE_TOKEN: Bearer token sent with HTTP requests (optional)

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials()
        >>> print(f"Fetching from {creds.url}")
    """

    def __init__(self):
        """Initialize the authenticator by loading environment variables from .env file."""
        load_dotenv()

    def get_source_url(self) -> Optional[str]:
        """Return CONTENT_SOURCE_URL, or None when unset."""
        url = os.getenv('CONTENT_SOURCE_URL')
        return url.strip() if url and url.strip() else None

    def get_credentials(self, url: Optional[str] = None) -> Credentials:
        """Get content source credentials.

        Args:
            url: Explicit source URL; falls back to CONTENT_SOURCE_URL

        Returns:
            Credentials with the url and the (possibly missing) token

        Raises:
            InvalidCredentialsError: If no source URL is configured
        """
        url = url or self.get_source_url()
        if not url:
            raise InvalidCredentialsError(
                endpoint="unknown",
                reason="CONTENT_SOURCE_URL is not set"
            )

        token = os.getenv('CONTENT_SOURCE_TOKEN') or None
        return Credentials(url=url, token=token)
