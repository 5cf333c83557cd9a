"""Authentication module for loading GitHub credentials.

This module handles loading the GitHub access token from environment variables
using python-dotenv. It validates that the token is present and raises an
appropriate error if it is missing.
"""

import os
from typing import NamedTuple

from dotenv import load_dotenv

from .errors import InvalidCredentialsError

DEFAULT_API_URL = "https://api.github.com"


class Credentials(NamedTuple):
    """GitHub API credentials."""
    api_url: str
    token: str


class Authenticator:
    """Loads and validates GitHub credentials from environment variables.

    Credentials are loaded from a .env file using python-dotenv and are never
    cached or logged.

    Environment variables:
        GITHUB_TOKEN: Personal access token or OAuth token with `repo` scope
            (plus `delete_repo` for repository removal). Required.
        GITHUB_API_URL: API base URL (default: https://api.github.com)

    Raises:
        InvalidCredentialsError: If the token is missing

    Example:
        >>> auth = Authenticator()
        >>> creds = auth.get_credentials()
        >>> print(f"Connecting to {creds.api_url}")
    """

    def __init__(self, api_url: str = ""):
        """Initialize the authenticator by loading environment variables from .env file.

        Args:
            api_url: Optional API base URL overriding GITHUB_API_URL
        """
        load_dotenv()
        self._api_url = api_url

    def get_credentials(self) -> Credentials:
        """Get GitHub credentials from environment variables.

        Returns:
            Credentials: A named tuple containing api_url and token

        Raises:
            InvalidCredentialsError: If GITHUB_TOKEN is missing
        """
        api_url = self._api_url or os.getenv('GITHUB_API_URL') or DEFAULT_API_URL
        token = os.getenv('GITHUB_TOKEN')

        if not token:
            raise InvalidCredentialsError(
                endpoint=api_url,
                reason="GITHUB_TOKEN is not set"
            )

        return Credentials(api_url=api_url.rstrip('/'), token=token)
