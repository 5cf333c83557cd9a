"""API wrapper for the GitHub REST API.

This module wraps a requests Session pointed at the GitHub REST API and
provides error translation from HTTP failures to our typed exception
hierarchy. Only the endpoints the sync engine needs are exposed: repository
lookup and lifecycle, and the low-level git data API (refs, commits, trees,
blobs).
"""

import logging
import re
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from .auth import Authenticator
from .errors import (
    APIAccessError,
    InvalidCredentialsError,
    NotFoundError,
    RemoteUnavailableError,
    RepositoryAlreadyExistsError,
)

logger = logging.getLogger(__name__)

# Pinned REST API version
GITHUB_API_VERSION = "2022-11-28"


class APIWrapper:
    """Thin wrapper around the GitHub REST API with error translation.

    This class:
    1. Handles authentication using the Authenticator
    2. Lazily creates a requests Session with the GitHub headers
    3. Translates HTTP errors to typed exceptions
    4. Returns decoded JSON payloads (untyped; see GitHubRepository for
       the typed adapter)

    No retries are performed. Rate limiting surfaces as
    RemoteUnavailableError and the caller decides whether to retry.

    Example:
        >>> api = APIWrapper(Authenticator())
        >>> repo = api.get_repository_by_id("123456")
        >>> print(repo["full_name"])
    """

    def __init__(self, authenticator: Authenticator, timeout: float = 30.0):
        """Initialize the API wrapper.

        Args:
            authenticator: Authenticator instance for loading credentials
            timeout: Per-request timeout in seconds
        """
        self._authenticator = authenticator
        self._timeout = timeout
        self._session: Optional[requests.Session] = None
        self._api_url: Optional[str] = None

    def _get_session(self) -> requests.Session:
        """Get or create the HTTP session.

        Returns:
            requests.Session carrying the authorization headers

        Raises:
            InvalidCredentialsError: If credentials are missing
        """
        if self._session is None:
            creds = self._authenticator.get_credentials()
            session = requests.Session()
            session.headers.update({
                "Authorization": f"Bearer {creds.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            })
            self._api_url = creds.api_url
            self._session = session
        return self._session

    def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def _sanitize_credentials(self, text: str) -> str:
        """Mask tokens and authorization headers in error messages.

        Args:
            text: The error message or log text to sanitize

        Returns:
            str: Sanitized text with credentials masked

        Example:
            >>> api._sanitize_credentials("token ghp_abcdefghijklmnop failed")
            'token ***REDACTED*** failed'
        """
        if not text:
            return text

        sanitized = text

        # Credentials embedded in URLs (user:pass@host)
        sanitized = re.sub(r'://([\w.-]+):([\w.-]+)@', r'://***:***@', sanitized)

        sanitized = re.sub(
            r'Authorization:\s*[^\n\r]+',
            'Authorization: ***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'Bearer\s+[^\s\n\r]+',
            'Bearer ***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )

        # GitHub token formats: ghp_, gho_, ghu_, ghs_, ghr_ and fine-grained github_pat_
        sanitized = re.sub(
            r'\b(gh[pousr]_[A-Za-z0-9]{8,}|github_pat_[A-Za-z0-9_]{8,})\b',
            '***REDACTED***',
            sanitized
        )

        sanitized = re.sub(
            r'(access_?token|token)["\']?\s*[:=]\s*["\']?([^"\'\s&]+)',
            r'\1=***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )

        return sanitized

    def _error_message(self, response: requests.Response) -> str:
        """Extract GitHub's error message from a failed response."""
        try:
            payload = response.json()
        except ValueError:
            return (response.text or "")[:200]
        if isinstance(payload, dict):
            return str(payload.get("message", ""))
        return ""

    def _is_rate_limited(self, response: requests.Response, message: str) -> bool:
        """Check if a 403/429 response is a primary or secondary rate limit."""
        if response.status_code == 429:
            return True
        if response.headers.get("X-RateLimit-Remaining") == "0":
            return True
        return "rate limit" in message.lower()

    def _translate_error(self, response: requests.Response, operation: str) -> Exception:
        """Translate a failed HTTP response to a typed exception.

        Args:
            response: The failed response (status >= 400)
            operation: Description of the operation that failed (for logging)

        Returns:
            Exception: Translated exception (one of our typed exceptions)
        """
        status = response.status_code
        message = self._error_message(response)
        endpoint = self._api_url or "unknown"

        if status == 401:
            return InvalidCredentialsError(endpoint=endpoint, reason=message or None)

        if status in (403, 429):
            if self._is_rate_limited(response, message):
                logger.warning(f"Rate limit hit during {operation}")
                return RemoteUnavailableError(endpoint=endpoint, reason="rate limit exceeded")
            return InvalidCredentialsError(endpoint=endpoint, reason=message or "forbidden")

        if status == 404:
            return NotFoundError(operation)

        if status >= 500:
            return RemoteUnavailableError(endpoint=endpoint, reason=f"HTTP {status}")

        safe_message = self._sanitize_credentials(message)
        logger.error(f"API operation failed: {operation} - HTTP {status} {safe_message}")
        return APIAccessError(
            f"GitHub API failure during {operation} (HTTP {status}): {safe_message}",
            status_code=status,
        )

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform one API call and decode the JSON body.

        Args:
            method: HTTP method
            path: API path starting with '/'
            operation: Description of the operation (for errors and logs)
            json: Optional JSON request body
            params: Optional query parameters

        Returns:
            Decoded JSON payload, or None for empty (204) responses

        Raises:
            InvalidCredentialsError: On 401/403
            NotFoundError: On 404
            RemoteUnavailableError: On network errors, rate limits and 5xx
            APIAccessError: On any other failure
        """
        session = self._get_session()
        url = f"{self._api_url}{path}"
        logger.debug(f"{method} {path} ({operation})")

        try:
            response = session.request(
                method,
                url,
                json=json,
                params=params,
                timeout=self._timeout,
            )
        except (Timeout, ConnectionError) as e:
            raise RemoteUnavailableError(
                endpoint=self._api_url or "unknown",
                reason=self._sanitize_credentials(str(e)),
            ) from e
        except RequestException as e:
            raise APIAccessError(
                f"GitHub API failure during {operation}: {self._sanitize_credentials(str(e))}"
            ) from e

        if response.status_code >= 400:
            raise self._translate_error(response, operation)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # === Users ===

    def get_authenticated_user(self) -> Dict[str, Any]:
        """Fetch the user the token belongs to (GET /user)."""
        return self._request("GET", "/user", "get_authenticated_user")

    # === Repositories ===

    def get_repository_by_id(self, repo_id: str) -> Dict[str, Any]:
        """Fetch a repository by its numeric id.

        Args:
            repo_id: GitHub repository id

        Returns:
            Dict containing repository data

        Raises:
            NotFoundError: If no repository has this id
        """
        return self._request(
            "GET", f"/repositories/{repo_id}", f"get_repository_by_id({repo_id})"
        )

    def get_repository(self, owner: str, name: str) -> Dict[str, Any]:
        """Fetch a repository by owner and name."""
        return self._request(
            "GET", f"/repos/{owner}/{name}", f"get_repository({owner}/{name})"
        )

    def create_repository(
        self,
        name: str,
        private: bool = False,
        auto_init: bool = True,
    ) -> Dict[str, Any]:
        """Create a repository for the authenticated user.

        With auto_init the host creates an initial commit (README.md) so the
        default branch exists immediately.

        Raises:
            RepositoryAlreadyExistsError: If the name is taken (HTTP 422)
        """
        try:
            return self._request(
                "POST",
                "/user/repos",
                f"create_repository({name})",
                json={"name": name, "private": private, "auto_init": auto_init},
            )
        except APIAccessError as e:
            if e.status_code == 422:
                raise RepositoryAlreadyExistsError(name) from e
            raise

    def delete_repository(self, owner: str, name: str) -> None:
        """Delete a repository (requires the delete_repo scope)."""
        self._request("DELETE", f"/repos/{owner}/{name}", f"delete_repository({owner}/{name})")

    # === Git data: refs and commits ===

    def get_ref(self, owner: str, name: str, branch: str) -> Dict[str, Any]:
        """Read a branch ref (GET /repos/{owner}/{repo}/git/ref/heads/{branch})."""
        return self._request(
            "GET",
            f"/repos/{owner}/{name}/git/ref/heads/{branch}",
            f"get_ref({owner}/{name}, {branch})",
        )

    def update_ref(self, owner: str, name: str, branch: str, sha: str) -> Dict[str, Any]:
        """Move a branch ref to a new commit (fast-forward only)."""
        return self._request(
            "PATCH",
            f"/repos/{owner}/{name}/git/refs/heads/{branch}",
            f"update_ref({owner}/{name}, {branch})",
            json={"sha": sha, "force": False},
        )

    def get_commit(self, owner: str, name: str, sha: str) -> Dict[str, Any]:
        """Read a commit object."""
        return self._request(
            "GET",
            f"/repos/{owner}/{name}/git/commits/{sha}",
            f"get_commit({owner}/{name}, {sha})",
        )

    def create_commit(
        self,
        owner: str,
        name: str,
        message: str,
        tree_sha: str,
        parents: List[str],
    ) -> Dict[str, Any]:
        """Create a commit object pointing at a tree."""
        return self._request(
            "POST",
            f"/repos/{owner}/{name}/git/commits",
            f"create_commit({owner}/{name})",
            json={"message": message, "tree": tree_sha, "parents": parents},
        )

    # === Git data: trees and blobs ===

    def get_tree(self, owner: str, name: str, tree_sha: str, recursive: bool = True) -> Dict[str, Any]:
        """Read a tree, optionally with all nested entries."""
        params = {"recursive": "1"} if recursive else None
        return self._request(
            "GET",
            f"/repos/{owner}/{name}/git/trees/{tree_sha}",
            f"get_tree({owner}/{name}, {tree_sha})",
            params=params,
        )

    def create_tree(
        self,
        owner: str,
        name: str,
        base_tree: str,
        tree: List[Dict[str, str]],
    ) -> Dict[str, Any]:
        """Create a tree on top of base_tree; unlisted paths are inherited."""
        return self._request(
            "POST",
            f"/repos/{owner}/{name}/git/trees",
            f"create_tree({owner}/{name})",
            json={"base_tree": base_tree, "tree": tree},
        )

    def get_blob(self, owner: str, name: str, sha: str) -> Dict[str, Any]:
        """Read a blob; content comes back base64 encoded."""
        return self._request(
            "GET",
            f"/repos/{owner}/{name}/git/blobs/{sha}",
            f"get_blob({owner}/{name}, {sha})",
        )

    def create_blob(self, owner: str, name: str, content: str) -> Dict[str, Any]:
        """Upload file content as a blob."""
        return self._request(
            "POST",
            f"/repos/{owner}/{name}/git/blobs",
            f"create_blob({owner}/{name})",
            json={"content": content, "encoding": "utf-8"},
        )
