"""
GitHub REST API client for the hosting interface.

Used when the ``api`` backend is configured; authenticates with a personal
access token instead of a ``gh`` session.
"""

import logging
from datetime import datetime
from typing import Dict, Optional

import requests

from ..config import GitHubConfig
from ..error_handling import AuthenticationError, RemoteUnavailableError, SkillSyncError
from .base import HostingApiClient

logger = logging.getLogger(__name__)

TOKEN_REMEDIATION = "Set GITHUB_TOKEN to a personal access token with 'repo' scope, or use the gh backend."


class GitHubAPIError(SkillSyncError):
    """GitHub API request that failed for reasons other than auth or connectivity."""

    def __init__(self, message: str, status_code: Optional[int] = None, **kwargs):
        kwargs.setdefault('error_code', 'GITHUB_API')
        super().__init__(message, **kwargs)
        self.status_code = status_code


def _error_detail(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict) and body.get("message"):
        return f" - {body['message']}"
    return ""


class GitHubClient(HostingApiClient):
    """
    GitHub API client over ``requests``.

    Failures are never retried: a 401 becomes AuthenticationError, connection
    problems, 5xx responses and exhausted rate limits become
    RemoteUnavailableError.
    """

    name = "github-api"

    def __init__(self, config: Optional[GitHubConfig] = None, session: Optional[requests.Session] = None):
        """
        Args:
            config: GitHub configuration section
            session: Pre-built requests session (tests)
        """
        config = config or GitHubConfig()

        self.access_token = config.access_token
        self.api_base_url = config.api_base_url.rstrip('/')
        self.web_base_url = config.web_base_url.rstrip('/')
        self.timeout = config.timeout
        self._login: Optional[str] = None

        # Last values reported by the X-RateLimit-* headers
        self.rate_limit_remaining: Optional[int] = None
        self.rate_limit_reset: Optional[datetime] = None

        self.session = session or requests.Session()
        self.session.headers.update(self._default_headers())

    def _default_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "skillsync"
        }
        if self.access_token:
            headers["Authorization"] = f"token {self.access_token}"
        return headers

    def _request(self, method: str, endpoint: str) -> requests.Response:
        """
        Send one request; non-2xx responses are raised as skillsync errors.

        Raises:
            AuthenticationError: On 401
            RemoteUnavailableError: On connection errors, 5xx or rate limiting
            GitHubAPIError: On any other non-2xx response
        """
        url = f"{self.api_base_url}/{endpoint.lstrip('/')}"
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(method=method, url=url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise RemoteUnavailableError(f"Could not reach the GitHub API: {e}", remote=self.api_base_url, cause=e)

        self._record_rate_limit(response.headers)
        if response.ok:
            return response

        status = response.status_code
        if status == 401:
            raise AuthenticationError(
                "GitHub rejected the access token (missing, expired or revoked)",
                remediation=TOKEN_REMEDIATION
            )
        if status in (403, 429) and "rate limit" in response.text.lower():
            reset = self.rate_limit_reset.strftime("%H:%M:%S") if self.rate_limit_reset else "later"
            raise RemoteUnavailableError(
                f"GitHub API rate limit exceeded (resets at {reset})",
                remote=self.api_base_url,
                remediation="Wait for the rate limit to reset, then run the command again."
            )

        message = f"{method} {endpoint} returned {status}{_error_detail(response)}"
        if status >= 500:
            raise RemoteUnavailableError(message, remote=self.api_base_url)
        raise GitHubAPIError(message, status_code=status)

    def _record_rate_limit(self, headers) -> None:
        if "X-RateLimit-Remaining" in headers:
            self.rate_limit_remaining = int(headers["X-RateLimit-Remaining"])
        if "X-RateLimit-Reset" in headers:
            self.rate_limit_reset = datetime.fromtimestamp(int(headers["X-RateLimit-Reset"]))

    def is_available(self) -> bool:
        return True

    def check_auth(self) -> None:
        if not self.access_token:
            raise AuthenticationError("No GitHub access token configured", remediation=TOKEN_REMEDIATION)
        self.current_user()

    def current_user(self) -> str:
        if self._login is None:
            self._login = self._request("GET", "/user").json()["login"]
            logger.info(f"GitHub user: {self._login}")
        return self._login

    def repository_exists(self, full_name: str) -> bool:
        try:
            self._request("GET", f"/repos/{full_name}")
        except GitHubAPIError as e:
            if e.status_code == 404:
                return False
            raise
        return True

    def create_fork(self, full_name: str) -> None:
        """Request a fork of ``full_name``; GitHub finishes it asynchronously."""
        response = self._request("POST", f"/repos/{full_name}/forks")
        logger.info(f"Requested fork of {full_name} as {response.json().get('full_name', '?')}")

    def clone_url(self, full_name: str) -> str:
        return f"{self.web_base_url}/{full_name}.git"
