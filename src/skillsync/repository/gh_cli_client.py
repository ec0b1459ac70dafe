"""
Hosting interface backed by the GitHub CLI (``gh``).

Uses whatever session ``gh auth login`` established, so no token needs to
be configured.
"""

import shutil
import subprocess
import logging
from typing import List, Optional

from ..config import GitHubConfig
from ..error_handling import AuthenticationError, RemoteUnavailableError, SkillSyncError
from .base import HostingApiClient

logger = logging.getLogger(__name__)

_NOT_FOUND_MARKERS = ("could not resolve to a repository", "not found", "http 404")
_AUTH_MARKERS = ("gh auth login", "not logged in", "authentication", "http 401", "bad credentials")
_NETWORK_MARKERS = (
    "could not resolve host",
    "connection refused",
    "connection reset",
    "timeout",
    "no such host",
    "network is unreachable",
    "http 5",
)


class GhCommandError(SkillSyncError):
    """A ``gh`` invocation failed for an unclassified reason."""

    def __init__(self, message: str, args: Optional[List[str]] = None,
                 returncode: Optional[int] = None, stderr: str = "", **kwargs):
        context = kwargs.get('context', {})
        if args:
            context['command'] = "gh " + " ".join(args)
        kwargs['context'] = context
        kwargs.setdefault('error_code', 'GH_COMMAND')
        super().__init__(message, **kwargs)
        self.returncode = returncode
        self.stderr = stderr


class GhCliClient(HostingApiClient):
    """
    Shells out to ``gh`` for user lookup, repository lookup and forking.
    """

    name = "gh"

    def __init__(self, config: Optional[GitHubConfig] = None, executable: str = "gh"):
        config = config or GitHubConfig()
        self.executable = executable
        self.web_base_url = config.web_base_url
        self.timeout = config.timeout
        self._login: Optional[str] = None

    def is_available(self) -> bool:
        return shutil.which(self.executable) is not None

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        """Run ``gh`` and return the completed process, whatever its exit code."""
        command = [self.executable, *args]
        logger.debug(f"Running: {' '.join(command)}")
        try:
            return subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False
            )
        except FileNotFoundError as e:
            raise GhCommandError(f"'{self.executable}' is not installed", args=list(args), cause=e)
        except subprocess.TimeoutExpired as e:
            raise RemoteUnavailableError(
                f"'gh {' '.join(args)}' timed out after {self.timeout}s",
                remote="github.com",
                cause=e
            )

    def _raise_for(self, result: subprocess.CompletedProcess, args: List[str]) -> None:
        """Translate a failed ``gh`` call into the error taxonomy."""
        stderr = (result.stderr or "").strip()
        lowered = stderr.lower()

        if any(marker in lowered for marker in _AUTH_MARKERS):
            raise AuthenticationError(f"GitHub CLI is not authenticated: {stderr}")
        if any(marker in lowered for marker in _NETWORK_MARKERS):
            raise RemoteUnavailableError(f"GitHub is unreachable: {stderr}", remote="github.com")
        raise GhCommandError(
            f"'gh {' '.join(args)}' failed with exit code {result.returncode}: {stderr}",
            args=args,
            returncode=result.returncode,
            stderr=stderr
        )

    def _call(self, *args: str) -> str:
        result = self._run(*args)
        if result.returncode != 0:
            self._raise_for(result, list(args))
        return result.stdout

    def check_auth(self) -> None:
        result = self._run("auth", "status")
        if result.returncode != 0:
            lowered = f"{result.stdout}\n{result.stderr}".lower()
            if any(marker in lowered for marker in _NETWORK_MARKERS):
                raise RemoteUnavailableError("Could not reach GitHub to verify the gh session", remote="github.com")
            raise AuthenticationError("GitHub CLI not authenticated.")

    def current_user(self) -> str:
        if self._login is None:
            self._login = self._call("api", "user", "--jq", ".login").strip()
            if not self._login:
                raise AuthenticationError("GitHub CLI did not report a user login")
            logger.info(f"GitHub user: {self._login}")
        return self._login

    def repository_exists(self, full_name: str) -> bool:
        args = ["repo", "view", full_name, "--json", "name"]
        result = self._run(*args)
        if result.returncode == 0:
            return True
        if any(marker in (result.stderr or "").lower() for marker in _NOT_FOUND_MARKERS):
            return False
        self._raise_for(result, args)
        return False

    def create_fork(self, full_name: str) -> None:
        logger.info(f"Forking {full_name}")
        self._call("repo", "fork", full_name, "--clone=false")

    def clone_url(self, full_name: str) -> str:
        return f"{self.web_base_url.rstrip('/')}/{full_name}.git"
