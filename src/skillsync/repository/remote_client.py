"""
High-level remote operations: "make sure I have a writable remote",
"get the latest from the canonical source".
"""

import time
import logging
from pathlib import Path
from typing import Optional

from ..error_handling import ConfigurationError, RemoteUnavailableError
from ..models import ORIGIN, UPSTREAM, ForkingStrategy, RemoteBinding
from .base import VersionControlClient, HostingApiClient

logger = logging.getLogger(__name__)

FORK_POLL_INTERVAL = 2  # seconds


def same_repository(first: Optional[str], second: Optional[str]) -> bool:
    """Compare two clone URLs, ignoring a trailing slash or ``.git``."""
    if not first or not second:
        return False

    def normalize(url: str) -> str:
        url = url.strip().rstrip('/')
        if url.endswith('.git'):
            url = url[:-4]
        return url.lower()

    return normalize(first) == normalize(second)


class RemoteRepositoryClient:
    """
    Translates install/update intents into hosting API and git calls.

    Args:
        vcs: Version control client
        hosting: Hosting API client (may be None unless the strategy is AUTO)
        upstream: Canonical repository as ``owner/name``
        forking_strategy: How ``origin`` is chosen for a fresh install
        origin_url: Fixed origin URL for ``ForkingStrategy.FIXED_URL``
        web_base_url: Base URL used to build the canonical clone URL
        fork_ready_timeout: Seconds to wait for a new fork to become visible
        sleep: Sleep function used while waiting for a new fork
    """

    def __init__(
        self,
        vcs: VersionControlClient,
        hosting: Optional[HostingApiClient],
        upstream: str,
        forking_strategy: ForkingStrategy = ForkingStrategy.AUTO,
        origin_url: Optional[str] = None,
        web_base_url: str = "https://github.com",
        fork_ready_timeout: int = 30,
        sleep=time.sleep
    ):
        self.vcs = vcs
        self.hosting = hosting
        self.upstream = upstream
        self.forking_strategy = forking_strategy
        self.origin_url = origin_url
        self.web_base_url = web_base_url
        self.fork_ready_timeout = fork_ready_timeout
        self._sleep = sleep

    @property
    def repo_name(self) -> str:
        return self.upstream.split("/", 1)[1]

    @property
    def upstream_url(self) -> str:
        if self.hosting is not None:
            return self.hosting.clone_url(self.upstream)
        return f"{self.web_base_url.rstrip('/')}/{self.upstream}.git"

    def current_user(self) -> Optional[str]:
        """Login of the hosting user, when a hosting client is in use."""
        if self.forking_strategy is not ForkingStrategy.AUTO or self.hosting is None:
            return None
        return self.hosting.current_user()

    def _require_hosting(self) -> HostingApiClient:
        if self.hosting is None:
            raise ConfigurationError("Forking requires a hosting API client", key="github.backend")
        return self.hosting

    def ensure_fork_exists(self, user: str) -> str:
        """
        Return the clone URL of ``user``'s fork, creating the fork if needed.

        Idempotent: an existing fork is reused, never duplicated. GitHub
        creates forks asynchronously, so a new fork is polled for up to
        ``fork_ready_timeout`` seconds before its URL is returned.

        Raises:
            RemoteUnavailableError: The new fork did not show up in time
        """
        hosting = self._require_hosting()

        fork_name = f"{user}/{self.repo_name}"
        if hosting.repository_exists(fork_name):
            logger.info(f"Reusing existing fork {fork_name}")
            return hosting.clone_url(fork_name)

        logger.info(f"Forking {self.upstream} to {user}")
        hosting.create_fork(self.upstream)
        self._wait_for_fork(hosting, fork_name)
        return hosting.clone_url(fork_name)

    def _wait_for_fork(self, hosting: HostingApiClient, fork_name: str) -> None:
        deadline = time.monotonic() + self.fork_ready_timeout
        while not hosting.repository_exists(fork_name):
            if time.monotonic() >= deadline:
                raise RemoteUnavailableError(
                    f"Fork {fork_name} was requested but is not available yet",
                    remote=hosting.clone_url(fork_name),
                    remediation="Wait a minute for GitHub to finish the fork, then run install again."
                )
            logger.debug(f"Waiting for fork {fork_name}")
            self._sleep(FORK_POLL_INTERVAL)

    def resolve_origin_url(self, user: Optional[str] = None) -> str:
        """Pick the URL ``origin`` should point at, according to the forking strategy."""
        if self.forking_strategy is ForkingStrategy.FIXED_URL:
            if not self.origin_url:
                raise ConfigurationError(
                    "Forking strategy 'fixed_url' requires an origin URL",
                    key="repository.origin_url"
                )
            return self.origin_url

        if self.forking_strategy is ForkingStrategy.NONE:
            return self.upstream_url

        if not user:
            user = self._require_hosting().current_user()
        return self.ensure_fork_exists(user)

    def tracks(self, path: Path) -> bool:
        """
        Whether the working copy at ``path`` belongs to the tracked repository.

        True when ``upstream`` or ``origin`` points at the canonical
        repository, or ``origin`` points at the configured fixed URL or the
        user's fork. Only looks things up; never creates a fork.
        """
        remotes = self.vcs.remotes(path)
        origin = remotes.get(ORIGIN)
        if any(same_repository(remotes.get(name), self.upstream_url) for name in (ORIGIN, UPSTREAM)):
            return True
        if self.forking_strategy is ForkingStrategy.FIXED_URL:
            return same_repository(origin, self.origin_url)

        user = self.current_user()
        if user is None:
            return False
        return same_repository(origin, self.hosting.clone_url(f"{user}/{self.repo_name}"))

    def bindings(self, path: Path) -> RemoteBinding:
        return RemoteBinding(remotes=self.vcs.remotes(path))

    def register_remote(self, path: Path, name: str, url: str) -> bool:
        """
        Add remote ``name`` unless it already exists.

        Returns:
            True if the remote was added, False if it was already present
        """
        existing = self.vcs.remotes(path)
        if name in existing:
            if existing[name] != url:
                logger.warning(f"Remote {name} already points at {existing[name]}; leaving it as is")
            return False

        self.vcs.add_remote(path, name, url)
        return True

    def clone(self, url: str, path: Path, branch: Optional[str] = None) -> None:
        self.vcs.clone(url, path, branch)

    def pull_rebase(self, path: Path, remote: str, branch: str) -> None:
        self.vcs.pull_rebase(path, remote, branch)

    def fetch(self, path: Path, remote: str) -> None:
        self.vcs.fetch(path, remote)

    def rebase_onto(self, path: Path, remote: str, branch: str) -> None:
        self.vcs.rebase(path, f"{remote}/{branch}")

    def stash(self, path: Path, message: str) -> bool:
        return self.vcs.stash(path, message)

    def unstash(self, path: Path) -> None:
        self.vcs.stash_pop(path)
