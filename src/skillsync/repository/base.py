"""
Narrow interfaces over version control and the hosting API.

Workflows only talk to these; the real implementations shell out to git
(through GitPython) and to GitHub (through ``gh`` or the REST API), and the
test suite swaps in in-memory fakes.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional


class VersionControlClient(ABC):
    """Operations skillsync needs from version control, keyed by working-copy path."""

    name = "git"

    @abstractmethod
    def is_available(self) -> bool:
        """True when the version control binary can be executed."""

    @abstractmethod
    def is_working_copy(self, path: Path) -> bool:
        """True when ``path`` is the root of a valid working copy."""

    @abstractmethod
    def clone(self, url: str, path: Path, branch: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def remotes(self, path: Path) -> Dict[str, str]:
        """Map of remote name to fetch URL."""

    @abstractmethod
    def add_remote(self, path: Path, name: str, url: str) -> None:
        pass

    @abstractmethod
    def fetch(self, path: Path, remote: str) -> None:
        pass

    @abstractmethod
    def pull_rebase(self, path: Path, remote: str, branch: str) -> None:
        """Integrate ``remote/branch``, replaying local commits on top."""

    @abstractmethod
    def rebase(self, path: Path, onto: str) -> None:
        pass

    @abstractmethod
    def head(self, path: Path) -> Optional[str]:
        """Commit id of HEAD, or None for an empty repository."""

    @abstractmethod
    def current_branch(self, path: Path) -> Optional[str]:
        """Name of the checked-out branch, or None when HEAD is detached."""

    @abstractmethod
    def has_local_changes(self, path: Path) -> bool:
        """True when tracked files carry uncommitted modifications."""

    @abstractmethod
    def stash(self, path: Path, message: str) -> bool:
        """
        Set aside uncommitted changes to tracked files.

        Returns:
            True if something was stashed
        """

    @abstractmethod
    def stash_pop(self, path: Path) -> None:
        """Reapply the most recent stash; raises ConflictError on collision."""


class HostingApiClient(ABC):
    """Operations skillsync needs from the repository hosting service."""

    name = "hosting"

    @abstractmethod
    def is_available(self) -> bool:
        """True when the client can be used at all (binary present, etc.)."""

    @abstractmethod
    def check_auth(self) -> None:
        """Raise AuthenticationError unless a valid session exists."""

    @abstractmethod
    def current_user(self) -> str:
        """Login of the authenticated user."""

    @abstractmethod
    def repository_exists(self, full_name: str) -> bool:
        pass

    @abstractmethod
    def create_fork(self, full_name: str) -> None:
        """Request a fork of ``full_name``; the fork may not be visible yet on return."""

    @abstractmethod
    def clone_url(self, full_name: str) -> str:
        pass
