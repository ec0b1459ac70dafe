"""
Git implementation of the version control interface, built on GitPython.
"""

import os
import shutil
import logging
from pathlib import Path
from typing import Dict, Optional

# Let the dependency check report a missing git binary instead of failing at import.
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

import git  # noqa: E402
from git import Repo, GitCommandError, InvalidGitRepositoryError, NoSuchPathError  # noqa: E402

from ..error_handling import (  # noqa: E402
    AuthenticationError, ConflictError, RemoteUnavailableError, VersionControlError
)
from .base import VersionControlClient  # noqa: E402

logger = logging.getLogger(__name__)

_NETWORK_MARKERS = (
    "could not resolve host",
    "unable to access",
    "could not read from remote",
    "connection timed out",
    "connection refused",
    "failed to connect",
    "network is unreachable",
)
_AUTH_MARKERS = (
    "authentication failed",
    "could not read username",
    "terminal prompts disabled",
    "permission denied (publickey)",
)
_CONFLICT_MARKERS = (
    "conflict",
    "could not apply",
    "needs merge",
)


def translate_git_error(error: GitCommandError, operation: str, path: Path):
    """
    Map a failed git command onto the skillsync error taxonomy.

    Returns the exception to raise; callers use ``raise ... from error``.
    """
    stderr = (error.stderr or "").strip()
    lowered = stderr.lower()
    command = " ".join(str(part) for part in error.command) if isinstance(error.command, (list, tuple)) \
        else str(error.command)

    if any(marker in lowered for marker in _AUTH_MARKERS):
        return AuthenticationError(
            f"git {operation} was refused: {stderr}",
            cause=error,
            context={"path": str(path)},
            remediation="Run: gh auth login && gh auth setup-git"
        )
    if any(marker in lowered for marker in _NETWORK_MARKERS):
        return RemoteUnavailableError(
            f"git {operation} could not reach the remote: {stderr}",
            cause=error,
            context={"path": str(path)}
        )
    if "would be overwritten" in lowered:
        # git refused before starting, so there is nothing to continue or abort
        if "untracked working tree files" in lowered:
            remediation = (
                f"Move or rename the untracked files git listed out of {path} "
                "(a fetched commit now adds files with the same names), then run the command again."
            )
        else:
            remediation = (
                f"Commit or stash the local changes git listed in {path}, then run the command again."
            )
        return ConflictError(
            f"git {operation} would overwrite files in {path}: {stderr}",
            operation=operation,
            cause=error,
            remediation=remediation
        )
    if any(marker in lowered for marker in _CONFLICT_MARKERS):
        return ConflictError(
            f"git {operation} stopped on conflicting changes in {path}",
            operation=operation,
            cause=error,
            remediation=(
                f"Resolve the conflicts in {path}, then run "
                "'git rebase --continue' (or 'git rebase --abort' to give up)."
            )
        )
    return VersionControlError(
        f"git {operation} failed in {path}: {stderr or error}",
        command=command,
        cause=error
    )


class GitClient(VersionControlClient):
    """
    Runs git operations on working copies through GitPython.
    """

    def __init__(self, executable: Optional[str] = None):
        """
        Initialize git client.

        Args:
            executable: Explicit path to the git binary (looked up on PATH otherwise)
        """
        self.executable = executable or "git"
        if executable:
            git.refresh(executable)

    def is_available(self) -> bool:
        return shutil.which(self.executable) is not None

    def _repo(self, path: Path) -> Repo:
        try:
            return Repo(str(path))
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise VersionControlError(f"{path} is not a git working copy", cause=e)

    def is_working_copy(self, path: Path) -> bool:
        if not (Path(path) / ".git").exists():
            return False
        try:
            repo = Repo(str(path))
        except (InvalidGitRepositoryError, NoSuchPathError):
            return False
        return not repo.bare

    def clone(self, url: str, path: Path, branch: Optional[str] = None) -> None:
        clone_kwargs = {}
        if branch:
            clone_kwargs["branch"] = branch

        logger.info(f"Cloning {url} into {path}")
        try:
            Repo.clone_from(url, str(path), **clone_kwargs)
        except GitCommandError as e:
            raise translate_git_error(e, "clone", path) from e

    def remotes(self, path: Path) -> Dict[str, str]:
        repo = self._repo(path)
        return {remote.name: remote.url for remote in repo.remotes}

    def add_remote(self, path: Path, name: str, url: str) -> None:
        repo = self._repo(path)
        try:
            repo.create_remote(name, url)
        except GitCommandError as e:
            raise translate_git_error(e, f"remote add {name}", path) from e
        logger.info(f"Added remote {name} -> {url}")

    def fetch(self, path: Path, remote: str) -> None:
        repo = self._repo(path)
        try:
            repo.git.fetch(remote)
        except GitCommandError as e:
            raise translate_git_error(e, f"fetch {remote}", path) from e

    def pull_rebase(self, path: Path, remote: str, branch: str) -> None:
        repo = self._repo(path)
        logger.info(f"Pulling {remote}/{branch} with rebase in {path}")
        try:
            repo.git.pull("--rebase", remote, branch)
        except GitCommandError as e:
            raise translate_git_error(e, f"pull --rebase {remote} {branch}", path) from e

    def rebase(self, path: Path, onto: str) -> None:
        repo = self._repo(path)
        logger.info(f"Rebasing {path} onto {onto}")
        try:
            repo.git.rebase(onto)
        except GitCommandError as e:
            raise translate_git_error(e, f"rebase {onto}", path) from e

    def head(self, path: Path) -> Optional[str]:
        repo = self._repo(path)
        try:
            return repo.head.commit.hexsha
        except ValueError:
            # Repository without commits
            return None

    def current_branch(self, path: Path) -> Optional[str]:
        repo = self._repo(path)
        try:
            return repo.active_branch.name
        except TypeError:
            # Detached HEAD
            return None

    def has_local_changes(self, path: Path) -> bool:
        return self._repo(path).is_dirty(untracked_files=False)

    def stash(self, path: Path, message: str) -> bool:
        repo = self._repo(path)
        if not repo.is_dirty(untracked_files=False):
            return False
        try:
            repo.git.stash("push", "-m", message)
        except GitCommandError as e:
            raise translate_git_error(e, "stash", path) from e
        logger.info(f"Stashed local changes in {path} as '{message}'")
        return True

    def stash_pop(self, path: Path) -> None:
        repo = self._repo(path)
        try:
            repo.git.stash("pop")
        except GitCommandError as e:
            raise ConflictError(
                f"Your stashed local edits conflict with the fetched changes in {path}",
                operation="stash pop",
                cause=e,
                remediation=(
                    f"Resolve the conflicts in {path}, then run 'git stash drop'. "
                    "Your edits are still saved in 'git stash list'."
                )
            ) from e
        logger.info(f"Reapplied stashed local changes in {path}")
