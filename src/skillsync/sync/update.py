"""
Steady-state sync of an installed managed directory.
"""

import logging

from ..error_handling import NotInstalledError, SkillSyncError
from ..models import ORIGIN, UPSTREAM, UpdateMode, UpdateResult
from .context import SyncContext
from .reconciler import LocalTreeReconciler

logger = logging.getLogger(__name__)

STASH_MESSAGE_PREFIX = "skillsync-update"


class UpdateWorkflow:
    """
    Brings an installed managed directory up to date.

    Uncommitted edits to tracked files are stashed, the branch is rebased onto
    ``origin`` (default) or ``upstream``, and the edits are reapplied. Nothing
    is ever pushed.
    """

    def __init__(self, ctx: SyncContext):
        self.ctx = ctx

    def _require_installed(self) -> None:
        managed = self.ctx.managed
        if not self.ctx.vcs.is_working_copy(managed.path):
            raise NotInstalledError(
                f"{managed.path} is not a git working copy.",
                path=str(managed.path),
                remediation="Run install first: skillsync install"
            )

    def run(self, mode: UpdateMode = UpdateMode.ORIGIN) -> UpdateResult:
        """
        Update the managed directory, protecting private entries around the sync.

        Raises:
            NotInstalledError: The managed directory is not a working copy
            ConflictError: Fetched changes collide with local edits
            RemoteUnavailableError: The remote could not be reached
        """
        self._require_installed()

        reconciler = LocalTreeReconciler(self.ctx.managed, self.ctx.backup_root, clock=self.ctx.clock)
        snapshot = reconciler.preserve()

        result = self.sync(mode)

        result.restore = reconciler.restore(snapshot)
        if snapshot is not None:
            result.snapshot = snapshot.path
        return result

    def sync(self, mode: UpdateMode = UpdateMode.ORIGIN) -> UpdateResult:
        """Stash, rebase and unstash without touching private entries."""
        self._require_installed()

        ctx = self.ctx
        path = ctx.managed.path
        vcs = ctx.vcs
        result = UpdateResult(mode=mode, branch=ctx.branch, old_head=vcs.head(path))

        stash_message = f"{STASH_MESSAGE_PREFIX} {ctx.clock().strftime('%Y%m%d-%H%M%S')}"
        result.stashed = ctx.remote.stash(path, stash_message)

        try:
            if mode is UpdateMode.UPSTREAM:
                self._sync_upstream(result)
            else:
                logger.info("Pulling latest skills...")
                ctx.remote.pull_rebase(path, ORIGIN, ctx.branch)
        except SkillSyncError as e:
            if result.stashed:
                e.remediation = (
                    f"{e.remediation}\n" if e.remediation else ""
                ) + f"Your local edits are saved as stash '{stash_message}'; run 'git stash pop' once resolved."
            raise

        if result.stashed:
            ctx.remote.unstash(path)

        result.new_head = vcs.head(path)
        if result.changed:
            logger.info(f"Updated {path}: {(result.old_head or '')[:8]} -> {(result.new_head or '')[:8]}")
        else:
            logger.info(f"{path} is already up to date")
        return result

    def _sync_upstream(self, result: UpdateResult) -> None:
        ctx = self.ctx
        path = ctx.managed.path

        if ctx.remote.register_remote(path, UPSTREAM, ctx.remote.upstream_url):
            result.messages.append(f"Registered remote '{UPSTREAM}' -> {ctx.remote.upstream_url}")

        logger.info(f"Fetching {UPSTREAM}...")
        ctx.remote.fetch(path, UPSTREAM)
        ctx.remote.rebase_onto(path, UPSTREAM, ctx.branch)

        result.messages.append(
            f"Rebased onto {UPSTREAM}/{ctx.branch}. Push the result to your fork yourself: "
            f"git push origin {ctx.branch} (use --force-with-lease if the push is rejected)"
        )
