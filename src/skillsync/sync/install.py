"""
First-time setup of the managed directory, and recovery when the directory
exists but is not a working copy.
"""

import os
import stat
import logging
from typing import List

from ..models import UPSTREAM, InstallResult, UpdateMode
from .context import SyncContext
from .dependencies import check_dependencies
from .reconciler import LocalTreeReconciler
from .update import UpdateWorkflow

logger = logging.getLogger(__name__)


class InstallWorkflow:
    """
    Installs the managed directory from the user's fork.

    Running install on an existing working copy behaves like an update.
    Whatever was in a non-git managed directory is moved into a backup
    snapshot before cloning, and private entries are restored afterwards.
    """

    def __init__(self, ctx: SyncContext):
        self.ctx = ctx

    def run(self) -> InstallResult:
        """
        Run the install.

        Raises:
            DependencyMissingError: git (or gh) is not installed
            AuthenticationError: The hosting session is missing or expired
            RemoteUnavailableError: GitHub could not be reached
        """
        ctx = self.ctx
        managed = ctx.managed

        check_dependencies(ctx)

        reconciler = LocalTreeReconciler(managed, ctx.backup_root, clock=ctx.clock)
        snapshot = reconciler.preserve()

        result = InstallResult(action="fresh", path=managed.path)

        working_copy = ctx.vcs.is_working_copy(managed.path)
        if working_copy and not ctx.remote.tracks(managed.path):
            logger.warning(
                f"{managed.path} is a checkout of another repository "
                f"(remotes: {ctx.remote.bindings(managed.path).remotes}); moving it aside"
            )
            working_copy = False

        if working_copy:
            logger.info("Updating existing installation...")
            result.action = "updated"
            result.update = UpdateWorkflow(ctx).sync(UpdateMode.ORIGIN)
            result.origin_url = ctx.remote.bindings(managed.path).origin
        else:
            logger.info("Fresh install...")
            result.github_user = ctx.remote.current_user()
            result.origin_url = ctx.remote.resolve_origin_url(result.github_user)
            logger.info(f"Using repo: {result.origin_url}")

            if not managed.is_empty():
                if snapshot is None:
                    snapshot = reconciler.new_snapshot()
                reconciler.move_aside(snapshot)
                result.moved_aside = True

            ctx.remote.clone(result.origin_url, managed.path, ctx.branch)

            if ctx.remote.register_remote(managed.path, UPSTREAM, ctx.remote.upstream_url):
                result.messages.append(f"Registered remote '{UPSTREAM}' -> {ctx.remote.upstream_url}")

        result.restore = reconciler.restore(snapshot)
        if snapshot is not None:
            result.snapshot = snapshot.path

        self.mark_scripts_executable()
        return result

    def mark_scripts_executable(self) -> List[str]:
        """
        Add execute bits to the entry-point scripts. Best effort: failures
        are logged and ignored.
        """
        marked = []
        for name in self.ctx.entry_scripts:
            script = self.ctx.managed.path / name
            if not script.is_file():
                continue
            try:
                mode = script.stat().st_mode
                os.chmod(script, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            except OSError as e:
                logger.warning(f"Could not make {script} executable: {e}")
                continue
            marked.append(name)
        return marked
