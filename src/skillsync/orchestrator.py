"""
Wires configuration, clients and workflows together for the CLI.
"""

import logging
from typing import Dict, Any, Optional

from .config import AppConfig, get_config
from .models import BackupSnapshot, ForkingStrategy, ManagedDirectory, UpdateMode, InstallResult, UpdateResult
from .repository import (
    GitClient, GhCliClient, GitHubClient, HostingApiClient, RemoteRepositoryClient, VersionControlClient
)
from .sync import SyncContext, InstallWorkflow, UpdateWorkflow

logger = logging.getLogger(__name__)


class OrchestrationManager:
    """
    Builds a SyncContext from the application configuration and runs the
    install and update workflows against it.

    Clients can be injected, which is how the tests run the whole thing
    against temporary directories and fakes.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        vcs: Optional[VersionControlClient] = None,
        hosting: Optional[HostingApiClient] = None
    ):
        self.config = config or get_config()
        self.vcs = vcs or GitClient()
        self.hosting = hosting or self._create_hosting_client()
        self.context = self._build_context()

    def _create_hosting_client(self) -> HostingApiClient:
        if self.config.github.backend == "api":
            return GitHubClient(self.config.github)
        return GhCliClient(self.config.github)

    def _build_context(self) -> SyncContext:
        repository = self.config.repository
        paths = self.config.paths

        remote = RemoteRepositoryClient(
            vcs=self.vcs,
            hosting=self.hosting,
            upstream=repository.upstream,
            forking_strategy=ForkingStrategy(repository.forking_strategy),
            origin_url=repository.origin_url,
            web_base_url=self.config.github.web_base_url,
            fork_ready_timeout=self.config.github.fork_ready_timeout
        )

        return SyncContext(
            managed=ManagedDirectory(
                path=paths.install_path,
                skills_subdir=paths.skills_subdir,
                private_prefix=paths.private_prefix
            ),
            backup_root=paths.backup_path,
            remote=remote,
            branch=repository.branch,
            entry_scripts=list(paths.entry_scripts)
        )

    def install(self) -> InstallResult:
        logger.info(f"Installing {self.config.repository.upstream} into {self.context.managed.path}")
        return InstallWorkflow(self.context).run()

    def update(self, upstream: bool = False) -> UpdateResult:
        mode = UpdateMode.UPSTREAM if upstream else UpdateMode.ORIGIN
        logger.info(f"Updating {self.context.managed.path} from {mode.value}")
        return UpdateWorkflow(self.context).run(mode)

    def status(self) -> Dict[str, Any]:
        """Read-only view of the managed directory, its remotes and backups."""
        ctx = self.context
        managed = ctx.managed
        installed = managed.exists and self.vcs.is_working_copy(managed.path)

        status = {
            "path": str(managed.path),
            "exists": managed.exists,
            "installed": installed,
            "branch": ctx.branch,
            "head": None,
            "local_changes": False,
            "remotes": {},
            "private_entries": [entry.name for entry in managed.private_entries()],
            "backups": [
                {"path": str(snapshot.path), "created_at": snapshot.created_at.isoformat(),
                 "entries": snapshot.entries}
                for snapshot in BackupSnapshot.discover(ctx.backup_root, managed.name)
            ],
        }

        if installed:
            status["branch"] = self.vcs.current_branch(managed.path)
            status["head"] = self.vcs.head(managed.path)
            status["local_changes"] = self.vcs.has_local_changes(managed.path)
            status["remotes"] = self.vcs.remotes(managed.path)

        return status
