"""
Explicit run context handed to every workflow.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List

from ..models import ManagedDirectory, ForkingStrategy
from ..repository import RemoteRepositoryClient


@dataclass
class SyncContext:
    """
    Everything a workflow needs to know about one run: where the managed
    directory lives, where backups go, which branch is tracked and which
    clients talk to git and the hosting service.
    """

    managed: ManagedDirectory
    backup_root: Path
    remote: RemoteRepositoryClient
    branch: str = "main"
    entry_scripts: List[str] = field(default_factory=lambda: ["install.sh", "update.sh"])
    clock: Callable[[], datetime] = datetime.now

    @property
    def vcs(self):
        return self.remote.vcs

    @property
    def hosting(self):
        return self.remote.hosting

    @property
    def needs_hosting(self) -> bool:
        """Only automatic forking talks to the hosting service."""
        return self.remote.forking_strategy is ForkingStrategy.AUTO
