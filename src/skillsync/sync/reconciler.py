"""
Keeps private skills safe across destructive tree replacement.

The reconciler runs as linear steps around a destructive operation
performed by the caller::

    entries  = reconciler.scan()
    snapshot = reconciler.preserve(entries)   # None when nothing is private
    ...caller replaces the tree (clone, rebase)...
    report   = reconciler.restore(snapshot)
"""

import os
import shutil
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from ..models import BackupSnapshot, ManagedDirectory, RestoreReport

logger = logging.getLogger(__name__)


def copy_entry(source: Path, destination: Path) -> None:
    """Copy a file, directory or symlink, keeping symlinks as links."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    if source.is_symlink():
        os.symlink(os.readlink(source), destination)
    elif source.is_dir():
        shutil.copytree(source, destination, symlinks=True)
    else:
        shutil.copy2(source, destination)


class LocalTreeReconciler:
    """
    Backs up private entries, and puts them back after the tree was replaced.

    Only copies are made; the private entries in the managed directory are
    never modified.
    """

    def __init__(self, managed: ManagedDirectory, backup_root: Path,
                 clock: Callable[[], datetime] = datetime.now):
        self.managed = managed
        self.backup_root = Path(backup_root)
        self.clock = clock

    def scan(self) -> List[Path]:
        """Private entries currently in the skills directory (empty if it is missing)."""
        entries = self.managed.private_entries()
        logger.debug(f"Found {len(entries)} private entries under {self.managed.skills_path}")
        return entries

    def new_snapshot(self) -> BackupSnapshot:
        snapshot = BackupSnapshot.create(self.backup_root, self.managed.name, now=self.clock())
        logger.info(f"Created backup snapshot {snapshot.path}")
        return snapshot

    def preserve(self, entries: Optional[List[Path]] = None) -> Optional[BackupSnapshot]:
        """
        Copy private entries into a fresh snapshot.

        No snapshot is created when there is nothing to preserve.
        """
        entries = self.scan() if entries is None else entries
        if not entries:
            return None

        logger.info("Backing up private skills...")
        snapshot = self.new_snapshot()
        for entry in entries:
            copy_entry(entry, snapshot.skills_path / entry.name)
            snapshot.entries.append(entry.name)
            logger.debug(f"Backed up {entry.name}")

        return snapshot

    def move_aside(self, snapshot: BackupSnapshot) -> List[str]:
        """
        Move the whole content of the managed directory into ``snapshot``,
        leaving the managed directory empty.

        Returns:
            Names of the moved entries
        """
        if not self.managed.exists:
            return []

        moved = []
        snapshot.contents_path.mkdir(parents=True, exist_ok=True)
        for child in sorted(self.managed.path.iterdir(), key=lambda p: p.name):
            shutil.move(str(child), str(snapshot.contents_path / child.name))
            moved.append(child.name)

        logger.info(f"Moved {len(moved)} existing entries from {self.managed.path} to {snapshot.contents_path}")
        return moved

    def restore(self, snapshot: Optional[BackupSnapshot]) -> RestoreReport:
        """
        Copy private entries from ``snapshot`` back into the skills directory.

        An entry is only restored when nothing of the same name exists at the
        destination; existing entries are never overwritten.
        """
        report = RestoreReport()
        if snapshot is None or not snapshot.skills_path.is_dir():
            return report

        logger.info("Restoring private skills...")
        for source in sorted(snapshot.skills_path.iterdir(), key=lambda p: p.name):
            if not self.managed.is_private_name(source.name):
                continue

            destination = self.managed.skills_path / source.name
            if os.path.lexists(destination):
                report.skipped.append(source.name)
                logger.info(f"  Kept existing: {source.name}")
                continue

            copy_entry(source, destination)
            report.restored.append(source.name)
            logger.info(f"  Restored: {source.name}")

        return report
