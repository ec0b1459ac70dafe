"""
Backup snapshot data model.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


@dataclass
class BackupSnapshot:
    """
    A timestamped sibling directory holding copies made before a destructive step.

    Layout::

        <root>/<managed-name>-backup-YYYYMMDD-HHMMSS/
            skills/<private-*>   private entries copied by Preserve
            contents/...         the previous managed directory (install move-aside)

    Snapshots are never deleted by skillsync.
    """

    path: Path
    created_at: datetime = field(default_factory=datetime.now)
    entries: List[str] = field(default_factory=list)

    SKILLS_DIR = "skills"
    CONTENTS_DIR = "contents"

    @property
    def skills_path(self) -> Path:
        return self.path / self.SKILLS_DIR

    @property
    def contents_path(self) -> Path:
        return self.path / self.CONTENTS_DIR

    @staticmethod
    def name_prefix(managed_name: str) -> str:
        return f"{managed_name}-backup-"

    @classmethod
    def create(cls, root: Path, managed_name: str, now: Optional[datetime] = None) -> "BackupSnapshot":
        """
        Create a new, empty snapshot directory under ``root``.

        If the timestamped name is already taken (two snapshots in the same
        second), a numeric suffix is appended.
        """
        now = now or datetime.now()
        root.mkdir(parents=True, exist_ok=True)
        base_name = f"{cls.name_prefix(managed_name)}{now.strftime(TIMESTAMP_FORMAT)}"

        candidate = root / base_name
        counter = 1
        while True:
            try:
                candidate.mkdir()
                break
            except FileExistsError:
                candidate = root / f"{base_name}-{counter}"
                counter += 1

        return cls(path=candidate, created_at=now)

    @classmethod
    def discover(cls, root: Path, managed_name: str) -> List["BackupSnapshot"]:
        """List existing snapshots for a managed directory, oldest first."""
        if not root.is_dir():
            return []

        prefix = cls.name_prefix(managed_name)
        snapshots = []
        for entry in root.iterdir():
            if not entry.is_dir() or not entry.name.startswith(prefix):
                continue
            stamp = entry.name[len(prefix):len(prefix) + 15]
            try:
                created_at = datetime.strptime(stamp, TIMESTAMP_FORMAT)
            except ValueError:
                continue
            skills_dir = entry / cls.SKILLS_DIR
            entries = sorted(p.name for p in skills_dir.iterdir()) if skills_dir.is_dir() else []
            snapshots.append(cls(path=entry, created_at=created_at, entries=entries))

        return sorted(snapshots, key=lambda s: (s.created_at, s.path.name))
