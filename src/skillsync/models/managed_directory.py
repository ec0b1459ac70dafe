"""
Managed directory data model.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List


@dataclass
class ManagedDirectory:
    """
    The single filesystem root skillsync owns and keeps in sync
    (by default ``~/.claude``).

    Entries directly under ``skills/`` whose names start with
    ``private_prefix`` are private: they are never committed and never
    overwritten by fetched content.
    """

    path: Path
    skills_subdir: str = "skills"
    private_prefix: str = "private-"

    def __post_init__(self):
        self.path = Path(self.path).expanduser()

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def skills_path(self) -> Path:
        return self.path / self.skills_subdir

    @property
    def git_dir(self) -> Path:
        return self.path / ".git"

    @property
    def exists(self) -> bool:
        return self.path.is_dir()

    def is_empty(self) -> bool:
        """True when the directory is missing or has no entries at all."""
        if not self.exists:
            return True
        return next(self.path.iterdir(), None) is None

    def is_private_name(self, name: str) -> bool:
        return name.startswith(self.private_prefix)

    def private_entries(self) -> List[Path]:
        """
        Immediate children of the skills directory carrying the private
        prefix, sorted by name. Empty when the skills directory is missing.
        """
        if not self.skills_path.is_dir():
            return []
        return sorted(
            (entry for entry in self.skills_path.iterdir() if self.is_private_name(entry.name)),
            key=lambda entry: entry.name
        )
