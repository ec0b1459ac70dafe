"""
Result objects returned by the install and update workflows.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .remote import UpdateMode


@dataclass
class RestoreReport:
    """Outcome of restoring private entries from a snapshot."""
    restored: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


@dataclass
class UpdateResult:
    """What an update did to the managed directory."""
    mode: UpdateMode
    branch: str
    old_head: Optional[str] = None
    new_head: Optional[str] = None
    stashed: bool = False
    snapshot: Optional[Path] = None
    restore: RestoreReport = field(default_factory=RestoreReport)
    messages: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.old_head != self.new_head


@dataclass
class InstallResult:
    """What an install did to the managed directory."""
    action: str  # "fresh" or "updated"
    path: Path
    origin_url: Optional[str] = None
    github_user: Optional[str] = None
    snapshot: Optional[Path] = None
    moved_aside: bool = False
    restore: RestoreReport = field(default_factory=RestoreReport)
    update: Optional[UpdateResult] = None
    messages: List[str] = field(default_factory=list)
