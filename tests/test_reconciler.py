"""Tests for skillsync.sync.reconciler."""

import os
from datetime import datetime

from skillsync.models import BackupSnapshot, ManagedDirectory
from skillsync.sync import LocalTreeReconciler

from fakes import make_private_skill


def make_reconciler(tmp_path, prefix="private-"):
    managed = ManagedDirectory(path=tmp_path / ".claude", private_prefix=prefix)
    return LocalTreeReconciler(managed, tmp_path, clock=lambda: datetime(2026, 1, 2, 3, 4, 5))


class TestScan:
    """Test LocalTreeReconciler.scan()."""

    def test_missing_skills_dir_is_not_an_error(self, tmp_path):
        reconciler = make_reconciler(tmp_path)
        assert reconciler.scan() == []

    def test_only_prefixed_immediate_children(self, tmp_path):
        reconciler = make_reconciler(tmp_path)
        skills = reconciler.managed.skills_path
        make_private_skill(skills, "private-notes")
        make_private_skill(skills, "writing")
        make_private_skill(skills / "writing", "private-nested")
        (skills / "private-cheatsheet.md").write_text("x")

        names = [entry.name for entry in reconciler.scan()]
        assert names == ["private-cheatsheet.md", "private-notes"]

    def test_custom_prefix(self, tmp_path):
        reconciler = make_reconciler(tmp_path, prefix="local-")
        make_private_skill(reconciler.managed.skills_path, "local-stuff")
        make_private_skill(reconciler.managed.skills_path, "private-notes")
        assert [e.name for e in reconciler.scan()] == ["local-stuff"]


class TestPreserve:
    """Test LocalTreeReconciler.preserve()."""

    def test_no_snapshot_without_private_entries(self, tmp_path):
        reconciler = make_reconciler(tmp_path)
        make_private_skill(reconciler.managed.skills_path, "writing")

        assert reconciler.preserve() is None
        assert BackupSnapshot.discover(tmp_path, ".claude") == []

    def test_copies_private_entries(self, tmp_path):
        reconciler = make_reconciler(tmp_path)
        make_private_skill(reconciler.managed.skills_path, "private-notes", "my notes\n")

        snapshot = reconciler.preserve()

        assert snapshot is not None
        assert snapshot.path.parent == tmp_path
        assert snapshot.path.name == ".claude-backup-20260102-030405"
        assert snapshot.entries == ["private-notes"]
        assert (snapshot.skills_path / "private-notes" / "SKILL.md").read_text() == "my notes\n"
        # The original is left untouched
        assert (reconciler.managed.skills_path / "private-notes" / "SKILL.md").exists()

    def test_same_second_snapshots_do_not_collide(self, tmp_path):
        reconciler = make_reconciler(tmp_path)
        make_private_skill(reconciler.managed.skills_path, "private-notes")

        first = reconciler.preserve()
        second = reconciler.preserve()

        assert first.path != second.path
        assert second.path.name == ".claude-backup-20260102-030405-1"

    def test_symlinks_are_copied_as_links(self, tmp_path):
        reconciler = make_reconciler(tmp_path)
        target = make_private_skill(tmp_path / "elsewhere", "real")
        reconciler.managed.skills_path.mkdir(parents=True)
        os.symlink(target, reconciler.managed.skills_path / "private-link")

        snapshot = reconciler.preserve()

        copied = snapshot.skills_path / "private-link"
        assert copied.is_symlink()
        assert os.readlink(copied) == str(target)


class TestRestore:
    """Test LocalTreeReconciler.restore()."""

    def test_restore_none_is_noop(self, tmp_path):
        reconciler = make_reconciler(tmp_path)
        report = reconciler.restore(None)
        assert report.restored == []
        assert report.skipped == []

    def test_restores_missing_entries(self, tmp_path):
        reconciler = make_reconciler(tmp_path)
        skills = reconciler.managed.skills_path
        make_private_skill(skills, "private-notes", "keep me\n")
        snapshot = reconciler.preserve()

        # Simulate the destructive step wiping the tree
        for entry in list(skills.iterdir()):
            for child in entry.iterdir():
                child.unlink()
            entry.rmdir()
        skills.rmdir()

        report = reconciler.restore(snapshot)

        assert report.restored == ["private-notes"]
        assert (skills / "private-notes" / "SKILL.md").read_text() == "keep me\n"

    def test_never_overwrites_existing_entry(self, tmp_path):
        reconciler = make_reconciler(tmp_path)
        skills = reconciler.managed.skills_path
        make_private_skill(skills, "private-notes", "backed up\n")
        snapshot = reconciler.preserve()

        (skills / "private-notes" / "SKILL.md").write_text("from the fetched tree\n")

        report = reconciler.restore(snapshot)

        assert report.restored == []
        assert report.skipped == ["private-notes"]
        assert (skills / "private-notes" / "SKILL.md").read_text() == "from the fetched tree\n"


class TestMoveAside:
    """Test LocalTreeReconciler.move_aside()."""

    def test_moves_everything_including_hidden_entries(self, tmp_path):
        reconciler = make_reconciler(tmp_path)
        root = reconciler.managed.path
        make_private_skill(root / "skills", "private-notes")
        (root / "settings.json").parent.mkdir(parents=True, exist_ok=True)
        (root / "settings.json").write_text("{}")
        (root / ".hidden").write_text("h")

        snapshot = reconciler.preserve()
        moved = reconciler.move_aside(snapshot)

        assert moved == [".hidden", "settings.json", "skills"]
        assert root.is_dir()
        assert list(root.iterdir()) == []
        assert (snapshot.contents_path / "settings.json").read_text() == "{}"
        assert (snapshot.contents_path / "skills" / "private-notes" / "SKILL.md").exists()
        # Preserved copies are untouched by the move
        assert (snapshot.skills_path / "private-notes" / "SKILL.md").exists()

    def test_missing_directory(self, tmp_path):
        reconciler = make_reconciler(tmp_path)
        snapshot = reconciler.new_snapshot()
        assert reconciler.move_aside(snapshot) == []
