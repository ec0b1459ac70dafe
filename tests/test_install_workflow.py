"""Tests for skillsync.sync.install."""

import logging
import os
import stat

import pytest

from skillsync.error_handling import AuthenticationError, DependencyMissingError
from skillsync.models import BackupSnapshot, ForkingStrategy
from skillsync.sync import InstallWorkflow

from fakes import FORK, UPSTREAM, FakeRemote, make_private_skill, url_for


class TestFreshInstall:
    """Scenario A: nothing on disk yet."""

    def test_creates_working_copy_from_new_fork(self, make_context, managed_path, vcs, hosting):
        result = InstallWorkflow(make_context()).run()

        assert result.action == "fresh"
        assert result.github_user == "alice"
        assert result.origin_url == url_for(FORK)
        assert hosting.forks_created == [FORK]
        assert vcs.commands("clone") == [("clone", url_for(FORK), str(managed_path), "main")]
        assert vcs.remotes(managed_path) == {"origin": url_for(FORK), "upstream": url_for(UPSTREAM)}
        assert sorted(p.name for p in (managed_path / "skills").iterdir()) == ["writing"]
        assert result.snapshot is None
        assert result.moved_aside is False

    def test_existing_fork_is_reused(self, make_context, vcs, hosting):
        hosting.repositories.add(FORK)

        InstallWorkflow(make_context()).run()

        assert hosting.forks_created == []
        assert vcs.commands("clone")[0][1] == url_for(FORK)

    def test_entry_scripts_become_executable(self, make_context, managed_path):
        InstallWorkflow(make_context()).run()

        for name in ("install.sh", "update.sh"):
            mode = (managed_path / name).stat().st_mode
            assert mode & stat.S_IXUSR

    def test_chmod_failure_is_ignored(self, make_context, managed_path, monkeypatch):
        def broken_chmod(*args, **kwargs):
            raise PermissionError("read-only filesystem")

        monkeypatch.setattr(os, "chmod", broken_chmod)

        result = InstallWorkflow(make_context()).run()

        assert result.action == "fresh"


class TestInstallOverUntrackedDirectory:
    """Scenario B: the managed directory exists but is not a working copy."""

    def test_backs_up_whole_directory_and_restores_private_skills(self, make_context, managed_path, vcs):
        make_private_skill(managed_path / "skills", "private-notes", "secret\n")
        (managed_path / "settings.json").write_text('{"theme": "dark"}')

        result = InstallWorkflow(make_context()).run()

        assert result.moved_aside is True
        snapshot = result.snapshot
        assert snapshot is not None and snapshot.parent == managed_path.parent
        assert (snapshot / "contents" / "settings.json").read_text() == '{"theme": "dark"}'
        assert (snapshot / "skills" / "private-notes" / "SKILL.md").read_text() == "secret\n"

        assert vcs.is_working_copy(managed_path)
        assert (managed_path / "skills" / "private-notes" / "SKILL.md").read_text() == "secret\n"
        assert (managed_path / "skills" / "writing" / "SKILL.md").exists()
        assert not (managed_path / "settings.json").exists()
        assert result.restore.restored == ["private-notes"]

    def test_non_empty_directory_without_private_skills_still_backed_up(self, make_context, managed_path):
        managed_path.mkdir(parents=True)
        (managed_path / "CLAUDE.md").write_text("old")

        result = InstallWorkflow(make_context()).run()

        assert result.moved_aside is True
        assert (result.snapshot / "contents" / "CLAUDE.md").read_text() == "old"
        assert result.restore.restored == []

    def test_empty_directory_needs_no_backup(self, make_context, managed_path):
        managed_path.mkdir(parents=True)

        result = InstallWorkflow(make_context()).run()

        assert result.snapshot is None
        assert BackupSnapshot.discover(managed_path.parent, managed_path.name) == []

    def test_fetched_tree_wins_over_same_named_private_entry(self, make_context, managed_path, fork_remote):
        make_private_skill(managed_path / "skills", "private-notes", "local copy\n")
        fork_remote.files["skills/private-notes/SKILL.md"] = "committed upstream\n"

        result = InstallWorkflow(make_context()).run()

        assert result.restore.skipped == ["private-notes"]
        assert (managed_path / "skills" / "private-notes" / "SKILL.md").read_text() == "committed upstream\n"


class TestInstallOnInstalledDirectory:
    """Installing twice behaves like an update."""

    def test_second_install_delegates_to_update(self, make_context, managed_path, vcs, hosting, fork_remote):
        ctx = make_context()
        InstallWorkflow(ctx).run()
        make_private_skill(managed_path / "skills", "private-notes")
        fork_remote.push_commit("2" * 40, {"skills/writing/SKILL.md": "writing v2\n"})

        result = InstallWorkflow(ctx).run()

        assert result.action == "updated"
        assert result.update is not None and result.update.changed
        assert len(vcs.commands("clone")) == 1
        assert vcs.commands("pull_rebase") == [("pull_rebase", str(managed_path), "origin", "main")]
        assert hosting.forks_created == [FORK]
        assert (managed_path / "skills" / "writing" / "SKILL.md").read_text() == "writing v2\n"
        assert (managed_path / "skills" / "private-notes" / "SKILL.md").exists()

    def test_checkout_of_another_repository_is_moved_aside(self, make_context, managed_path, vcs, caplog):
        other = "https://github.com/alice/dotfiles.git"
        vcs.remote_repos[other] = FakeRemote(files={"README.md": "dotfiles\n"})
        vcs.clone(other, managed_path, "main")
        make_private_skill(managed_path / "skills", "private-notes")

        with caplog.at_level(logging.WARNING):
            result = InstallWorkflow(make_context()).run()

        assert result.action == "fresh"
        assert result.moved_aside is True
        assert vcs.commands("pull_rebase") == []
        assert (result.snapshot / "contents" / "README.md").read_text() == "dotfiles\n"
        assert vcs.remotes(managed_path)["origin"] == url_for(FORK)
        assert (managed_path / "skills" / "private-notes" / "SKILL.md").exists()
        assert "checkout of another repository" in caplog.text

    def test_private_entries_survive_repeated_cycles(self, make_context, managed_path):
        make_private_skill(managed_path / "skills", "private-a")
        ctx = make_context()

        for _ in range(3):
            InstallWorkflow(ctx).run()
            make_private_skill(managed_path / "skills", "private-b")

        names = {p.name for p in (managed_path / "skills").iterdir()}
        assert {"private-a", "private-b"} <= names


class TestPreflight:
    """Dependency and authentication checks fail fast."""

    def test_missing_git(self, make_context, vcs, managed_path):
        vcs.available = False

        with pytest.raises(DependencyMissingError) as exc_info:
            InstallWorkflow(make_context()).run()

        assert exc_info.value.dependency == "git"
        assert "brew install git" in exc_info.value.remediation
        assert not managed_path.exists()

    def test_missing_gh(self, make_context, hosting):
        hosting.available = False

        with pytest.raises(DependencyMissingError) as exc_info:
            InstallWorkflow(make_context()).run()

        assert exc_info.value.dependency == "gh"
        assert "gh auth login" in exc_info.value.remediation

    def test_not_authenticated(self, make_context, hosting, vcs):
        hosting.authenticated = False

        with pytest.raises(AuthenticationError) as exc_info:
            InstallWorkflow(make_context()).run()

        assert exc_info.value.remediation == "Run: gh auth login"
        assert vcs.calls == []


class TestForkingStrategies:
    """One workflow, three ways of choosing origin."""

    def test_fixed_url_skips_hosting(self, make_context, vcs, managed_path, fork_remote):
        ctx = make_context(strategy=ForkingStrategy.FIXED_URL, origin_url=url_for(FORK), hosting_client=None)

        result = InstallWorkflow(ctx).run()

        assert result.github_user is None
        assert result.origin_url == url_for(FORK)
        assert vcs.remotes(managed_path)["upstream"] == url_for(UPSTREAM)

    def test_none_clones_canonical(self, make_context, vcs, managed_path, hosting):
        hosting.authenticated = False
        ctx = make_context(strategy=ForkingStrategy.NONE)

        result = InstallWorkflow(ctx).run()

        assert result.origin_url == url_for(UPSTREAM)
        assert vcs.remotes(managed_path) == {"origin": url_for(UPSTREAM), "upstream": url_for(UPSTREAM)}
        assert hosting.forks_created == []
