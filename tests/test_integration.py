# Integration tests for gitbulk
# Real git repositories: bare remotes with local clones under a search root

import shutil
import subprocess
from pathlib import Path

import pytest

from gitbulk.sync import EventKind, OutcomeStatus, ResetMode, SkipReason, SyncEngine, SyncOperation, inspect
from gitbulk.sync.stash import STASH_LABEL_PREFIX

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(cwd: Path, *args: str) -> str:
    """Run a git command and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _configure(repo: Path) -> None:
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "user.name", "Test")
    _git(repo, "config", "pull.rebase", "false")


def _commit_file(repo: Path, filename: str, content: str, message: str) -> None:
    (repo / filename).write_text(content, encoding="utf-8")
    _git(repo, "add", filename)
    _git(repo, "commit", "-m", message)


def _stash_list(repo: Path) -> str:
    return _git(repo, "stash", "list")


@pytest.fixture
def remotes(temp_dir: Path, temp_home: Path) -> Path:
    """Directory for bare remotes, outside the search root."""
    path = temp_dir / "remotes"
    path.mkdir()
    return path


@pytest.fixture
def root(temp_dir: Path) -> Path:
    """Search root holding the working clones."""
    path = temp_dir / "root"
    path.mkdir()
    return path


def _make_remote(remotes: Path, name: str) -> Path:
    """Create a bare remote whose main branch is seeded through ``<name>-seed``."""
    remote = remotes / f"{name}.git"
    _git(remotes, "init", "--bare", "-b", "main", remote.name)

    seed = remotes / f"{name}-seed"
    _git(remotes, "clone", str(remote), seed.name)
    _configure(seed)
    _git(seed, "symbolic-ref", "HEAD", "refs/heads/main")
    _commit_file(seed, "README.md", "initial\n", "Initial commit")
    _git(seed, "push", "-u", "origin", "main")
    return remote


def _make_pair(remotes: Path, root: Path, name: str) -> tuple[Path, Path]:
    """
    Create a bare remote with one commit on main and a tracking clone.

    Returns:
        Tuple of (remote, clone).
    """
    remote = _make_remote(remotes, name)
    clone = root / name
    _git(root, "clone", str(remote), name)
    _configure(clone)
    return remote, clone


def _push_change(remotes: Path, name: str, filename: str, content: str) -> None:
    """Advance the remote through its seed clone."""
    seed = remotes / f"{name}-seed"
    _commit_file(seed, filename, content, f"Update {filename}")
    _git(seed, "push", "origin", "main")


class TestScenarios:
    """End-to-end runs over small repository trees."""

    def test_pull_updates_tracking_repo_and_skips_repo_without_remotes(self, remotes, root):
        _, a = _make_pair(remotes, root, "a")
        _push_change(remotes, "a", "README.md", "second\n")
        _git(a, "fetch")
        assert inspect(a).behind == 1

        b = root / "b"
        b.mkdir()
        _git(b, "init")
        (b / "scratch.txt").write_text("dirty\n", encoding="utf-8")

        summary = SyncEngine().run(root, 5, "pull")

        assert (summary.total, summary.success, summary.skipped, summary.error) == (2, 1, 1, 0)
        assert summary.exit_code == 0
        by_repo = {o.repo: o for o in summary.outcomes}
        assert by_repo[a].status == OutcomeStatus.SUCCESS
        assert by_repo[a].stash.created is False
        assert by_repo[b].reason == SkipReason.NO_REMOTES
        assert (a / "README.md").read_text(encoding="utf-8") == "second\n"
        assert (b / "scratch.txt").exists()

    def test_conflicting_rebase_fails_and_keeps_stash(self, remotes, root, reporter):
        _, c = _make_pair(remotes, root, "c")
        _push_change(remotes, "c", "README.md", "remote edit\n")
        _commit_file(c, "README.md", "local edit\n", "Local change")
        (c / "notes.txt").write_text("work in progress\n", encoding="utf-8")

        summary = SyncEngine(reporter=reporter).run(root, 5, "rebase")

        assert (summary.total, summary.success, summary.skipped, summary.error) == (1, 0, 0, 1)
        assert summary.exit_code != 0

        outcome = summary.outcomes[0]
        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.stash_preserved is True
        assert STASH_LABEL_PREFIX in _stash_list(c)
        # Rebase was aborted, local commit is intact
        assert not (c / ".git" / "rebase-merge").exists()
        assert (c / "README.md").read_text(encoding="utf-8") == "local edit\n"
        assert EventKind.STASH_PRESERVED in reporter.kinds()


class TestStashRoundTrip:
    """Stash protection around successful operations."""

    def test_dirty_tree_restored_after_rebase(self, remotes, root):
        _, repo = _make_pair(remotes, root, "repo")
        _push_change(remotes, "repo", "CHANGELOG.md", "v2\n")
        (repo / "README.md").write_text("local wip\n", encoding="utf-8")
        (repo / "untracked.txt").write_text("new\n", encoding="utf-8")

        summary = SyncEngine().run(root, 5, "rebase")

        assert summary.success == 1
        outcome = summary.outcomes[0]
        assert outcome.stash.created is True
        assert outcome.stash.popped is True
        assert (repo / "CHANGELOG.md").exists()
        assert (repo / "README.md").read_text(encoding="utf-8") == "local wip\n"
        assert (repo / "untracked.txt").exists()
        assert _stash_list(repo) == ""

    def test_dirty_submodule_leaves_user_stash_alone(self, remotes, root):
        lib = _make_remote(remotes, "lib")
        _, repo = _make_pair(remotes, root, "app")
        _git(repo, "-c", "protocol.file.allow=always", "submodule", "add", str(lib), "sub")
        _git(repo, "commit", "-m", "Add submodule")
        _git(repo, "push", "origin", "main")

        (repo / "README.md").write_text("user wip\n", encoding="utf-8")
        _git(repo, "stash", "push", "-m", "user wip")
        (repo / "sub" / "scratch.txt").write_text("x", encoding="utf-8")

        summary = SyncEngine().run(root, 5, "pull")

        assert summary.success == 1
        assert summary.outcomes[0].stash.created is False
        assert "user wip" in _stash_list(repo)
        assert len(_stash_list(repo).splitlines()) == 1
        assert (repo / "README.md").read_text(encoding="utf-8") == "initial\n"
        assert (repo / "sub" / "scratch.txt").exists()

    def test_only_own_stash_popped(self, remotes, root):
        _, repo = _make_pair(remotes, root, "repo")
        (repo / "README.md").write_text("older wip\n", encoding="utf-8")
        _git(repo, "stash", "push", "-m", "older wip")
        _push_change(remotes, "repo", "CHANGELOG.md", "v2\n")
        (repo / "notes.txt").write_text("current wip\n", encoding="utf-8")

        summary = SyncEngine().run(root, 5, "merge")

        assert summary.outcomes[0].stash.popped is True
        assert (repo / "notes.txt").exists()
        assert (repo / "README.md").read_text(encoding="utf-8") == "initial\n"
        assert "older wip" in _stash_list(repo)
        assert STASH_LABEL_PREFIX not in _stash_list(repo)

    def test_fetch_leaves_working_tree_alone(self, remotes, root):
        _, repo = _make_pair(remotes, root, "repo")
        _push_change(remotes, "repo", "CHANGELOG.md", "v2\n")
        (repo / "README.md").write_text("local wip\n", encoding="utf-8")

        summary = SyncEngine().run(root, 5, "fetch")

        assert summary.success == 1
        assert _stash_list(repo) == ""
        assert not (repo / "CHANGELOG.md").exists()
        assert inspect(repo).behind == 1


class TestResets:
    """Reset variants against real repositories."""

    def test_pull_reset_with_stash_restores_local_changes(self, remotes, root):
        _, repo = _make_pair(remotes, root, "repo")
        _push_change(remotes, "repo", "NEWS.md", "news\n")
        (repo / "README.md").write_text("local edit\n", encoding="utf-8")

        summary = SyncEngine().run(root, 5, SyncOperation.reset_to(ResetMode.PULL))

        assert summary.success == 1
        assert (repo / "NEWS.md").exists()
        assert (repo / "README.md").read_text(encoding="utf-8") == "local edit\n"
        assert _stash_list(repo) == ""

    def test_hard_reset_without_stash_discards_changes(self, remotes, root):
        _, repo = _make_pair(remotes, root, "repo")
        (repo / "README.md").write_text("throw me away\n", encoding="utf-8")

        summary = SyncEngine().run(root, 5, SyncOperation.reset_to(ResetMode.HARD), auto_stash=False)

        assert summary.success == 1
        assert (repo / "README.md").read_text(encoding="utf-8") == "initial\n"
        assert _stash_list(repo) == ""

    def test_clean_reset_without_stash_removes_untracked(self, remotes, root):
        _, repo = _make_pair(remotes, root, "repo")
        (repo / "build").mkdir()
        (repo / "build" / "out.o").write_text("x", encoding="utf-8")

        summary = SyncEngine().run(root, 5, SyncOperation.reset_to(ResetMode.CLEAN), auto_stash=False)

        assert summary.success == 1
        assert not (repo / "build").exists()
        assert _stash_list(repo) == ""

    def test_origin_reset_returns_to_default_branch(self, remotes, root):
        _, repo = _make_pair(remotes, root, "repo")
        _git(repo, "checkout", "-b", "feature")
        _commit_file(repo, "feature.txt", "f\n", "Feature work")

        summary = SyncEngine().run(root, 5, SyncOperation.reset_to(ResetMode.ORIGIN))

        assert summary.success == 1
        assert _git(repo, "symbolic-ref", "--short", "HEAD") == "main"
        assert not (repo / "feature.txt").exists()


class TestWithoutUpstream:
    """Pulls that have to name their source explicitly."""

    def test_forced_pull_on_branch_without_upstream(self, remotes, root):
        _, repo = _make_pair(remotes, root, "repo")
        _git(repo, "branch", "--unset-upstream")
        _push_change(remotes, "repo", "NEWS.md", "news\n")

        summary = SyncEngine().run(root, 5, "pull", force=True)

        assert summary.success == 1
        assert summary.outcomes[0].message == "Pulled from origin/main"
        assert (repo / "NEWS.md").exists()

    def test_pull_reset_on_detached_head(self, remotes, root):
        _, repo = _make_pair(remotes, root, "repo")
        _git(repo, "checkout", "--detach")
        _push_change(remotes, "repo", "NEWS.md", "news\n")

        summary = SyncEngine().run(root, 5, SyncOperation.reset_to(ResetMode.PULL))

        assert summary.success == 1
        assert (repo / "NEWS.md").exists()


class TestSkips:
    """Repositories the engine must leave untouched."""

    def test_detached_head_skipped(self, remotes, root):
        _, repo = _make_pair(remotes, root, "repo")
        _git(repo, "checkout", "--detach")

        summary = SyncEngine().run(root, 5, "pull")

        assert summary.skipped == 1
        assert summary.outcomes[0].reason == SkipReason.DETACHED_HEAD

    def test_branch_without_upstream_skipped(self, remotes, root):
        _, repo = _make_pair(remotes, root, "repo")
        _git(repo, "checkout", "-b", "local-only")
        (repo / "wip.txt").write_text("x", encoding="utf-8")

        summary = SyncEngine().run(root, 5, "merge")

        assert summary.skipped == 1
        assert summary.outcomes[0].reason == SkipReason.NO_UPSTREAM
        assert _stash_list(repo) == ""
        assert (repo / "wip.txt").exists()
