# gitbulk Test Fixtures
# Pytest fixtures for gitbulk tests

import itertools
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from gitbulk.sync.events import EventKind, SyncEvent


class RecordingReporter:
    """Reporter that keeps every event for later assertions."""

    def __init__(self):
        self.events: list[SyncEvent] = []

    def report(self, event: SyncEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[EventKind]:
        return [e.kind for e in self.events]

    def of_kind(self, kind: EventKind) -> list[SyncEvent]:
        return [e for e in self.events if e.kind == kind]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("GITBULK_CONFIG", raising=False)
    return home


@pytest.fixture
def reporter() -> RecordingReporter:
    """Create a reporter that records events."""
    return RecordingReporter()


@pytest.fixture
def make_repo(temp_dir: Path) -> Callable[..., Path]:
    """
    Factory for fake repository roots.

    Creates a directory containing a ``.git`` marker (a directory by
    default, a file when ``worktree=True``).
    """

    def _make(relative: str, *, worktree: bool = False) -> Path:
        path = temp_dir / relative
        path.mkdir(parents=True, exist_ok=True)
        marker = path / ".git"
        if worktree:
            marker.write_text("gitdir: /elsewhere/.git/worktrees/x\n", encoding="utf-8")
        else:
            marker.mkdir(exist_ok=True)
        return path

    return _make


@pytest.fixture
def sample_config() -> dict:
    """Create sample configuration dict."""
    return {
        "sync": {
            "max_depth": 3,
            "reset_max_depth": 2,
            "default_operation": "pull",
            "default_reset_mode": "clean",
            "auto_stash": True,
            "force": False,
            "follow_symlinks": False,
            "exclude": ["node_modules", "vendor"],
        },
        "clone": {
            "method": "ssh",
            "target_dir": "~/src",
            "include_forks": True,
            "include_private": False,
            "jobs": 2,
            "update_existing": True,
        },
        "output": {"verbose": True, "colored": False},
    }


@pytest.fixture
def config_file(temp_home: Path, sample_config: dict) -> Path:
    """Create a configuration file."""
    config_dir = temp_home / ".config" / "gitbulk"
    config_dir.mkdir(parents=True)
    config_path = config_dir / "config.yaml"

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(sample_config, f, default_flow_style=False)

    return config_path


@pytest.fixture
def fake_stash_refs() -> Generator[None, None, None]:
    """
    Stand in for the stash list when stash_push itself is mocked.

    Every stash head lookup returns a new commit id, so each push counts as
    saved, and every recorded entry is found at ``stash@{0}``.
    """
    commits = (f"stash-{n}" for n in itertools.count())
    with patch("gitbulk.sync.stash.get_stash_head", side_effect=lambda repo: next(commits)):
        with patch("gitbulk.sync.stash.find_stash_entry", return_value="stash@{0}"):
            yield
