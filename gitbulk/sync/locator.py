# gitbulk Repository Locator
# Depth-bounded discovery of git repositories under a root directory

import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from gitbulk.sync.events import EventKind, NullReporter, Reporter, SyncEvent


GIT_MARKER = ".git"


@dataclass(frozen=True, order=True)
class RepositoryHandle:
    """Absolute path of a discovered repository root."""

    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    def __str__(self) -> str:
        return str(self.path)


def is_repository_root(path: Path) -> bool:
    """
    Check if a directory holds repository metadata.

    A ``.git`` directory (regular clone) or ``.git`` file (worktree,
    submodule) both count.
    """
    return os.path.exists(path / GIT_MARKER)


class RepositoryLocator:
    """
    Walks a directory tree and yields each repository exactly once.

    Repositories are leaves of the walk: nothing below a repository root is
    visited, so nested repositories are never reported separately.
    """

    def __init__(
        self,
        *,
        follow_symlinks: bool = False,
        exclude: Optional[list[str]] = None,
        reporter: Optional[Reporter] = None,
    ):
        """
        Initialize locator.

        Args:
            follow_symlinks: Descend into symlinked directories.
            exclude: Directory names that are never descended into.
            reporter: Receives depth-limit and unreadable-directory warnings.
        """
        self.follow_symlinks = follow_symlinks
        self.exclude = set(exclude or [])
        self.reporter = reporter or NullReporter()

    def locate(self, root: Path, max_depth: int) -> Iterator[RepositoryHandle]:
        """
        Lazily yield repositories under root.

        Args:
            root: Directory to start from (depth 0).
            max_depth: Deepest level whose children are still enumerated.

        Yields:
            RepositoryHandle for every repository found, in sorted walk order.
        """
        visited: set[str] = set()
        yield from self._walk(Path(root).resolve(), 0, max_depth, visited)

    def _walk(self, directory: Path, depth: int, max_depth: int, visited: set[str]) -> Iterator[RepositoryHandle]:
        if self.follow_symlinks:
            real = os.path.realpath(directory)
            if real in visited:
                return
            visited.add(real)

        if is_repository_root(directory):
            yield RepositoryHandle(directory)
            return

        if depth > max_depth:
            self.reporter.report(
                SyncEvent(EventKind.DEPTH_LIMIT, directory, f"Max depth reached at: {directory}")
            )
            return

        for child in self._child_directories(directory):
            yield from self._walk(child, depth + 1, max_depth, visited)

    def _child_directories(self, directory: Path) -> list[Path]:
        """List subdirectories, warning instead of failing on unreadable ones."""
        children: list[Path] = []
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    if entry.name in self.exclude:
                        continue
                    try:
                        if not entry.is_dir(follow_symlinks=self.follow_symlinks):
                            continue
                    except OSError:
                        continue
                    children.append(Path(entry.path))
        except OSError as e:
            self.reporter.report(
                SyncEvent(EventKind.UNREADABLE, directory, f"Cannot access: {directory} ({e.strerror or e})")
            )
            return []

        return sorted(children)


def locate(
    root: Path,
    max_depth: int,
    *,
    follow_symlinks: bool = False,
    exclude: Optional[list[str]] = None,
    reporter: Optional[Reporter] = None,
) -> Iterator[RepositoryHandle]:
    """
    Yield repositories under root.

    Convenience wrapper around RepositoryLocator.
    """
    locator = RepositoryLocator(follow_symlinks=follow_symlinks, exclude=exclude, reporter=reporter)
    return locator.locate(root, max_depth)
