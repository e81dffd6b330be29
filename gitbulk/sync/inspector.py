# gitbulk Working Tree Inspector
# Queries the repository state needed to decide whether an operation is safe

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from gitbulk.git.operations import (
    GitError,
    get_ahead_behind,
    get_current_branch,
    get_upstream,
    has_uncommitted_changes,
    list_remotes,
)


@dataclass
class RepositoryState:
    """
    Mutable state of a repository, recomputed on every run.

    ``current_branch`` is None exactly when HEAD is detached. ``ahead`` and
    ``behind`` are only meaningful when ``upstream`` is set; otherwise both
    are 0.
    """

    is_dirty: bool = False
    current_branch: Optional[str] = None
    upstream: Optional[str] = None
    ahead: int = 0
    behind: int = 0
    remotes: list[str] = field(default_factory=list)

    @property
    def has_remotes(self) -> bool:
        return len(self.remotes) > 0

    @property
    def is_detached(self) -> bool:
        return self.current_branch is None

    @property
    def has_upstream(self) -> bool:
        return self.upstream is not None

    @property
    def is_diverged(self) -> bool:
        return self.ahead > 0 and self.behind > 0

    @property
    def is_up_to_date(self) -> bool:
        return self.has_upstream and self.ahead == 0 and self.behind == 0


def _is_dirty(repo: Path) -> bool:
    # An unreadable status is treated as dirty so the tree still gets stashed
    try:
        return has_uncommitted_changes(repo)
    except GitError:
        return True


def inspect(repo: Path) -> RepositoryState:
    """
    Inspect a repository.

    Every query degrades to its "absent" value instead of raising.

    Args:
        repo: Repository path.

    Returns:
        RepositoryState.
    """
    state = RepositoryState(remotes=list_remotes(repo))
    state.current_branch = get_current_branch(repo)

    if state.current_branch is not None:
        state.upstream = get_upstream(repo)

    state.is_dirty = _is_dirty(repo)

    if state.upstream is not None:
        state.ahead, state.behind = get_ahead_behind(repo)

    return state
