# gitbulk Sync Actions
# Operation variants and their git command sequences

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from gitbulk.errors import InvalidOperationError
from gitbulk.git.operations import (
    abort_merge,
    abort_rebase,
    checkout,
    clean,
    fetch,
    get_remote_head_branch,
    pull,
    ref_exists,
    reset,
)
from gitbulk.sync.inspector import RepositoryState
from gitbulk.sync.outcome import SkipReason


DEFAULT_BRANCH_CANDIDATES = ("main", "master")


class OperationType(str, Enum):
    """Kinds of bulk operation."""

    RESET = "reset"
    PULL = "pull"
    FETCH = "fetch"
    REBASE = "rebase"
    MERGE = "merge"
    STASH_PULL = "stash-pull"


class ResetMode(str, Enum):
    """Flavours of the reset operation."""

    SOFT = "soft"
    HARD = "hard"
    CLEAN = "clean"  # hard reset, then remove untracked files
    PULL = "pull"  # hard reset, then pull
    ORIGIN = "origin"  # reset to origin's default branch


class OperationFamily(str, Enum):
    """Token namespaces accepted on the command line."""

    SYNC = "sync"
    RESET = "reset"


SYNC_TOKENS: dict[str, OperationType] = {
    "pull": OperationType.PULL,
    "fetch": OperationType.FETCH,
    "rebase": OperationType.REBASE,
    "merge": OperationType.MERGE,
    "stash-pull": OperationType.STASH_PULL,
}

RESET_TOKENS: dict[str, ResetMode] = {mode.value: mode for mode in ResetMode}


@dataclass(frozen=True)
class SyncOperation:
    """
    A bulk operation selected for a run.

    Reset operations carry a mode; every other type must not.
    """

    type: OperationType
    reset_mode: Optional[ResetMode] = None

    def __post_init__(self) -> None:
        if self.type == OperationType.RESET and self.reset_mode is None:
            raise ValueError("Reset operation requires a reset mode")
        if self.type != OperationType.RESET and self.reset_mode is not None:
            raise ValueError(f"Operation '{self.type.value}' does not take a reset mode")

    @classmethod
    def reset_to(cls, mode: ResetMode) -> "SyncOperation":
        return cls(OperationType.RESET, mode)

    @property
    def name(self) -> str:
        """Human-readable operation name, e.g. "rebase" or "reset-hard"."""
        if self.reset_mode is not None:
            return f"{self.type.value}-{self.reset_mode.value}"
        return self.type.value

    @property
    def is_read_only(self) -> bool:
        """Fetch never touches the working tree."""
        return self.type == OperationType.FETCH

    @property
    def is_mutating(self) -> bool:
        return not self.is_read_only

    @property
    def requires_upstream(self) -> bool:
        return self.type in (
            OperationType.PULL,
            OperationType.REBASE,
            OperationType.MERGE,
            OperationType.STASH_PULL,
        )

    @property
    def tolerates_missing_upstream(self) -> bool:
        """Operations that may run without an upstream in force mode."""
        return self.type in (OperationType.PULL, OperationType.STASH_PULL)

    @property
    def always_stash(self) -> bool:
        return self.type == OperationType.STASH_PULL

    @property
    def restores_stash(self) -> bool:
        """Whether a protective stash is popped after success."""
        return self.is_mutating


def parse_operation(token: str, family: OperationFamily = OperationFamily.SYNC) -> SyncOperation:
    """
    Parse an operation selector.

    Args:
        token: Operation token, e.g. "rebase", "hard" or "reset-origin".
        family: Namespace for bare tokens ("pull" is a plain pull in the
                sync family and a hard reset followed by pull in the reset family).

    Returns:
        SyncOperation.

    Raises:
        InvalidOperationError: If the token is not recognized.
    """
    normalized = token.strip().lower()

    if normalized.startswith("reset-"):
        mode = RESET_TOKENS.get(normalized[len("reset-") :])
        if mode is not None:
            return SyncOperation.reset_to(mode)
    elif family == OperationFamily.RESET:
        mode = RESET_TOKENS.get(normalized)
        if mode is not None:
            return SyncOperation.reset_to(mode)
    else:
        op_type = SYNC_TOKENS.get(normalized)
        if op_type is not None:
            return SyncOperation(op_type)

    valid = RESET_TOKENS if family == OperationFamily.RESET else SYNC_TOKENS
    raise InvalidOperationError(f"Unknown {family.value} operation: '{token}' (expected one of: {', '.join(valid)})")


@dataclass
class ActionResult:
    """Result of executing an operation on one repository."""

    operation: SyncOperation
    success: bool
    message: str = ""
    skip_reason: Optional[SkipReason] = None

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None


def resolve_default_branch(repo: Path, *, remote: str = "origin") -> Optional[str]:
    """
    Find the remote's default branch.

    The remote's symbolic HEAD is preferred; otherwise "main" and then
    "master" are tried in that order.

    Args:
        repo: Repository path.
        remote: Remote name.

    Returns:
        Branch name, or None if no candidate exists.
    """
    head = get_remote_head_branch(repo, remote=remote)
    if head and ref_exists(f"refs/remotes/{remote}/{head}", repo):
        return head

    for candidate in DEFAULT_BRANCH_CANDIDATES:
        if ref_exists(f"refs/remotes/{remote}/{candidate}", repo):
            return candidate

    return None


def check_preconditions(
    repo: Path,
    operation: SyncOperation,
    state: RepositoryState,
    *,
    force: bool = False,
) -> Optional[SkipReason]:
    """
    Decide whether a repository must be skipped before anything is changed.

    Args:
        repo: Repository path.
        operation: Operation about to run.
        state: Inspected repository state.
        force: Allow tolerant operations to run without an upstream.

    Returns:
        SkipReason, or None if the operation may proceed.
    """
    if not state.has_remotes:
        return SkipReason.NO_REMOTES

    if operation.requires_upstream:
        if state.is_detached:
            return SkipReason.DETACHED_HEAD
        if state.upstream is None and not (force and operation.tolerates_missing_upstream):
            return SkipReason.NO_UPSTREAM

    if operation.reset_mode == ResetMode.ORIGIN and resolve_default_branch(repo) is None:
        return SkipReason.NO_DEFAULT_BRANCH

    return None


def _preferred_remote(remotes: list[str]) -> Optional[str]:
    if "origin" in remotes:
        return "origin"
    return remotes[0] if remotes else None


def _explicit_source(repo: Path, state: Optional[RepositoryState]) -> tuple[Optional[str], Optional[str]]:
    """
    Remote and branch to pull from when the branch tracks nothing.

    Returns:
        (None, None) when the upstream can be used, or when nothing is known
        about the repository.
    """
    if state is None or state.upstream is not None:
        return None, None

    remote = _preferred_remote(state.remotes)
    if remote is None:
        return None, None
    return remote, state.current_branch or resolve_default_branch(repo, remote=remote)


def _pull_or_abort(
    repo: Path,
    *,
    rebase: Optional[bool] = None,
    remote: Optional[str] = None,
    branch: Optional[str] = None,
) -> bool:
    """Pull, and back out of a half-finished merge or rebase on failure."""
    source = {"remote": remote, "branch": branch} if remote else {}
    if pull(repo, rebase=rebase, **source):
        return True

    if rebase:
        abort_rebase(repo)
    elif not abort_merge(repo) and rebase is None:
        # pull.rebase may be configured
        abort_rebase(repo)
    return False


def _reset_soft(repo: Path, operation: SyncOperation, state: Optional[RepositoryState]) -> ActionResult:
    return ActionResult(operation, reset(repo, mode="soft"), "Soft reset to HEAD")


def _reset_hard(repo: Path, operation: SyncOperation, state: Optional[RepositoryState]) -> ActionResult:
    return ActionResult(operation, reset(repo, mode="hard"), "Hard reset to HEAD")


def _reset_clean(repo: Path, operation: SyncOperation, state: Optional[RepositoryState]) -> ActionResult:
    if not reset(repo, mode="hard"):
        return ActionResult(operation, False, "Hard reset failed")
    if not clean(repo):
        return ActionResult(operation, False, "Removing untracked files failed")
    return ActionResult(operation, True, "Hard reset and cleaned untracked files")


def _reset_pull(repo: Path, operation: SyncOperation, state: Optional[RepositoryState]) -> ActionResult:
    remote, branch = _explicit_source(repo, state)
    if not reset(repo, mode="hard"):
        return ActionResult(operation, False, "Hard reset failed")
    if not _pull_or_abort(repo, remote=remote, branch=branch):
        return ActionResult(operation, False, "Pull failed")
    return ActionResult(operation, True, "Hard reset and pulled latest changes")


def _reset_origin(repo: Path, operation: SyncOperation, state: Optional[RepositoryState]) -> ActionResult:
    branch = resolve_default_branch(repo)
    if branch is None:
        return ActionResult(operation, False, skip_reason=SkipReason.NO_DEFAULT_BRANCH)

    if not checkout(branch, repo):
        return ActionResult(operation, False, f"Checkout of '{branch}' failed")
    if not reset(repo, mode="hard", ref=f"origin/{branch}"):
        return ActionResult(operation, False, f"Reset to origin/{branch} failed")
    if not _pull_or_abort(repo, remote="origin", branch=branch):
        return ActionResult(operation, False, f"Pull of origin/{branch} failed")
    return ActionResult(operation, True, f"Reset to origin/{branch}")


def _pull(repo: Path, operation: SyncOperation, state: Optional[RepositoryState]) -> ActionResult:
    remote, branch = _explicit_source(repo, state)
    if _pull_or_abort(repo, remote=remote, branch=branch):
        if remote:
            return ActionResult(operation, True, f"Pulled from {remote}/{branch}")
        return ActionResult(operation, True, "Pulled from upstream")
    return ActionResult(operation, False, "Pull failed")


def _fetch(repo: Path, operation: SyncOperation, state: Optional[RepositoryState]) -> ActionResult:
    if fetch(repo, all_remotes=True, prune=True):
        return ActionResult(operation, True, "Fetch complete, no merge performed")
    return ActionResult(operation, False, "Fetch failed")


def _rebase(repo: Path, operation: SyncOperation, state: Optional[RepositoryState]) -> ActionResult:
    if _pull_or_abort(repo, rebase=True):
        return ActionResult(operation, True, "Rebased on upstream")
    return ActionResult(operation, False, "Rebase failed (aborted)")


def _merge(repo: Path, operation: SyncOperation, state: Optional[RepositoryState]) -> ActionResult:
    if _pull_or_abort(repo, rebase=False):
        return ActionResult(operation, True, "Merged from upstream")
    return ActionResult(operation, False, "Merge failed (aborted)")


_Handler = Callable[[Path, SyncOperation, Optional[RepositoryState]], ActionResult]

_RESET_HANDLERS: dict[ResetMode, _Handler] = {
    ResetMode.SOFT: _reset_soft,
    ResetMode.HARD: _reset_hard,
    ResetMode.CLEAN: _reset_clean,
    ResetMode.PULL: _reset_pull,
    ResetMode.ORIGIN: _reset_origin,
}

_HANDLERS: dict[OperationType, _Handler] = {
    OperationType.PULL: _pull,
    OperationType.STASH_PULL: _pull,
    OperationType.FETCH: _fetch,
    OperationType.REBASE: _rebase,
    OperationType.MERGE: _merge,
}


def execute_operation(
    repo: Path,
    operation: SyncOperation,
    state: Optional[RepositoryState] = None,
) -> ActionResult:
    """
    Run the git command sequence for an operation.

    Args:
        repo: Repository path.
        operation: Operation to execute.
        state: Inspected state; without an upstream, pulls name a remote and branch.

    Returns:
        ActionResult with success status.
    """
    if operation.reset_mode is not None:
        handler = _RESET_HANDLERS[operation.reset_mode]
    else:
        handler = _HANDLERS[operation.type]
    return handler(repo, operation, state)
