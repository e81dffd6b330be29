# gitbulk Sync Engine
# Drives discovery, inspection, stash protection and operations for a run

import os
from pathlib import Path
from typing import Optional, Union

from gitbulk.errors import RootPathError
from gitbulk.git.operations import GitError, is_git_repo
from gitbulk.sync.actions import (
    OperationFamily,
    SyncOperation,
    check_preconditions,
    execute_operation,
    parse_operation,
)
from gitbulk.sync.events import EventKind, NullReporter, Reporter, SyncEvent
from gitbulk.sync.inspector import RepositoryState, inspect
from gitbulk.sync.locator import RepositoryHandle, RepositoryLocator
from gitbulk.sync.outcome import FailReason, OperationOutcome, RunSummary, SkipReason
from gitbulk.sync.stash import StashError, StashGuard, StashRecord


def validate_root(root: Path) -> Path:
    """
    Resolve the root path of a run.

    Args:
        root: Root directory.

    Returns:
        Absolute, resolved path.

    Raises:
        RootPathError: If root is not a readable directory.
    """
    resolved = Path(root).expanduser().resolve()
    if not resolved.is_dir():
        raise RootPathError(f"Directory does not exist: {root}")
    if not os.access(resolved, os.R_OK | os.X_OK):
        raise RootPathError(f"Directory is not readable: {root}")
    return resolved


class SyncEngine:
    """
    Main synchronization engine.

    Processes repositories one at a time; a failure in one repository never
    stops the walk.
    """

    def __init__(
        self,
        *,
        reporter: Optional[Reporter] = None,
        stash_guard: Optional[StashGuard] = None,
        follow_symlinks: bool = False,
        exclude: Optional[list[str]] = None,
    ):
        """
        Initialize sync engine.

        Args:
            reporter: Receives progress events (discarded if not provided).
            stash_guard: Stash guard (creates new one if not provided).
            follow_symlinks: Descend into symlinked directories while walking.
            exclude: Directory names never descended into.
        """
        self.reporter = reporter or NullReporter()
        self.stash_guard = stash_guard or StashGuard()
        self.locator = RepositoryLocator(
            follow_symlinks=follow_symlinks,
            exclude=exclude,
            reporter=self.reporter,
        )

    def _emit(self, kind: EventKind, path: Optional[Path] = None, message: str = "", **kwargs) -> None:
        self.reporter.report(SyncEvent(kind, path, message, **kwargs))

    def run(
        self,
        root: Path,
        max_depth: int,
        operation: Union[SyncOperation, str],
        *,
        auto_stash: bool = True,
        force: bool = False,
    ) -> RunSummary:
        """
        Apply an operation to every repository under root.

        Args:
            root: Directory to search.
            max_depth: Maximum walk depth.
            operation: Operation, or a sync-family token such as "rebase".
            auto_stash: Stash dirty working trees before mutating operations.
            force: Let tolerant operations run without an upstream.

        Returns:
            RunSummary with one outcome per repository.

        Raises:
            RootPathError: If root is not a readable directory.
            InvalidOperationError: If the operation token is not recognized.
        """
        if isinstance(operation, str):
            operation = parse_operation(operation, OperationFamily.SYNC)
        resolved = validate_root(root)

        summary = RunSummary()
        self._emit(EventKind.RUN_STARTED, resolved, operation.name)

        for handle in self.locator.locate(resolved, max_depth):
            self._emit(EventKind.REPO_STARTED, handle.path)
            outcome = self.process_repository(handle, operation, auto_stash=auto_stash, force=force)
            summary.record(outcome)
            self._emit(EventKind.OUTCOME, handle.path, outcome.message, outcome=outcome)

        summary.check()
        self._emit(EventKind.RUN_FINISHED, resolved, summary=summary)
        return summary

    def process_repository(
        self,
        handle: RepositoryHandle,
        operation: SyncOperation,
        *,
        auto_stash: bool = True,
        force: bool = False,
    ) -> OperationOutcome:
        """
        Run one repository through inspect, protect, operate and restore.

        Args:
            handle: Repository to process.
            operation: Operation to apply.
            auto_stash: Stash a dirty tree before mutating operations.
            force: Let tolerant operations run without an upstream.

        Returns:
            The repository's OperationOutcome.
        """
        repo = handle.path
        try:
            return self._process(repo, operation, auto_stash=auto_stash, force=force)
        except PermissionError as e:
            return OperationOutcome.failed(repo, FailReason.UNREADABLE_DIRECTORY, f"Cannot access directory: {e}")
        except GitError as e:
            return OperationOutcome.failed(repo, FailReason.OPERATION_FAILED, e.detail)

    def _process(
        self,
        repo: Path,
        operation: SyncOperation,
        *,
        auto_stash: bool,
        force: bool,
    ) -> OperationOutcome:
        if not os.access(repo, os.R_OK | os.X_OK):
            return OperationOutcome.failed(repo, FailReason.UNREADABLE_DIRECTORY, "Cannot access directory")

        if not is_git_repo(repo):
            return OperationOutcome.skipped(repo, SkipReason.NOT_A_REPOSITORY)

        state = inspect(repo)
        self._emit(EventKind.REPO_STATE, repo, describe_state(state))

        skip_reason = check_preconditions(repo, operation, state, force=force)
        if skip_reason is not None:
            message = ""
            if skip_reason == SkipReason.NO_UPSTREAM:
                message = f"No upstream branch for '{state.current_branch}'"
            return OperationOutcome.skipped(repo, skip_reason, message)

        wants_stash = operation.is_mutating and (auto_stash or operation.always_stash)
        try:
            record = self.stash_guard.protect(repo, state.is_dirty and wants_stash, operation.name)
        except StashError as e:
            return OperationOutcome.failed(repo, FailReason.STASH_FAILED, e.message)

        if record.created:
            self._emit(EventKind.STASH_CREATED, repo, record.label)

        try:
            result = execute_operation(repo, operation, state)
        except GitError as e:
            if record.created:
                self._emit(EventKind.STASH_PRESERVED, repo, record.label)
            return OperationOutcome.failed(repo, FailReason.OPERATION_FAILED, e.detail, stash=record)

        if result.skipped:
            # Nothing ran: put the tree back the way it was
            record = self.stash_guard.restore(repo, record, True, operation)
            self._report_stash(repo, record)
            return OperationOutcome.skipped(repo, result.skip_reason)

        record = self.stash_guard.restore(repo, record, result.success, operation)
        self._report_stash(repo, record)

        if not result.success:
            return OperationOutcome.failed(repo, FailReason.OPERATION_FAILED, result.message, stash=record)

        return OperationOutcome.success(repo, result.message, stash=record)

    def _report_stash(self, repo: Path, record: StashRecord) -> None:
        if not record.created:
            return
        if record.popped:
            self._emit(EventKind.STASH_RESTORED, repo, record.label)
        elif record.conflict:
            self._emit(EventKind.STASH_CONFLICT, repo, record.label)
        else:
            self._emit(EventKind.STASH_PRESERVED, repo, record.label)


def describe_state(state: RepositoryState) -> str:
    """One-line description of an inspected repository."""
    branch = state.current_branch or "(detached)"
    parts = [f"branch {branch}"]
    if state.upstream:
        parts.append(f"upstream {state.upstream}")
        if state.ahead or state.behind:
            parts.append(f"{state.ahead} ahead, {state.behind} behind")
    else:
        parts.append("no upstream")
    if state.is_dirty:
        parts.append("uncommitted changes")
    return ", ".join(parts)
