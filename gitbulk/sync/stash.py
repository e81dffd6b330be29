# gitbulk Stash Guard
# Protective stashing of uncommitted work around mutating operations

from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from gitbulk.git.operations import GitError, find_stash_entry, get_stash_head, stash_pop, stash_push

if TYPE_CHECKING:
    from gitbulk.sync.actions import SyncOperation


STASH_LABEL_PREFIX = "gitbulk auto-stash before"


class StashError(GitError):
    """Raised when a protective stash cannot be created."""


@dataclass(frozen=True)
class StashRecord:
    """
    State of the protective stash for one repository.

    ``popped`` is only ever True when ``created`` is True. A record that is
    created but not popped at the end of processing means the stash was left
    in place on purpose, for manual recovery. ``commit`` identifies the entry
    gitbulk created, so other stashes are never touched.
    """

    created: bool = False
    label: str = ""
    commit: str = ""
    popped: bool = False
    conflict: bool = False


def make_stash_label(operation_name: str, now: Optional[datetime] = None) -> str:
    """
    Build a unique, timestamped stash message.

    Args:
        operation_name: Name of the operation about to run.
        now: Timestamp to embed (defaults to current time).

    Returns:
        Stash label.
    """
    stamp = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    return f"{STASH_LABEL_PREFIX} {operation_name} {stamp}"


class StashGuard:
    """Creates and restores protective stashes."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    def protect(self, repo: Path, dirty: bool, operation_name: str) -> StashRecord:
        """
        Stash a dirty working tree before a risky operation.

        Args:
            repo: Repository path.
            dirty: Whether the working tree has uncommitted changes.
            operation_name: Operation name used in the stash label.

        Returns:
            StashRecord describing what was done.

        Raises:
            StashError: If the tree is dirty and the stash could not be created.
        """
        if not dirty:
            return StashRecord()

        label = make_stash_label(operation_name, self._clock())
        previous = get_stash_head(repo)
        if not stash_push(label, path=repo):
            raise StashError(f"Failed to stash changes in {repo}")

        commit = get_stash_head(repo)
        if commit is None or commit == previous:
            # git exits 0 without saving anything, e.g. for dirty submodule content
            return StashRecord()
        return StashRecord(created=True, label=label, commit=commit)

    def restore(
        self,
        repo: Path,
        record: StashRecord,
        operation_succeeded: bool,
        operation: "SyncOperation",
    ) -> StashRecord:
        """
        Pop the protective stash when it is safe to do so.

        The stash is kept when the operation failed, and after read-only
        operations, which never touch the working tree. Only the entry
        recorded by protect() is popped, wherever it now sits in the list.

        Args:
            repo: Repository path.
            record: Record returned by protect().
            operation_succeeded: Outcome of the operation.
            operation: The operation that ran.

        Returns:
            Updated StashRecord.
        """
        if not record.created or record.popped:
            return record

        if not operation_succeeded or not operation.restores_stash:
            return record

        entry = find_stash_entry(record.commit, repo)
        if entry is None:
            return replace(record, conflict=True)

        if stash_pop(path=repo, entry=entry):
            return replace(record, popped=True)

        return replace(record, conflict=True)
