# gitbulk Sync Outcomes
# Per-repository outcomes and the run-level summary

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from gitbulk.sync.stash import StashRecord


class OutcomeStatus(str, Enum):
    """Terminal status of one repository in a run."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class SkipReason(str, Enum):
    """Why a repository was left untouched."""

    NOT_A_REPOSITORY = "not-a-repository"
    NO_REMOTES = "no-remotes"
    DETACHED_HEAD = "detached-head"
    NO_UPSTREAM = "no-upstream"
    NO_DEFAULT_BRANCH = "no-default-branch"


class FailReason(str, Enum):
    """Why processing a repository failed."""

    STASH_FAILED = "stash-failed"
    OPERATION_FAILED = "operation-failed"
    UNREADABLE_DIRECTORY = "unreadable-directory"


SKIP_MESSAGES: dict[SkipReason, str] = {
    SkipReason.NOT_A_REPOSITORY: "Not a valid git repository",
    SkipReason.NO_REMOTES: "No remotes configured",
    SkipReason.DETACHED_HEAD: "Detached HEAD state",
    SkipReason.NO_UPSTREAM: "No upstream branch",
    SkipReason.NO_DEFAULT_BRANCH: "No origin/main or origin/master found",
}


@dataclass
class OperationOutcome:
    """
    Result of processing a single repository.

    Exactly one outcome is produced per repository per run.
    """

    repo: Path
    status: OutcomeStatus
    reason: Optional[Union[SkipReason, FailReason]] = None
    message: str = ""
    stash: StashRecord = field(default_factory=StashRecord)
    warning: bool = False

    @classmethod
    def success(cls, repo: Path, message: str = "", *, stash: Optional[StashRecord] = None) -> "OperationOutcome":
        """Create a success outcome, flagged as a warning when the stash could not be restored."""
        record = stash or StashRecord()
        return cls(
            repo=repo,
            status=OutcomeStatus.SUCCESS,
            message=message,
            stash=record,
            warning=record.conflict,
        )

    @classmethod
    def skipped(cls, repo: Path, reason: SkipReason, message: str = "") -> "OperationOutcome":
        """Create a skipped outcome."""
        return cls(
            repo=repo,
            status=OutcomeStatus.SKIPPED,
            reason=reason,
            message=message or SKIP_MESSAGES[reason],
        )

    @classmethod
    def failed(
        cls,
        repo: Path,
        reason: FailReason,
        message: str = "",
        *,
        stash: Optional[StashRecord] = None,
    ) -> "OperationOutcome":
        """Create a failed outcome."""
        return cls(
            repo=repo,
            status=OutcomeStatus.FAILED,
            reason=reason,
            message=message,
            stash=stash or StashRecord(),
        )

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def is_skipped(self) -> bool:
        return self.status == OutcomeStatus.SKIPPED

    @property
    def is_failed(self) -> bool:
        return self.status == OutcomeStatus.FAILED

    @property
    def stash_preserved(self) -> bool:
        """Check if a protective stash was left behind for manual recovery."""
        return self.stash.created and not self.stash.popped


@dataclass
class RunSummary:
    """Counters for a complete run."""

    total: int = 0
    success: int = 0
    skipped: int = 0
    error: int = 0
    warnings: int = 0
    outcomes: list[OperationOutcome] = field(default_factory=list)

    def record(self, outcome: OperationOutcome) -> None:
        """Count one repository outcome."""
        self.total += 1
        self.outcomes.append(outcome)

        if outcome.is_success:
            self.success += 1
            if outcome.warning:
                self.warnings += 1
        elif outcome.is_skipped:
            self.skipped += 1
        else:
            self.error += 1

    def check(self) -> None:
        """
        Verify the counters add up.

        Raises:
            RuntimeError: If total != success + skipped + error.
        """
        if self.total != self.success + self.skipped + self.error:
            raise RuntimeError(
                f"Run summary mismatch: total={self.total} success={self.success} "
                f"skipped={self.skipped} error={self.error}"
            )

    @property
    def has_errors(self) -> bool:
        return self.error > 0

    @property
    def exit_code(self) -> int:
        """Process exit code for this run."""
        return 1 if self.has_errors else 0

    @property
    def preserved_stashes(self) -> list[OperationOutcome]:
        """Outcomes that left a protective stash in place."""
        return [o for o in self.outcomes if o.stash_preserved]
