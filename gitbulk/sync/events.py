# gitbulk Sync Events
# Events emitted by the engine to an injected reporter

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Protocol

from gitbulk.sync.outcome import OperationOutcome, RunSummary


class EventKind(str, Enum):
    """Kinds of engine event."""

    RUN_STARTED = "run_started"
    REPO_STARTED = "repo_started"
    REPO_STATE = "repo_state"
    DEPTH_LIMIT = "depth_limit"
    UNREADABLE = "unreadable"
    STASH_CREATED = "stash_created"
    STASH_RESTORED = "stash_restored"
    STASH_CONFLICT = "stash_conflict"
    STASH_PRESERVED = "stash_preserved"
    OUTCOME = "outcome"
    RUN_FINISHED = "run_finished"


@dataclass
class SyncEvent:
    """A single event in a run."""

    kind: EventKind
    path: Optional[Path] = None
    message: str = ""
    outcome: Optional[OperationOutcome] = None
    summary: Optional[RunSummary] = None


class Reporter(Protocol):
    """Anything that can receive engine events."""

    def report(self, event: SyncEvent) -> None: ...


class NullReporter:
    """Reporter that discards every event."""

    def report(self, event: SyncEvent) -> None:
        pass
