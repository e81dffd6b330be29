# gitbulk Sync Module
# Repository discovery and the per-repository operation state machine

from gitbulk.sync.actions import (
    ActionResult,
    OperationFamily,
    OperationType,
    ResetMode,
    SyncOperation,
    check_preconditions,
    execute_operation,
    parse_operation,
    resolve_default_branch,
)
from gitbulk.sync.engine import SyncEngine, validate_root
from gitbulk.sync.events import EventKind, NullReporter, Reporter, SyncEvent
from gitbulk.sync.inspector import RepositoryState, inspect
from gitbulk.sync.locator import RepositoryHandle, RepositoryLocator, locate
from gitbulk.sync.outcome import FailReason, OperationOutcome, OutcomeStatus, RunSummary, SkipReason
from gitbulk.sync.stash import StashError, StashGuard, StashRecord

__all__ = [
    # Locator
    "RepositoryHandle",
    "RepositoryLocator",
    "locate",
    # Inspector
    "RepositoryState",
    "inspect",
    # Stash
    "StashGuard",
    "StashRecord",
    "StashError",
    # Actions
    "OperationType",
    "ResetMode",
    "OperationFamily",
    "SyncOperation",
    "ActionResult",
    "parse_operation",
    "check_preconditions",
    "execute_operation",
    "resolve_default_branch",
    # Outcomes
    "OutcomeStatus",
    "SkipReason",
    "FailReason",
    "OperationOutcome",
    "RunSummary",
    # Events
    "EventKind",
    "SyncEvent",
    "Reporter",
    "NullReporter",
    # Engine
    "SyncEngine",
    "validate_root",
]
