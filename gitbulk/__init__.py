"""gitbulk - bulk synchronization of git repository trees.

Discovers git repositories under a root directory and applies a reset, pull,
rebase, fetch or merge to each of them, stashing uncommitted work first.
Also mass-clones the repositories of a GitHub account.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "SyncEngine",
    "SyncOperation",
    "RunSummary",
    "OperationOutcome",
    "parse_operation",
    "locate",
    "inspect",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("SyncEngine", "SyncOperation", "RunSummary", "OperationOutcome", "parse_operation", "locate", "inspect"):
        from gitbulk import sync

        return getattr(sync, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
