# gitbulk Errors
# Run-fatal error types

class GitBulkError(Exception):
    """Base class for errors that abort a whole run."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RootPathError(GitBulkError):
    """Raised when the root path is not a readable directory."""


class InvalidOperationError(GitBulkError):
    """Raised for an unrecognized operation selector."""
