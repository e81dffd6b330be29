# gitbulk GitHub Module
# Mass-cloning of a GitHub account's repositories

from gitbulk.github.client import GitHubClient, GitHubError, GitHubRepo
from gitbulk.github.cloner import CloneResult, CloneStatus, CloneSummary, clone_all, clone_repository

__all__ = [
    "GitHubClient",
    "GitHubError",
    "GitHubRepo",
    "CloneStatus",
    "CloneResult",
    "CloneSummary",
    "clone_repository",
    "clone_all",
]
