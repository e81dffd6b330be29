# gitbulk Git Module
# Git operations for repository inspection and synchronization

from gitbulk.git.operations import (
    GitError,
    abort_merge,
    abort_rebase,
    checkout,
    clean,
    clone_repo,
    fetch,
    find_stash_entry,
    get_ahead_behind,
    get_current_branch,
    get_remote_head_branch,
    get_stash_head,
    get_upstream,
    git_status,
    has_uncommitted_changes,
    is_git_repo,
    list_remotes,
    pull,
    ref_exists,
    reset,
    stash_pop,
    stash_push,
)

__all__ = [
    "GitError",
    "is_git_repo",
    "git_status",
    "has_uncommitted_changes",
    "get_current_branch",
    "get_upstream",
    "get_ahead_behind",
    "list_remotes",
    "ref_exists",
    "get_remote_head_branch",
    "stash_push",
    "stash_pop",
    "get_stash_head",
    "find_stash_entry",
    "reset",
    "clean",
    "checkout",
    "fetch",
    "pull",
    "abort_rebase",
    "abort_merge",
    "clone_repo",
]
