# gitbulk Git Operations
# Thin wrappers over the git CLI used by the sync engine and the cloner

import subprocess
from pathlib import Path
from typing import Optional


class GitError(Exception):
    """A git invocation exited non-zero or git itself is missing."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = ""):
        self.message = message
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)

    @property
    def detail(self) -> str:
        """Message followed by git's own stderr, when there is any."""
        if not self.stderr:
            return self.message
        return f"{self.message}: {self.stderr}"


def _run_git(*args: str, cwd: Optional[Path] = None, check: bool = True) -> subprocess.CompletedProcess[str]:
    """
    Invoke git with captured text output.

    Args:
        *args: Arguments after ``git``.
        cwd: Repository to run in; the process working directory if None.
        check: Raise GitError on a non-zero exit status.

    Returns:
        The completed process.

    Raises:
        GitError: On a non-zero exit with check set, or if git is not installed.
    """
    cmd = ["git", *args]
    try:
        result = subprocess.run(cmd, cwd=cwd, check=False, capture_output=True, text=True)
    except FileNotFoundError:
        raise GitError("git command not found. Is git installed?")

    if check and result.returncode != 0:
        raise GitError(
            f"git {args[0] if args else ''} failed in {cwd or '.'}",
            returncode=result.returncode,
            stderr=(result.stderr or "").strip(),
        )
    return result


def _succeeds(*args: str, cwd: Optional[Path] = None) -> bool:
    try:
        _run_git(*args, cwd=cwd)
    except GitError:
        return False
    return True


def _stdout_or_none(*args: str, cwd: Optional[Path] = None) -> Optional[str]:
    try:
        output = _run_git(*args, cwd=cwd).stdout.strip()
    except GitError:
        return None
    return output or None


# Queries


def is_git_repo(path: Optional[Path] = None) -> bool:
    """True when git recognises path as (inside) a working tree or git dir."""
    return _succeeds("rev-parse", "--git-dir", cwd=path)


def git_status(path: Optional[Path] = None) -> str:
    """Porcelain status of the working tree. Raises GitError if unreadable."""
    return _run_git("status", "--porcelain", cwd=path).stdout


def has_uncommitted_changes(path: Optional[Path] = None) -> bool:
    """
    Whether anything is staged, modified or untracked.

    Raises:
        GitError: If the status cannot be read.
    """
    return bool(git_status(path).strip())


def get_current_branch(path: Optional[Path] = None) -> Optional[str]:
    """Short name of the checked-out branch, None on a detached HEAD."""
    return _stdout_or_none("symbolic-ref", "--short", "HEAD", cwd=path)


def get_upstream(path: Optional[Path] = None) -> Optional[str]:
    """Upstream of the current branch, such as ``origin/main``, or None."""
    return _stdout_or_none("rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{u}", cwd=path)


def get_ahead_behind(path: Optional[Path] = None) -> tuple[int, int]:
    """
    Commits the current branch is ahead of and behind its upstream.

    Returns:
        Tuple of (ahead, behind); (0, 0) without an upstream.
    """
    counts = _stdout_or_none("rev-list", "--left-right", "--count", "@{u}...HEAD", cwd=path)
    if counts is None:
        return 0, 0

    fields = counts.split()
    if len(fields) != 2:
        return 0, 0
    behind, ahead = (int(n) for n in fields)
    return ahead, behind


def list_remotes(path: Optional[Path] = None) -> list[str]:
    output = _stdout_or_none("remote", cwd=path)
    if output is None:
        return []
    return [line.strip() for line in output.splitlines() if line.strip()]


def ref_exists(ref: str, path: Optional[Path] = None) -> bool:
    """Whether a fully qualified ref such as ``refs/remotes/origin/main`` exists."""
    return _succeeds("show-ref", "--verify", "--quiet", ref, cwd=path)


def get_remote_head_branch(path: Optional[Path] = None, *, remote: str = "origin") -> Optional[str]:
    """
    Default branch recorded in ``refs/remotes/<remote>/HEAD``.

    Args:
        path: Repository path.
        remote: Remote whose HEAD is read.

    Returns:
        Branch name without the remote prefix, or None if the remote HEAD is unset.
    """
    prefix = f"refs/remotes/{remote}/"
    target = _stdout_or_none("symbolic-ref", f"{prefix}HEAD", cwd=path)
    if target is None or not target.startswith(prefix):
        return None
    return target[len(prefix) :] or None


# Working tree changes. Each returns True on success.


def stash_push(message: str, path: Optional[Path] = None) -> bool:
    """Stash tracked and untracked changes under the given message."""
    return _succeeds("stash", "push", "--include-untracked", "-m", message, cwd=path)


def get_stash_head(path: Optional[Path] = None) -> Optional[str]:
    """Commit id of the newest stash entry, None when there are no stashes."""
    return _stdout_or_none("rev-parse", "-q", "--verify", "refs/stash", cwd=path)


def find_stash_entry(commit: str, path: Optional[Path] = None) -> Optional[str]:
    """
    Locate a stash entry by commit id.

    Returns:
        Its ``stash@{n}`` selector, or None if no entry has that commit.
    """
    listing = _stdout_or_none("stash", "list", "--format=%H", cwd=path)
    if listing is None:
        return None
    for index, line in enumerate(listing.splitlines()):
        if line.strip() == commit:
            return f"stash@{{{index}}}"
    return None


def stash_pop(path: Optional[Path] = None, *, entry: Optional[str] = None) -> bool:
    """Apply and drop a stash entry (the newest by default). False on conflict; the entry is then kept."""
    args = ["stash", "pop"]
    if entry:
        args.append(entry)
    return _succeeds(*args, cwd=path)


def reset(path: Optional[Path] = None, *, mode: str = "hard", ref: str = "HEAD") -> bool:
    return _succeeds("reset", f"--{mode}", ref, cwd=path)


def clean(path: Optional[Path] = None) -> bool:
    """Delete untracked files and directories (ignored files are left alone)."""
    return _succeeds("clean", "-fd", cwd=path)


def checkout(branch: str, path: Optional[Path] = None) -> bool:
    return _succeeds("checkout", branch, cwd=path)


def abort_rebase(path: Optional[Path] = None) -> bool:
    return _succeeds("rebase", "--abort", cwd=path)


def abort_merge(path: Optional[Path] = None) -> bool:
    return _succeeds("merge", "--abort", cwd=path)


# Network


def fetch(path: Optional[Path] = None, *, all_remotes: bool = False, prune: bool = False) -> bool:
    args = ["fetch"]
    if all_remotes:
        args.append("--all")
    if prune:
        args.append("--prune")
    return _succeeds(*args, cwd=path)


def pull(
    path: Optional[Path] = None,
    *,
    rebase: Optional[bool] = None,
    ff_only: bool = False,
    remote: Optional[str] = None,
    branch: Optional[str] = None,
) -> bool:
    """
    Pull into the current branch.

    Args:
        path: Repository path.
        rebase: True adds --rebase, False adds --no-rebase, None leaves it to git config.
        ff_only: Only allow a fast-forward.
        remote: Pull from this remote instead of the upstream.
        branch: Branch on ``remote``; ignored without a remote.

    Returns:
        True if git exited cleanly. A conflicted rebase or merge is left in
        progress for the caller to abort.
    """
    args = ["pull"]
    if rebase is not None:
        args.append("--rebase" if rebase else "--no-rebase")
    if ff_only:
        args.append("--ff-only")
    if remote:
        args.append(remote)
        if branch:
            args.append(branch)
    return _succeeds(*args, cwd=path)


def clone_repo(url: str, dest: Path) -> bool:
    """Clone url into dest, which must not exist yet."""
    return _succeeds("clone", url, str(dest))
