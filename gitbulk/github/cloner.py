# gitbulk GitHub Cloner
# Clone or update many repositories with a bounded worker pool

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from gitbulk.config.schema import CloneMethod
from gitbulk.git.operations import clone_repo, pull
from gitbulk.github.client import GitHubRepo


class CloneStatus(str, Enum):
    """Result of handling one repository."""

    CLONED = "cloned"
    UPDATED = "updated"
    EXISTS = "exists"
    DRY_RUN = "dry_run"
    FAILED = "failed"


@dataclass
class CloneResult:
    """Result of cloning or updating one repository."""

    repo: GitHubRepo
    status: CloneStatus
    path: Path
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status != CloneStatus.FAILED


@dataclass
class CloneSummary:
    """Result of a complete clone run."""

    results: list[CloneResult] = field(default_factory=list)

    def _count(self, status: CloneStatus) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def cloned(self) -> int:
        return self._count(CloneStatus.CLONED)

    @property
    def updated(self) -> int:
        return self._count(CloneStatus.UPDATED)

    @property
    def skipped(self) -> int:
        return self._count(CloneStatus.EXISTS) + self._count(CloneStatus.DRY_RUN)

    @property
    def failed(self) -> int:
        return self._count(CloneStatus.FAILED)

    @property
    def success(self) -> bool:
        return self.failed == 0


def clone_repository(
    repo: GitHubRepo,
    target_dir: Path,
    *,
    method: CloneMethod = CloneMethod.HTTPS,
    update_existing: bool = False,
    dry_run: bool = False,
) -> CloneResult:
    """
    Clone a single repository, or update an existing clone.

    Args:
        repo: Repository to clone.
        target_dir: Parent directory for the clone.
        method: Transport to use.
        update_existing: Fast-forward existing clones instead of skipping them.
        dry_run: Report what would happen without touching anything.

    Returns:
        CloneResult.
    """
    url = repo.url_for(method)
    dest = target_dir / repo.name

    if dry_run:
        return CloneResult(repo, CloneStatus.DRY_RUN, dest, f"Would clone: {url}")

    if dest.exists():
        if not update_existing:
            return CloneResult(repo, CloneStatus.EXISTS, dest, "Directory exists, skipping (use --update to update)")
        if pull(dest, ff_only=True):
            return CloneResult(repo, CloneStatus.UPDATED, dest, "Updated successfully")
        return CloneResult(repo, CloneStatus.FAILED, dest, "Update failed, may have local changes")

    if clone_repo(url, dest):
        return CloneResult(repo, CloneStatus.CLONED, dest, "Cloned successfully")
    return CloneResult(repo, CloneStatus.FAILED, dest, "Clone failed")


def clone_all(
    repos: list[GitHubRepo],
    target_dir: Path,
    *,
    method: CloneMethod = CloneMethod.HTTPS,
    jobs: int = 5,
    update_existing: bool = False,
    dry_run: bool = False,
    on_result: Optional[Callable[[CloneResult], None]] = None,
) -> CloneSummary:
    """
    Clone repositories, in parallel when jobs > 1.

    Each clone is independent, so results arrive in completion order; the
    summary lists them sorted by name.

    Args:
        repos: Repositories to clone.
        target_dir: Parent directory for all clones (created if missing).
        method: Transport to use.
        jobs: Worker pool size.
        update_existing: Fast-forward existing clones.
        dry_run: Clone nothing.
        on_result: Called with each result as it completes.

    Returns:
        CloneSummary.
    """
    if not dry_run:
        target_dir.mkdir(parents=True, exist_ok=True)

    summary = CloneSummary()

    def handle(repo: GitHubRepo) -> CloneResult:
        return clone_repository(
            repo,
            target_dir,
            method=method,
            update_existing=update_existing,
            dry_run=dry_run,
        )

    def collect(result: CloneResult) -> None:
        summary.results.append(result)
        if on_result is not None:
            on_result(result)

    if jobs <= 1 or dry_run or len(repos) <= 1:
        for repo in repos:
            collect(handle(repo))
    else:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            futures = {executor.submit(handle, repo): repo for repo in repos}
            for future in as_completed(futures):
                collect(future.result())

    summary.results.sort(key=lambda r: r.repo.name)
    return summary
