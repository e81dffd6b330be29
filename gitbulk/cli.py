"""Click-based CLI for gitbulk - bulk git synchronization."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError
from rich.markup import escape
from rich.syntax import Syntax

from gitbulk import __version__
from gitbulk.config import (
    CloneMethod,
    GitBulkConfig,
    ensure_config_exists,
    format_validation_errors,
    generate_default_config,
    get_config_path,
    load_config_or_default,
    validate_config_file,
)
from gitbulk.errors import GitBulkError
from gitbulk.github import GitHubClient, GitHubError, clone_all
from gitbulk.output import Console, create_console
from gitbulk.sync import (
    OperationFamily,
    SyncEngine,
    inspect,
    locate,
    parse_operation,
    validate_root,
)


def _load_config(config_path: Optional[Path]) -> GitBulkConfig:
    """Load configuration, exiting with an error message if it is invalid."""
    try:
        return load_config_or_default(config_path)
    except ValidationError as e:
        console = create_console()
        console.print_error("Invalid configuration:")
        for line in format_validation_errors(e):
            console.print(f"  • {line}")
        sys.exit(1)
    except yaml.YAMLError as e:
        create_console().print_error(f"Invalid configuration: invalid YAML syntax: {escape(str(e))}")
        sys.exit(1)


def _make_console(config: GitBulkConfig, verbose: bool = False) -> Console:
    return create_console(verbose=verbose or config.output.verbose, colored=config.output.colored)


def _run_operation(
    *,
    title: str,
    family: OperationFamily,
    root: Path,
    token: str,
    max_depth: int,
    auto_stash: bool,
    force: bool,
    config: GitBulkConfig,
    console: Console,
) -> None:
    """Run one operation over a tree and exit with the run's status."""
    try:
        operation = parse_operation(token, family)
        resolved = validate_root(root)
    except GitBulkError as e:
        console.print_error(e.message)
        sys.exit(1)

    console.print_run_header(title, resolved, operation.name, max_depth)

    engine = SyncEngine(
        reporter=console,
        follow_symlinks=config.sync.follow_symlinks,
        exclude=config.sync.exclude,
    )

    try:
        summary = engine.run(resolved, max_depth, operation, auto_stash=auto_stash, force=force)
    except GitBulkError as e:
        console.print_error(e.message)
        sys.exit(1)

    sys.exit(summary.exit_code)


@click.group()
@click.version_option(version=__version__, prog_name="gitbulk")
def cli() -> None:
    """gitbulk - bulk git synchronization.

    Find every git repository below a directory and update them all at once.
    Uncommitted changes are stashed before anything is modified.

    \b
    Workflows:
      gitbulk sync ~/src             Rebase every repository on its upstream
      gitbulk sync ~/src fetch       Fetch all remotes, touch nothing else
      gitbulk reset ~/src origin     Reset to origin's default branch
      gitbulk list ~/src             Show branch/upstream/dirty state
      gitbulk clone octocat          Clone all public repos of an account
    """
    pass


@cli.command()
@click.argument("root", type=click.Path(path_type=Path), default=".")
@click.argument("operation", required=False)
@click.argument("max_depth", type=click.IntRange(min=0), required=False)
@click.option("--no-stash", is_flag=True, help="Do not stash uncommitted changes first")
@click.option("--force", "-f", is_flag=True, help="Pull even when no upstream is configured")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Configuration file")
def sync(
    root: Path,
    operation: Optional[str],
    max_depth: Optional[int],
    no_stash: bool,
    force: bool,
    verbose: bool,
    config_path: Optional[Path],
) -> None:
    """Pull, fetch, rebase or merge every repository under ROOT.

    \b
    Operations:
      rebase      git pull --rebase (default)
      pull        git pull
      fetch       git fetch --all --prune (no stash, no merge)
      merge       git pull --no-rebase
      stash-pull  git pull, always stashing first

    Repositories without remotes, on a detached HEAD or without an upstream
    branch are skipped. Exits non-zero if any repository failed.
    """
    config = _load_config(config_path)
    console = _make_console(config, verbose)

    _run_operation(
        title="Git Repository Sync",
        family=OperationFamily.SYNC,
        root=root,
        token=operation or config.sync.default_operation,
        max_depth=config.sync.max_depth if max_depth is None else max_depth,
        auto_stash=config.sync.auto_stash and not no_stash,
        force=force or config.sync.force,
        config=config,
        console=console,
    )


@cli.command()
@click.argument("root", type=click.Path(path_type=Path), default=".")
@click.argument("mode", required=False)
@click.argument("max_depth", type=click.IntRange(min=0), required=False)
@click.option("--no-stash", is_flag=True, help="Do not stash uncommitted changes first")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Configuration file")
def reset(
    root: Path,
    mode: Optional[str],
    max_depth: Optional[int],
    no_stash: bool,
    verbose: bool,
    config_path: Optional[Path],
) -> None:
    """Reset every repository under ROOT.

    \b
    Modes:
      soft    git reset --soft HEAD
      hard    git reset --hard HEAD (default)
      clean   hard reset, then git clean -fd
      pull    hard reset, then git pull
      origin  check out origin's default branch and reset to it

    Local changes are stashed and restored afterwards; pass --no-stash
    to discard them.
    """
    config = _load_config(config_path)
    console = _make_console(config, verbose)

    _run_operation(
        title="Git Repository Reset",
        family=OperationFamily.RESET,
        root=root,
        token=mode or config.sync.default_reset_mode,
        max_depth=config.sync.reset_max_depth if max_depth is None else max_depth,
        auto_stash=config.sync.auto_stash and not no_stash,
        force=False,
        config=config,
        console=console,
    )


@cli.command("list")
@click.argument("root", type=click.Path(path_type=Path), default=".")
@click.option("--max-depth", "-d", type=click.IntRange(min=0), help="Maximum search depth")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Configuration file")
def list_repos(root: Path, max_depth: Optional[int], config_path: Optional[Path]) -> None:
    """List repositories under ROOT with their branch and upstream state.

    Nothing is modified.
    """
    config = _load_config(config_path)
    console = _make_console(config)

    try:
        resolved = validate_root(root)
    except GitBulkError as e:
        console.print_error(e.message)
        sys.exit(1)

    depth = config.sync.max_depth if max_depth is None else max_depth
    handles = locate(
        resolved,
        depth,
        follow_symlinks=config.sync.follow_symlinks,
        exclude=config.sync.exclude,
        reporter=console,
    )
    rows = [(handle, inspect(handle.path)) for handle in handles]
    console.print_repositories(rows, resolved)


@cli.command()
@click.argument("owner")
@click.option("--ssh", "method", flag_value=CloneMethod.SSH.value, help="Clone over SSH")
@click.option("--https", "method", flag_value=CloneMethod.HTTPS.value, help="Clone over HTTPS (default)")
@click.option("--dir", "target_dir", type=click.Path(file_okay=False, path_type=Path), help="Target directory")
@click.option("--include-forks", is_flag=True, help="Include forked repositories")
@click.option("--include-private", is_flag=True, help="Include private repositories (requires token)")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub personal access token (default: $GITHUB_TOKEN)")
@click.option("--jobs", "-j", type=click.IntRange(min=1), help="Number of parallel clone jobs")
@click.option("--update", is_flag=True, help="Update existing repositories instead of skipping")
@click.option("--dry-run", "-n", is_flag=True, help="Show what would be cloned without doing it")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Configuration file")
def clone(
    owner: str,
    method: Optional[str],
    target_dir: Optional[Path],
    include_forks: bool,
    include_private: bool,
    token: Optional[str],
    jobs: Optional[int],
    update: bool,
    dry_run: bool,
    yes: bool,
    config_path: Optional[Path],
) -> None:
    """Clone all repositories of a GitHub user or organization.

    OWNER is the GitHub user or organization name.
    """
    config = _load_config(config_path)
    console = _make_console(config)
    settings = config.clone

    clone_method = CloneMethod(method) if method else settings.method
    target = target_dir or Path(settings.target_dir)
    with_forks = include_forks or settings.include_forks
    with_private = include_private or settings.include_private
    workers = jobs or settings.jobs
    update_existing = update or settings.update_existing

    client = GitHubClient(token or None)
    if with_private and not client.authenticated:
        console.print_warning("Private repositories require a token (set GITHUB_TOKEN)")

    console.print_info(f"Fetching repository list for '{owner}'...")
    try:
        repos = client.list_repositories(owner, include_forks=with_forks, include_private=with_private)
    except GitHubError as e:
        console.print_error(e.message)
        sys.exit(1)

    if not repos:
        console.print_warning("No repositories found matching criteria")
        return

    console.print(
        f"Found [cyan]{len(repos)}[/cyan] repositories "
        f"(method: {clone_method.value}, target: {target}, jobs: {workers})"
    )

    if not dry_run and not yes and not console.confirm("Proceed with cloning?"):
        console.print_warning("Cancelled by user")
        return

    summary = clone_all(
        repos,
        target,
        method=clone_method,
        jobs=workers,
        update_existing=update_existing,
        dry_run=dry_run,
        on_result=console.print_clone_result,
    )
    console.print_clone_summary(summary, dry_run=dry_run)

    if not summary.success:
        sys.exit(1)


@cli.group()
def config() -> None:
    """Configuration management.

    \b
    The configuration file lives at ~/.config/gitbulk/config.yaml
    (override with GITBULK_CONFIG). Sections:
      sync     max_depth, default_operation, auto_stash, force, exclude
      clone    method, target_dir, include_forks, jobs, update_existing
      output   verbose, colored
    """
    pass


@config.command("init")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing configuration file")
def config_init(force: bool) -> None:
    """Create the default configuration file."""
    console = create_console()
    path = get_config_path()

    if force and path.exists():
        path.write_text(generate_default_config(), encoding="utf-8")
        console.print_success(f"Configuration overwritten: {path}")
        return

    path, created = ensure_config_exists(path)
    if created:
        console.print_success(f"Configuration created: {path}")
    else:
        console.print_info(f"Configuration already exists: {path} (use --force to overwrite)")


@config.command("show")
def config_show() -> None:
    """Show the active configuration file."""
    console = create_console()
    path = get_config_path()
    exists = path.exists()

    console.print_config_summary(str(path), exists)

    if exists:
        text = path.read_text(encoding="utf-8")
    else:
        console.print_info("Configuration file not found, built-in defaults are used:")
        text = generate_default_config()
    console.print(Syntax(text, "yaml", theme="monokai"))


@config.command("validate")
def config_validate() -> None:
    """Validate the configuration file."""
    console = create_console()
    valid, errors = validate_config_file()

    if valid:
        console.print_success("Configuration is valid")
        return

    console.print_error(f"Configuration has {len(errors)} errors:")
    for error in errors:
        console.print(f"  • {error}")
    sys.exit(1)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
