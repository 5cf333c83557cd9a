"""Main CLI entry point for the sandbox-sync command.

This module provides the Typer application that serves as the entry point
for the sandbox-sync command-line tool. Each subcommand runs one sync
operation for a registered project and maps failures to exit codes.
"""

import logging
import os
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import typer

from src.cli.config import ConfigLoader
from src.cli.errors import (
    CLIError,
    LockTimeoutError,
    ProjectNotFoundError,
    RepositoryNotLinkedError,
)
from src.cli.models import ExitCode, SyncConfig
from src.cli.output import OutputHandler
from src.cli.project_store import ProjectStore
from src.cli.sync_service import GitHubSyncService
from src.github_client.api_wrapper import APIWrapper
from src.github_client.auth import Authenticator
from src.github_client.errors import (
    BranchNotFoundError,
    InvalidCredentialsError,
    NotFoundError,
    RemoteUnavailableError,
    SyncError,
)
from src.repository.remote_repository import GitHubRepository, RemoteRepository
from src.sync_engine.models import ConflictResolution

VERSION = "0.1.0"

app = typer.Typer(
    name="sandbox-sync",
    help="""Synchronize sandbox projects with GitHub repositories.

QUICK START:
  sandbox-sync init 42 --path ./my-app     # Register a project
  sandbox-sync create-repo 42              # Create a repository and push
  sandbox-sync check 42                    # Is the remote ahead?
  sandbox-sync pull 42                     # Pull remote changes
  sandbox-sync resolve 42 --all incoming   # Resolve conflicts
  sandbox-sync commit 42 -m "message"      # Push local changes

Credentials are read from GITHUB_TOKEN (a .env file is honoured).""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

# Module logger
logger = logging.getLogger(__name__)


@dataclass
class CLIContext:
    """Global options shared by all subcommands."""
    output: OutputHandler
    state_path: str
    config_path: str


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure logging based on verbosity level.

    Configures only the 'src' namespace logger to avoid affecting third-party
    libraries. The root logger is left unchanged.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG)
        logdir: Optional directory for log files (creates timestamped log file)
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:  # verbosity >= 2
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    # Handlers from a previous invocation in the same process
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    log_format = "%(asctime)s [%(levelname)8s] %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(log_format, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"sandbox-sync_{timestamp}.log"

        file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        file_formatter = logging.Formatter(file_format, datefmt=date_format)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _exit_code_for(error: Exception) -> ExitCode:
    """Map an exception to the CLI exit code."""
    if isinstance(error, InvalidCredentialsError):
        return ExitCode.AUTH_ERROR
    if isinstance(error, (RemoteUnavailableError, LockTimeoutError)):
        return ExitCode.NETWORK_ERROR
    if isinstance(error, (NotFoundError, BranchNotFoundError, ProjectNotFoundError, RepositoryNotLinkedError)):
        return ExitCode.NOT_FOUND
    return ExitCode.GENERAL_ERROR


def _create_remote(config: SyncConfig) -> RemoteRepository:
    """Build the GitHub-backed remote repository."""
    return GitHubRepository(APIWrapper(Authenticator(api_url=config.api_url)))


def _create_service(ctx: CLIContext) -> GitHubSyncService:
    config = ConfigLoader.load(ctx.config_path)
    return GitHubSyncService(ProjectStore(ctx.state_path), _create_remote(config), config)


def _execute(
    ctx: typer.Context,
    action: Callable[[OutputHandler, GitHubSyncService], ExitCode],
) -> None:
    """Run one service operation and exit with its code.

    Errors are reported on the console and mapped to exit codes.
    """
    cli_ctx: CLIContext = ctx.obj
    output = cli_ctx.output

    try:
        service = _create_service(cli_ctx)
        exit_code = action(output, service)
    except typer.Exit:
        raise
    except ValueError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.GENERAL_ERROR)
    except SyncError as e:
        logger.error(f"{ctx.command.name} failed: {e}")
        output.error(str(e))
        raise typer.Exit(_exit_code_for(e))
    except Exception as e:
        logger.exception(f"Unexpected error during {ctx.command.name}")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    raise typer.Exit(exit_code)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    state_path: str = typer.Option(
        os.path.join(ProjectStore.DEFAULT_STATE_DIR, ProjectStore.DEFAULT_STATE_FILE),
        "--state",
        help="Path of the project state file",
    ),
    config_path: str = typer.Option(
        ConfigLoader.default_path(),
        "--config",
        help="Path of the configuration file",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Synchronize sandbox projects with GitHub repositories."""
    if version:
        typer.echo(f"sandbox-sync version {VERSION}")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    _configure_logging(verbosity, logdir)
    ctx.obj = CLIContext(
        output=OutputHandler(verbosity=verbosity, no_color=no_color),
        state_path=state_path,
        config_path=config_path,
    )


@app.command()
def init(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project id"),
    path: str = typer.Option(".", "--path", help="Project directory"),
    name: Optional[str] = typer.Option(None, "--name", help="Project name (default: directory name)"),
    repo_id: Optional[str] = typer.Option(None, "--repo-id", help="Link an existing repository by id"),
) -> None:
    """Register a project and write the default configuration."""
    cli_ctx: CLIContext = ctx.obj
    output = cli_ctx.output

    if not os.path.isdir(path):
        output.error(f"Project directory does not exist: {path}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    try:
        project_name = name or os.path.basename(os.path.abspath(path))
        record = ProjectStore(cli_ctx.state_path).add_project(project_id, project_name, path, repo_id)
        if not os.path.exists(cli_ctx.config_path):
            ConfigLoader.save(cli_ctx.config_path, SyncConfig())
            output.info(f"  Config file: {cli_ctx.config_path}")
    except CLIError as e:
        logger.error(f"Initialization failed: {e}")
        output.error(f"Initialization failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    output.success(f"Project {project_id} registered at {record.local_path}")
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def status(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project id"),
) -> None:
    """Show whether a repository is linked and still exists."""
    def action(output: OutputHandler, service: GitHubSyncService) -> ExitCode:
        repo_status = service.repo_status(project_id)
        output.print_repo_status(project_id, repo_status)
        pending = service.get_pending_conflicts(project_id)
        if pending:
            output.warning(f"{len(pending)} conflict(s) waiting for a resolution")
            return ExitCode.CONFLICTS
        return ExitCode.SUCCESS

    _execute(ctx, action)


@app.command()
def check(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project id"),
) -> None:
    """Check whether the remote has commits that are not pulled yet."""
    def action(output: OutputHandler, service: GitHubSyncService) -> ExitCode:
        with output.spinner("Checking remote..."):
            result = service.check_pull(project_id)
        output.print_pull_check(result)
        return ExitCode.SUCCESS

    _execute(ctx, action)


@app.command()
def pull(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project id"),
    commit_sha: Optional[str] = typer.Option(None, "--commit", help="Pull this commit instead of HEAD"),
) -> None:
    """Pull remote changes into the project."""
    def action(output: OutputHandler, service: GitHubSyncService) -> ExitCode:
        with output.spinner("Pulling from GitHub..."):
            result = service.pull(project_id, commit_sha)
        output.print_pull_summary(result)
        return ExitCode.CONFLICTS if result.conflicts else ExitCode.SUCCESS

    _execute(ctx, action)


def _read_merged_option(spec: str) -> Tuple[str, str]:
    """Split a PATH=FILE option and read FILE as UTF-8 text.

    Raises:
        ValueError: If the option is malformed or FILE cannot be read
    """
    path, sep, source = spec.partition("=")
    if not sep or not path or not source:
        raise ValueError(f"Invalid --merged value '{spec}': expected PATH=FILE")
    try:
        with open(source, "r", encoding="utf-8", newline="") as f:
            return path, f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"Cannot read merged content for {path} from {source}: {e}") from e


@app.command()
def resolve(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project id"),
    incoming: Optional[List[str]] = typer.Option(
        None, "--incoming", help="Take the remote version of PATH (repeatable)", metavar="PATH"
    ),
    local: Optional[List[str]] = typer.Option(
        None, "--local", help="Keep the local version of PATH (repeatable)", metavar="PATH"
    ),
    merged: Optional[List[str]] = typer.Option(
        None,
        "--merged",
        help="Write the content of FILE as the resolved version of PATH (repeatable)",
        metavar="PATH=FILE",
    ),
    resolve_all: Optional[str] = typer.Option(
        None, "--all", help="Resolve every pending conflict with 'local', 'incoming' or 'merged'"
    ),
) -> None:
    """Resolve conflicts left by the last pull."""
    def action(output: OutputHandler, service: GitHubSyncService) -> ExitCode:
        pending = service.get_pending_conflicts(project_id)
        if not pending:
            output.warning("No pending conflicts")
            return ExitCode.SUCCESS

        choices = {}
        if resolve_all:
            choices = {conflict.path: resolve_all for conflict in pending}
        for path in incoming or []:
            choices[path] = "incoming"
        for path in local or []:
            choices[path] = "local"
        merged_contents = {}
        for spec in merged or []:
            path, content = _read_merged_option(spec)
            choices[path] = "merged"
            merged_contents[path] = content

        if not choices:
            output.error("Nothing to resolve: pass --incoming PATH, --local PATH, --merged PATH=FILE or --all")
            output.print_conflicts(pending)
            return ExitCode.GENERAL_ERROR

        pending_paths = {conflict.path for conflict in pending}
        unknown = sorted(set(choices) - pending_paths)
        if unknown:
            output.error(f"Not a pending conflict: {', '.join(unknown)}")
            return ExitCode.GENERAL_ERROR

        resolutions = [
            ConflictResolution.for_conflict(
                conflict, choices[conflict.path], merged_content=merged_contents.get(conflict.path)
            )
            for conflict in pending
            if conflict.path in choices
        ]
        result = service.resolve_conflicts(project_id, resolutions)

        output.success(f"Resolved {len(resolutions)} conflict(s)")
        if result["remainingConflicts"]:
            output.warning(f"{len(result['remainingConflicts'])} conflict(s) still pending")
            return ExitCode.CONFLICTS
        return ExitCode.SUCCESS

    _execute(ctx, action)


@app.command()
def commit(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project id"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Commit message"),
) -> None:
    """Commit all project files and push them to GitHub."""
    def action(output: OutputHandler, service: GitHubSyncService) -> ExitCode:
        with output.spinner("Pushing to GitHub..."):
            result = service.commit(project_id, message)
        output.success(f"Pushed {result['commitSha'][:7]} to {result['repoUrl']}")
        return ExitCode.SUCCESS

    _execute(ctx, action)


@app.command("create-repo")
def create_repo(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project id"),
) -> None:
    """Create a GitHub repository for the project and push it."""
    def action(output: OutputHandler, service: GitHubSyncService) -> ExitCode:
        with output.spinner("Creating repository..."):
            result = service.create_repo(project_id)
        output.success(f"Created {result['repoUrl']}")
        return ExitCode.SUCCESS

    _execute(ctx, action)


@app.command("remove-repo")
def remove_repo(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete the linked GitHub repository and unlink it."""
    if not yes:
        typer.confirm(
            f"Delete the GitHub repository linked to project {project_id}?",
            abort=True,
        )

    def action(output: OutputHandler, service: GitHubSyncService) -> ExitCode:
        service.remove_repo(project_id)
        output.success(f"Repository of project {project_id} removed")
        return ExitCode.SUCCESS

    _execute(ctx, action)


@app.command()
def changes(
    ctx: typer.Context,
    project_id: str = typer.Argument(..., help="Project id"),
) -> None:
    """List local changes since the last synced commit."""
    def action(output: OutputHandler, service: GitHubSyncService) -> ExitCode:
        output.print_changes(service.changed_files(project_id))
        return ExitCode.SUCCESS

    _execute(ctx, action)


def main() -> None:
    """Main entry point for the CLI application.

    This function is called when the module is executed directly or
    when the console script is invoked.
    """
    app()


# Allow running as: python -m src.cli.main
if __name__ == "__main__":
    main()
