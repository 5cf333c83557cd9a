"""Typed exception hierarchy for CLI-related errors.

This module defines all custom exceptions used by the CLI and the sync
service. All exceptions inherit from CLIError base class for easy catching
and include descriptive messages with context to help with debugging.
"""

from typing import Optional

from src.github_client.errors import SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class ConfigError(CLIError):
    """Raised when the configuration file is malformed or invalid."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Config error in field '{config_field}': {message}"
        else:
            full_message = f"Config error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message


class StateError(CLIError):
    """Raised when state file operations or validation fail."""

    def __init__(self, message: str, state_field: Optional[str] = None):
        if state_field:
            full_message = f"State error in field '{state_field}': {message}"
        else:
            full_message = f"State error: {message}"
        super().__init__(full_message)
        self.state_field = state_field
        self.original_message = message


class StateFilesystemError(CLIError):
    """Raised when state or config file filesystem operations fail."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"State file operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class ProjectNotFoundError(CLIError):
    """Raised when a project id is not registered in the state file."""

    def __init__(self, project_id: str):
        super().__init__(
            f"Project '{project_id}' is not registered. Run 'sandbox-sync init' first."
        )
        self.project_id = project_id


class RepositoryNotLinkedError(CLIError):
    """Raised when an operation needs a linked repository and there is none."""

    def __init__(self, project_id: str):
        super().__init__(
            f"Project '{project_id}' has no linked GitHub repository. "
            f"Run 'sandbox-sync create-repo' first."
        )
        self.project_id = project_id


class NothingToCommitError(CLIError):
    """Raised when a commit is requested but no project file qualifies."""

    def __init__(self, project_id: str):
        super().__init__(f"Nothing to commit for project '{project_id}'")
        self.project_id = project_id


class LockTimeoutError(CLIError):
    """Raised when a project lock or the state file lock cannot be acquired in time."""

    def __init__(self, project_id: str, timeout: float):
        super().__init__(
            f"Timeout acquiring lock for '{project_id}' after {timeout}s. "
            f"Another sync may be in progress."
        )
        self.project_id = project_id
        self.timeout = timeout
