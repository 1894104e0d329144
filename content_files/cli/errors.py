"""Exceptions raised by the content-files commands.

Failures of the run state sidecar and the setup wizard end the command;
TransformCommand and main() turn them into exit codes.
"""

from typing import Optional

from content_files.content_source.errors import ContentFilesError


class CLIError(ContentFilesError):
    """Base exception for command-level failures."""
    pass


class SetupError(CLIError):
    """Raised when the setup wizard cannot produce a configuration."""
    pass


class StateError(CLIError):
    """Raised when .content-files/state.yaml holds an invalid run state."""

    def __init__(self, message: str, state_field: Optional[str] = None):
        where = f" ({state_field})" if state_field else ""
        super().__init__(f"Invalid run state{where}: {message}")
        self.state_field = state_field


class StateFilesystemError(CLIError):
    """Raised when the run state file cannot be read or written."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Could not {operation.replace('_', ' ')} run state at {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason
