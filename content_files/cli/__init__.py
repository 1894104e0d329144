"""Command-line interface for content file export.

This package provides the `content-files` CLI tool: an interactive setup
wizard that builds the export rules, and the export run that reconciles
files on disk with the objects fetched from the content source.
"""

from .transform_command import TransformCommand
from .setup_command import SetupCommand
from .models import ExitCode, RunState, RunSummary
from .errors import (
    CLIError,
    SetupError,
    StateError,
    StateFilesystemError,
)

__all__ = [
    'TransformCommand',
    'SetupCommand',
    'ExitCode',
    'RunState',
    'RunSummary',
    'CLIError',
    'SetupError',
    'StateError',
    'StateFilesystemError',
]
