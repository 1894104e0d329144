"""Data models for CLI operations.

This module defines all data models used by the CLI module.
All models use dataclasses, following the patterns established in
content_files/file_writer/models.py.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Run completed and every object and file succeeded
    - GENERAL_ERROR (1): Configuration, state or other fatal error
    - PARTIAL_FAILURE (2): Run completed but some objects or files failed
    - AUTH_ERROR (3): Content source rejected or lacks credentials
    - NETWORK_ERROR (4): Content source unreachable

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    PARTIAL_FAILURE = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4


@dataclass
class RunState:
    """Project-level run state tracked in .content-files/state.yaml.

    Attributes:
        last_run: ISO 8601 timestamp of the last completed run (None if never run)
        written_files: Absolute paths written by the last completed run, in
                       write order. Paths absent from the next run's target
                       are deleted by that run.

    Example:
        >>> state = RunState(last_run="2026-01-15T10:30:00+00:00")
        >>> state = RunState()  # Never run
    """
    last_run: Optional[str] = None
    written_files: List[str] = field(default_factory=list)


@dataclass
class RunSummary:
    """Counts of a run's outcomes for display to the user.

    Attributes:
        created_count: Files written
        deleted_count: Stale files deleted
        failed_write_count: Files that could not be written
        failed_delete_count: Stale files that could not be deleted
        failed_object_count: Objects whose decision function failed
        skipped_object_count: Objects that map to no file
    """
    created_count: int = 0
    deleted_count: int = 0
    failed_write_count: int = 0
    failed_delete_count: int = 0
    failed_object_count: int = 0
    skipped_object_count: int = 0

    @property
    def failure_count(self) -> int:
        return self.failed_write_count + self.failed_delete_count + self.failed_object_count
