"""Typed exception hierarchy for file writer errors.

This module defines all custom exceptions used by the file writer library.
All exceptions inherit from FileWriterError so callers can catch the whole
family at once, and carry the path or field that failed.
"""

from typing import Optional

from content_files.content_source.errors import ContentFilesError


class FileWriterError(ContentFilesError):
    """Base exception for all file writer errors."""
    pass


class InvalidInputError(FileWriterError):
    """Raised when a decision utility receives an unusable value.

    The reconciler isolates this to the one object being evaluated.
    """

    def __init__(self, message: str, value: object = None):
        super().__init__(message)
        self.value = value


class UnwritableSpecError(FileWriterError):
    """Raised when a write spec has no path or names an unknown format.

    This is an opt-out signal, not a failure: the object is skipped silently.
    """

    def __init__(self, reason: str):
        super().__init__(f"Unwritable spec: {reason}")
        self.reason = reason


class FilesystemError(FileWriterError):
    """Raised when filesystem operations fail (read, write, delete, etc)."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Filesystem operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class DeleteFailedError(FilesystemError):
    """Raised when a stale file could not be deleted."""

    def __init__(self, file_path: str, reason: Optional[str] = None):
        super().__init__(file_path, 'delete', reason)


class WriteFailedError(FilesystemError):
    """Raised when a target file could not be created or written."""

    def __init__(self, file_path: str, reason: Optional[str] = None):
        super().__init__(file_path, 'write', reason)


class CodecError(FileWriterError):
    """Raised when content cannot be serialized in the requested format."""

    def __init__(self, file_format: str, message: str):
        super().__init__(f"Cannot serialize {file_format} content: {message}")
        self.file_format = file_format
        self.message = message


class ConfigError(FileWriterError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, config_field: Optional[str] = None):
        if config_field:
            full_message = f"Configuration error in field '{config_field}': {message}"
        else:
            full_message = f"Configuration error: {message}"
        super().__init__(full_message)
        self.config_field = config_field
        self.original_message = message
