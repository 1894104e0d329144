"""Content source client for fetching object snapshots.

This package loads the object set (objects plus content model descriptions)
either from a local JSON/YAML snapshot or from an HTTP endpoint.
"""

from .auth import Authenticator, Credentials
from .errors import (
    ContentFilesError,
    SourceError,
    InvalidCredentialsError,
    SourceUnreachableError,
    SourceAccessError,
    SnapshotFormatError,
)
from .source_client import SourceClient

__all__ = [
    'Authenticator',
    'Credentials',
    'ContentFilesError',
    'SourceError',
    'InvalidCredentialsError',
    'SourceUnreachableError',
    'SourceAccessError',
    'SnapshotFormatError',
    'SourceClient',
]
