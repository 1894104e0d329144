"""Filesystem adapter used by the reconciler.

Thin wrappers over the host OS for path resolution, directory creation,
file writes and deletes. Every failure is raised as a typed
FilesystemError subclass carrying the path and operation.
"""

import logging
import os
import tempfile

from .errors import DeleteFailedError, WriteFailedError

logger = logging.getLogger(__name__)


class FilesystemAdapter:
    """Performs file operations relative to an output directory.

    Attributes:
        base_dir: Absolute output directory that relative paths resolve against
        restrict_to_base: Refuse writes that resolve outside base_dir

    Example:
        >>> fs = FilesystemAdapter("./site")
        >>> path = fs.resolve("_posts/hello.md")
        >>> fs.write_text(path, "---\\ntitle: Hello\\n---\\n")
    """

    def __init__(self, base_dir: str = ".", restrict_to_base: bool = True):
        self.base_dir = os.path.abspath(base_dir)
        self.restrict_to_base = restrict_to_base

    def resolve(self, path: str) -> str:
        """Resolve a path against the output directory.

        Absolute paths are normalized and returned as-is.
        """
        return os.path.normpath(os.path.join(self.base_dir, os.path.expanduser(path)))

    def is_within_base(self, path: str) -> bool:
        """Check that a resolved path stays inside the output directory.

        Symlinks are resolved on both sides so a link cannot escape the base.
        """
        real_base = os.path.realpath(self.base_dir)
        real_path = os.path.realpath(path)
        return real_path == real_base or real_path.startswith(real_base + os.sep)

    def ensure_parent_dir(self, path: str) -> None:
        """Create the parent directory of path, recursively.

        Raises:
            WriteFailedError: If the directory cannot be created
        """
        parent = os.path.dirname(path)
        if not parent:
            return
        try:
            os.makedirs(parent, exist_ok=True)
        except OSError as e:
            raise WriteFailedError(path, f"cannot create directory {parent}: {e}")

    def write_text(self, path: str, text: str) -> None:
        """Write text to path, replacing any existing file.

        The content is staged in a temporary file in the same directory and
        moved into place, so readers never see a half-written file.

        Raises:
            WriteFailedError: If the path is outside the output directory or
                              the write fails
        """
        if not self.is_writable(path):
            raise WriteFailedError(
                path,
                f"path is outside output directory {self.base_dir}"
            )

        self.ensure_parent_dir(path)

        if os.path.isdir(path):
            raise WriteFailedError(path, "a directory exists at this path")

        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(
                prefix=".tmp-",
                dir=os.path.dirname(path) or None
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(text)
            # mkstemp creates 0600 files; keep the existing mode or use 0644
            mode = os.stat(path).st_mode & 0o777 if os.path.exists(path) else 0o644
            os.chmod(temp_path, mode)
            os.replace(temp_path, path)
            temp_path = None
        except OSError as e:
            raise WriteFailedError(path, str(e))
        finally:
            if temp_path is not None:
                self._remove_temp(temp_path)

    def delete(self, path: str) -> None:
        """Delete the file at path.

        Raises:
            DeleteFailedError: If the path is outside the output directory,
                               or the file is missing or cannot be removed
        """
        if not self.is_writable(path):
            raise DeleteFailedError(path, f"path is outside output directory {self.base_dir}")

        try:
            os.unlink(path)
        except FileNotFoundError:
            raise DeleteFailedError(path, "file does not exist")
        except OSError as e:
            raise DeleteFailedError(path, str(e))

    def is_writable(self, path: str) -> bool:
        """Return False if restrict_to_base forbids touching path."""
        return not self.restrict_to_base or self.is_within_base(path)

    @staticmethod
    def _remove_temp(temp_path: str) -> None:
        try:
            if os.path.exists(temp_path):
                os.remove(temp_path)
        except OSError as e:
            logger.warning(f"Failed to remove temp file {temp_path}: {e}")
