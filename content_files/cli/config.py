"""Run state persistence in .content-files/state.yaml.

This module loads and saves the run state: the set of files written by the
last completed run. The state must survive process restarts, otherwise
files written by earlier runs could never be cleaned up.
"""

import os
import tempfile
from typing import Any, Dict

import yaml

from .errors import StateError, StateFilesystemError
from .models import RunState


class StateManager:
    """Reads and writes the run state sidecar.

    State file structure:
        last_run: "2026-01-15T10:30:00+00:00"
        written_files:
          - /abs/path/_posts/2026-01-15-hello.md
          - /abs/path/_data/authors.json

    If the file is missing it's treated as a fresh state (never run).
    The file is written to a temporary sibling and moved into place so an
    interrupted save never leaves a truncated state.
    """

    DEFAULT_STATE_DIR = '.content-files'
    DEFAULT_STATE_FILE = 'state.yaml'

    @classmethod
    def load(cls, state_path: str) -> RunState:
        """Read the run state, or a fresh state if none was saved yet.

        Args:
            state_path: Path to the YAML state file

        Returns:
            RunState with parsed state

        Raises:
            StateFilesystemError: If file cannot be read (except FileNotFoundError)
            StateError: If state file is invalid or malformed
        """
        try:
            with open(state_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            # Missing state file is normal for the first run
            return RunState()
        except PermissionError:
            raise StateFilesystemError(
                state_path,
                'read',
                'Permission denied'
            )
        except OSError as e:
            raise StateFilesystemError(
                state_path,
                'read',
                str(e)
            )

        if not content.strip():
            return RunState()

        try:
            state_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise StateError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if state_dict is None:
            return RunState()

        if not isinstance(state_dict, dict):
            raise StateError(
                f"State must be a YAML dictionary, got {type(state_dict).__name__}"
            )

        return cls._parse_state(state_dict)

    @classmethod
    def save(cls, state_path: str, run_state: RunState) -> None:
        """Atomically replace the run state file.

        Args:
            state_path: Path to the YAML state file
            run_state: RunState to save

        Raises:
            StateFilesystemError: If file cannot be written
        """
        state_dict = {
            'last_run': run_state.last_run,
            'written_files': list(dict.fromkeys(run_state.written_files)),
        }

        yaml_str = yaml.safe_dump(
            state_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        state_dir = os.path.dirname(state_path)
        if state_dir:
            try:
                os.makedirs(state_dir, exist_ok=True)
            except OSError as e:
                raise StateFilesystemError(
                    state_dir,
                    'create_directory',
                    str(e)
                )

        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(prefix='.state-', dir=state_dir or None)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
            os.replace(temp_path, state_path)
            temp_path = None
        except PermissionError:
            raise StateFilesystemError(
                state_path,
                'write',
                'Permission denied'
            )
        except OSError as e:
            raise StateFilesystemError(
                state_path,
                'write',
                str(e)
            )
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.remove(temp_path)

    @classmethod
    def _parse_state(cls, state_dict: Dict[str, Any]) -> RunState:
        last_run = state_dict.get('last_run')

        if last_run is not None:
            if not isinstance(last_run, str):
                raise StateError(
                    f"Field 'last_run' must be a string (ISO 8601 timestamp), got {type(last_run).__name__}",
                    'last_run'
                )

            if not last_run.strip():
                raise StateError(
                    "Field 'last_run' cannot be empty",
                    'last_run'
                )

            last_run = last_run.strip()

        written_files = state_dict.get('written_files')

        if written_files is None:
            written_files = []
        elif not isinstance(written_files, list):
            raise StateError(
                f"Field 'written_files' must be a list, got {type(written_files).__name__}",
                'written_files'
            )

        for path in written_files:
            if not isinstance(path, str) or not path.strip():
                raise StateError(
                    "Field 'written_files' entries must be non-empty strings",
                    'written_files'
                )
            if not os.path.isabs(path):
                raise StateError(
                    f"Field 'written_files' entries must be absolute paths, got {path!r}",
                    'written_files'
                )

        return RunState(last_run=last_run, written_files=list(dict.fromkeys(written_files)))
