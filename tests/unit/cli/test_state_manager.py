"""Unit tests for cli.config module (StateManager)."""

import os
from unittest.mock import patch

import pytest
import yaml

from content_files.cli.config import StateManager
from content_files.cli.errors import StateError, StateFilesystemError
from content_files.cli.models import RunState


class TestStateManagerLoad:
    """Test cases for StateManager.load."""

    def test_missing_file_is_fresh_state(self, tmp_path):
        """A missing state file means the tool never ran."""
        state = StateManager.load(str(tmp_path / "state.yaml"))

        assert state == RunState()

    @pytest.mark.parametrize("text", ["", "   \n", "~\n"])
    def test_empty_file_is_fresh_state(self, tmp_path, text):
        path = tmp_path / "state.yaml"
        path.write_text(text, encoding="utf-8")

        assert StateManager.load(str(path)) == RunState()

    def test_loads_written_files(self, tmp_path):
        """Tracked paths are loaded in order, without duplicates."""
        path = tmp_path / "state.yaml"
        path.write_text(
            "last_run: '2026-01-15T10:30:00+00:00'\n"
            "written_files:\n"
            "  - /site/_posts/a.md\n"
            "  - /site/_data/b.json\n"
            "  - /site/_posts/a.md\n",
            encoding="utf-8",
        )

        state = StateManager.load(str(path))

        assert state.last_run == "2026-01-15T10:30:00+00:00"
        assert state.written_files == ["/site/_posts/a.md", "/site/_data/b.json"]

    @pytest.mark.parametrize("text,field", [
        ("written_files: [\n", None),
        ("- a\n", None),
        ("last_run: 5\n", "last_run"),
        ("last_run: '  '\n", "last_run"),
        ("written_files: /a.md\n", "written_files"),
        ("written_files: ['']\n", "written_files"),
        ("written_files: [relative/a.md]\n", "written_files"),
    ])
    def test_invalid_state(self, tmp_path, text, field):
        """Malformed state raises StateError naming the field."""
        path = tmp_path / "state.yaml"
        path.write_text(text, encoding="utf-8")

        with pytest.raises(StateError) as exc_info:
            StateManager.load(str(path))

        assert exc_info.value.state_field == field

    def test_unreadable_file(self, tmp_path):
        """Read errors other than a missing file raise StateFilesystemError."""
        with patch("builtins.open", side_effect=PermissionError("denied")):
            with pytest.raises(StateFilesystemError) as exc_info:
                StateManager.load(str(tmp_path / "state.yaml"))

        assert exc_info.value.operation == "read"


class TestStateManagerSave:
    """Test cases for StateManager.save."""

    def test_save_creates_directory(self, tmp_path):
        """The state directory is created on first save."""
        path = tmp_path / ".content-files" / "state.yaml"

        StateManager.save(str(path), RunState(last_run="2026-01-15T10:30:00+00:00", written_files=["/a.md"]))

        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data == {"last_run": "2026-01-15T10:30:00+00:00", "written_files": ["/a.md"]}

    def test_save_then_load(self, tmp_path):
        """State survives a save and reload."""
        path = str(tmp_path / "state.yaml")
        state = RunState(last_run="2026-01-15T10:30:00+00:00", written_files=["/b.md", "/a.md"])

        StateManager.save(path, state)

        assert StateManager.load(path) == state

    def test_save_replaces_previous_state(self, tmp_path):
        path = str(tmp_path / "state.yaml")
        StateManager.save(path, RunState(written_files=["/old.md"]))

        StateManager.save(path, RunState(written_files=["/new.md"]))

        assert StateManager.load(path).written_files == ["/new.md"]
        assert os.listdir(tmp_path) == ["state.yaml"]

    def test_failed_save_keeps_previous_state(self, tmp_path):
        """An interrupted save leaves the old state and no temp files."""
        path = str(tmp_path / "state.yaml")
        StateManager.save(path, RunState(written_files=["/old.md"]))

        with patch("os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StateFilesystemError) as exc_info:
                StateManager.save(path, RunState(written_files=["/new.md"]))

        assert exc_info.value.operation == "write"
        assert StateManager.load(path).written_files == ["/old.md"]
        assert os.listdir(tmp_path) == ["state.yaml"]

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")

        with pytest.raises(StateFilesystemError) as exc_info:
            StateManager.save(str(blocker / "state.yaml"), RunState())

        assert exc_info.value.operation == "create_directory"
