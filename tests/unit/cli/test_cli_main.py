"""Unit tests for main CLI entry point (main.py).

Tests the Typer CLI application using CliRunner.
"""

import logging
from unittest.mock import Mock, patch

from typer.testing import CliRunner

from content_files import __version__
from content_files.cli.errors import SetupError
from content_files.cli.main import APP_LOGGER_NAME, _configure_logging, app
from content_files.cli.models import ExitCode
from content_files.file_writer.models import ExportConfig, FileFormat
from content_files.file_writer.rules import PathKind, PathTemplate, Rule, RuleMatch, RuleSet


runner = CliRunner()


class TestConfigureLogging:
    """Test cases for _configure_logging function."""

    def test_verbosity_0_sets_warning_level(self):
        _configure_logging(0)

        assert logging.getLogger(APP_LOGGER_NAME).level == logging.WARNING

    def test_verbosity_1_sets_info_level(self):
        _configure_logging(1)

        assert logging.getLogger(APP_LOGGER_NAME).level == logging.INFO

    def test_verbosity_2_sets_debug_level(self):
        """Verbosity 2+ sets logging to DEBUG level."""
        _configure_logging(3)

        assert logging.getLogger(APP_LOGGER_NAME).level == logging.DEBUG

    def test_repeated_calls_do_not_stack_handlers(self):
        _configure_logging(0)
        _configure_logging(1)

        assert len(logging.getLogger(APP_LOGGER_NAME).handlers) == 1

    def test_root_logger_untouched(self):
        root_level = logging.getLogger().level

        _configure_logging(2)

        assert logging.getLogger().level == root_level

    def test_logdir_creates_log_file(self, tmp_path):
        """--logdir adds a timestamped file handler."""
        logdir = tmp_path / "logs"

        _configure_logging(1, str(logdir))
        logging.getLogger("content_files.file_writer.reconciler").info("Created file: /site/a.md")
        for handler in logging.getLogger(APP_LOGGER_NAME).handlers:
            handler.flush()

        (log_file,) = logdir.glob("content-files_*.log")
        assert "Created file: /site/a.md" in log_file.read_text(encoding="utf-8")


class TestVersion:
    """Test cases for --version."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"content-files version {__version__}" in result.stdout


class TestTransform:
    """Test cases for the default export command."""

    @patch('content_files.cli.main.TransformCommand')
    def test_default_runs_export(self, mock_transform_cmd):
        mock_instance = Mock()
        mock_instance.run.return_value = ExitCode.SUCCESS
        mock_transform_cmd.return_value = mock_instance

        result = runner.invoke(app, [])

        assert result.exit_code == ExitCode.SUCCESS
        mock_instance.run.assert_called_once_with(objects=None, dry_run=False)

    @patch('content_files.cli.main.TransformCommand')
    def test_objects_and_dry_run_are_forwarded(self, mock_transform_cmd):
        mock_instance = Mock()
        mock_instance.run.return_value = ExitCode.SUCCESS
        mock_transform_cmd.return_value = mock_instance

        result = runner.invoke(app, ["--objects", "content.json", "--dryrun"])

        assert result.exit_code == ExitCode.SUCCESS
        mock_instance.run.assert_called_once_with(objects="content.json", dry_run=True)

    @patch('content_files.cli.main.TransformCommand')
    def test_exit_code_is_propagated(self, mock_transform_cmd):
        """The command's exit code becomes the process exit code."""
        mock_instance = Mock()
        mock_instance.run.return_value = ExitCode.PARTIAL_FAILURE
        mock_transform_cmd.return_value = mock_instance

        result = runner.invoke(app, ["-v", "1"])

        assert result.exit_code == ExitCode.PARTIAL_FAILURE


class TestSetup:
    """Test cases for --setup."""

    @staticmethod
    def saved_config():
        rules = RuleSet([
            Rule(
                RuleMatch("post"),
                FileFormat.FRONTMATTER_DOCUMENT,
                PathTemplate(PathKind.SLUG, field="title", directory="_posts"),
            ),
        ])
        return ExportConfig(output_dir="site", source="content.json", rules=rules)

    @patch('content_files.cli.main.SetupCommand')
    def test_setup_prints_rules(self, mock_setup_cmd):
        mock_instance = Mock()
        mock_instance.run.return_value = self.saved_config()
        mock_instance.config_path = ".content-files/config.yaml"
        mock_setup_cmd.return_value = mock_instance

        result = runner.invoke(app, ["--setup", "--objects", "content.json", "--output-dir", "site"])

        assert result.exit_code == ExitCode.SUCCESS
        mock_instance.run.assert_called_once_with(source="content.json", output_dir="site")
        assert "Configuration saved successfully" in result.stdout
        assert "_posts/<title>.md" in result.stdout

    @patch('content_files.cli.main.SetupCommand')
    def test_setup_error(self, mock_setup_cmd):
        mock_instance = Mock()
        mock_instance.run.side_effect = SetupError("No models selected for export")
        mock_setup_cmd.return_value = mock_instance

        result = runner.invoke(app, ["--setup"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        assert "No models selected for export" in result.stdout

    @patch('content_files.cli.main.SetupCommand')
    def test_unexpected_setup_error(self, mock_setup_cmd):
        mock_instance = Mock()
        mock_instance.run.side_effect = RuntimeError("boom")
        mock_setup_cmd.return_value = mock_instance

        result = runner.invoke(app, ["--setup"])

        assert result.exit_code == ExitCode.GENERAL_ERROR

    @patch('content_files.cli.main.SetupCommand')
    @patch('content_files.cli.main.TransformCommand')
    def test_setup_with_dry_run_is_rejected(self, mock_transform_cmd, mock_setup_cmd):
        result = runner.invoke(app, ["--setup", "--dry-run"])

        assert result.exit_code == ExitCode.GENERAL_ERROR
        mock_setup_cmd.assert_not_called()
        mock_transform_cmd.assert_not_called()
