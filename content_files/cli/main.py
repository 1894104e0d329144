"""Command-line entry point: the ``content-files`` command.

A single Typer command carries every flag. Without flags it exports files
using .content-files/config.yaml; ``--setup`` runs the configuration wizard
instead.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from content_files import __version__
from content_files.content_source.errors import ContentFilesError
from content_files.file_writer.config_loader import rule_summaries
from .models import ExitCode
from .output import OutputHandler
from .setup_command import SetupCommand
from .transform_command import TransformCommand

app = typer.Typer(
    name="content-files",
    help="""Export content objects to markdown, JSON and YAML files.

QUICK START:
  content-files --setup --objects content.json   # Configure the export
  content-files                                  # Write files
  content-files --dry-run                        # Preview changes""",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=False,
)

logger = logging.getLogger(__name__)

APP_LOGGER_NAME = "content_files"

# Index is the --verbosity value; anything higher logs at DEBUG
LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Route content_files log records to stderr and optionally a log file.

    Only the package logger is configured; the root logger and third-party
    loggers keep their settings. Handlers from an earlier call are replaced.

    Args:
        verbosity: 0 logs warnings, 1 adds per-file lines, 2+ adds debug detail
        logdir: Directory for a content-files_<timestamp>.log file
    """
    level = LOG_LEVELS[min(max(verbosity, 0), len(LOG_LEVELS) - 1)]

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(level)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    handlers = [(
        logging.StreamHandler(sys.stderr),
        "%(asctime)s [%(levelname)8s] %(message)s",
    )]

    log_file = None
    if logdir:
        Path(logdir).mkdir(parents=True, exist_ok=True)
        log_file = Path(logdir) / f"content-files_{datetime.now():%Y%m%d_%H%M%S}.log"
        handlers.append((
            logging.FileHandler(log_file, encoding="utf-8"),
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))

    for handler, fmt in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt, datefmt=LOG_DATE_FORMAT))
        app_logger.addHandler(handler)

    if log_file:
        logger.info(f"Writing log to {log_file}")


def _run_setup(
    objects: Optional[str],
    output_dir: str,
    verbosity: int,
    no_color: bool,
    logdir: Optional[str],
) -> None:
    """Run the setup wizard.

    Args:
        objects: Snapshot path or URL
        output_dir: Output directory recorded in the configuration
        verbosity: Verbosity level
        no_color: Whether to disable colored output
        logdir: Directory for log files
    """
    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    try:
        setup_cmd = SetupCommand(output_handler=output)
        config = setup_cmd.run(source=objects, output_dir=output_dir)

        output.success("Configuration saved successfully")
        output.print_rules(rule_summaries(config.rules))
        output.info(f"  Config file: {setup_cmd.config_path}")
        output.info("")
        output.info("Next steps:")
        output.info(f"  1. Review {setup_cmd.config_path}")
        output.info("  2. Run 'content-files' to write files")

        raise typer.Exit(ExitCode.SUCCESS)

    except ContentFilesError as e:
        logger.error(f"Setup failed: {e}")
        output.error(f"Setup failed: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    except typer.Exit:
        raise

    except Exception as e:
        logger.exception("Unexpected error during setup")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)


def _run_transform(
    objects: Optional[str],
    dry_run: bool,
    logdir: Optional[str],
    verbosity: int,
    no_color: bool,
) -> None:
    """Run one export.

    Args:
        objects: Snapshot path or URL overriding the configured source
        dry_run: Preview changes without applying
        logdir: Directory for log files
        verbosity: Verbosity level
        no_color: Whether to disable colored output
    """
    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    transform_cmd = TransformCommand(output_handler=output)
    exit_code = transform_cmd.run(objects=objects, dry_run=dry_run)

    raise typer.Exit(exit_code)


@app.command()
def main_command(
    setup: bool = typer.Option(
        False,
        "--setup",
        help="Run the interactive setup wizard and write .content-files/config.yaml",
    ),
    objects: Optional[str] = typer.Option(
        None,
        "--objects",
        help="Object snapshot path or URL (overrides config and CONTENT_SOURCE_URL)",
        metavar="PATH|URL",
    ),
    output_dir: str = typer.Option(
        ".",
        "--output-dir",
        help="With --setup: directory the files are written to",
        metavar="DIR",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "--dryrun",
        help="Preview changes without applying them",
    ),
    logdir: Optional[str] = typer.Option(
        None,
        "--logdir",
        help="Directory for log files (creates timestamped log file)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbosity",
        "-v",
        help="Verbosity level: 0=summary, 1=info, 2=debug",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
) -> None:
    """Export content objects to markdown, JSON and YAML files.

    \b
    QUICK START:
      content-files --setup --objects content.json   # Configure the export
      content-files                                  # Write files
      content-files --dry-run                        # Preview changes

    \b
    NOTE:
      - Files written by the previous run that no object maps to anymore
        are deleted; other files in the output directory are never touched
    """
    if version:
        typer.echo(f"content-files version {__version__}")
        raise typer.Exit()

    if setup:
        if dry_run:
            typer.echo("Error: --dry-run cannot be combined with --setup", err=True)
            raise typer.Exit(ExitCode.GENERAL_ERROR)
        _run_setup(objects, output_dir, verbosity, no_color, logdir)
        return

    _run_transform(objects, dry_run, logdir, verbosity, no_color)


def main() -> None:
    """Console script target for ``content-files``."""
    app()


# Allow running as: python -m content_files.cli.main
if __name__ == "__main__":
    main()
