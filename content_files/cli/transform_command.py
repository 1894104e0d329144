"""Transform command orchestration for CLI.

This module provides the TransformCommand class that runs one export:
load configuration and state, fetch the object snapshot, reconcile files
on disk, persist the new state and report the outcome.
"""

import logging
from datetime import datetime, UTC
from pathlib import Path
from typing import Optional

from content_files.content_source.errors import (
    InvalidCredentialsError,
    SnapshotFormatError,
    SourceAccessError,
    SourceUnreachableError,
)
from content_files.content_source.source_client import SourceClient
from content_files.file_writer.config_loader import ConfigLoader, rule_summaries
from content_files.file_writer.errors import ConfigError, FilesystemError
from content_files.file_writer.filesystem import FilesystemAdapter
from content_files.file_writer.models import ExportConfig, ReconcileResult
from content_files.file_writer.reconciler import Reconciler, describe_failure
from content_files.file_writer.rules import DecisionFunction, import_decision_function
from .config import StateManager
from .errors import CLIError
from .models import ExitCode, RunSummary
from .output import OutputHandler

logger = logging.getLogger(__name__)

DEFAULT_STATE_PATH = f"{StateManager.DEFAULT_STATE_DIR}/{StateManager.DEFAULT_STATE_FILE}"


class TransformCommand:
    """Orchestrates one export run for the CLI.

    The run workflow:
        1. Load configuration and the previous run's state
        2. Resolve the decision function (custom function or rule set)
        3. Fetch the object snapshot
        4. Reconcile: delete stale files, write target files
        5. Save the new state (skipped on dry run)
        6. Return an exit code reflecting partial failures

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> cmd = TransformCommand(output_handler=output)
        >>> exit_code = cmd.run(objects="content.json", dry_run=False)
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        config_path: str = ConfigLoader.DEFAULT_CONFIG_PATH,
        state_path: str = DEFAULT_STATE_PATH,
        output_handler: Optional[OutputHandler] = None,
        source_client: Optional[SourceClient] = None,
        state_manager: Optional[StateManager] = None,
        reconciler: Optional[Reconciler] = None,
    ):
        """Initialize transform command with dependencies.

        Args:
            config_path: Path to configuration YAML file
            state_path: Path to state YAML file
            output_handler: OutputHandler for terminal output (optional)
            source_client: SourceClient for fetching objects (optional)
            state_manager: StateManager for state management (optional)
            reconciler: Reconciler to use instead of one built from config
                        (optional)
        """
        self.config_path = config_path
        self.state_path = state_path
        self.output_handler = output_handler or OutputHandler()
        self.source_client = source_client or SourceClient()
        self.state_manager = state_manager or StateManager()
        self.reconciler = reconciler

    def run(self, objects: Optional[str] = None, dry_run: bool = False) -> ExitCode:
        """Execute one export run.

        Args:
            objects: Snapshot path or URL overriding the configured source
            dry_run: If True, preview changes without applying them

        Returns:
            ExitCode indicating success or specific failure type
        """
        try:
            logger.info(f"Loading configuration from {self.config_path}")

            if not Path(self.config_path).exists():
                self._print_getting_started()
                return ExitCode.GENERAL_ERROR

            config = ConfigLoader.load(self.config_path)

            logger.info(f"Loading run state from {self.state_path}")
            state = self.state_manager.load(self.state_path)
            logger.info(
                f"Last run: {state.last_run or 'never'} "
                f"({len(state.written_files)} tracked file(s))"
            )

            decide = self._get_decision_function(config)

            with self.output_handler.spinner("Fetching objects..."):
                snapshot = self.source_client.fetch(objects or config.source)
            self.output_handler.info(f"Fetched {len(snapshot.objects)} object(s)")

            reconciler = self.reconciler or Reconciler(
                FilesystemAdapter(
                    config.output_dir,
                    restrict_to_base=config.restrict_to_output_dir,
                )
            )

            result = reconciler.run(
                snapshot.objects,
                decide,
                prior=state.written_files,
                dry_run=dry_run,
            )

            if dry_run:
                self.output_handler.print_dryrun_summary(
                    to_write=list(result.plan.target.keys()),
                    to_delete=result.plan.to_delete,
                    failed_objects=[
                        f"{describe_failure(failure)}: {failure.reason}"
                        for failure in result.plan.object_failures
                    ],
                )
                if result.plan.object_failures:
                    return ExitCode.PARTIAL_FAILURE
                return ExitCode.SUCCESS

            state.written_files = result.written_files
            state.last_run = datetime.now(UTC).isoformat()
            self.state_manager.save(self.state_path, state)
            logger.info(f"Saved run state to {self.state_path}")

            self.output_handler.print_run_summary(self._summarize(result))

            if result.has_failures:
                return ExitCode.PARTIAL_FAILURE
            return ExitCode.SUCCESS

        except InvalidCredentialsError as e:
            logger.error(f"Authentication failed: {e}")
            self.output_handler.error(f"Authentication failed: {e}")
            self.output_handler.info(
                "Check CONTENT_SOURCE_URL and CONTENT_SOURCE_TOKEN environment variables"
            )
            return ExitCode.AUTH_ERROR

        except SnapshotFormatError as e:
            logger.error(f"Invalid object snapshot: {e}")
            self.output_handler.error(f"Invalid object snapshot: {e}")
            return ExitCode.GENERAL_ERROR

        except (SourceUnreachableError, SourceAccessError) as e:
            logger.error(f"Content source error: {e}")
            self.output_handler.error(f"Content source error: {e}")
            self.output_handler.info("Check the object source location and try again")
            return ExitCode.NETWORK_ERROR

        except (ConfigError, FilesystemError) as e:
            logger.error(f"Configuration error: {e}")
            self.output_handler.error(f"Configuration error: {e}")
            return ExitCode.GENERAL_ERROR

        except CLIError as e:
            logger.error(f"CLI error: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception("Unexpected error during export")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def _get_decision_function(self, config: ExportConfig) -> Optional[DecisionFunction]:
        """Return the custom decision function, the rule set, or None.

        Raises:
            ConfigError: If the custom function cannot be imported
        """
        if config.decision_function:
            logger.info(f"Using decision function {config.decision_function}")
            return import_decision_function(config.decision_function)

        if config.rules:
            logger.info(f"Using {len(config.rules)} configured rule(s)")
            for line in rule_summaries(config.rules):
                self.output_handler.debug(f"  {line}")
            return config.rules

        return None

    @staticmethod
    def _summarize(result: ReconcileResult) -> RunSummary:
        return RunSummary(
            created_count=len(result.created),
            deleted_count=len(result.deleted),
            failed_write_count=len(result.failed_writes),
            failed_delete_count=len(result.failed_deletes),
            failed_object_count=len(result.plan.object_failures),
            skipped_object_count=result.plan.skipped_count,
        )

    def _print_getting_started(self) -> None:
        self.output_handler.print("No export configuration found.\n")
        self.output_handler.print("To get started, run the setup wizard against your objects:\n")
        self.output_handler.print("  content-files --setup --objects content.json\n")
        self.output_handler.print("Optional environment variables:")
        self.output_handler.print("  CONTENT_SOURCE_URL      - Default object snapshot URL or path")
        self.output_handler.print("  CONTENT_SOURCE_TOKEN    - Bearer token for HTTP sources\n")
        self.output_handler.print("Run 'content-files --help' for more options.")
