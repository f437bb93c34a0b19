"""
CLI workflow orchestration for Cull.

Provides the CLIOrchestrator class that coordinates the entire CLI workflow
from argument parsing through scanning, reporting, export and removal.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from ..exceptions import CancellationError, DirectoryAccessError
from ..models import DuplicateGroup, format_size
from ..scanner import CancellationToken, DuplicateEngine, has_heif_support
from ..user_config import get_user_config
from ..utils import validators
from ..utils.exporters import export_results
from .actions import files_to_remove, handle_duplicates
from .arg_parser import parse_arguments
from .interactive import confirm_action, prompt_for_directory
from .progress import ProgressDisplay
from .reporting import print_duplicate_report

# Conventional exit status for termination by SIGINT
EXIT_CANCELLED = 130


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Configure logging for the CLI.

    Args:
        verbose: Enable verbose (DEBUG level) logging

    Returns:
        Configured logger instance
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    return logging.getLogger(__name__)


class CLIOrchestrator:
    """
    Orchestrates the CLI scanning workflow.

    The scan runs on a worker thread so Ctrl+C in the main thread can cancel
    it cooperatively instead of interrupting it mid-file.
    """

    def __init__(self, argv: Optional[list[str]] = None):
        """
        Initialize the orchestrator.

        Args:
            argv: Argument list (default: sys.argv)
        """
        self.argv = argv
        self.logger = logging.getLogger(__name__)
        self.args = None
        self.groups: list[DuplicateGroup] = []
        self.cancel_token = CancellationToken()

    def run(self) -> int:
        """
        Execute the complete CLI workflow.

        Returns:
            Exit code (0 success, 1 error, 130 cancelled)
        """
        self.args = parse_arguments(self.argv)
        self.logger = setup_logging(self.args.verbose)

        if self.args.directory is None:
            self.args.directory = prompt_for_directory()

        exit_code = self._configure_phase()
        if exit_code != 0:
            return exit_code

        exit_code = self._scan_phase()
        if exit_code != 0:
            return exit_code

        self._report_phase()

        if self.args.action != 'report':
            return self._action_phase()
        return 0

    def _configure_phase(self) -> int:
        """Fill unset options from the user configuration and validate them."""
        user_config = get_user_config()
        if self.args.mode is None:
            self.args.mode = user_config.default_mode
        if self.args.threshold is None:
            self.args.threshold = user_config.default_threshold
        if self.args.workers is None:
            self.args.workers = user_config.default_workers

        for is_valid, error in (
            validators.validate_mode(self.args.mode),
            validators.validate_threshold(self.args.threshold),
        ):
            if not is_valid:
                self.logger.error(error)
                return 1

        if self.args.mode != 'exact' and not has_heif_support():
            self.logger.info("HEIC files will only be matched exactly (pillow-heif missing)")

        self.show_progress = not self.args.no_progress
        return 0

    def _scan_phase(self) -> int:
        """
        Run the engine on a worker thread and wait for it.

        Returns:
            0 for success, 1 for a scan error, 130 when cancelled
        """
        display = ProgressDisplay(enabled=self.show_progress)
        engine = DuplicateEngine(workers=self.args.workers)
        outcome: dict = {}

        def worker() -> None:
            try:
                outcome['groups'] = engine.scan(
                    self.args.directory,
                    mode=self.args.mode,
                    threshold=self.args.threshold,
                    on_progress=display.on_progress,
                    on_duplicate_count=display.on_duplicate_count,
                    cancel_token=self.cancel_token,
                )
            except Exception as e:
                outcome['error'] = e

        self.logger.info(f"Scanning {self.args.directory} for images...")
        thread = threading.Thread(target=worker, name='cull-scan', daemon=True)
        thread.start()

        try:
            while thread.is_alive():
                thread.join(0.2)
        except KeyboardInterrupt:
            self.logger.warning("Interrupted, cancelling scan...")
            self.cancel_token.cancel()
            thread.join()
        finally:
            display.close()

        error = outcome.get('error')
        if isinstance(error, CancellationError):
            self.logger.info("Scan cancelled.")
            return EXIT_CANCELLED
        if isinstance(error, DirectoryAccessError):
            self.logger.error(str(error))
            return 1
        if error is not None:
            self.logger.error(f"Scan failed: {error}")
            return 1

        self.groups = outcome['groups']
        return 0

    def _report_phase(self) -> None:
        """Print the report and handle exports."""
        print_duplicate_report(self.groups, self.args.strategy)

        if self.args.export:
            export_results(self.groups, self.args.export, self.args.export_format)
            self.logger.info(f"Results exported to: {self.args.export}")

    def _action_phase(self) -> int:
        """Remove duplicates and show statistics."""
        if not self.groups:
            self.logger.info("Nothing to remove.")
            return 0

        dry_run = not self.args.no_dry_run
        if dry_run:
            self.logger.info("[DRY RUN MODE - No files will be modified]")
        else:
            records = files_to_remove(self.groups, self.args.strategy)
            size = format_size(sum(r.file_size for r in records))
            if not confirm_action(self.args.action, len(records), size):
                self.logger.info("Aborted.")
                return 0

        stats = handle_duplicates(
            self.groups,
            action=self.args.action,
            strategy=self.args.strategy,
            dry_run=dry_run,
            max_workers=get_user_config().delete_workers,
            logger=self.logger,
        )

        self.logger.info(f"Processed: {stats['processed']:,} files")
        if stats['errors']:
            self.logger.info(f"Errors: {stats['errors']}")
        self.logger.info(
            f"Space {'would be ' if dry_run else ''}saved: {format_size(stats['space_saved'])}"
        )
        return 1 if stats['errors'] else 0


__all__ = ['CLIOrchestrator', 'setup_logging', 'EXIT_CANCELLED']
