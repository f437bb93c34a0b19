"""
CLI package for Cull.

Provides the command-line interface for scanning a directory, reporting
duplicate groups, exporting them and moving redundant copies to the trash.

Public API:
- main: Entry point for CLI execution
- CLIOrchestrator: CLI workflow orchestration class
- handle_duplicates: Function to remove duplicates
- print_duplicate_report: Function to display results report
"""

from __future__ import annotations

from typing import Optional

from .orchestrator import CLIOrchestrator, EXIT_CANCELLED, setup_logging
from .arg_parser import create_parser, parse_arguments
from .actions import files_to_remove, handle_duplicates
from .progress import ProgressDisplay
from .reporting import print_duplicate_report
from .interactive import prompt_for_directory, confirm_action


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Delegates to CLIOrchestrator to execute the complete workflow.

    Returns:
        Exit code (0 success, 1 error, 130 cancelled)
    """
    orchestrator = CLIOrchestrator(argv)
    return orchestrator.run()


__all__ = [
    # Main entry point
    'main',
    # Core classes
    'CLIOrchestrator',
    'ProgressDisplay',
    'EXIT_CANCELLED',
    # Utilities
    'setup_logging',
    'create_parser',
    'parse_arguments',
    'files_to_remove',
    'handle_duplicates',
    'print_duplicate_report',
    'prompt_for_directory',
    'confirm_action',
]
