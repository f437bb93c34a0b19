"""
Argument parsing for the CLI interface.

Provides functions to create and configure the argument parser for the
cull command-line interface.
"""

from __future__ import annotations

import argparse
from pathlib import Path

from ..config import MAX_THRESHOLD, MIN_THRESHOLD, SCAN_MODES
from ..utils.exporters import EXPORT_FORMATS
from ..utils.selection import SelectionStrategy


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Mode, threshold and workers default to None so the orchestrator can fall
    back to the user configuration.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog='cull-cli',
        description='Find duplicate and visually similar images',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s /path/to/photos
      Scan for duplicates (report only, no changes)

  %(prog)s /path/to/photos --action trash --no-dry-run
      Move every duplicate except the largest copy to the trash

  %(prog)s /path/to/photos --mode perceptual --threshold 5
      Strict visual matching only

  %(prog)s /path/to/photos --export results.csv --export-format csv
      Export results to CSV for external review
        """
    )

    # Positional argument
    parser.add_argument(
        'directory',
        type=Path,
        nargs='?',
        default=None,
        help='Directory to scan for duplicate images'
    )

    # Scanning options
    parser.add_argument(
        '-m', '--mode',
        choices=SCAN_MODES,
        default=None,
        help='Which matching to run. Default: both (or the configured default)'
    )

    parser.add_argument(
        '-t', '--threshold',
        type=int,
        default=None,
        help=(
            f'Perceptual match threshold in bits ({MIN_THRESHOLD}-{MAX_THRESHOLD}, '
            f'lower=stricter). Default: 10 (or the configured default)'
        )
    )

    # Action options
    parser.add_argument(
        '-a', '--action',
        choices=['report', 'trash', 'delete'],
        default='report',
        help='Action to take on duplicates. Default: report'
    )

    parser.add_argument(
        '-s', '--strategy',
        choices=[s.value for s in SelectionStrategy],
        default=SelectionStrategy.LARGEST.value,
        help='Which file of each group to keep. Default: largest'
    )

    parser.add_argument(
        '--no-dry-run',
        action='store_true',
        help='Actually perform the action (default is dry-run)'
    )

    # Performance options
    parser.add_argument(
        '-w', '--workers',
        type=int,
        default=None,
        help='Number of hashing threads. Default: 1 (or the configured default)'
    )

    # Export options
    parser.add_argument(
        '-e', '--export',
        type=Path,
        help='Export results to file'
    )

    parser.add_argument(
        '--export-format',
        choices=EXPORT_FORMATS,
        default='txt',
        help='Export format. Default: txt'
    )

    # Output options
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    parser.add_argument(
        '--no-progress',
        action='store_true',
        help='Disable progress bars (useful for piping output)'
    )

    return parser


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: List of argument strings (default: sys.argv)

    Returns:
        Parsed arguments as Namespace object

    Examples:
        >>> args = parse_arguments(['/path/to/photos', '--threshold', '5'])
        >>> args.directory
        PosixPath('/path/to/photos')
        >>> args.threshold
        5
    """
    parser = create_parser()
    return parser.parse_args(argv)


__all__ = [
    'create_parser',
    'parse_arguments',
]
