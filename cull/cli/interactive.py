"""
Interactive prompts for the CLI interface.

Provides functions for user interaction including directory selection
and action confirmation.
"""

from __future__ import annotations

from pathlib import Path


def prompt_for_directory() -> Path:
    """
    Interactively prompt user for a directory to scan.

    Loops until an existing directory is given. Quotes around the path
    (common when copy-pasting) are stripped.

    Returns:
        Path object for the directory
    """
    print("\n" + "=" * 50)
    print("  CULL - DUPLICATE IMAGE FINDER")
    print("=" * 50)

    while True:
        dir_input = input("\nDirectory to scan: ").strip().strip('"\'')
        if not dir_input:
            print("Please enter a path.")
            continue

        directory = Path(dir_input).expanduser()
        if directory.is_dir():
            return directory
        print(f"Not a directory: {directory}")


def confirm_action(action: str, count: int, size: str) -> bool:
    """
    Prompt user to confirm removing files.

    Args:
        action: 'trash' or 'delete'
        count: Number of files that will be removed
        size: Human-readable total size of those files

    Returns:
        True if user confirms (types 'y'), False otherwise
    """
    verb = "move to the trash" if action == 'trash' else "permanently delete"
    confirm = input(f"\nThis will {verb} {count:,} files ({size}). Continue? [y/N]: ")
    return confirm.strip().lower() == 'y'


__all__ = [
    'prompt_for_directory',
    'confirm_action',
]
