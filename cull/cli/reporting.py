"""
Report formatting and display for the CLI interface.

Provides functions to format and print duplicate groups in a human-readable
format. Groups are printed in the order given (largest reclaimable space
first, as returned by the engine).
"""

from __future__ import annotations

from ..models import DuplicateGroup, FileRecord, MatchType, format_size
from ..utils.formatters import format_number, format_similarity
from ..utils.selection import choose_keeper


def _format_group_header(group_number: int, group: DuplicateGroup) -> str:
    """
    Format a group header line.

    Args:
        group_number: The group number (1-indexed)
        group: The duplicate group

    Returns:
        Formatted header string
    """
    if group.match_type == MatchType.EXACT:
        kind = "identical"
    else:
        kind = f"{format_similarity(group.similarity)} similar"
    return (
        f"\nGroup {group_number} ({group.file_count} files, {kind}, "
        f"{group.wasted_bytes_formatted} reclaimable):"
    )


def _print_file_in_group(record: FileRecord, is_keeper: bool) -> None:
    marker = "  [KEEP]" if is_keeper else "  [DUPE]"
    print(f"{marker} {record.path}")
    details = [record.file_size_formatted]
    if record.dimensions:
        details.insert(0, record.dimensions)
    if record.modified_at:
        details.append(record.modified_at.strftime('%Y-%m-%d %H:%M'))
    print(f"         {' | '.join(details)}")


def calculate_statistics(groups: list[DuplicateGroup]) -> dict[str, int]:
    """
    Calculate statistics for duplicate groups.

    Returns:
        Dictionary with:
        - total_duplicates: Files beyond the first in each group
        - total_groups: Number of groups
        - exact_groups / perceptual_groups: Groups per match type
        - total_waste: Sum of wasted bytes (bytes)
    """
    return {
        'total_duplicates': sum(g.file_count - 1 for g in groups),
        'total_groups': len(groups),
        'exact_groups': sum(1 for g in groups if g.match_type == MatchType.EXACT),
        'perceptual_groups': sum(1 for g in groups if g.match_type == MatchType.PERCEPTUAL),
        'total_waste': sum(g.wasted_bytes for g in groups),
    }


def print_duplicate_report(groups: list[DuplicateGroup], strategy: str = 'largest') -> None:
    """
    Print a report of found duplicates.

    Args:
        groups: Duplicate groups to print
        strategy: Selection strategy deciding the [KEEP] file of each group
    """
    stats = calculate_statistics(groups)

    # Header
    print("\n" + "=" * 70)
    print("DUPLICATE IMAGE REPORT")
    print("=" * 70)

    print(f"\nDuplicate groups: {format_number(stats['total_groups'])} "
          f"({format_number(stats['exact_groups'])} exact, "
          f"{format_number(stats['perceptual_groups'])} visually similar)")
    print(f"Redundant files: {format_number(stats['total_duplicates'])}")

    for i, group in enumerate(groups, 1):
        print(_format_group_header(i, group))
        keeper = choose_keeper(group, strategy)
        for record in group.files:
            _print_file_in_group(record, record.id == keeper.id)

    # Footer with total space recoverable
    print("\n" + "=" * 70)
    print(f"Total space recoverable: {format_size(stats['total_waste'])}")
    print("=" * 70)


__all__ = ['print_duplicate_report', 'calculate_statistics']
