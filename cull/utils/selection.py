"""
Selection strategy utilities for Cull.

Decides which files of a duplicate group are marked for removal. Every
strategy keeps exactly one file per group, and manual toggles can never
mark a whole group.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable

from ..models import DuplicateGroup, FileRecord


class SelectionStrategy(str, Enum):
    """
    Strategy for choosing the file to keep in each group.

    Attributes:
        LARGEST: Keep the largest file
        SMALLEST: Keep the smallest file
        NEWEST: Keep the most recently modified file
        OLDEST: Keep the oldest file
    """
    LARGEST = 'largest'
    SMALLEST = 'smallest'
    NEWEST = 'newest'
    OLDEST = 'oldest'


def _mtime(record: FileRecord) -> float:
    return record.modified_at.timestamp() if record.modified_at else 0.0


def choose_keeper(group: DuplicateGroup, strategy: str = 'largest') -> FileRecord:
    """
    Pick the file to keep in a group.

    Unknown strategies fall back to LARGEST. Ties go to the file encountered
    first.
    """
    try:
        strategy_enum = SelectionStrategy(strategy)
    except ValueError:
        strategy_enum = SelectionStrategy.LARGEST

    if strategy_enum == SelectionStrategy.SMALLEST:
        return min(group.files, key=lambda f: f.file_size)
    if strategy_enum == SelectionStrategy.NEWEST:
        return max(group.files, key=_mtime)
    if strategy_enum == SelectionStrategy.OLDEST:
        # Files without a timestamp sort last
        return min(group.files, key=lambda f: f.modified_at or datetime.max)
    return group.largest_file


def select_all_but_keeper(group: DuplicateGroup, strategy: str = 'largest') -> set[int]:
    """Return the ids of every member except the keeper."""
    keeper = choose_keeper(group, strategy)
    return {f.id for f in group.files if f.id != keeper.id}


def apply_selection_strategy(groups: Iterable[DuplicateGroup], strategy: str) -> set[int]:
    """
    Apply a strategy to all groups.

    Returns:
        Ids of all files marked for removal
    """
    selected: set[int] = set()
    for group in groups:
        selected |= select_all_but_keeper(group, strategy)
    return selected


def toggle_selection(group: DuplicateGroup, selected: set[int], file_id: int) -> bool:
    """
    Toggle one file of a group in the selected set (in place).

    Selecting is refused when it would mark every member of the group.

    Returns:
        True if the selection changed
    """
    if file_id in selected:
        selected.discard(file_id)
        return True

    if group.get_file(file_id) is None:
        return False

    if group.file_ids <= selected | {file_id}:
        return False

    selected.add(file_id)
    return True


__all__ = [
    'SelectionStrategy',
    'choose_keeper',
    'select_all_but_keeper',
    'apply_selection_strategy',
    'toggle_selection',
]
