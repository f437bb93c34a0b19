"""
Duplicate file action handlers for the CLI interface.

Removes every file of each group except the one the chosen strategy keeps,
either by moving it to the trash or by deleting it permanently.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..deletion import DeletionResult, delete_files, delete_permanently, move_to_trash
from ..models import DuplicateGroup, FileRecord, prune_groups
from ..utils.selection import apply_selection_strategy

_logger = logging.getLogger(__name__)


def files_to_remove(groups: list[DuplicateGroup], strategy: str = 'largest') -> list[FileRecord]:
    """
    Collect the files a strategy marks for removal, in report order.

    A file that appears in more than one group is listed once.
    """
    selected = apply_selection_strategy(groups, strategy)
    seen: set[int] = set()
    records = []
    for group in groups:
        for record in group.files:
            if record.id in selected and record.id not in seen:
                seen.add(record.id)
                records.append(record)
    return records


def handle_duplicates(
    groups: list[DuplicateGroup],
    action: str = 'trash',
    strategy: str = 'largest',
    dry_run: bool = True,
    max_workers: int = 4,
    logger: Optional[logging.Logger] = None,
) -> dict:
    """
    Remove duplicates from every group.

    Args:
        groups: Duplicate groups to act on
        action: 'trash' or 'delete'
        strategy: Which file of each group to keep
        dry_run: If True, only log what would happen
        max_workers: Concurrent removals
        logger: Optional logger (defaults to this module's logger)

    Returns:
        Dictionary with statistics:
        - processed: Files removed (or that would be removed)
        - errors: Files that could not be removed
        - space_saved: Bytes freed (or that would be freed)
        - remaining_groups: Groups that still hold two or more files
        - result: The DeletionResult (None on dry run)

    Raises:
        ValueError: If action is not 'trash' or 'delete'
    """
    if action not in ('trash', 'delete'):
        raise ValueError(f"Unknown action: {action}")
    log = logger or _logger

    records = files_to_remove(groups, strategy)

    if dry_run:
        verb = "trash" if action == 'trash' else "delete"
        for record in records:
            log.info(f"[DRY RUN] Would {verb}: {record.path}")
        return {
            'processed': len(records),
            'errors': 0,
            'space_saved': sum(r.file_size for r in records),
            'remaining_groups': len(groups),
            'result': None,
        }

    remover = move_to_trash if action == 'trash' else delete_permanently
    result: DeletionResult = delete_files(records, remover=remover, max_workers=max_workers)

    removed = {r.id: r for r in records if r.id in result.deleted_ids}
    if result.failures:
        log.error(result.error_message())

    return {
        'processed': result.deleted_count,
        'errors': len(result.failures),
        'space_saved': sum(r.file_size for r in removed.values()),
        'remaining_groups': len(prune_groups(groups, result.deleted_ids)),
        'result': result,
    }


__all__ = ['files_to_remove', 'handle_duplicates']
