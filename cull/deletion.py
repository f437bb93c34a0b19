"""
File removal for Cull.

Moves duplicates to the system trash (falling back to permanent removal when
the trash is unavailable) or deletes them outright. Removals run on a small
thread pool; each attempt is independent, so one failure never stops the
others. Failures are collected and reported back to the caller.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from send2trash import send2trash

from .config import DEFAULT_DELETE_WORKERS
from .models import DuplicateGroup, FileRecord

_logger = logging.getLogger(__name__)

Remover = Callable[[str], None]


@dataclass
class DeletionFailure:
    """A file that could not be removed."""
    filename: str
    error: str
    path: str


@dataclass
class DeletionResult:
    """
    Outcome of a batch removal.

    Attributes:
        deleted_ids: Ids of files that were removed
        failures: Files that could not be removed, with the reason
    """
    deleted_ids: set[int] = field(default_factory=set)
    failures: list[DeletionFailure] = field(default_factory=list)

    @property
    def deleted_count(self) -> int:
        return len(self.deleted_ids)

    @property
    def success(self) -> bool:
        return not self.failures

    def error_message(self) -> Optional[str]:
        """
        Summarise failures for display.

        Returns:
            "Failed to delete N file(s):" followed by one "name: error" line
            per failure, or None when everything was removed
        """
        if not self.failures:
            return None
        lines = [f"Failed to delete {len(self.failures)} file(s):"]
        lines.extend(f"{f.filename}: {f.error}" for f in self.failures)
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'deleted': sorted(self.deleted_ids),
            'deleted_count': self.deleted_count,
            'failures': [
                {'filename': f.filename, 'error': f.error, 'path': f.path}
                for f in self.failures
            ],
            'error': self.error_message(),
        }


def delete_permanently(path: str) -> None:
    """Remove a file from disk. Raises OSError on failure."""
    os.remove(path)


def move_to_trash(path: str) -> None:
    """
    Move a file to the system trash.

    Falls back to permanent removal when trashing fails (no trash on the
    volume, headless session and so on). Raises OSError only when both fail.
    """
    try:
        send2trash(path)
    except Exception as e:
        _logger.debug(f"Trash unavailable for {path} ({e}), deleting permanently")
        delete_permanently(path)


def delete_files(
    records: Iterable[FileRecord],
    remover: Remover = move_to_trash,
    max_workers: int = DEFAULT_DELETE_WORKERS,
) -> DeletionResult:
    """
    Remove files concurrently.

    Args:
        records: Files to remove
        remover: Callable that removes one path and raises on failure
        max_workers: Upper bound on concurrent removals

    Returns:
        DeletionResult with the removed ids and any failures
    """
    records = list(records)
    result = DeletionResult()
    if not records:
        return result

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(records)))) as executor:
        future_to_record = {
            executor.submit(remover, record.path): record
            for record in records
        }
        for future in as_completed(future_to_record):
            record = future_to_record[future]
            try:
                future.result()
            except Exception as e:
                _logger.warning(f"Could not delete {record.path}: {e}")
                result.failures.append(DeletionFailure(
                    filename=record.filename,
                    error=str(e),
                    path=record.path,
                ))
            else:
                result.deleted_ids.add(record.id)

    _logger.info(
        f"Deleted {result.deleted_count} of {len(records)} files"
        + (f", {len(result.failures)} failed" if result.failures else "")
    )
    return result


def delete_from_group(
    group: DuplicateGroup,
    file_ids: Iterable[int],
    remover: Remover = move_to_trash,
    max_workers: int = DEFAULT_DELETE_WORKERS,
) -> tuple[DeletionResult, bool]:
    """
    Remove some members of a group and update the group.

    Ids that are not members of the group are ignored.

    Returns:
        Tuple of (result, group_survives). group_survives is False when fewer
        than two members remain, in which case the caller must drop the group.
    """
    targets = [f for f in (group.get_file(i) for i in set(file_ids)) if f is not None]
    result = delete_files(targets, remover, max_workers)
    if not result.deleted_ids:
        return result, True
    return result, group.remove_files(result.deleted_ids)


__all__ = [
    'Remover',
    'DeletionFailure',
    'DeletionResult',
    'delete_permanently',
    'move_to_trash',
    'delete_files',
    'delete_from_group',
]
