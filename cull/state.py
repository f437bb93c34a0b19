"""
State management for the Cull web API.

Holds the in-memory state of the current scan: the latest progress snapshot,
the result groups, the files marked for removal and the last error. Progress
and count callbacks arrive from the scanning thread, so every mutation goes
through a single lock. Nothing is persisted between runs.
"""

from __future__ import annotations

import threading
from typing import Optional

from .deletion import DeletionResult
from .models import DuplicateGroup, FileRecord, ScanPhase, ScanProgress, prune_groups
from .scanner.cancellation import CancellationToken
from .utils.selection import apply_selection_strategy, select_all_but_keeper, toggle_selection

# Overall status values reported to clients
STATUS_IDLE = 'idle'
STATUS_SCANNING = 'scanning'
STATUS_COMPLETE = 'complete'
STATUS_CANCELLED = 'cancelled'
STATUS_ERROR = 'error'


class ScanState:
    """
    Manages the current state of a duplicate scan.

    Selections are stored as file ids. A file id can only be marked while it
    belongs to one of the current groups, and no group can ever have all of
    its members marked.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self.thread: Optional[threading.Thread] = None
        self.reset()

    def reset(self):
        """Reset state to initial values."""
        with self._lock:
            self.status = STATUS_IDLE
            self.directory = ''
            self.settings: dict = {}
            self.progress = ScanProgress()
            self.duplicate_count = 0
            self.groups: list[DuplicateGroup] = []
            self.selected: set[int] = set()
            self.error: Optional[str] = None
            self.cancel_token: Optional[CancellationToken] = None
            self.last_deletion: Optional[DeletionResult] = None

    def begin(self, directory: str, settings: dict) -> Optional[CancellationToken]:
        """
        Clear previous results and mark a new scan as running.

        Returns:
            The new scan's cancellation token, or None if a scan is already
            running (the running scan is left untouched)
        """
        with self._lock:
            if self.status == STATUS_SCANNING:
                return None
            self.reset()
            self.status = STATUS_SCANNING
            self.directory = directory
            self.settings = dict(settings)
            self.cancel_token = CancellationToken()
            return self.cancel_token

    # Callbacks from the scanning thread

    def update_progress(self, progress: ScanProgress) -> None:
        with self._lock:
            self.progress = progress

    def set_duplicate_count(self, count: int) -> None:
        with self._lock:
            self.duplicate_count = count

    def finish(self, groups: list[DuplicateGroup]) -> None:
        with self._lock:
            self.groups = list(groups)
            self.duplicate_count = len(self.groups)
            self.status = STATUS_COMPLETE

    def fail(self, error: str) -> None:
        with self._lock:
            self.error = error
            self.status = STATUS_ERROR

    def mark_cancelled(self) -> None:
        with self._lock:
            self.status = STATUS_CANCELLED
            self.progress = ScanProgress(phase=ScanPhase.IDLE)

    # Control

    @property
    def is_scanning(self) -> bool:
        with self._lock:
            return self.status == STATUS_SCANNING

    def request_cancel(self) -> bool:
        """
        Request cancellation of the running scan.

        Returns:
            True if a running scan was signalled
        """
        with self._lock:
            if self.status != STATUS_SCANNING or self.cancel_token is None:
                return False
            self.cancel_token.cancel()
            return True

    # Lookups

    def get_group(self, group_id: str) -> Optional[DuplicateGroup]:
        with self._lock:
            for group in self.groups:
                if group.id == group_id:
                    return group
            return None

    def _group_for_file(self, file_id: int) -> Optional[DuplicateGroup]:
        for group in self.groups:
            if group.get_file(file_id) is not None:
                return group
        return None

    # Selection

    def toggle_file(self, file_id: int) -> bool:
        """
        Toggle whether a file is marked for removal.

        Returns:
            True if the selection changed. False for unknown files, or when
            marking would select every member of the file's group.
        """
        with self._lock:
            group = self._group_for_file(file_id)
            if group is None:
                return False
            return toggle_selection(group, self.selected, file_id)

    def select_all_but_largest(self, group_id: str) -> bool:
        """Mark every member of a group except its largest file."""
        with self._lock:
            group = self.get_group(group_id)
            if group is None:
                return False
            self.selected -= group.file_ids
            self.selected |= select_all_but_keeper(group, 'largest')
            return True

    def apply_strategy(self, strategy: str) -> int:
        """
        Replace the selection with the result of a strategy over all groups.

        Returns:
            Number of files now marked
        """
        with self._lock:
            self.selected = apply_selection_strategy(self.groups, strategy)
            return len(self.selected)

    def clear_selection(self) -> None:
        with self._lock:
            self.selected.clear()

    def marked_files(self) -> list[FileRecord]:
        """Files currently marked for removal, in group order."""
        with self._lock:
            return [f for g in self.groups for f in g.files if f.id in self.selected]

    @property
    def total_marked_bytes(self) -> int:
        return sum(f.file_size for f in self.marked_files())

    # Deletion

    def apply_deletion_result(self, result: DeletionResult) -> None:
        """Drop removed files from the groups and the selection."""
        with self._lock:
            self.groups = prune_groups(self.groups, result.deleted_ids)
            live_ids = {f.id for g in self.groups for f in g.files}
            self.selected &= live_ids
            self.duplicate_count = len(self.groups)
            self.last_deletion = result

    # Summaries

    @property
    def total_wasted_bytes(self) -> int:
        with self._lock:
            return sum(g.wasted_bytes for g in self.groups)

    @property
    def total_duplicates(self) -> int:
        """Files that are not the largest of their group."""
        with self._lock:
            return sum(g.file_count - 1 for g in self.groups)

    def to_status_dict(self) -> dict:
        """Return current status for API response."""
        with self._lock:
            return {
                'status': self.status,
                'directory': self.directory,
                'settings': self.settings,
                'progress': self.progress.to_dict(),
                'duplicate_count': self.duplicate_count,
                'error': self.error,
                'has_results': bool(self.groups),
            }

    def to_groups_dict(self) -> dict:
        """Return groups data for API response."""
        with self._lock:
            return {
                'groups': [g.to_dict() for g in self.groups],
                'selected': sorted(self.selected),
                'directory': self.directory,
                'total_wasted_bytes': self.total_wasted_bytes,
                'total_duplicates': self.total_duplicates,
                'marked_bytes': self.total_marked_bytes,
            }


__all__ = [
    'ScanState',
    'STATUS_IDLE',
    'STATUS_SCANNING',
    'STATUS_COMPLETE',
    'STATUS_CANCELLED',
    'STATUS_ERROR',
]
