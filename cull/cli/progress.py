"""
Terminal progress display for the CLI.

Turns the engine's ScanProgress snapshots into tqdm bars: a counter while
files are discovered, then one bar per hashing stage.
"""

from __future__ import annotations

import threading
from typing import Optional

from tqdm import tqdm

from ..models import ScanPhase, ScanProgress

_STAGE_LABELS = {
    'exact': 'Exact matching',
    'perceptual': 'Perceptual hashing',
}


class ProgressDisplay:
    """
    Receives progress callbacks from the scanning thread and draws bars.

    A new bar is opened whenever the (phase, stage) pair changes; the
    previous one is closed at that point.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.duplicate_count = 0
        self._bar: Optional[tqdm] = None
        self._key: Optional[tuple] = None
        self._lock = threading.Lock()

    def on_progress(self, progress: ScanProgress) -> None:
        if not self.enabled:
            return

        with self._lock:
            if progress.phase == ScanPhase.DISCOVERING:
                self._switch(('discovering',), lambda: tqdm(desc='Finding images', unit=' files'))
                self._bar.n = progress.discovered_files
                self._bar.refresh()
            elif progress.phase == ScanPhase.HASHING:
                self._switch(
                    ('hashing', progress.stage),
                    lambda: tqdm(
                        total=progress.total,
                        desc=_STAGE_LABELS.get(progress.stage, 'Hashing'),
                        unit=' files',
                    ),
                )
                self._bar.n = progress.processed
                self._bar.set_postfix_str(progress.current_file[-40:], refresh=True)
            else:
                self._close()

    def on_duplicate_count(self, count: int) -> None:
        self.duplicate_count = count

    def close(self) -> None:
        with self._lock:
            self._close()

    def _switch(self, key: tuple, factory) -> None:
        if key != self._key:
            self._close()
            self._bar = factory()
            self._key = key

    def _close(self) -> None:
        if self._bar is not None:
            self._bar.close()
        self._bar = None
        self._key = None


__all__ = ['ProgressDisplay']
