"""
Scan orchestration for the Cull web API.

Provides the ScanOrchestrator class that runs a DuplicateEngine scan on a
background thread and feeds its progress and results into a ScanState.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from ..exceptions import CancellationError
from ..models import ScanMode
from ..scanner import DuplicateEngine
from ..state import ScanState
from ..utils import formatters, selection

# Module logger
_logger = logging.getLogger(__name__)


class ScanOrchestrator:
    """
    Coordinates one background scan for the web API.

    The orchestrator owns nothing beyond its parameters; all observable
    state lives in the ScanState it was given.
    """

    def __init__(
        self,
        scan_state: ScanState,
        directory: str,
        mode: str = 'both',
        threshold: int = 10,
        workers: int = 1,
        auto_select_strategy: str = '',
    ):
        """
        Initialize the orchestrator.

        Args:
            scan_state: Shared scan state object
            directory: Directory to scan
            mode: 'exact', 'perceptual' or 'both'
            threshold: Perceptual match threshold (1-20)
            workers: Worker threads for hashing
            auto_select_strategy: Selection strategy applied on completion;
                empty leaves nothing selected
        """
        self.scan_state = scan_state
        self.directory = directory
        self.mode = ScanMode(mode)
        self.threshold = threshold
        self.workers = workers
        self.auto_select_strategy = auto_select_strategy

    def start(self) -> Optional[threading.Thread]:
        """
        Mark the state as scanning and run the scan on a daemon thread.

        Returns:
            The scan thread, or None if another scan already holds the state
        """
        cancel_token = self.scan_state.begin(self.directory, {
            'mode': self.mode.value,
            'threshold': self.threshold,
            'workers': self.workers,
            'auto_select_strategy': self.auto_select_strategy,
        })
        if cancel_token is None:
            return None
        thread = threading.Thread(target=self.run, args=(cancel_token,), daemon=True)
        self.scan_state.thread = thread
        thread.start()
        return thread

    def run(self, cancel_token=None) -> None:
        """Main scan execution method (runs in background thread)."""
        engine = DuplicateEngine(workers=self.workers)
        start_time = time.time()

        try:
            groups = engine.scan(
                self.directory,
                mode=self.mode,
                threshold=self.threshold,
                on_progress=self.scan_state.update_progress,
                on_duplicate_count=self.scan_state.set_duplicate_count,
                cancel_token=cancel_token,
            )
        except CancellationError:
            _logger.info(f"Scan of {self.directory} cancelled")
            self.scan_state.mark_cancelled()
            return
        except Exception as e:
            _logger.error(f"Scan of {self.directory} failed: {e}", exc_info=True)
            self.scan_state.fail(str(e))
            return

        self.scan_state.finish(groups)
        if self.auto_select_strategy:
            self.scan_state.apply_strategy(self.auto_select_strategy)

        elapsed = formatters.format_time_estimate(time.time() - start_time)
        _logger.info(
            f"Scan complete: {formatters.format_number(len(groups))} groups, "
            f"{formatters.format_size(self.scan_state.total_wasted_bytes)} reclaimable ({elapsed})"
        )


def is_known_strategy(name: str) -> bool:
    """True for empty (no auto-selection) or a SelectionStrategy value."""
    if not name:
        return True
    return name in {s.value for s in selection.SelectionStrategy}


__all__ = ['ScanOrchestrator', 'is_known_strategy']
