"""
Scan coordination for Cull.

Provides the DuplicateEngine class that runs discovery, the exact and/or
perceptual passes, the merge and the final sort, while pushing progress
snapshots and duplicate-group counts to the caller.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional

from ..config import DEFAULT_THRESHOLD, DEFAULT_WORKERS
from ..exceptions import CancellationError
from ..models import DuplicateGroup, FileRecord, ScanMode, ScanPhase, ScanProgress
from ..utils import formatters, validators
from .cancellation import CancellationToken, check_cancelled
from .deduplication import (
    build_exact_groups,
    find_exact_matches,
    find_perceptual_duplicates,
    merge_groups,
)
from .file_discovery import find_image_files

_logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ScanProgress], None]
CountCallback = Callable[[int], None]


class DuplicateEngine:
    """
    Orchestrates a complete duplicate scan.

    Phases run idle -> discovering -> hashing -> grouping -> complete.
    An unrecoverable error moves the engine to FAILED (reason kept in
    failure_reason) and propagates; cancellation returns it to IDLE and
    raises CancellationError.

    One engine runs one scan at a time. It does not guard against
    concurrent scan() calls; callers must serialize them.
    """

    def __init__(self, workers: int = DEFAULT_WORKERS):
        """
        Initialize the engine.

        Args:
            workers: Worker threads for per-file hashing (1 = sequential)
        """
        self.workers = max(1, int(workers))
        self.phase = ScanPhase.IDLE
        self.failure_reason: Optional[str] = None
        self._on_progress: Optional[ProgressCallback] = None
        self._on_duplicate_count: Optional[CountCallback] = None
        self._discovered = 0
        self._group_count = 0
        self._observer_errors = 0

    def scan(
        self,
        root: str | Path,
        mode: ScanMode | str = ScanMode.BOTH,
        threshold: int = DEFAULT_THRESHOLD,
        on_progress: Optional[ProgressCallback] = None,
        on_duplicate_count: Optional[CountCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> list[DuplicateGroup]:
        """
        Scan a directory tree for duplicate images.

        Args:
            root: Directory to scan
            mode: 'exact', 'perceptual' or 'both'
            threshold: Maximum Hamming distance for perceptual matches (1-20)
            on_progress: Receives ScanProgress snapshots from the scanning thread
            on_duplicate_count: Receives the best-known group count after each
                pass, after the merge and at completion
                (exceptions from either callback are logged and ignored)
            cancel_token: Cooperative cancellation flag

        Returns:
            Duplicate groups sorted by wasted bytes, largest first

        Raises:
            ValueError: If mode or threshold is invalid
            DirectoryAccessError: If root cannot be read (engine ends FAILED)
            CancellationError: If cancelled (engine returns to IDLE)
        """
        is_valid, error = validators.validate_threshold(threshold)
        if not is_valid:
            raise ValueError(error)
        threshold = int(threshold)
        mode = ScanMode(mode)

        self._on_progress = on_progress
        self._on_duplicate_count = on_duplicate_count
        self._discovered = 0
        self._group_count = 0
        self._observer_errors = 0
        self.failure_reason = None

        start_time = time.time()
        _logger.info(f"Scanning {root} (mode={mode.value}, threshold={threshold})")

        try:
            groups = self._run(Path(root), mode, threshold, cancel_token)
        except CancellationError:
            _logger.info("Scan cancelled")
            self.phase = ScanPhase.IDLE
            raise
        except Exception as e:
            self.phase = ScanPhase.FAILED
            self.failure_reason = str(e)
            _logger.error(f"Scan failed: {e}")
            self._emit(ScanProgress(
                phase=ScanPhase.FAILED,
                discovered_files=self._discovered,
                duplicate_groups=self._group_count,
                message=self.failure_reason,
            ))
            raise

        elapsed = formatters.format_time_estimate(time.time() - start_time)
        _logger.info(
            f"Found {formatters.format_number(len(groups))} duplicate groups "
            f"in {formatters.format_number(self._discovered)} files ({elapsed})"
        )
        return groups

    def _run(
        self,
        root: Path,
        mode: ScanMode,
        threshold: int,
        cancel_token: Optional[CancellationToken],
    ) -> list[DuplicateGroup]:
        # Phase 1: Discover files
        self.phase = ScanPhase.DISCOVERING
        self._emit(ScanProgress(phase=ScanPhase.DISCOVERING))

        def discovery_progress(count: int, name: str) -> None:
            self._discovered = count
            self._emit(ScanProgress(
                phase=ScanPhase.DISCOVERING,
                discovered_files=count,
                current_file=name,
            ))

        files = find_image_files(root, discovery_progress, cancel_token)
        self._discovered = len(files)
        check_cancelled(cancel_token)

        if not files:
            return self._complete([])

        # Phase 2: Hash according to mode
        self.phase = ScanPhase.HASHING
        exact_matches: list[list[FileRecord]] = []
        perceptual_groups: list[DuplicateGroup] = []

        if mode in (ScanMode.EXACT, ScanMode.BOTH):
            # Groups are built after the perceptual pass has annotated the records
            exact_matches = find_exact_matches(
                files,
                progress_callback=self._hashing_callback('exact'),
                cancel_token=cancel_token,
                workers=self.workers,
            )
            check_cancelled(cancel_token)
            _logger.info(f"Exact pass: {len(exact_matches):,} groups")
            self._report_count(len(exact_matches))

        if mode in (ScanMode.PERCEPTUAL, ScanMode.BOTH):
            # Runs over the full candidate list, not just exact survivors
            perceptual_groups = find_perceptual_duplicates(
                files,
                threshold=threshold,
                progress_callback=self._hashing_callback('perceptual'),
                cancel_token=cancel_token,
                workers=self.workers,
            )
            check_cancelled(cancel_token)
            _logger.info(f"Perceptual pass: {len(perceptual_groups):,} groups")
            self._report_count(len(perceptual_groups))

        # Phase 3: Merge and sort
        self.phase = ScanPhase.GROUPING
        self._emit(ScanProgress(
            phase=ScanPhase.GROUPING,
            discovered_files=self._discovered,
            duplicate_groups=self._group_count,
        ))
        exact_groups = build_exact_groups(exact_matches)

        if mode == ScanMode.BOTH:
            groups = merge_groups(exact_groups, perceptual_groups)
            self._report_count(len(groups))
        elif mode == ScanMode.EXACT:
            groups = exact_groups
        else:
            groups = perceptual_groups

        check_cancelled(cancel_token)
        groups.sort(key=lambda g: g.wasted_bytes, reverse=True)
        return self._complete(groups)

    def _complete(self, groups: list[DuplicateGroup]) -> list[DuplicateGroup]:
        self.phase = ScanPhase.COMPLETE
        self._group_count = len(groups)
        self._emit(ScanProgress(
            phase=ScanPhase.COMPLETE,
            discovered_files=self._discovered,
            duplicate_groups=self._group_count,
        ))
        self._report_count(len(groups))
        return groups

    def _hashing_callback(self, stage: str) -> Callable[[int, int, str], None]:
        def callback(processed: int, total: int, name: str) -> None:
            self._emit(ScanProgress(
                phase=ScanPhase.HASHING,
                discovered_files=self._discovered,
                current_file=name,
                processed=processed,
                total=total,
                stage=stage,
                duplicate_groups=self._group_count,
            ))
        return callback

    def _report_count(self, count: int) -> None:
        self._group_count = count
        if self._on_duplicate_count:
            self._notify(self._on_duplicate_count, count)

    def _emit(self, progress: ScanProgress) -> None:
        if self._on_progress:
            self._notify(self._on_progress, progress)

    def _notify(self, callback: Callable, value) -> None:
        # Observer errors never abort or fail the scan
        try:
            callback(value)
        except CancellationError:
            raise
        except Exception as e:
            self._observer_errors += 1
            if self._observer_errors == 1:
                _logger.warning(f"Scan observer raised {e!r}; continuing", exc_info=True)
            else:
                _logger.debug(f"Scan observer raised {e!r}")


def scan_directory(
    root: str | Path,
    mode: ScanMode | str = ScanMode.BOTH,
    threshold: int = DEFAULT_THRESHOLD,
    on_progress: Optional[ProgressCallback] = None,
    on_duplicate_count: Optional[CountCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    workers: int = DEFAULT_WORKERS,
) -> list[DuplicateGroup]:
    """Run a one-off scan on a fresh DuplicateEngine."""
    engine = DuplicateEngine(workers=workers)
    return engine.scan(root, mode, threshold, on_progress, on_duplicate_count, cancel_token)


__all__ = ['DuplicateEngine', 'scan_directory', 'ProgressCallback', 'CountCallback']
