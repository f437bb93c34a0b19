"""
File discovery module for the scanner package.

Walks a directory tree and turns every supported image file into a
FileRecord, skipping hidden entries and package-like directories.
"""

from __future__ import annotations

import logging
import os
import stat
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Optional

from ..config import IMAGE_EXTENSIONS, PACKAGE_EXTENSIONS
from ..exceptions import DirectoryAccessError
from ..models import FileRecord
from .cancellation import CancellationToken, check_cancelled

_logger = logging.getLogger(__name__)


def _is_hidden(name: str) -> bool:
    return name.startswith('.')


def _is_package(name: str) -> bool:
    return os.path.splitext(name)[1].lower() in PACKAGE_EXTENSIONS


def _check_root(root: Path) -> None:
    """Raise DirectoryAccessError unless root is a readable directory."""
    if not root.exists():
        raise DirectoryAccessError(str(root), "not found")
    if not root.is_dir():
        raise DirectoryAccessError(str(root), "not a directory")
    try:
        with os.scandir(root):
            pass
    except OSError as e:
        raise DirectoryAccessError(str(root), e.strerror or str(e)) from e


def _iter_candidate_paths(root: Path) -> Iterable[str]:
    """Depth-first walk in stable, case-insensitive name order."""

    def on_error(err: OSError) -> None:
        _logger.warning(f"Cannot read directory {err.filename}: {err.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        # Prune in place so os.walk never descends into these
        dirnames[:] = sorted(
            (d for d in dirnames if not _is_hidden(d) and not _is_package(d)),
            key=str.lower,
        )
        for name in sorted(filenames, key=str.lower):
            if not _is_hidden(name):
                yield os.path.join(dirpath, name)


def _make_record(path: str) -> Optional[FileRecord]:
    """Build a FileRecord from lstat(), or None if it is not a usable file."""
    try:
        st = os.lstat(path)
    except OSError as e:
        _logger.debug(f"Skipping {path}: cannot read metadata ({e})")
        return None

    # Symlinks and special files are not regular files
    if not stat.S_ISREG(st.st_mode) or st.st_size <= 0:
        return None

    birth_time = getattr(st, 'st_birthtime', None)
    return FileRecord(
        path=path,
        file_size=st.st_size,
        modified_at=datetime.fromtimestamp(st.st_mtime),
        created_at=datetime.fromtimestamp(birth_time) if birth_time else None,
    )


def find_image_files(
    root_path: str | Path,
    progress_callback: Optional[Callable[[int, str], None]] = None,
    cancel_token: Optional[CancellationToken] = None,
    extensions: Optional[set[str]] = None,
) -> list[FileRecord]:
    """
    Find all candidate image files under the given directory.

    Args:
        root_path: Directory to search recursively
        progress_callback: Optional callback(count, filename) fired once per
            discovered file with a strictly increasing count. It runs on the
            scanning thread and must return promptly. Its exceptions
            propagate here; DuplicateEngine shields the scan from them.
        cancel_token: Checked once per directory entry
        extensions: Lower-cased extensions to accept (default: IMAGE_EXTENSIONS)

    Returns:
        FileRecords in traversal order

    Raises:
        DirectoryAccessError: If root_path is missing, not a directory or unreadable
        CancellationError: If cancellation was requested

    Notes:
        - Hidden files/directories and package-like directories are skipped
        - Zero-byte files and files with unreadable metadata are skipped
        - Symlinks are not followed
    """
    root = Path(root_path).absolute()
    _check_root(root)

    accepted = extensions if extensions is not None else IMAGE_EXTENSIONS

    records: list[FileRecord] = []
    for path in _iter_candidate_paths(root):
        check_cancelled(cancel_token)

        if os.path.splitext(path)[1].lower() not in accepted:
            continue

        record = _make_record(path)
        if record is None:
            continue

        records.append(record)
        if progress_callback:
            progress_callback(len(records), record.filename)

    _logger.debug(f"Discovered {len(records):,} image files under {root}")
    return records


__all__ = ['find_image_files']
