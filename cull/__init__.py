"""
Cull
====
Finds duplicate and visually similar images and reclaims the space they take.

Features:
- Exact matching: size pre-filter + SHA-256 content digest
- Perceptual matching: 64-bit difference hash with a configurable threshold
- Wasted-space accounting per duplicate group
- Cancellable scans with live progress
- CLI for automation, JSON API for interactive review
- Move-to-trash removal that never empties a group
"""

__version__ = "1.0.0"

from .models import DuplicateGroup, FileRecord, MatchType, ScanMode, ScanPhase, ScanProgress
from .exceptions import CullError, DirectoryAccessError, CancellationError
from .config import IMAGE_EXTENSIONS, DEFAULT_THRESHOLD
from .scanner import (
    CancellationToken,
    DuplicateEngine,
    scan_directory,
    find_image_files,
    calculate_file_hash,
    calculate_dhash,
    hamming_distance,
    find_exact_duplicates,
    find_perceptual_duplicates,
    merge_groups,
)

__all__ = [
    "DuplicateGroup",
    "FileRecord",
    "MatchType",
    "ScanMode",
    "ScanPhase",
    "ScanProgress",
    "CullError",
    "DirectoryAccessError",
    "CancellationError",
    "IMAGE_EXTENSIONS",
    "DEFAULT_THRESHOLD",
    "CancellationToken",
    "DuplicateEngine",
    "scan_directory",
    "find_image_files",
    "calculate_file_hash",
    "calculate_dhash",
    "hamming_distance",
    "find_exact_duplicates",
    "find_perceptual_duplicates",
    "merge_groups",
]
