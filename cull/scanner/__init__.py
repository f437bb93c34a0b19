"""
Scanner package for Cull.

Provides file discovery, content and perceptual hashing, duplicate grouping
and the DuplicateEngine that runs them as one cancellable scan.

Public API:
- find_image_files: Discover candidate image files under a directory
- calculate_file_hash: SHA-256 digest of a file's content
- calculate_dhash: 64-bit difference hash of an image
- hamming_distance: Differing bits between two fingerprints
- find_exact_duplicates: Group byte-identical files
- find_perceptual_duplicates: Group visually similar images
- merge_groups: Combine exact and perceptual results
- DuplicateEngine / scan_directory: Full scan with progress and cancellation
- CancellationToken: Cooperative cancellation flag
- has_heif_support: Check if HEIC/HEIF decoding is available
"""

from __future__ import annotations

# Import public functions from submodules
from .cancellation import CancellationToken, check_cancelled
from .file_discovery import find_image_files
from .hashing import (
    calculate_file_hash,
    calculate_dhash,
    dhash_from_pixels,
    read_image_dimensions,
    hamming_distance,
    similarity_for_threshold,
)
from .parallel import iter_ordered
from .deduplication import (
    group_by_size,
    find_exact_matches,
    build_exact_groups,
    find_exact_duplicates,
    fingerprint_files,
    cluster_by_hamming_distance,
    find_perceptual_duplicates,
    merge_groups,
)
from .engine import DuplicateEngine, scan_directory

# Import dependencies for has_heif_support function
from .dependencies import HAS_HEIF_SUPPORT


def has_heif_support() -> bool:
    """Check if HEIC/HEIF support is available."""
    return HAS_HEIF_SUPPORT


# Public API exports
__all__ = [
    # Cancellation
    'CancellationToken',
    'check_cancelled',
    # File discovery
    'find_image_files',
    # Hashing functions
    'calculate_file_hash',
    'calculate_dhash',
    'dhash_from_pixels',
    'read_image_dimensions',
    'hamming_distance',
    'similarity_for_threshold',
    # Parallelism
    'iter_ordered',
    # Duplicate detection
    'group_by_size',
    'find_exact_matches',
    'build_exact_groups',
    'find_exact_duplicates',
    'fingerprint_files',
    'cluster_by_hamming_distance',
    'find_perceptual_duplicates',
    'merge_groups',
    # Coordination
    'DuplicateEngine',
    'scan_directory',
    # Feature detection
    'has_heif_support',
]
