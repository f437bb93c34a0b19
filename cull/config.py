"""
Configuration constants for Cull.

This module contains all configurable settings including:
- Supported image extensions
- Directory suffixes that are treated as opaque packages
- Perceptual hash geometry and similarity threshold bounds
"""

# Supported image extensions (compared lower-cased)
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.heic', '.png'}

# Directories with these suffixes are bundles (macOS packages, photo
# libraries) and are never descended into
PACKAGE_EXTENSIONS = {
    '.app', '.bundle', '.framework', '.plugin', '.kext', '.pkg', '.mpkg',
    '.photoslibrary', '.photolibrary', '.aplibrary', '.migratedphotolibrary',
    '.lrdata', '.xcodeproj', '.xcworkspace', '.rtfd', '.key', '.pages', '.numbers',
}

# Scan modes
SCAN_MODES = ('exact', 'perceptual', 'both')
DEFAULT_MODE = 'both'

# Maximum Hamming distance between fingerprints for perceptual matching
# Lower = stricter matching. Users may pick 1-20 out of 64 bits.
DEFAULT_THRESHOLD = 10
MIN_THRESHOLD = 1
MAX_THRESHOLD = 20

# Difference hash geometry: 9x8 grayscale grid -> 8 comparisons per row
HASH_WIDTH = 9
HASH_HEIGHT = 8
FINGERPRINT_BITS = (HASH_WIDTH - 1) * HASH_HEIGHT

# Read size when streaming file content into the digest
HASH_CHUNK_SIZE = 64 * 1024
HASH_ALGORITHM = 'sha256'

# Worker threads for per-file hashing (1 = sequential)
DEFAULT_WORKERS = 1

# Worker threads for concurrent deletions within one group
DEFAULT_DELETE_WORKERS = 4

# Decompression bomb limit for PIL
DEFAULT_MAX_IMAGE_PIXELS = 500_000_000
