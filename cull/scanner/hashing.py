"""
Hashing module for the scanner package.

Provides functions for calculating cryptographic content digests, 64-bit
difference hashes (dHash) and the Hamming distance between fingerprints.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Optional

from ..config import (
    FINGERPRINT_BITS,
    HASH_ALGORITHM,
    HASH_CHUNK_SIZE,
    HASH_HEIGHT,
    HASH_WIDTH,
)
from .dependencies import Image, numpy, _logger


def calculate_file_hash(filepath: str | Path, algorithm: str = HASH_ALGORITHM) -> str:
    """
    Calculate cryptographic hash of a file.

    Args:
        filepath: Path to the file
        algorithm: Hash algorithm to use (default: sha256)

    Returns:
        Hex digest of the file hash, or empty string on error
    """
    hasher = hashlib.new(algorithm)
    try:
        with open(filepath, 'rb') as f:
            for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b''):
                hasher.update(chunk)
        return hasher.hexdigest()
    except OSError as e:
        _logger.debug(f"File hash calculation failed for {filepath}: {e}")
        return ""


def dhash_from_pixels(pixels) -> int:
    """
    Compute a difference hash from a grayscale grid.

    Args:
        pixels: Array-like of shape (HASH_HEIGHT, HASH_WIDTH) holding luma values

    Returns:
        Fingerprint where bit row*8+col is set when the pixel at (row, col)
        is strictly brighter than its right-hand neighbour
    """
    grid = numpy.asarray(pixels, dtype=numpy.int16)
    if grid.shape != (HASH_HEIGHT, HASH_WIDTH):
        raise ValueError(f"Expected a {HASH_HEIGHT}x{HASH_WIDTH} grid, got {grid.shape}")

    diff = (grid[:, :-1] > grid[:, 1:]).flatten()
    fingerprint = 0
    for bit in numpy.flatnonzero(diff):
        fingerprint |= 1 << int(bit)
    return fingerprint


def calculate_dhash(filepath: str | Path) -> Optional[int]:
    """
    Calculate the 64-bit difference hash of an image.

    The image is decoded, converted to grayscale and resized to a 9x8 grid.
    No orientation normalisation is applied, so rotated or mirrored copies
    produce unrelated fingerprints.

    Args:
        filepath: Path to the image

    Returns:
        Fingerprint as an int, or None if the image cannot be decoded
    """
    try:
        with Image.open(filepath) as img:
            # Let JPEG decode at reduced scale; we only need a thumbnail
            img.draft('L', (HASH_WIDTH * 8, HASH_HEIGHT * 8))
            gray = img.convert('L')
            small = gray.resize((HASH_WIDTH, HASH_HEIGHT), Image.Resampling.LANCZOS)
            pixels = numpy.asarray(small)
    except Exception as e:
        # Pillow raises a wide range of errors for corrupt or truncated files
        _logger.debug(f"Perceptual hash calculation failed for {filepath}: {e}")
        return None

    return dhash_from_pixels(pixels)


def read_image_dimensions(filepath: str | Path) -> Optional[tuple[int, int]]:
    """
    Read pixel dimensions from the image header without decoding pixel data.

    Returns:
        (width, height), or None if the header cannot be read
    """
    try:
        with Image.open(filepath) as img:
            return img.size
    except Exception as e:
        _logger.debug(f"Could not read dimensions of {filepath}: {e}")
        return None


def hamming_distance(a: int, b: int) -> int:
    """Count of differing bits between two fingerprints."""
    return bin(a ^ b).count('1')


def similarity_for_threshold(threshold: int) -> float:
    """
    Similarity score reported for perceptual groups.

    Derived from the configured threshold rather than the measured distances
    within a group, so every perceptual group of a scan reports the same value.
    """
    return 1.0 - threshold / float(FINGERPRINT_BITS)


__all__ = [
    'calculate_file_hash',
    'calculate_dhash',
    'dhash_from_pixels',
    'read_image_dimensions',
    'hamming_distance',
    'similarity_for_threshold',
]
