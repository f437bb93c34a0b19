"""
Input validation for Cull.

Provides validators for scan parameters shared by the engine, CLI and API.
"""

from __future__ import annotations

import os
from typing import Any, Optional

from ..config import MAX_THRESHOLD, MIN_THRESHOLD, SCAN_MODES


def validate_directory(directory: str) -> tuple[bool, str]:
    """
    Validate that a directory exists and is accessible.

    Args:
        directory: Directory path to validate

    Returns:
        Tuple of (is_valid, error_message)

    Examples:
        >>> validate_directory('/nonexistent/directory')
        (False, 'Directory not found: /nonexistent/directory')
    """
    if not directory:
        return False, "Directory path is required"

    if not os.path.exists(directory):
        return False, f"Directory not found: {directory}"

    if not os.path.isdir(directory):
        return False, f"Path is not a directory: {directory}"

    if not os.access(directory, os.R_OK):
        return False, f"Cannot read directory (permission denied): {directory}"

    return True, ""


def validate_threshold(threshold: Any) -> tuple[bool, str]:
    """
    Validate that a similarity threshold is within the user range.

    Examples:
        >>> validate_threshold(10)
        (True, '')
        >>> validate_threshold(30)
        (False, 'Threshold must be between 1 and 20')
    """
    if isinstance(threshold, bool):
        return False, "Threshold must be an integer"
    if isinstance(threshold, float) and not threshold.is_integer():
        return False, "Threshold must be an integer"
    try:
        threshold = int(threshold)
    except (ValueError, TypeError):
        return False, "Threshold must be an integer"

    if not MIN_THRESHOLD <= threshold <= MAX_THRESHOLD:
        return False, f"Threshold must be between {MIN_THRESHOLD} and {MAX_THRESHOLD}"
    return True, ""


def validate_mode(mode: Any) -> tuple[bool, str]:
    """Validate a scan mode name."""
    if mode not in SCAN_MODES:
        return False, f"Mode must be one of: {', '.join(SCAN_MODES)}"
    return True, ""


def validate_scan_params(
    directory: str,
    mode: str = 'both',
    threshold: Optional[int] = None,
    workers: Optional[int] = None,
) -> tuple[bool, str]:
    """
    Validate all scan parameters.

    Args:
        directory: Directory to scan
        mode: Scan mode ('exact', 'perceptual' or 'both')
        threshold: Perceptual hash threshold (optional)
        workers: Number of worker threads (optional)

    Returns:
        Tuple of (is_valid, error_message)
    """
    is_valid, error = validate_directory(directory)
    if not is_valid:
        return False, error

    is_valid, error = validate_mode(mode)
    if not is_valid:
        return False, error

    if threshold is not None:
        is_valid, error = validate_threshold(threshold)
        if not is_valid:
            return False, error

    if workers is not None:
        try:
            workers = int(workers)
            if not 1 <= workers <= 32:
                return False, "Workers must be between 1 and 32"
        except (ValueError, TypeError):
            return False, "Workers must be an integer"

    return True, ""


__all__ = [
    'validate_directory',
    'validate_threshold',
    'validate_mode',
    'validate_scan_params',
]
