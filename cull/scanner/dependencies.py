"""
Dependency initialization for the scanner package.

Handles PIL, numpy and HEIC/HEIF support imports with proper error handling
and configuration.
"""

from __future__ import annotations

import warnings
import logging

from ..user_config import get_user_config

# Module-level logger
_logger = logging.getLogger(__name__)

# Check for required dependencies
try:
    from PIL import Image
    import numpy
except ImportError:
    raise ImportError(
        "Required packages not found!\n"
        "Install with: pip install Pillow numpy"
    )

# Register HEIC/HEIF support via pillow-heif
# This must be done before opening any HEIC files
HAS_HEIF_SUPPORT = False
try:
    from pillow_heif import register_heif_opener
    register_heif_opener()
    HAS_HEIF_SUPPORT = True
    _logger.debug("HEIC/HEIF support enabled via pillow-heif")
except ImportError:
    _logger.warning(
        "pillow-heif not installed - HEIC/HEIF files will only be matched exactly. "
        "Install with: pip install pillow-heif"
    )

# Raise PIL's decompression bomb limit for large photos and panoramas
Image.MAX_IMAGE_PIXELS = get_user_config().max_image_pixels

# We've raised the limit deliberately; the warning is noise
warnings.filterwarnings("ignore", category=Image.DecompressionBombWarning)


__all__ = [
    'Image',
    'numpy',
    'HAS_HEIF_SUPPORT',
    '_logger',
]
