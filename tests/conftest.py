"""
Pytest configuration and shared fixtures for test suite.
"""

import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path

import pytest
from PIL import Image

from cull.models import FileRecord


def gradient_pixels():
    """
    9x8 grayscale rows that strictly increase left to right.

    No pixel is brighter than its right-hand neighbour, so the difference
    hash of this grid is 0.
    """
    return [[20 * c + r for c in range(9)] for r in range(8)]


def save_grid(path, rows):
    """Save a list of 8 rows of 9 luma values as a grayscale PNG."""
    img = Image.new('L', (9, 8))
    img.putdata([value for row in rows for value in row])
    img.save(path, 'PNG')
    return path


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def exact_files(temp_dir):
    """
    Three byte-identical files and one same-size file with other content.

    Returns:
        dict with paths to copy1.jpg, copy2.jpg, copy3.jpg and other.jpg
    """
    files = {}
    for name in ('copy1', 'copy2', 'copy3'):
        path = temp_dir / f"{name}.jpg"
        path.write_bytes(b'a' * 100)
        files[name] = str(path)

    other = temp_dir / "other.jpg"
    other.write_bytes(b'b' * 100)
    files['other'] = str(other)
    return files


@pytest.fixture
def similar_pair(temp_dir):
    """
    Two different images whose difference hashes are 3 bits apart.

    The base gradient hashes to 0; brightening column 0 of rows 0-2 sets
    bits 0, 8 and 16 in the variant.
    """
    base = gradient_pixels()
    variant = gradient_pixels()
    for row in range(3):
        variant[row][0] = 250

    return {
        'base': str(save_grid(temp_dir / "base.png", base)),
        'variant': str(save_grid(temp_dir / "variant.png", variant)),
    }


@pytest.fixture
def sample_images(temp_dir):
    """
    A mixed folder.

    Returns:
        dict with paths to:
        - red1.png, red2.png (exact duplicates)
        - blue.png (unique solid image)
        - notes.txt (not an image)
        - broken.png (image extension, invalid content)
    """
    images = {}

    img = Image.new('RGB', (64, 64), color='red')
    for name in ('red1', 'red2'):
        path = temp_dir / f"{name}.png"
        img.save(path, 'PNG')
        images[name] = str(path)

    blue = Image.new('RGB', (32, 48), color='blue')
    path = temp_dir / "blue.png"
    blue.save(path, 'PNG')
    images['blue'] = str(path)

    notes = temp_dir / "notes.txt"
    notes.write_text("not an image")
    images['notes'] = str(notes)

    broken = temp_dir / "broken.png"
    broken.write_bytes(b'definitely not a png')
    images['broken'] = str(broken)

    return images


@pytest.fixture
def make_record():
    """Factory for in-memory FileRecords (no file on disk)."""
    def _make(name="img.jpg", size=100, fingerprint=None, modified=None):
        return FileRecord(
            path=os.path.join("/photos", name),
            file_size=size,
            modified_at=modified or datetime(2024, 1, 1),
            fingerprint=fingerprint,
        )
    return _make


@pytest.fixture
def isolated_config(temp_dir, monkeypatch):
    """Point the user configuration at an empty temporary directory."""
    from cull.user_config import get_user_config

    config_dir = temp_dir / "config"
    monkeypatch.setenv('CULL_CONFIG_DIR', str(config_dir))
    for var in ('CULL_THRESHOLD', 'CULL_MODE', 'CULL_WORKERS',
                'CULL_DELETE_WORKERS', 'CULL_MAX_PIXELS'):
        monkeypatch.delenv(var, raising=False)

    config = get_user_config()
    config.reload()
    yield config
    config.reload()
