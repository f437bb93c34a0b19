"""
Data models for Cull.

Contains dataclasses for discovered files, duplicate groups and scan
progress snapshots, plus the enums shared across the scanner.
"""

from __future__ import annotations

import itertools
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

import imagehash
import numpy

from .config import HASH_HEIGHT, HASH_WIDTH

# Process-local identifiers for FileRecord, assigned at discovery
_record_ids = itertools.count(1)


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable form."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f} TB"


def fingerprint_to_image_hash(fingerprint: int) -> imagehash.ImageHash:
    """
    Wrap a 64-bit dHash fingerprint in an imagehash.ImageHash.

    Bit i of the fingerprint lands at row i // 8, column i % 8 of the
    boolean grid, so str() of the result is the canonical imagehash hex.
    """
    columns = HASH_WIDTH - 1
    bits = [(fingerprint >> i) & 1 for i in range(columns * HASH_HEIGHT)]
    grid = numpy.array(bits, dtype=bool).reshape((HASH_HEIGHT, columns))
    return imagehash.ImageHash(grid)


class MatchType(str, Enum):
    """How the members of a duplicate group were matched."""
    EXACT = 'exact'
    PERCEPTUAL = 'perceptual'


class ScanMode(str, Enum):
    """
    Which hashers a scan runs.

    Attributes:
        EXACT: Content digest only
        PERCEPTUAL: Difference hash only
        BOTH: Content digest, then difference hash, then merge
    """
    EXACT = 'exact'
    PERCEPTUAL = 'perceptual'
    BOTH = 'both'


class ScanPhase(str, Enum):
    """Coordinator phases. FAILED is terminal until a new scan starts."""
    IDLE = 'idle'
    DISCOVERING = 'discovering'
    HASHING = 'hashing'
    GROUPING = 'grouping'
    COMPLETE = 'complete'
    FAILED = 'failed'


@dataclass(eq=False)
class FileRecord:
    """
    A candidate image file discovered during a scan.

    Attributes:
        path: Absolute path to the file
        file_size: Size in bytes (always > 0)
        modified_at: Last modification time, if available
        created_at: Creation (birth) time, if the platform reports one
        content_hash: SHA-256 hex digest, set by the exact hasher
        fingerprint: 64-bit difference hash, set by the perceptual hasher
        width: Pixel width, set alongside the fingerprint
        height: Pixel height, set alongside the fingerprint
        id: Process-local identifier; equality and hashing use only this
    """
    path: str
    file_size: int
    modified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    content_hash: Optional[str] = None
    fingerprint: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    id: int = field(default_factory=lambda: next(_record_ids))

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, FileRecord):
            return False
        return self.id == other.id

    @property
    def filename(self) -> str:
        """Return just the filename portion of the path."""
        return os.path.basename(self.path)

    @property
    def directory(self) -> str:
        """Return the directory containing this file."""
        return os.path.dirname(self.path)

    @property
    def dimensions(self) -> Optional[str]:
        """Return resolution as 'W x H', or None when unknown."""
        if self.width is None or self.height is None:
            return None
        return f"{self.width} x {self.height}"

    @property
    def file_size_formatted(self) -> str:
        """Return human-readable file size."""
        return format_size(self.file_size)

    @property
    def fingerprint_hex(self) -> Optional[str]:
        """Return the fingerprint in imagehash hex notation."""
        if self.fingerprint is None:
            return None
        return str(fingerprint_to_image_hash(self.fingerprint))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'path': self.path,
            'filename': self.filename,
            'directory': self.directory,
            'file_size': self.file_size,
            'file_size_formatted': self.file_size_formatted,
            'modified_at': self.modified_at.isoformat() if self.modified_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'content_hash': self.content_hash,
            'fingerprint': self.fingerprint_hex,
            'width': self.width,
            'height': self.height,
            'dimensions': self.dimensions,
        }


@dataclass
class DuplicateGroup:
    """
    A set of files judged duplicates of one another.

    A group always holds at least two files. Construction with fewer raises
    ValueError, and remove_files() refuses removals that would leave fewer.

    Attributes:
        files: Member files in encounter order
        match_type: How duplicates were detected
        similarity: 1.0 for exact matches; threshold-derived for perceptual
        id: Unique identifier for this group
    """
    files: list[FileRecord]
    match_type: MatchType
    similarity: float = 1.0
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        self.files = list(self.files)
        self.match_type = MatchType(self.match_type)
        if len(self.files) < 2:
            raise ValueError(
                f"A duplicate group needs at least 2 files, got {len(self.files)}"
            )

    @property
    def file_count(self) -> int:
        """Number of files in this group."""
        return len(self.files)

    @property
    def file_ids(self) -> set[int]:
        """Identifiers of all members."""
        return {f.id for f in self.files}

    @property
    def largest_file(self) -> FileRecord:
        """The largest member; the first one encountered wins ties."""
        return max(self.files, key=lambda f: f.file_size)

    @property
    def total_bytes(self) -> int:
        """Combined size of all members."""
        return sum(f.file_size for f in self.files)

    @property
    def wasted_bytes(self) -> int:
        """Bytes reclaimable by deleting every member except the largest."""
        return self.total_bytes - self.largest_file.file_size

    @property
    def wasted_bytes_formatted(self) -> str:
        """Human-readable wasted space."""
        return format_size(self.wasted_bytes)

    def get_file(self, file_id: int) -> Optional[FileRecord]:
        """Return the member with the given id, if present."""
        for f in self.files:
            if f.id == file_id:
                return f
        return None

    def remove_files(self, file_ids: Iterable[int]) -> bool:
        """
        Remove the given members from this group.

        Args:
            file_ids: Identifiers of files to drop (unknown ids are ignored)

        Returns:
            True if the group still holds at least two files. False if the
            removal would leave one or none; the group is then left untouched
            and the caller must discard it.
        """
        removed = set(file_ids)
        remaining = [f for f in self.files if f.id not in removed]
        if len(remaining) < 2:
            return False
        self.files = remaining
        return True

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'match_type': self.match_type.value,
            'similarity': round(self.similarity, 4),
            'file_count': self.file_count,
            'files': [f.to_dict() for f in self.files],
            'largest_id': self.largest_file.id,
            'wasted_bytes': self.wasted_bytes,
            'wasted_bytes_formatted': self.wasted_bytes_formatted,
        }


def prune_groups(groups: list[DuplicateGroup], removed_ids: Iterable[int]) -> list[DuplicateGroup]:
    """
    Remove files from every group, dropping groups that fall below two members.

    Args:
        groups: Current result set
        removed_ids: Identifiers of files that no longer exist

    Returns:
        The surviving groups in their original order
    """
    removed = set(removed_ids)
    if not removed:
        return list(groups)

    survivors = []
    for group in groups:
        if not removed & group.file_ids:
            survivors.append(group)
        elif group.remove_files(removed):
            survivors.append(group)
    return survivors


@dataclass
class ScanProgress:
    """
    A progress snapshot pushed to callers during a scan.

    Attributes:
        phase: Current coordinator phase
        discovered_files: Candidate files found so far
        current_file: Name of the file being processed
        processed: Files processed in the current hashing stage
        total: Files to process in the current hashing stage
        stage: Hashing stage ('exact' or 'perceptual'); counts are
            monotonic within a (phase, stage) pair
        duplicate_groups: Best-known count of duplicate groups
        message: Failure reason when phase is FAILED
    """
    phase: ScanPhase = ScanPhase.IDLE
    discovered_files: int = 0
    current_file: str = ""
    processed: int = 0
    total: int = 0
    stage: str = ""
    duplicate_groups: int = 0
    message: str = ""

    @property
    def fraction(self) -> float:
        """Completed fraction of the current hashing stage (0.0-1.0)."""
        if self.phase == ScanPhase.HASHING and self.total > 0:
            return self.processed / self.total
        if self.phase == ScanPhase.COMPLETE:
            return 1.0
        return 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'phase': self.phase.value,
            'discovered_files': self.discovered_files,
            'current_file': self.current_file,
            'processed': self.processed,
            'total': self.total,
            'stage': self.stage,
            'fraction': round(self.fraction, 4),
            'duplicate_groups': self.duplicate_groups,
            'message': self.message,
        }
