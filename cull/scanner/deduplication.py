"""
Deduplication module for the scanner package.

Provides the exact-match pass (size pre-filter + content digest), the
perceptual pass (dHash + greedy seed clustering) and the merge of the two.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Optional

from ..config import DEFAULT_THRESHOLD
from ..models import DuplicateGroup, FileRecord, MatchType
from .cancellation import CancellationToken, check_cancelled
from .hashing import (
    calculate_dhash,
    calculate_file_hash,
    hamming_distance,
    read_image_dimensions,
    similarity_for_threshold,
)
from .parallel import iter_ordered

_logger = logging.getLogger(__name__)

# callback(processed, total, filename)
FileProgressCallback = Callable[[int, int, str], None]


def group_by_size(records: list[FileRecord]) -> list[list[FileRecord]]:
    """
    Bucket files by exact byte size.

    Files with a unique size cannot have an exact duplicate, so only buckets
    with two or more members are returned (in first-encounter order).
    """
    size_groups: dict[int, list[FileRecord]] = defaultdict(list)
    for record in records:
        size_groups[record.file_size].append(record)
    return [bucket for bucket in size_groups.values() if len(bucket) > 1]


def find_exact_matches(
    records: list[FileRecord],
    progress_callback: Optional[FileProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    workers: int = 1,
) -> list[list[FileRecord]]:
    """
    Find byte-identical files without building result groups.

    Args:
        records: All candidate files
        progress_callback: Optional callback(processed, total, filename) fired
            after each digest; total is the size-filtered candidate count
        cancel_token: Checked before each digest
        workers: Worker threads for digest computation

    Returns:
        One list of files per digest shared by 2+ files, in first-encounter order
    """
    candidates = [r for bucket in group_by_size(records) for r in bucket]
    total = len(candidates)
    _logger.debug(f"Exact pass: {total:,} of {len(records):,} files share a size")

    hash_groups: dict[str, list[FileRecord]] = defaultdict(list)
    processed = 0

    for record, digest in iter_ordered(
        lambda r: calculate_file_hash(r.path), candidates, workers, cancel_token
    ):
        processed += 1
        if digest:
            record.content_hash = digest
            hash_groups[digest].append(record)
        else:
            _logger.debug(f"Skipping unreadable file {record.path}")

        if progress_callback:
            progress_callback(processed, total, record.filename)

    return [members for members in hash_groups.values() if len(members) > 1]


def build_exact_groups(matches: list[list[FileRecord]]) -> list[DuplicateGroup]:
    """Wrap each list of byte-identical files in an 'exact' DuplicateGroup."""
    return [
        DuplicateGroup(files=members, match_type=MatchType.EXACT, similarity=1.0)
        for members in matches
    ]


def find_exact_duplicates(
    records: list[FileRecord],
    progress_callback: Optional[FileProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    workers: int = 1,
) -> list[DuplicateGroup]:
    """
    Find byte-identical files.

    Returns:
        One 'exact' DuplicateGroup (similarity 1.0) per digest shared by 2+ files
    """
    return build_exact_groups(
        find_exact_matches(records, progress_callback, cancel_token, workers)
    )


def _fingerprint(record: FileRecord) -> tuple[Optional[int], Optional[tuple[int, int]]]:
    fingerprint = calculate_dhash(record.path)
    if fingerprint is None:
        return None, None
    return fingerprint, read_image_dimensions(record.path)


def fingerprint_files(
    records: list[FileRecord],
    progress_callback: Optional[FileProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    workers: int = 1,
) -> list[FileRecord]:
    """
    Attach a difference hash and pixel dimensions to each decodable file.

    Progress fires once per file whether or not decoding succeeded.

    Returns:
        The successfully fingerprinted files, in input order
    """
    total = len(records)
    hashed: list[FileRecord] = []

    for index, (record, (fingerprint, dims)) in enumerate(
        iter_ordered(_fingerprint, records, workers, cancel_token), 1
    ):
        if fingerprint is not None:
            record.fingerprint = fingerprint
            if dims is not None:
                record.width, record.height = dims
            hashed.append(record)

        if progress_callback:
            progress_callback(index, total, record.filename)

    skipped = total - len(hashed)
    if skipped:
        _logger.info(f"{skipped:,} files could not be decoded for perceptual matching")
    return hashed


def cluster_by_hamming_distance(
    records: list[FileRecord],
    threshold: int,
    cancel_token: Optional[CancellationToken] = None,
) -> list[DuplicateGroup]:
    """
    Greedy single-pass clustering by distance to a seed.

    Each unvisited file in list order seeds a cluster; every later unvisited
    file within `threshold` bits of the seed joins it. Distance is only
    bounded relative to the seed, so two members of one cluster may be up to
    2 * threshold bits apart. Results depend only on input order.

    Args:
        records: Fingerprinted files (files without a fingerprint are ignored)
        threshold: Maximum Hamming distance to the seed
        cancel_token: Checked once per seed

    Returns:
        'perceptual' DuplicateGroups for clusters with two or more files
    """
    similarity = similarity_for_threshold(threshold)
    visited: set[int] = set()
    groups: list[DuplicateGroup] = []

    for i, seed in enumerate(records):
        check_cancelled(cancel_token)
        if seed.id in visited or seed.fingerprint is None:
            continue

        cluster = [seed]
        visited.add(seed.id)

        for other in records[i + 1:]:
            if other.id in visited or other.fingerprint is None:
                continue
            if hamming_distance(seed.fingerprint, other.fingerprint) <= threshold:
                cluster.append(other)
                visited.add(other.id)

        if len(cluster) > 1:
            groups.append(DuplicateGroup(
                files=cluster,
                match_type=MatchType.PERCEPTUAL,
                similarity=similarity,
            ))

    return groups


def find_perceptual_duplicates(
    records: list[FileRecord],
    threshold: int = DEFAULT_THRESHOLD,
    progress_callback: Optional[FileProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    workers: int = 1,
) -> list[DuplicateGroup]:
    """
    Find visually similar images.

    Args:
        records: All candidate files (file size plays no part here)
        threshold: Maximum Hamming distance to a cluster seed (1-20)
        progress_callback: Optional callback(processed, total, filename)
        cancel_token: Checked per file and per cluster seed
        workers: Worker threads for decoding

    Returns:
        List of 'perceptual' DuplicateGroups
    """
    hashed = fingerprint_files(records, progress_callback, cancel_token, workers)
    if len(hashed) < 2:
        return []
    return cluster_by_hamming_distance(hashed, threshold, cancel_token)


def merge_groups(
    exact_groups: list[DuplicateGroup],
    perceptual_groups: list[DuplicateGroup],
) -> list[DuplicateGroup]:
    """
    Combine exact and perceptual results without double-counting files.

    Exact groups are kept verbatim. Each perceptual group loses any member
    already claimed by an exact group and is rebuilt as a new group if at
    least two members remain. The input groups are never mutated.
    """
    merged = list(exact_groups)
    claimed = {f.id for group in exact_groups for f in group.files}

    for group in perceptual_groups:
        remaining = [f for f in group.files if f.id not in claimed]
        if len(remaining) > 1:
            merged.append(DuplicateGroup(
                files=remaining,
                match_type=MatchType.PERCEPTUAL,
                similarity=group.similarity,
            ))

    return merged


__all__ = [
    'group_by_size',
    'find_exact_matches',
    'build_exact_groups',
    'find_exact_duplicates',
    'fingerprint_files',
    'cluster_by_hamming_distance',
    'find_perceptual_duplicates',
    'merge_groups',
]
