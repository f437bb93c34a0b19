"""
Export functionality for Cull.

Provides functions to export duplicate groups to TXT, CSV and JSON files.
The file kept by default (the largest of each group) is marked as such.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import TextIO

from ..models import DuplicateGroup
from .formatters import format_similarity

EXPORT_FORMATS = ('txt', 'csv', 'json')


def _export_txt(groups: list[DuplicateGroup], file_handle: TextIO) -> None:
    """
    Export duplicate groups to TXT format.

    Args:
        groups: Duplicate groups, already sorted
        file_handle: Open file handle to write to
    """
    file_handle.write("DUPLICATE IMAGE REPORT\n")
    file_handle.write("=" * 70 + "\n")

    for i, group in enumerate(groups, 1):
        file_handle.write(
            f"\nGroup {i} ({group.match_type.value}, "
            f"{format_similarity(group.similarity)} similar, "
            f"{group.wasted_bytes_formatted} reclaimable):\n"
        )
        keeper = group.largest_file
        for f in group.files:
            marker = "[KEEP]" if f.id == keeper.id else "[DUPE]"
            file_handle.write(f"  {marker} {f.path}\n")


def _export_csv(groups: list[DuplicateGroup], file_handle: TextIO) -> None:
    """
    Export duplicate groups to CSV format.

    Notes:
        Columns: group, match_type, similarity, status, path, width, height,
        file_size
    """
    writer = csv.writer(file_handle)
    writer.writerow([
        'group', 'match_type', 'similarity', 'status', 'path', 'width', 'height', 'file_size',
    ])
    for i, group in enumerate(groups, 1):
        keeper = group.largest_file
        for f in group.files:
            writer.writerow([
                i,
                group.match_type.value,
                f"{group.similarity:.4f}",
                'keep' if f.id == keeper.id else 'duplicate',
                f.path,
                f.width if f.width is not None else '',
                f.height if f.height is not None else '',
                f.file_size,
            ])


def _export_json(groups: list[DuplicateGroup], file_handle: TextIO) -> None:
    json.dump({'groups': [g.to_dict() for g in groups]}, file_handle, indent=2)


def export_results(
    groups: list[DuplicateGroup],
    output_path: str | Path,
    export_format: str = 'txt'
) -> None:
    """
    Export duplicate groups to a file.

    Args:
        groups: Duplicate groups to write
        output_path: Path to output file
        export_format: 'txt', 'csv' or 'json'. Default: 'txt'

    Raises:
        ValueError: If export_format is not supported
        OSError: If the file cannot be written
    """
    if export_format not in EXPORT_FORMATS:
        raise ValueError(
            f"Unsupported export format: {export_format}. "
            f"Use one of: {', '.join(EXPORT_FORMATS)}."
        )

    with open(output_path, 'w', encoding='utf-8', newline='') as f:
        if export_format == 'txt':
            _export_txt(groups, f)
        elif export_format == 'csv':
            _export_csv(groups, f)
        else:
            _export_json(groups, f)


__all__ = ['EXPORT_FORMATS', 'export_results']
