"""
Unit tests for data models (FileRecord, DuplicateGroup, ScanProgress).
"""

import pytest
from cull.models import (
    DuplicateGroup,
    FileRecord,
    MatchType,
    ScanPhase,
    ScanProgress,
    format_size,
    fingerprint_to_image_hash,
    prune_groups,
)


class TestFormatSize:
    """Test the format_size utility function."""

    def test_bytes(self):
        assert format_size(500) == "500.0 B"

    def test_kilobytes(self):
        assert format_size(2048) == "2.0 KB"

    def test_megabytes(self):
        assert format_size(5242880) == "5.0 MB"

    def test_zero(self):
        assert format_size(0) == "0.0 B"


class TestFileRecord:
    """Test FileRecord data class."""

    def test_filename_and_directory(self):
        record = FileRecord(path="/path/to/image.jpg", file_size=10)
        assert record.filename == "image.jpg"
        assert record.directory == "/path/to"

    def test_ids_are_unique(self):
        a = FileRecord(path="/a.jpg", file_size=1)
        b = FileRecord(path="/a.jpg", file_size=1)
        assert a.id != b.id

    def test_equality_uses_identity_only(self):
        """Two records for the same path are still different records."""
        a = FileRecord(path="/a.jpg", file_size=1)
        b = FileRecord(path="/a.jpg", file_size=1)
        assert a != b
        assert a == a
        assert len({a, b, a}) == 2

    def test_dimensions(self):
        record = FileRecord(path="/a.jpg", file_size=1, width=1920, height=1080)
        assert record.dimensions == "1920 x 1080"
        assert FileRecord(path="/b.jpg", file_size=1).dimensions is None

    def test_fingerprint_hex(self):
        """Bit 0 is the first cell of the imagehash grid, i.e. the top hex bit."""
        assert FileRecord(path="/a.jpg", file_size=1, fingerprint=0).fingerprint_hex == "0" * 16
        assert FileRecord(path="/a.jpg", file_size=1, fingerprint=1).fingerprint_hex == "8" + "0" * 15
        assert FileRecord(path="/a.jpg", file_size=1).fingerprint_hex is None

    def test_image_hash_distance_matches_bit_count(self):
        a = fingerprint_to_image_hash(0)
        b = fingerprint_to_image_hash(0b1011)
        assert a - b == 3

    def test_to_dict(self, make_record):
        record = make_record("photo.jpg", size=2048, fingerprint=0)
        data = record.to_dict()
        assert data['id'] == record.id
        assert data['filename'] == "photo.jpg"
        assert data['file_size'] == 2048
        assert data['fingerprint'] == "0" * 16
        assert data['modified_at'].startswith("2024-01-01")


class TestDuplicateGroup:
    """Test DuplicateGroup data class."""

    def test_requires_two_members(self, make_record):
        with pytest.raises(ValueError):
            DuplicateGroup(files=[make_record()], match_type=MatchType.EXACT)
        with pytest.raises(ValueError):
            DuplicateGroup(files=[], match_type=MatchType.EXACT)

    def test_match_type_coerced(self, make_record):
        group = DuplicateGroup(files=[make_record(), make_record()], match_type='perceptual')
        assert group.match_type == MatchType.PERCEPTUAL

    def test_wasted_bytes(self, make_record):
        group = DuplicateGroup(
            files=[make_record(size=100), make_record(size=300), make_record(size=50)],
            match_type=MatchType.EXACT,
        )
        assert group.total_bytes == 450
        assert group.wasted_bytes == 150
        assert group.largest_file.file_size == 300

    def test_largest_file_first_wins_ties(self, make_record):
        first = make_record("first.jpg", size=100)
        second = make_record("second.jpg", size=100)
        group = DuplicateGroup(files=[first, second], match_type=MatchType.EXACT)
        assert group.largest_file is first

    def test_remove_files_recomputes_waste(self, make_record):
        small, mid, large = make_record(size=10), make_record(size=20), make_record(size=30)
        group = DuplicateGroup(files=[small, mid, large], match_type=MatchType.EXACT)
        assert group.wasted_bytes == 30

        assert group.remove_files([large.id]) is True
        assert group.file_count == 2
        assert group.wasted_bytes == 10

    def test_remove_files_refuses_to_break_group(self, make_record):
        a, b, c = make_record(), make_record(), make_record()
        group = DuplicateGroup(files=[a, b, c], match_type=MatchType.EXACT)

        assert group.remove_files([a.id, b.id]) is False
        assert group.file_count == 3

    def test_remove_unknown_ids_is_noop(self, make_record):
        a, b = make_record(), make_record()
        group = DuplicateGroup(files=[a, b], match_type=MatchType.EXACT)
        assert group.remove_files([999999]) is True
        assert group.file_count == 2

    def test_get_file(self, make_record):
        a, b = make_record(), make_record()
        group = DuplicateGroup(files=[a, b], match_type=MatchType.EXACT)
        assert group.get_file(b.id) is b
        assert group.get_file(-1) is None

    def test_ids_are_unique(self, make_record):
        g1 = DuplicateGroup(files=[make_record(), make_record()], match_type=MatchType.EXACT)
        g2 = DuplicateGroup(files=[make_record(), make_record()], match_type=MatchType.EXACT)
        assert g1.id != g2.id

    def test_to_dict(self, make_record):
        a, b = make_record(size=10), make_record(size=20)
        group = DuplicateGroup(files=[a, b], match_type=MatchType.PERCEPTUAL, similarity=0.84375)
        data = group.to_dict()
        assert data['match_type'] == 'perceptual'
        assert data['file_count'] == 2
        assert data['largest_id'] == b.id
        assert data['wasted_bytes'] == 10
        assert [f['id'] for f in data['files']] == [a.id, b.id]


class TestPruneGroups:
    """Test prune_groups."""

    def test_drops_groups_below_two(self, make_record):
        a, b = make_record(), make_record()
        c, d, e = make_record(), make_record(), make_record()
        pair = DuplicateGroup(files=[a, b], match_type=MatchType.EXACT)
        triple = DuplicateGroup(files=[c, d, e], match_type=MatchType.EXACT)

        survivors = prune_groups([pair, triple], [a.id, c.id])

        assert survivors == [triple]
        assert triple.file_ids == {d.id, e.id}

    def test_nothing_removed(self, make_record):
        group = DuplicateGroup(files=[make_record(), make_record()], match_type=MatchType.EXACT)
        assert prune_groups([group], []) == [group]


class TestScanProgress:
    """Test ScanProgress snapshots."""

    def test_fraction_during_hashing(self):
        progress = ScanProgress(phase=ScanPhase.HASHING, processed=5, total=20)
        assert progress.fraction == 0.25

    def test_fraction_outside_hashing(self):
        assert ScanProgress(phase=ScanPhase.DISCOVERING, discovered_files=50).fraction == 0.0
        assert ScanProgress(phase=ScanPhase.COMPLETE).fraction == 1.0
        assert ScanProgress(phase=ScanPhase.HASHING, total=0).fraction == 0.0

    def test_to_dict(self):
        data = ScanProgress(phase=ScanPhase.HASHING, processed=1, total=4, stage='exact').to_dict()
        assert data['phase'] == 'hashing'
        assert data['stage'] == 'exact'
        assert data['fraction'] == 0.25
