"""
Unit tests for exact and perceptual grouping and the merge step.
"""

import pytest

from cull.exceptions import CancellationError
from cull.models import DuplicateGroup, MatchType
from cull.scanner import (
    CancellationToken,
    build_exact_groups,
    cluster_by_hamming_distance,
    find_exact_duplicates,
    find_exact_matches,
    find_image_files,
    find_perceptual_duplicates,
    group_by_size,
    iter_ordered,
    merge_groups,
)


class TestGroupBySize:
    """Test the size pre-filter."""

    def test_unique_sizes_dropped(self, make_record):
        a, b = make_record(size=10), make_record(size=10)
        lonely = make_record(size=11)
        buckets = group_by_size([a, lonely, b])
        assert buckets == [[a, b]]


class TestFindExactDuplicates:
    """Test find_exact_duplicates function."""

    def test_groups_identical_files(self, exact_files, temp_dir):
        records = find_image_files(temp_dir)
        groups = find_exact_duplicates(records)

        assert len(groups) == 1
        group = groups[0]
        assert group.match_type == MatchType.EXACT
        assert group.similarity == 1.0
        assert sorted(f.filename for f in group.files) == ['copy1.jpg', 'copy2.jpg', 'copy3.jpg']
        assert group.wasted_bytes == 200

    def test_matches_then_groups(self, exact_files, temp_dir):
        matches = find_exact_matches(find_image_files(temp_dir))
        assert [sorted(f.filename for f in m) for m in matches] == [['copy1.jpg', 'copy2.jpg', 'copy3.jpg']]

        groups = build_exact_groups(matches)
        assert len(groups) == 1
        assert groups[0].files == matches[0]
        assert groups[0].match_type == MatchType.EXACT

    def test_unique_size_never_grouped(self, exact_files, temp_dir):
        (temp_dir / "odd.jpg").write_bytes(b'a' * 101)
        records = find_image_files(temp_dir)
        groups = find_exact_duplicates(records)
        grouped = {f.filename for g in groups for f in g.files}
        assert 'odd.jpg' not in grouped

    def test_unique_size_is_never_read(self, exact_files, temp_dir):
        (temp_dir / "odd.jpg").write_bytes(b'a' * 101)
        records = find_image_files(temp_dir)
        find_exact_duplicates(records)
        odd = next(r for r in records if r.filename == 'odd.jpg')
        assert odd.content_hash is None

    def test_progress_total_is_size_filtered_count(self, exact_files, temp_dir):
        (temp_dir / "odd.jpg").write_bytes(b'a' * 101)
        calls = []
        find_exact_duplicates(
            find_image_files(temp_dir),
            progress_callback=lambda done, total, name: calls.append((done, total)),
        )
        assert calls == [(1, 4), (2, 4), (3, 4), (4, 4)]

    def test_workers_preserve_results(self, exact_files, temp_dir):
        sequential = find_exact_duplicates(find_image_files(temp_dir))
        threaded = find_exact_duplicates(find_image_files(temp_dir), workers=4)
        assert [sorted(f.filename for f in g.files) for g in sequential] == \
            [sorted(f.filename for f in g.files) for g in threaded]

    def test_cancellation(self, exact_files, temp_dir):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(CancellationError):
            find_exact_duplicates(find_image_files(temp_dir), cancel_token=token)


class TestClusterByHammingDistance:
    """Test greedy seed clustering."""

    def test_seed_collects_later_files_within_threshold(self, make_record):
        a = make_record("a.jpg", fingerprint=0)
        b = make_record("b.jpg", fingerprint=0b111)
        far = make_record("far.jpg", fingerprint=(1 << 64) - 1)
        groups = cluster_by_hamming_distance([a, b, far], threshold=5)
        assert len(groups) == 1
        assert groups[0].files == [a, b]
        assert groups[0].similarity == pytest.approx(1 - 5 / 64)

    def test_not_transitive(self, make_record):
        """
        b and c are each 6 bits from a but 12 bits from each other. With b as
        the seed, a joins and c is left alone.
        """
        a = make_record("a.jpg", fingerprint=0)
        b = make_record("b.jpg", fingerprint=0b111111)
        c = make_record("c.jpg", fingerprint=0b111111 << 6)

        seeded_by_a = cluster_by_hamming_distance([a, b, c], threshold=6)
        assert [g.files for g in seeded_by_a] == [[a, b, c]]

        seeded_by_b = cluster_by_hamming_distance([b, a, c], threshold=6)
        assert [g.files for g in seeded_by_b] == [[b, a]]

    def test_deterministic(self, make_record):
        records = [make_record(fingerprint=fp) for fp in (0, 1, 3, 1 << 40, (1 << 40) | 1, 7)]
        first = [[f.id for f in g.files] for g in cluster_by_hamming_distance(records, 2)]
        second = [[f.id for f in g.files] for g in cluster_by_hamming_distance(records, 2)]
        assert first == second

    def test_each_file_in_at_most_one_group(self, make_record):
        records = [make_record(fingerprint=fp) for fp in (0, 1, 2, 3, 4, 5)]
        groups = cluster_by_hamming_distance(records, 2)
        ids = [f.id for g in groups for f in g.files]
        assert len(ids) == len(set(ids))

    def test_files_without_fingerprint_ignored(self, make_record):
        a = make_record(fingerprint=0)
        b = make_record(fingerprint=None)
        assert cluster_by_hamming_distance([a, b], threshold=10) == []


class TestFindPerceptualDuplicates:
    """Test find_perceptual_duplicates on real images."""

    def test_close_images_grouped(self, similar_pair, temp_dir):
        records = find_image_files(temp_dir)
        groups = find_perceptual_duplicates(records, threshold=10)
        assert len(groups) == 1
        assert {f.filename for f in groups[0].files} == {'base.png', 'variant.png'}
        assert groups[0].match_type == MatchType.PERCEPTUAL

    def test_strict_threshold_splits(self, similar_pair, temp_dir):
        records = find_image_files(temp_dir)
        assert find_perceptual_duplicates(records, threshold=2) == []

    def test_sets_fingerprint_and_dimensions(self, similar_pair, temp_dir):
        records = find_image_files(temp_dir)
        find_perceptual_duplicates(records, threshold=10)
        for record in records:
            assert record.fingerprint is not None
            assert (record.width, record.height) == (9, 8)

    def test_undecodable_files_excluded(self, sample_images, temp_dir):
        records = find_image_files(temp_dir)
        calls = []
        groups = find_perceptual_duplicates(
            records, threshold=10,
            progress_callback=lambda done, total, name: calls.append((done, total)),
        )
        grouped = {f.filename for g in groups for f in g.files}
        assert 'broken.png' not in grouped
        # Progress covers every file, decodable or not
        assert calls[-1] == (len(records), len(records))

    def test_ignores_file_size(self, temp_dir):
        from PIL import Image
        Image.new('RGB', (40, 40), color='red').save(temp_dir / "small.png")
        Image.new('RGB', (400, 400), color='red').save(temp_dir / "big.png")
        groups = find_perceptual_duplicates(find_image_files(temp_dir), threshold=1)
        assert len(groups) == 1


class TestMergeGroups:
    """Test merge_groups."""

    def test_exact_claim_removes_perceptual_members(self, make_record):
        f1, f2, f3, f4 = (make_record() for _ in range(4))
        exact = DuplicateGroup(files=[f1, f2], match_type=MatchType.EXACT)
        swallowed = DuplicateGroup(files=[f1, f2, f3], match_type=MatchType.PERCEPTUAL, similarity=0.9)
        trimmed = DuplicateGroup(files=[f1, f3, f4], match_type=MatchType.PERCEPTUAL, similarity=0.9)

        merged = merge_groups([exact], [swallowed, trimmed])

        assert merged[0] is exact
        assert len(merged) == 2
        assert merged[1].files == [f3, f4]
        assert merged[1].similarity == 0.9
        assert merged[1].id != trimmed.id

    def test_inputs_not_mutated(self, make_record):
        f1, f2, f3, f4 = (make_record() for _ in range(4))
        exact = DuplicateGroup(files=[f1, f2], match_type=MatchType.EXACT)
        perceptual = DuplicateGroup(files=[f1, f3, f4], match_type=MatchType.PERCEPTUAL)
        merge_groups([exact], [perceptual])
        assert perceptual.files == [f1, f3, f4]

    def test_no_file_in_both_kinds(self, make_record):
        records = [make_record() for _ in range(6)]
        exact = [DuplicateGroup(files=records[:2], match_type=MatchType.EXACT)]
        perceptual = [
            DuplicateGroup(files=[records[1], records[2], records[3]], match_type=MatchType.PERCEPTUAL),
            DuplicateGroup(files=[records[0], records[4], records[5]], match_type=MatchType.PERCEPTUAL),
        ]
        merged = merge_groups(exact, perceptual)
        exact_ids = {f.id for g in merged if g.match_type == MatchType.EXACT for f in g.files}
        perceptual_ids = {f.id for g in merged if g.match_type == MatchType.PERCEPTUAL for f in g.files}
        assert not exact_ids & perceptual_ids


class TestIterOrdered:
    """Test ordered parallel iteration."""

    def test_preserves_order(self):
        import time

        def slow_first(n):
            time.sleep(0.05 if n == 0 else 0)
            return n * n

        results = list(iter_ordered(slow_first, range(6), workers=3))
        assert results == [(n, n * n) for n in range(6)]

    def test_sequential(self):
        assert list(iter_ordered(str, [1, 2], workers=1)) == [(1, '1'), (2, '2')]

    def test_cancellation(self):
        token = CancellationToken()
        seen = []
        with pytest.raises(CancellationError):
            for item, _ in iter_ordered(lambda n: n, range(10), workers=2, cancel_token=token):
                seen.append(item)
                if item == 2:
                    token.cancel()
        assert seen == [0, 1, 2]
