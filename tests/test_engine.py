"""
Tests for the DuplicateEngine scan coordinator.
"""

import pytest
from PIL import Image

from cull.exceptions import CancellationError, DirectoryAccessError
from cull.models import MatchType, ScanMode, ScanPhase
from cull.scanner import CancellationToken, DuplicateEngine, scan_directory


class Recorder:
    """Collects progress snapshots and duplicate counts."""

    def __init__(self):
        self.snapshots = []
        self.counts = []

    def on_progress(self, progress):
        self.snapshots.append(progress)

    def on_count(self, count):
        self.counts.append(count)

    @property
    def phases(self):
        phases = []
        for snapshot in self.snapshots:
            if not phases or phases[-1] != snapshot.phase:
                phases.append(snapshot.phase)
        return phases


class TestScenarios:
    """End-to-end scans over small fixture folders."""

    def test_exact_mode_groups_identical_files(self, exact_files, temp_dir):
        groups = scan_directory(temp_dir, mode='exact')

        assert len(groups) == 1
        assert groups[0].file_count == 3
        assert groups[0].similarity == 1.0
        assert groups[0].wasted_bytes == 200

    def test_perceptual_match_within_threshold(self, similar_pair, temp_dir):
        groups = scan_directory(temp_dir, mode=ScanMode.PERCEPTUAL, threshold=10)
        assert len(groups) == 1
        assert groups[0].file_count == 2
        assert groups[0].match_type == MatchType.PERCEPTUAL

    def test_perceptual_match_outside_threshold(self, similar_pair, temp_dir):
        assert scan_directory(temp_dir, mode=ScanMode.PERCEPTUAL, threshold=2) == []

    def test_empty_directory(self, temp_dir):
        engine = DuplicateEngine()
        recorder = Recorder()
        assert engine.scan(temp_dir, on_progress=recorder.on_progress) == []
        assert engine.phase == ScanPhase.COMPLETE
        assert recorder.snapshots[-1].phase == ScanPhase.COMPLETE

    def test_cancel_during_hashing(self, exact_files, similar_pair, temp_dir):
        token = CancellationToken()
        engine = DuplicateEngine()
        recorder = Recorder()

        def cancel_on_hashing(progress):
            recorder.on_progress(progress)
            if progress.phase == ScanPhase.HASHING:
                token.cancel()

        with pytest.raises(CancellationError):
            engine.scan(temp_dir, on_progress=cancel_on_hashing, cancel_token=token)

        assert engine.phase == ScanPhase.IDLE
        assert engine.failure_reason is None
        assert ScanPhase.COMPLETE not in recorder.phases
        assert ScanPhase.FAILED not in recorder.phases


class TestPhasesAndProgress:
    """Test phase transitions, progress snapshots and count reports."""

    def test_phase_order(self, exact_files, similar_pair, temp_dir):
        recorder = Recorder()
        DuplicateEngine().scan(temp_dir, on_progress=recorder.on_progress)
        assert recorder.phases == [
            ScanPhase.DISCOVERING,
            ScanPhase.HASHING,
            ScanPhase.GROUPING,
            ScanPhase.COMPLETE,
        ]

    def test_hashing_progress_monotonic_per_stage(self, exact_files, similar_pair, temp_dir):
        recorder = Recorder()
        DuplicateEngine().scan(temp_dir, on_progress=recorder.on_progress)

        hashing = [s for s in recorder.snapshots if s.phase == ScanPhase.HASHING]
        assert {s.stage for s in hashing} == {'exact', 'perceptual'}
        for stage in ('exact', 'perceptual'):
            processed = [s.processed for s in hashing if s.stage == stage]
            assert processed == sorted(processed)
            assert all(0.0 <= s.fraction <= 1.0 for s in hashing)

    def test_discovery_count_increases(self, exact_files, temp_dir):
        recorder = Recorder()
        DuplicateEngine().scan(temp_dir, mode='exact', on_progress=recorder.on_progress)
        counts = [s.discovered_files for s in recorder.snapshots if s.phase == ScanPhase.DISCOVERING]
        assert counts == sorted(counts)
        assert counts[-1] == 4

    def test_duplicate_counts_reported_in_both_mode(self, exact_files, similar_pair, temp_dir):
        recorder = Recorder()
        groups = DuplicateEngine().scan(
            temp_dir, mode='both', threshold=10, on_duplicate_count=recorder.on_count
        )
        # exact pass, perceptual pass, merge, completion
        assert len(recorder.counts) == 4
        assert recorder.counts[-1] == len(groups)

    def test_duplicate_counts_reported_in_exact_mode(self, exact_files, temp_dir):
        recorder = Recorder()
        DuplicateEngine().scan(temp_dir, mode='exact', on_duplicate_count=recorder.on_count)
        assert recorder.counts == [1, 1]


class TestMergeAndSort:
    """Test the combined result of a 'both' scan."""

    def test_exact_members_not_repeated_as_perceptual(self, temp_dir):
        img = Image.new('RGB', (50, 50), color='red')
        img.save(temp_dir / "a.png")
        img.save(temp_dir / "b.png")
        # Same picture re-encoded at another size: perceptual only
        Image.new('RGB', (80, 80), color='red').save(temp_dir / "c.png")

        groups = scan_directory(temp_dir, mode='both', threshold=5)

        exact_ids = {f.id for g in groups if g.match_type == MatchType.EXACT for f in g.files}
        perceptual_ids = {f.id for g in groups if g.match_type == MatchType.PERCEPTUAL for f in g.files}
        assert len(exact_ids) == 2
        assert not exact_ids & perceptual_ids

    def test_exact_group_members_not_changed_after_grouping(self, temp_dir, monkeypatch):
        from cull.scanner import engine as engine_module

        img = Image.new('RGB', (40, 40), color='blue')
        img.save(temp_dir / "a.png")
        img.save(temp_dir / "b.png")

        at_creation = {}
        real_build = engine_module.build_exact_groups

        def recording_build(matches):
            groups = real_build(matches)
            for group in groups:
                for f in group.files:
                    at_creation[f.id] = (f.fingerprint, f.width, f.height, f.content_hash)
            return groups

        monkeypatch.setattr(engine_module, 'build_exact_groups', recording_build)
        groups = scan_directory(temp_dir, mode='both', threshold=5)

        exact = [g for g in groups if g.match_type == MatchType.EXACT]
        assert len(exact) == 1
        for f in exact[0].files:
            assert at_creation[f.id] == (f.fingerprint, f.width, f.height, f.content_hash)
            assert f.fingerprint is not None

    def test_sorted_by_wasted_bytes(self, temp_dir):
        (temp_dir / "s1.jpg").write_bytes(b's' * 10)
        (temp_dir / "s2.jpg").write_bytes(b's' * 10)
        (temp_dir / "l1.jpg").write_bytes(b'l' * 1000)
        (temp_dir / "l2.jpg").write_bytes(b'l' * 1000)

        groups = scan_directory(temp_dir, mode='exact')
        assert [g.wasted_bytes for g in groups] == [1000, 10]

    def test_workers_do_not_change_result(self, exact_files, similar_pair, temp_dir):
        def shape(groups):
            return sorted(sorted(f.filename for f in g.files) for g in groups)

        sequential = scan_directory(temp_dir, mode='both', workers=1)
        threaded = scan_directory(temp_dir, mode='both', workers=4)
        assert shape(sequential) == shape(threaded)


class TestErrors:
    """Test validation and failure handling."""

    @pytest.mark.parametrize('threshold', [0, 21, 64, 'ten', 10.5, 20.9])
    def test_invalid_threshold(self, temp_dir, threshold):
        with pytest.raises(ValueError):
            DuplicateEngine().scan(temp_dir, threshold=threshold)

    def test_numeric_string_threshold_is_coerced(self, similar_pair, temp_dir):
        engine = DuplicateEngine()
        groups = engine.scan(temp_dir, mode='perceptual', threshold="10")

        assert engine.phase == ScanPhase.COMPLETE
        assert len(groups) == 1
        assert groups[0].similarity == pytest.approx(1 - 10 / 64)

    def test_invalid_mode(self, temp_dir):
        with pytest.raises(ValueError):
            DuplicateEngine().scan(temp_dir, mode='fuzzy')

    def test_missing_directory_fails(self, temp_dir):
        engine = DuplicateEngine()
        recorder = Recorder()
        with pytest.raises(DirectoryAccessError):
            engine.scan(temp_dir / "missing", on_progress=recorder.on_progress)

        assert engine.phase == ScanPhase.FAILED
        assert "missing" in engine.failure_reason
        assert recorder.snapshots[-1].phase == ScanPhase.FAILED

    def test_engine_reusable_after_failure(self, exact_files, temp_dir):
        engine = DuplicateEngine()
        with pytest.raises(DirectoryAccessError):
            engine.scan(temp_dir / "missing")
        assert len(engine.scan(temp_dir, mode='exact')) == 1
        assert engine.phase == ScanPhase.COMPLETE
        assert engine.failure_reason is None

    def test_failing_observers_do_not_abort_scan(self, exact_files, temp_dir, caplog):
        calls = {'progress': 0, 'count': 0}

        def broken_progress(progress):
            calls['progress'] += 1
            raise RuntimeError("display gone")

        def broken_count(count):
            calls['count'] += 1
            raise RuntimeError("display gone")

        engine = DuplicateEngine()
        groups = engine.scan(
            temp_dir, mode='exact',
            on_progress=broken_progress, on_duplicate_count=broken_count,
        )

        assert engine.phase == ScanPhase.COMPLETE
        assert len(groups) == 1
        assert calls['progress'] > 1
        assert calls['count'] == 2
        assert "display gone" in caplog.text
