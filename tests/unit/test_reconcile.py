"""Tests for compute_changelog - reconciling two analysis snapshots."""

import pytest

from specbook.analysis.models import AnalysisResult, AnalysisStatus, RelatedFile
from specbook.mapping.models import ChangeType, MappingSnapshot
from specbook.mapping.reconcile import compute_changelog


def make_result(object_id, status="implemented", impl=(), tests=(), title=None):
    return AnalysisResult(
        object_id=object_id,
        object_title=title or object_id.upper(),
        status=status,
        impl_files=[RelatedFile(file_path=p) for p in impl],
        test_files=[RelatedFile(file_path=p) for p in tests],
    )


def snapshot_of(*entries) -> MappingSnapshot:
    return MappingSnapshot(entries=list(entries))


def by_id(changelog):
    return {c.object_id: c for c in changelog}


class TestComputeChangelog:
    """Test suite for compute_changelog."""

    def test_first_scan_everything_added(self):
        changelog = compute_changelog([make_result("a", impl=["a.py"]), make_result("b")], None)

        assert [c.change_type for c in changelog] == [ChangeType.ADDED, ChangeType.ADDED]
        a = changelog[0]
        assert a.change_summary == "New implementation"
        assert a.previous_status is None
        assert a.current_status == AnalysisStatus.IMPLEMENTED
        assert [f.file_path for f in a.added_files] == ["a.py"]
        assert a.removed_files == []

    def test_status_and_files_changed(self):
        """partial -> implemented with a new file is one 'changed' entry."""
        previous = snapshot_of(make_result("x", status="partial", impl=["x.go"]))
        new = [make_result("x", status="implemented", impl=["x.go", "y.go"])]

        [change] = compute_changelog(new, previous)

        assert change.change_type == ChangeType.CHANGED
        assert change.previous_status == AnalysisStatus.PARTIAL
        assert change.current_status == AnalysisStatus.IMPLEMENTED
        assert change.change_summary == "partial → implemented; Implementation files changed"
        assert [f.file_path for f in change.added_files] == ["y.go"]
        assert change.removed_files == []

    def test_removed_object(self):
        previous = snapshot_of(make_result("x", impl=["x.go"], tests=["x_test.go"]), make_result("y"))
        changelog = compute_changelog([make_result("y")], previous)

        changes = by_id(changelog)
        assert changes["y"].change_type == ChangeType.UNCHANGED
        removed = changes["x"]
        assert removed.change_type == ChangeType.REMOVED
        assert removed.change_summary == "Requirement removed"
        assert removed.current_status is None
        assert [f.file_path for f in removed.removed_files] == ["x.go", "x_test.go"]

    def test_status_only_change(self):
        previous = snapshot_of(make_result("x", status="not_found"))
        [change] = compute_changelog([make_result("x", status="partial")], previous)
        assert change.change_summary == "not_found → partial"
        assert change.added_files == []

    def test_files_only_change(self):
        previous = snapshot_of(make_result("x", impl=["old.py"]))
        [change] = compute_changelog([make_result("x", impl=["new.py"])], previous)

        assert change.change_type == ChangeType.CHANGED
        assert change.change_summary == "Implementation files changed"
        assert [f.file_path for f in change.added_files] == ["new.py"]
        assert [f.file_path for f in change.removed_files] == ["old.py"]

    def test_file_moved_between_impl_and_test_is_unchanged(self):
        """Impl and test files are pooled; only paths matter."""
        previous = snapshot_of(make_result("x", impl=["a.py", "t.py"]))
        [change] = compute_changelog([make_result("x", impl=["a.py"], tests=["t.py"])], previous)
        assert change.change_type == ChangeType.UNCHANGED

    def test_description_change_is_unchanged(self):
        old = make_result("x")
        old.impl_files = [RelatedFile(file_path="a.py", description="old words")]
        new = make_result("x")
        new.impl_files = [RelatedFile(file_path="a.py", description="new words")]

        [change] = compute_changelog([new], snapshot_of(old))
        assert change.change_type == ChangeType.UNCHANGED
        assert change.change_summary == ""

    def test_order_new_first_then_removed(self):
        previous = snapshot_of(make_result("gone1"), make_result("b"), make_result("gone2"))
        new = [make_result("c"), make_result("b")]

        changelog = compute_changelog(new, previous)
        assert [c.object_id for c in changelog] == ["c", "b", "gone1", "gone2"]

    def test_duplicate_new_entries_keep_first(self):
        new = [make_result("a", status="partial"), make_result("a", status="implemented")]
        [change] = compute_changelog(new, None)
        assert change.current_status == AnalysisStatus.PARTIAL

    @pytest.mark.parametrize("old_ids,new_ids", [
        ([], ["a", "b"]),
        (["a", "b"], []),
        (["a", "b", "c"], ["b", "c", "d"]),
        (["a"], ["a"]),
    ])
    def test_every_object_classified_exactly_once(self, old_ids, new_ids):
        previous = snapshot_of(*[make_result(i) for i in old_ids])
        changelog = compute_changelog([make_result(i) for i in new_ids], previous)

        ids = [c.object_id for c in changelog]
        assert len(ids) == len(set(ids))
        assert set(ids) == set(old_ids) | set(new_ids)
        for change in changelog:
            if change.object_id not in old_ids:
                assert change.change_type == ChangeType.ADDED
            elif change.object_id not in new_ids:
                assert change.change_type == ChangeType.REMOVED
