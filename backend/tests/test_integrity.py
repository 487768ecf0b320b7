# ruff: noqa

import pytest

from conftest import FakeJobStore, job
from prodmgr.services.integrity import (
    EmptyProjectSetError,
    classify_jobs,
    cleanup_orphaned_jobs,
    describe_orphans,
    scan_orphaned_jobs,
    select_cleanup_targets,
)


def _ids(jobs):
    return [j.id for j in jobs]


def test_classify_jobs_splits_valid_null_and_orphaned():
    jobs = [job(1, 10), job(2, None), job(3, 99)]
    result = classify_jobs(jobs, {10})
    assert _ids(result.valid) == [1]
    assert _ids(result.null_ref) == [2]
    assert _ids(result.orphaned) == [3]
    assert result.has_orphans is True


def test_classify_jobs_is_a_partition_and_keeps_input_order():
    jobs = [job(7, 3), job(2, None), job(5, 4), job(1, 3), job(9, 8), job(4, None), job(3, 4)]
    for valid_ids in (set(), {3}, {3, 4}, {3, 4, 8}, {100}):
        result = classify_jobs(jobs, valid_ids)
        groups = [result.valid, result.orphaned, result.null_ref]
        seen = [j.id for g in groups for j in g]
        assert sorted(seen) == sorted(_ids(jobs))
        assert len(seen) == len(set(seen))
        assert result.total == len(jobs)
        order = _ids(jobs)
        for g in groups:
            assert _ids(g) == sorted(_ids(g), key=order.index)


def test_classify_jobs_with_no_projects_marks_every_reference_orphaned():
    result = classify_jobs([job(1, 5), job(2, None)], [])
    assert _ids(result.orphaned) == [1]
    assert _ids(result.null_ref) == [2]
    assert result.valid == []


def test_select_cleanup_targets_never_includes_null_refs_when_projects_exist():
    jobs = [job(1, 10), job(2, None), job(3, 99)]
    assert _ids(select_cleanup_targets(jobs, {10})) == [3]


def test_select_cleanup_targets_takes_everything_when_no_projects_exist():
    jobs = [job(1, 10), job(2, None)]
    assert _ids(select_cleanup_targets(jobs, set())) == [1, 2]


def test_cleanup_deletes_only_unresolvable_references():
    store = FakeJobStore([job(1, 10), job(2, None), job(3, 99)], {10})
    result = cleanup_orphaned_jobs(store)
    assert result.deleted_count == 1
    assert result.deleted_ids == [3]
    assert result.remaining_count == 2
    assert result.wiped_all is False
    assert _ids(store.jobs) == [1, 2]
    assert store.delete_calls == ["orphaned"]


def test_cleanup_second_run_deletes_nothing():
    store = FakeJobStore([job(1, 10), job(2, None), job(3, 99), job(4, 42)], {10})
    first = cleanup_orphaned_jobs(store)
    second = cleanup_orphaned_jobs(store)
    assert first.deleted_count == 2
    assert second.deleted_count == 0
    assert second.remaining_count == 2


def test_cleanup_refuses_to_wipe_without_permission():
    store = FakeJobStore([job(1, 5)], set())
    with pytest.raises(EmptyProjectSetError) as excinfo:
        cleanup_orphaned_jobs(store)
    assert excinfo.value.job_count == 1
    assert _ids(store.jobs) == [1]
    assert store.delete_calls == []


def test_cleanup_wipes_all_jobs_when_no_projects_and_allowed():
    store = FakeJobStore([job(1, 5), job(2, None)], set())
    result = cleanup_orphaned_jobs(store, allow_wipe=True)
    assert result.deleted_count == 2
    assert result.wiped_all is True
    assert store.jobs == []
    assert store.delete_calls == ["all"]


def test_cleanup_on_empty_database_is_a_noop_even_without_projects():
    store = FakeJobStore([], set())
    result = cleanup_orphaned_jobs(store)
    assert result.deleted_count == 0
    assert store.delete_calls == []


def test_cleanup_dry_run_reports_targets_without_deleting():
    store = FakeJobStore([job(1, 10), job(2, 11), job(3, None)], {10})
    result = cleanup_orphaned_jobs(store, dry_run=True)
    assert result.dry_run is True
    assert result.deleted_ids == [2]
    assert result.remaining_count == 2
    assert len(store.jobs) == 3
    assert store.delete_calls == []


def test_cleanup_propagates_store_failures():
    store = FakeJobStore([job(1, 99)], {10})
    store.fail_on_delete = RuntimeError("connection lost")
    with pytest.raises(RuntimeError, match="connection lost"):
        cleanup_orphaned_jobs(store)


def test_scan_reports_project_count():
    store = FakeJobStore([job(1, 10), job(2, 11)], {10, 12})
    scan = scan_orphaned_jobs(store)
    assert scan.project_count == 2
    assert _ids(scan.classification.orphaned) == [2]


def test_describe_orphans_truncates_long_lists():
    orphans = [job(i, 500 + i, items=f"panel {i}") for i in range(1, 13)]
    lines = describe_orphans(orphans, limit=10)
    assert len(lines) == 11
    assert lines[0] == "Job ID: 1, Project ID: 501, Items: panel 1"
    assert lines[-1] == "... and 2 more"
