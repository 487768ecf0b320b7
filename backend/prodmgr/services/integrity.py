"""Orphaned job detection and cleanup.

A job is *orphaned* when its `project_id` is set but no longer resolves to a
row in `projects` (out-of-band deletes that did not cascade). Jobs with a
null `project_id` are reported separately and never removed unless the
operator explicitly wipes a database that has no projects at all.

Classification is pure; all reads and deletes go through a `JobStore` handle
so the logic can run against an in-memory fake as well as a real session.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from prodmgr.core.logging import get_logger
from prodmgr.models.jobs import Job
from prodmgr.models.projects import Project

logger = get_logger(__name__)

ORPHAN_DETAIL_LIMIT = 10


class IntegrityCheckError(Exception):
    pass


class EmptyProjectSetError(IntegrityCheckError):
    def __init__(self, job_count: int):
        self.job_count = job_count
        super().__init__(
            f"No projects exist; refusing to delete all {job_count} jobs without allow_wipe"
        )


class JobStore(Protocol):
    def list_jobs(self) -> list[Job]: ...

    def list_project_ids(self) -> set[int]: ...

    def delete_orphaned_jobs(self) -> list[int]: ...

    def delete_all_jobs(self) -> list[int]: ...


class SqlJobStore:
    """`JobStore` backed by a SQLModel session. Each delete is one statement + commit."""

    def __init__(self, session: Session):
        self.session = session

    def list_jobs(self) -> list[Job]:
        return list(self.session.exec(select(Job).order_by(col(Job.id).asc())).all())

    def list_project_ids(self) -> set[int]:
        return set(self.session.exec(select(Project.id)).all())

    def delete_orphaned_jobs(self) -> list[int]:
        # Projects are resolved inside the statement, so one created mid-run keeps its jobs.
        stmt = (
            delete(Job)
            .where(col(Job.project_id).is_not(None))
            .where(col(Job.project_id).not_in(select(Project.id)))
            .returning(col(Job.id))
        )
        return self._delete(stmt)

    def delete_all_jobs(self) -> list[int]:
        return self._delete(delete(Job).returning(col(Job.id)))

    def _delete(self, stmt) -> list[int]:
        try:
            deleted = [row[0] for row in self.session.execute(stmt).all()]
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        # Deleted rows may still sit in the identity map.
        self.session.expire_all()
        return sorted(deleted)


@dataclass(frozen=True)
class JobClassification:
    null_ref: list[Job] = field(default_factory=list)
    orphaned: list[Job] = field(default_factory=list)
    valid: list[Job] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.null_ref) + len(self.orphaned) + len(self.valid)

    @property
    def has_orphans(self) -> bool:
        return bool(self.orphaned)


@dataclass(frozen=True)
class OrphanScan:
    classification: JobClassification
    project_count: int


@dataclass(frozen=True)
class CleanupResult:
    deleted_count: int
    deleted_ids: list[int]
    remaining_count: int
    wiped_all: bool = False
    dry_run: bool = False


def classify_jobs(jobs: Iterable[Job], valid_project_ids: Iterable[int]) -> JobClassification:
    valid_ids = set(valid_project_ids)
    result = JobClassification()
    for job in jobs:
        if job.project_id is None:
            result.null_ref.append(job)
        elif job.project_id not in valid_ids:
            result.orphaned.append(job)
        else:
            result.valid.append(job)
    return result


def select_cleanup_targets(jobs: Iterable[Job], valid_project_ids: Iterable[int]) -> list[Job]:
    """Jobs that `cleanup_orphaned_jobs` would remove for this project-id set."""
    valid_ids = set(valid_project_ids)
    if not valid_ids:
        return list(jobs)
    return classify_jobs(jobs, valid_ids).orphaned


def scan_orphaned_jobs(store: JobStore) -> OrphanScan:
    jobs = store.list_jobs()
    project_ids = store.list_project_ids()
    classification = classify_jobs(jobs, project_ids)
    logger.info(
        "jobs.scan total=%s null_ref=%s orphaned=%s projects=%s",
        classification.total,
        len(classification.null_ref),
        len(classification.orphaned),
        len(project_ids),
    )
    return OrphanScan(classification=classification, project_count=len(project_ids))


def cleanup_orphaned_jobs(
    store: JobStore,
    *,
    allow_wipe: bool = False,
    dry_run: bool = False,
) -> CleanupResult:
    """Delete jobs whose project reference does not resolve.

    With no projects at all every job counts as orphaned, but wiping the table
    on an empty project set requires `allow_wipe=True`; otherwise
    `EmptyProjectSetError` is raised and nothing is deleted.
    """
    jobs = store.list_jobs()
    project_ids = store.list_project_ids()
    targets = select_cleanup_targets(jobs, project_ids)
    wipe = not project_ids

    if wipe and jobs and not allow_wipe:
        logger.warning("jobs.cleanup.refused_wipe jobs=%s", len(jobs))
        raise EmptyProjectSetError(len(jobs))

    if dry_run:
        target_ids = [job.id for job in targets if job.id is not None]
        logger.info("jobs.cleanup.dry_run would_delete=%s", len(target_ids))
        return CleanupResult(
            deleted_count=len(target_ids),
            deleted_ids=target_ids,
            remaining_count=len(jobs) - len(target_ids),
            wiped_all=wipe,
            dry_run=True,
        )

    if not targets:
        logger.info("jobs.cleanup.nothing_to_delete total=%s", len(jobs))
        return CleanupResult(deleted_count=0, deleted_ids=[], remaining_count=len(jobs))

    if wipe:
        deleted_ids = store.delete_all_jobs()
    else:
        deleted_ids = store.delete_orphaned_jobs()

    remaining = len(store.list_jobs())
    logger.info("jobs.cleanup.deleted count=%s remaining=%s wiped_all=%s", len(deleted_ids), remaining, wipe)
    return CleanupResult(
        deleted_count=len(deleted_ids),
        deleted_ids=deleted_ids,
        remaining_count=remaining,
        wiped_all=wipe,
    )


def describe_orphans(jobs: Sequence[Job], limit: int = ORPHAN_DETAIL_LIMIT) -> list[str]:
    lines = [f"Job ID: {job.id}, Project ID: {job.project_id}, Items: {job.items}" for job in jobs[:limit]]
    if len(jobs) > limit:
        lines.append(f"... and {len(jobs) - limit} more")
    return lines
