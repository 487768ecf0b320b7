# ruff: noqa

from __future__ import annotations

from collections.abc import Iterable, Iterator

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import prodmgr.models  # registers tables
from prodmgr.models.jobs import Job


class FakeJobStore:
    """In-memory JobStore; mirrors the SQL NOT IN semantics for null project ids."""

    def __init__(self, jobs: Iterable[Job] = (), project_ids: Iterable[int] = ()):
        self.jobs = list(jobs)
        self.project_ids = set(project_ids)
        self.delete_calls: list[str] = []
        self.fail_on_delete: Exception | None = None

    def list_jobs(self) -> list[Job]:
        return list(self.jobs)

    def list_project_ids(self) -> set[int]:
        return set(self.project_ids)

    def delete_orphaned_jobs(self) -> list[int]:
        self.delete_calls.append("orphaned")
        return self._remove(lambda j: j.project_id is not None and j.project_id not in self.project_ids)

    def delete_all_jobs(self) -> list[int]:
        self.delete_calls.append("all")
        return self._remove(lambda j: True)

    def _remove(self, predicate) -> list[int]:
        if self.fail_on_delete is not None:
            raise self.fail_on_delete
        doomed = [j for j in self.jobs if predicate(j)]
        self.jobs = [j for j in self.jobs if not predicate(j)]
        return sorted(j.id for j in doomed)


def job(job_id: int, project_id: int | None, items: str | None = None) -> Job:
    return Job(id=job_id, project_id=project_id, items=items or f"items-{job_id}")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session
