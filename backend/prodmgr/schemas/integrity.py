from __future__ import annotations

from sqlmodel import SQLModel


class OrphanedJobRead(SQLModel):
    id: int | None
    project_id: int | None
    items: str


class OrphanedJobsReport(SQLModel):
    total_jobs: int
    null_project_jobs: int
    valid_jobs: int
    project_count: int
    orphaned_count: int
    orphaned: list[OrphanedJobRead]
