from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from prodmgr.core.time import utcnow

JOB_STATUSES = (
    "not-assigned",
    "nesting-complete",
    "machining-complete",
    "assembly-complete",
    "delivered",
)


class Job(SQLModel, table=True):
    """A production work order.

    `project_id` is nullable and the historical data was written without a
    cascading FK, so rows can point at projects that no longer exist. See
    `prodmgr.services.integrity`.
    """

    __tablename__ = "jobs"

    id: int | None = Field(default=None, primary_key=True)
    project_id: int | None = Field(default=None, foreign_key="projects.id", index=True)

    unit: str | None = None
    type: str | None = None
    items: str

    # Stage dates are stored as YYYY-MM-DD strings.
    nesting_date: str | None = None
    machining_date: str | None = None
    assembly_date: str | None = None
    delivery_date: str | None = None

    status: str = Field(default="not-assigned")  # one of JOB_STATUSES
    comments: str | None = None

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
