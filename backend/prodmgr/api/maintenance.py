from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from prodmgr.api.deps import require_debug_token
from prodmgr.core.logging import get_logger
from prodmgr.db.session import get_session
from prodmgr.schemas.integrity import OrphanedJobRead, OrphanedJobsReport
from prodmgr.services.integrity import SqlJobStore, scan_orphaned_jobs

router = APIRouter(prefix="/maintenance", tags=["maintenance"], dependencies=[Depends(require_debug_token)])
logger = get_logger(__name__)


@router.get("/orphaned-jobs", response_model=OrphanedJobsReport)
def orphaned_jobs_report(session: Session = Depends(get_session)) -> OrphanedJobsReport:
    try:
        scan = scan_orphaned_jobs(SqlJobStore(session))
    except SQLAlchemyError as exc:
        logger.error("maintenance.orphaned_jobs.error error=%s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to scan jobs"
        ) from exc

    c = scan.classification
    return OrphanedJobsReport(
        total_jobs=c.total,
        null_project_jobs=len(c.null_ref),
        valid_jobs=len(c.valid),
        project_count=scan.project_count,
        orphaned_count=len(c.orphaned),
        orphaned=[OrphanedJobRead(id=j.id, project_id=j.project_id, items=j.items) for j in c.orphaned],
    )
