"""Report jobs whose project reference is null or no longer resolves. Read-only."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from prodmgr.cli.common import base_parser, cli_session, parse
from prodmgr.core.logging import get_logger
from prodmgr.models.projects import Client
from prodmgr.services.integrity import OrphanScan, SqlJobStore, describe_orphans, scan_orphaned_jobs

logger = get_logger(__name__)


def render_scan(scan: OrphanScan, client_count: int) -> str:
    c = scan.classification
    lines = [
        "=== CHECKING FOR ORPHANED JOBS ===",
        f"Total jobs in database: {c.total}",
        f"Jobs with NULL project_id: {len(c.null_ref)}",
        f"Existing projects: {scan.project_count}",
        f"Jobs with non-existent project IDs: {len(c.orphaned)}",
    ]
    if c.has_orphans:
        lines.append("")
        lines.append("=== ORPHANED JOBS DETAILS ===")
        lines.extend(describe_orphans(c.orphaned))
    lines.append("")
    lines.append(f"Total clients in database: {client_count}")
    return "\n".join(lines)


def count_clients(session: Session) -> int:
    return session.exec(select(func.count()).select_from(Client)).one()


def main(argv: Sequence[str] | None = None) -> int:
    args = parse(base_parser("Report orphaned jobs (jobs pointing at missing projects)."), argv)
    try:
        with cli_session(args) as session:
            scan = scan_orphaned_jobs(SqlJobStore(session))
            client_count = count_clients(session)
    except SQLAlchemyError:
        logger.exception("jobs.check.failed")
        return 1
    print(render_scan(scan, client_count))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
