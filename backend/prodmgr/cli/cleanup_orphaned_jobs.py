"""Delete jobs whose project reference no longer resolves."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError

from prodmgr.cli.common import base_parser, cli_session, parse
from prodmgr.core.logging import get_logger
from prodmgr.services.integrity import CleanupResult, IntegrityCheckError, SqlJobStore, cleanup_orphaned_jobs

logger = get_logger(__name__)


def render_result(result: CleanupResult) -> str:
    verb = "Would delete" if result.dry_run else "Deleted"
    if result.wiped_all:
        head = f"{verb} all {result.deleted_count} jobs (no projects exist)"
    else:
        head = f"{verb} {result.deleted_count} orphaned jobs"
    lines = ["=== CLEANING UP ORPHANED JOBS ===", head]
    if result.deleted_ids:
        lines.append(f"Job IDs: {', '.join(str(i) for i in result.deleted_ids)}")
    lines.append(f"Remaining jobs: {result.remaining_count}")
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    parser = base_parser("Delete jobs that reference projects which no longer exist.")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be deleted without deleting.")
    parser.add_argument(
        "--allow-wipe",
        action="store_true",
        help="When no projects exist at all, delete every job (refused otherwise).",
    )
    args = parse(parser, argv)
    try:
        with cli_session(args) as session:
            result = cleanup_orphaned_jobs(SqlJobStore(session), allow_wipe=args.allow_wipe, dry_run=args.dry_run)
    except IntegrityCheckError as exc:
        logger.error("jobs.cleanup.aborted error=%s", exc)
        return 1
    except SQLAlchemyError:
        logger.exception("jobs.cleanup.failed")
        return 1
    print(render_result(result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
