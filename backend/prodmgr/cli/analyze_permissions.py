from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError

from prodmgr.cli.common import base_parser, cli_session, parse
from prodmgr.core.logging import get_logger
from prodmgr.services.permissions_report import load_permission_report, render_permission_report

logger = get_logger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse(base_parser("Print permissions, roles and who holds them."), argv)
    try:
        with cli_session(args) as session:
            report = load_permission_report(session)
    except SQLAlchemyError:
        logger.exception("permissions.report.failed")
        return 1
    print(render_permission_report(report))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
