"""Preview (default) or apply a batch of role assignments and account removals.

Example:
    prodmgr-setup-user-roles --assign owner@example.com=super_admin \
        --assign ops@example.com=admin --remove old-admin@example.com --execute
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError

from prodmgr.cli.common import base_parser, cli_session, parse
from prodmgr.core.logging import get_logger
from prodmgr.services.role_assignments import (
    PlanResolutionError,
    RoleAssignmentPlan,
    build_role_plan,
    execute_role_plan,
    parse_assignment,
)

logger = get_logger(__name__)


def _assignment(raw: str):
    try:
        return parse_assignment(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def render_plan(plan: RoleAssignmentPlan) -> str:
    lines = ["Assignment Plan:", "================"]
    lines.extend(plan.describe() or ["(nothing to do)"])
    lines.append("")
    lines.append("SQL that would be executed:")
    lines.extend(plan.sql_preview())
    return "\n".join(lines)


def main(argv: Sequence[str] | None = None) -> int:
    parser = base_parser("Plan and optionally apply user role assignments.")
    parser.add_argument("--assign", action="append", type=_assignment, default=[], metavar="EMAIL=ROLE")
    parser.add_argument("--remove", action="append", default=[], metavar="EMAIL", help="Account to delete.")
    parser.add_argument("--assigned-by", default=None, metavar="EMAIL")
    parser.add_argument("--execute", action="store_true", help="Apply the plan (default is preview only).")
    args = parse(parser, argv)

    try:
        with cli_session(args) as session:
            plan = build_role_plan(session, args.assign, args.remove, assigned_by=args.assigned_by)
            print(render_plan(plan))
            if not args.execute:
                print("\nPreview only. Re-run with --execute to apply.")
                return 0
            rows = execute_role_plan(session, plan)
    except PlanResolutionError as exc:
        logger.error("roles.plan.unresolved %s", exc)
        return 1
    except SQLAlchemyError:
        logger.exception("roles.plan.failed")
        return 1

    print("\nVerification - Current User Roles:")
    for row in rows:
        marker = " (SUPER ADMIN)" if row.is_super_admin else ""
        print(f"{row.user_email} -> {row.role_display}{marker}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
