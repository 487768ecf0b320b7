from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError

from prodmgr.cli.common import base_parser, cli_session, parse
from prodmgr.core.logging import get_logger
from prodmgr.services.users import list_users, render_user_listing

logger = get_logger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse(base_parser("List users with status flags and a summary."), argv)
    try:
        with cli_session(args) as session:
            listing = render_user_listing(list_users(session))
    except SQLAlchemyError:
        logger.exception("users.list.failed")
        return 1
    print(listing)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
