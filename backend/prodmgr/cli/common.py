from __future__ import annotations

import argparse
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlmodel import Session

from prodmgr.core.config import settings
from prodmgr.core.logging import configure_logging
from prodmgr.db.session import build_engine, session_scope


def base_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--database-url",
        default=None,
        help="Override DATABASE_URL for this run.",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s).")
    return parser


def parse(parser: argparse.ArgumentParser, argv: Sequence[str] | None) -> argparse.Namespace:
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    return args


@contextmanager
def cli_session(args: argparse.Namespace) -> Iterator[Session]:
    bind: Engine | None = build_engine(args.database_url) if args.database_url else None
    try:
        with session_scope(bind) as session:
            yield session
    finally:
        if bind is not None:
            bind.dispose()
