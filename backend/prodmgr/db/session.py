from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from prodmgr.core.config import settings


def build_engine(database_url: str | None = None, **kwargs: object) -> Engine:
    url = database_url or settings.database_url
    connect_args = kwargs.pop("connect_args", None) or {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, **connect_args}
    return create_engine(url, connect_args=connect_args, **kwargs)


engine = build_engine()


def init_db(bind: Engine | None = None) -> None:
    # Import models so every table is registered on the metadata.
    import prodmgr.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@contextmanager
def session_scope(bind: Engine | None = None) -> Iterator[Session]:
    """Session for one-off operator scripts; closed on exit, never auto-committed."""
    session = Session(bind or engine)
    try:
        yield session
    finally:
        session.close()
