from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from prodmgr.api.deps import require_debug_token
from prodmgr.core.logging import get_logger
from prodmgr.db.session import get_session
from prodmgr.models.projects import Client

router = APIRouter(prefix="/debug", tags=["debug"], dependencies=[Depends(require_debug_token)])
logger = get_logger(__name__)

DEBUG_CLIENT_LIMIT = 10


@router.get("/tables")
def list_tables(session: Session = Depends(get_session)) -> dict[str, list[str]]:
    try:
        tables = sorted(inspect(session.connection()).get_table_names())
    except SQLAlchemyError as exc:
        logger.error("debug.tables.error error=%s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch tables") from exc
    return {"tables": tables}


@router.get("/table/{name}")
def describe_table(name: str, session: Session = Depends(get_session)) -> dict[str, Any]:
    try:
        inspector = inspect(session.connection())
        if name not in inspector.get_table_names():
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Table not found")
        columns = [
            {
                "column_name": c["name"],
                "data_type": str(c["type"]),
                "is_nullable": "YES" if c.get("nullable", True) else "NO",
                "column_default": c.get("default"),
            }
            for c in inspector.get_columns(name)
        ]
    except SQLAlchemyError as exc:
        logger.error("debug.table.error table=%s error=%s", name, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch table structure"
        ) from exc
    return {"table": name, "columns": columns}


@router.get("/clients")
def list_clients_raw(session: Session = Depends(get_session)) -> dict[str, Any]:
    try:
        clients = session.exec(select(Client).order_by(col(Client.id).asc()).limit(DEBUG_CLIENT_LIMIT)).all()
    except SQLAlchemyError as exc:
        logger.error("debug.clients.error error=%s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to fetch clients") from exc
    return {"count": len(clients), "clients": [c.model_dump(mode="json") for c in clients]}
