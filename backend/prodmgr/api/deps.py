from __future__ import annotations

import hmac

from fastapi import Header, HTTPException, status

from prodmgr.core.config import settings


def require_debug_token(authorization: str | None = Header(default=None)) -> None:
    expected = settings.debug_token
    scheme, _, token = (authorization or "").partition(" ")
    if not expected or scheme.lower() != "bearer" or not hmac.compare_digest(token.strip().encode(), expected.encode()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing token")
