from __future__ import annotations

from typing import Any

import requests

from prodmgr.schemas.clients import ClientCreate


class ProductionManagerAPIError(Exception):
    def __init__(self, status_code: int, error: str, details: Any = None):
        self.status_code = status_code
        self.error = error
        self.details = details
        super().__init__(f"{status_code}: {error}")


class ProductionManagerClient:
    """Thin client for the running production-manager HTTP API."""

    def __init__(self, base_url: str, token: str | None = None, *, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.http = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _post(self, path: str, payload: dict[str, Any], *, timeout_s: float) -> dict[str, Any]:
        r = self.http.post(f"{self.base_url}{path}", headers=self._headers(), json=payload, timeout=timeout_s)
        try:
            body = r.json()
        except ValueError:
            body = {}
        if not r.ok:
            error = body.get("error") if isinstance(body, dict) else None
            details = body.get("details") if isinstance(body, dict) else None
            raise ProductionManagerAPIError(r.status_code, error or r.reason or "request failed", details)
        return body if isinstance(body, dict) else {"data": body}

    def login(self, email: str, password: str, *, timeout_s: float = 10.0) -> str:
        body = self._post("/api/auth/login", {"email": email, "password": password}, timeout_s=timeout_s)
        token = body.get("token")
        if not token:
            raise ProductionManagerAPIError(200, "login response did not include a token")
        self.token = token
        return token

    def create_client(self, payload: ClientCreate, *, timeout_s: float = 10.0) -> dict[str, Any]:
        return self._post("/api/clients", payload.to_api_payload(), timeout_s=timeout_s)
