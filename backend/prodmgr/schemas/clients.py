from __future__ import annotations

from sqlmodel import SQLModel


class ClientCreate(SQLModel):
    name: str
    company: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    abn: str | None = None
    contact_person: str | None = None
    notes: str | None = None

    def to_api_payload(self) -> dict[str, str]:
        """Body for `POST /api/clients`; the API speaks camelCase and drops unset fields."""
        data = self.model_dump(exclude_none=True)
        if "contact_person" in data:
            data["contactPerson"] = data.pop("contact_person")
        return data
