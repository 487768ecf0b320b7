from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import requests

from prodmgr.core.logging import get_logger
from prodmgr.integrations.production_manager import ProductionManagerAPIError, ProductionManagerClient
from prodmgr.schemas.clients import ClientCreate

logger = get_logger(__name__)

SAMPLE_CLIENTS: tuple[ClientCreate, ...] = (
    ClientCreate(
        name="ACME Corp",
        company="ACME Corporation",
        email="info@acmecorp.com.au",
        phone="02 9123 4567",
        address="123 Business Street, Sydney NSW 2000",
        contact_person="John Smith",
    ),
    ClientCreate(
        name="Metro Builds",
        company="Metropolitan Builders Pty Ltd",
        email="projects@metrobuilds.com.au",
        phone="03 8765 4321",
        address="456 Construction Ave, Melbourne VIC 3000",
        contact_person="Sarah Johnson",
    ),
    ClientCreate(
        name="Coast Homes",
        company="Coastal Home Developments",
        email="hello@coasthomes.com.au",
        phone="07 5555 1234",
        address="789 Beachside Blvd, Gold Coast QLD 4217",
        contact_person="Mike Wilson",
    ),
    ClientCreate(
        name="Urban Living",
        company="Urban Living Solutions",
        email="contact@urbanliving.com.au",
        phone="08 9876 5432",
        address="321 City Plaza, Perth WA 6000",
        contact_person="Emma Davis",
    ),
    ClientCreate(
        name="Heritage Builders",
        company="Heritage Construction Group",
        email="admin@heritage.com.au",
        phone="02 6789 1234",
        address="654 Historic Lane, Canberra ACT 2600",
        contact_person="David Brown",
    ),
)


@dataclass
class SeedResult:
    created: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def seed_clients(api: ProductionManagerClient, clients: Iterable[ClientCreate] = SAMPLE_CLIENTS) -> SeedResult:
    """Create each client through the API; one failure never stops the rest."""
    result = SeedResult()
    for client in clients:
        try:
            api.create_client(client)
        except ProductionManagerAPIError as exc:
            logger.warning("clients.seed.rejected name=%s status=%s error=%s", client.name, exc.status_code, exc.error)
            detail = exc.error if exc.details is None else f"{exc.error} ({exc.details})"
            result.failed[client.name] = detail
            continue
        except requests.RequestException as exc:
            logger.warning("clients.seed.network_error name=%s error=%s", client.name, str(exc))
            result.failed[client.name] = f"network error: {exc}"
            continue
        logger.info("clients.seed.created name=%s", client.name)
        result.created.append(client.name)
    return result
