from __future__ import annotations

import argparse
from collections.abc import Sequence

import requests

from prodmgr.core.config import settings
from prodmgr.core.logging import configure_logging, get_logger
from prodmgr.integrations.production_manager import ProductionManagerAPIError, ProductionManagerClient
from prodmgr.services.client_seeding import SAMPLE_CLIENTS, seed_clients

logger = get_logger(__name__)


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the sample clients through the running API.")
    parser.add_argument("--base-url", default=settings.api_base_url)
    parser.add_argument("--email", default=settings.api_email, help="Login email (default: API_EMAIL).")
    parser.add_argument("--password", default=settings.api_password, help="Login password (default: API_PASSWORD).")
    parser.add_argument("--log-level", default=settings.log_level)
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)
    if not args.email or not args.password:
        logger.error("clients.seed.missing_credentials")
        return 2

    api = ProductionManagerClient(args.base_url)
    try:
        api.login(args.email, args.password)
    except (ProductionManagerAPIError, requests.RequestException) as exc:
        logger.error("clients.seed.login_failed error=%s", exc)
        return 1

    result = seed_clients(api, SAMPLE_CLIENTS)
    for name in result.created:
        print(f"Added: {name}")
    for name, error in result.failed.items():
        print(f"Failed: {name}: {error}")
    print(f"\n{len(result.created)} created, {len(result.failed)} failed")
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
