from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp for the `timestamp with time zone` columns."""
    return datetime.now(UTC)
