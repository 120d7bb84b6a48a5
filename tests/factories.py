"""Token and reading factories for tests."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from jose import jwt

from household_meter.models.reading import GLOBAL_PK, Reading
from household_meter.services.time_window import to_utc_ms


def make_token(username: str | None = None, claims: dict | None = None) -> str:
    """Mint a token shaped like the access proxy's, signed with a throwaway key."""
    if claims is None:
        claims = {"email": f"{username}@example.com", "custom": {"family_name": username}}
    return jwt.encode(claims, "not-verified-here", algorithm="HS256")


def ms(year: int, month: int, day: int = 1, hour: int = 0, minute: int = 0) -> int:
    return to_utc_ms(datetime(year, month, day, hour, minute, tzinfo=UTC))


def make_reading(
    owner: str | None,
    delta: str,
    timestamp: int,
    created_by: str | None = None,
    username: str | None = None,
    start: str = "0",
    notes: str = "",
) -> Reading:
    """Build a transient reading with explicit values (bypasses delta rules)."""
    start_kwh = Decimal(start)
    delta_kwh = Decimal(delta)
    return Reading(
        id=str(uuid.uuid4()),
        created_by=created_by,
        owner_username=owner,
        on_behalf=bool(created_by and owner and created_by != owner),
        username=username if username is not None else owner,
        start_kwh=start_kwh,
        end_kwh=start_kwh + delta_kwh,
        delta_kwh=delta_kwh,
        notes=notes,
        timestamp=timestamp,
        global_pk=GLOBAL_PK,
    )
