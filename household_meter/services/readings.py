"""Reading service - delta computation, attribution and the monthly rollup.

The delta is always computed against the single most recent reading across
all owners: the household shares one physical meter.

Creating a reading reads the latest row and then inserts without any lock.
Two concurrent submissions can chain from the same previous value and end up
with overlapping ranges; callers that need strict chaining must serialize
writes themselves.
"""

import logging
import math
import uuid
from decimal import Decimal

from sqlalchemy.orm import Session

from household_meter.core.config import settings
from household_meter.core.errors import AuthorizationError, NotFoundError, ValidationError
from household_meter.models.enums import ReadingStrictness
from household_meter.models.reading import GLOBAL_PK, Reading
from household_meter.schemas.reading import ReadingCreate
from household_meter.schemas.summary import AccountSummary, PeriodSummary, YearlyReport
from household_meter.services import store
from household_meter.services.aggregation import (
    build_yearly_report,
    rollup_by_user,
    summarize,
    total_for_owner,
)
from household_meter.services.kwh import round_kwh, to_decimal
from household_meter.services.time_window import (
    month_window,
    parse_year_month,
    period_label,
    utc_now_ms,
)

logger = logging.getLogger(__name__)


def compute_delta(
    previous: Reading | None,
    current_kwh: Decimal,
    strictness: ReadingStrictness | None = None,
) -> tuple[Decimal, Decimal]:
    """
    Derive ``(start_kwh, delta_kwh)`` for a new meter value.

    The start is the previous reading's end value, or zero for the first
    reading. Strict mode requires positive consumption; permissive mode also
    accepts an unchanged meter.

    Raises:
        ValidationError: If the new value does not advance the meter.
    """
    strictness = strictness or settings.READING_STRICTNESS
    start_kwh = to_decimal(previous.end_kwh) if previous is not None else Decimal("0")
    delta_kwh = round_kwh(current_kwh - start_kwh)

    rejected = delta_kwh < 0 if strictness == ReadingStrictness.PERMISSIVE else delta_kwh <= 0
    if rejected:
        relation = "at least" if strictness == ReadingStrictness.PERMISSIVE else "greater than"
        raise ValidationError(
            f"currentKWh ({current_kwh}) must be {relation} the last recorded endKWh ({start_kwh})."
        )
    return start_kwh, delta_kwh


def resolve_owner(principal: str, for_username: str | None) -> tuple[str, bool]:
    """Return ``(owner, on_behalf)`` for a submission by ``principal``."""
    target = (for_username or "").strip()
    if target and target != principal:
        return target, True
    return principal, False


def _validate_current_kwh(value: object) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, int | float | Decimal):
        raise ValidationError("Invalid or missing currentKWh value.")
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("Invalid or missing currentKWh value.")
    return to_decimal(value)


def create_reading(
    db: Session,
    principal: str,
    data: ReadingCreate,
    now_ms: int | None = None,
) -> Reading:
    """Record a new cumulative meter value for the principal or on someone's behalf."""
    current_kwh = _validate_current_kwh(data.current_kwh)

    last = store.most_recent_reading(db)
    start_kwh, delta_kwh = compute_delta(last, current_kwh)
    owner, on_behalf = resolve_owner(principal, data.for_username)

    timestamp = now_ms if now_ms is not None else utc_now_ms()
    if last is not None and timestamp <= last.timestamp:
        # Keep the timestamp order strict so "most recent" is unambiguous
        timestamp = last.timestamp + 1

    reading = store.insert_reading(
        db,
        Reading(
            id=str(uuid.uuid4()),
            created_by=principal,
            owner_username=owner,
            on_behalf=on_behalf,
            username=owner,
            start_kwh=start_kwh,
            end_kwh=current_kwh,
            delta_kwh=delta_kwh,
            notes=data.notes or "",
            timestamp=timestamp,
            global_pk=GLOBAL_PK,
        ),
    )
    logger.info(
        "Reading %s recorded by %s for %s: %s kWh",
        reading.id,
        principal,
        owner,
        delta_kwh,
    )

    if settings.MONTHLY_ROLLUP_ENABLED:
        store.upsert_monthly_aggregate(db, owner, timestamp, delta_kwh, timestamp)

    return reading


def list_readings(db: Session, year: object = None, month: object = None) -> list[Reading]:
    """Get readings in the selected year or month, newest first."""
    window = parse_year_month(year, month)
    return store.query_by_time_range(db, window.start_timestamp, window.end_timestamp)


def latest_kwh(db: Session) -> Decimal:
    """End value of the most recent reading, or zero for an empty ledger."""
    last = store.most_recent_reading(db)
    return to_decimal(last.end_kwh) if last is not None else Decimal("0")


def delete_reading(db: Session, reading_id: str | None, principal: str) -> None:
    """Delete one of the principal's readings and refresh the affected monthly total."""
    if not reading_id or not reading_id.strip():
        raise ValidationError("Missing reading id.")

    try:
        deleted = store.delete_if_owned(db, reading_id, principal)
    except (AuthorizationError, NotFoundError):
        logger.warning("Delete of reading %s by %s rejected", reading_id, principal)
        raise
    logger.info("Reading %s deleted by %s", reading_id, principal)

    if settings.MONTHLY_ROLLUP_ENABLED:
        rebuild_monthly_aggregate(db, deleted.effective_owner, deleted.timestamp)


def rebuild_monthly_aggregate(db: Session, owner: str, period_ts: int) -> Decimal:
    """Recompute the owner's total for the month containing ``period_ts`` from raw readings."""
    start, end = month_window(period_ts)
    total = total_for_owner(store.query_by_time_range(db, start, end), owner)
    store.set_monthly_aggregate(db, owner, period_ts, total, utc_now_ms())
    return total


def rebuild_all_monthly_aggregates(db: Session) -> int:
    """Recompute every owner/month total. Returns the number of rows written."""
    seen: dict[tuple[str, str], int] = {}
    for reading in store.query_all_readings(db):
        seen.setdefault((reading.effective_owner, period_label(reading.timestamp)), reading.timestamp)

    for (owner, _period), period_ts in seen.items():
        rebuild_monthly_aggregate(db, owner, period_ts)
    return len(seen)


def account_summary(
    db: Session,
    username: str,
    year: object = None,
    month: object = None,
) -> AccountSummary:
    """
    Monthly total for an owner.

    The period is the month of the selected window's start, so a year-only
    selector reports January. A missing cache row is recomputed from raw
    readings and stored when there is something to store.
    """
    if not username or not username.strip():
        raise ValidationError("Missing username.")

    window = parse_year_month(year, month)
    period = period_label(window.start_timestamp)

    total = store.get_monthly_aggregate(db, username, period)
    if total is None:
        start, end = month_window(window.start_timestamp)
        total = total_for_owner(store.query_by_time_range(db, start, end), username)
        if total and settings.MONTHLY_ROLLUP_ENABLED:
            store.set_monthly_aggregate(db, username, window.start_timestamp, total, utc_now_ms())

    return AccountSummary(username=username, period=period, total_kwh=total)


def period_summary(db: Session, year: object = None, month: object = None) -> PeriodSummary:
    """Per-user consumption for the selected year or month."""
    window = parse_year_month(year, month)
    readings = store.query_by_time_range(db, window.start_timestamp, window.end_timestamp)
    return PeriodSummary(
        year=window.year,
        month=window.month,
        start_timestamp=window.start_timestamp,
        end_timestamp=window.end_timestamp,
        summary=summarize(readings),
        users=rollup_by_user(readings),
    )


def yearly_report(db: Session, year: object = None) -> YearlyReport:
    """Data for the yearly consumption report."""
    window = parse_year_month(year, None)
    readings = store.query_by_time_range(db, window.start_timestamp, window.end_timestamp)
    readings.reverse()  # chronological
    return build_yearly_report(readings, window.year, utc_now_ms())
