"""Roll readings up into per-user, per-month and overall consumption figures.

Everything here is pure: callers pass in readings they already fetched. Each
reading's delta goes through ``round_kwh`` before summing and every output is
rounded with the same rule, so totals reproduce from the stored deltas.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from decimal import Decimal

from household_meter.models.reading import Reading
from household_meter.schemas.summary import (
    MonthRollup,
    ReadingsSummary,
    ReportRow,
    UserRollup,
    YearlyReport,
)
from household_meter.services.kwh import round_kwh, to_decimal
from household_meter.services.time_window import from_utc_ms

MONTHS = [f"{m:02d}" for m in range(1, 13)]


def _delta(reading: Reading) -> Decimal:
    return round_kwh(to_decimal(reading.delta_kwh))


def _average(total: Decimal, count: int) -> Decimal:
    if count == 0:
        return Decimal("0")
    return round_kwh(total / count)


def total_for_owner(readings: Iterable[Reading], owner: str) -> Decimal:
    """Sum of deltas attributed to one owner."""
    total = sum((_delta(r) for r in readings if r.effective_owner == owner), Decimal("0"))
    return round_kwh(total)


def rollup_by_user(readings: Iterable[Reading]) -> list[UserRollup]:
    """Group readings by effective owner with sum, count, min, max and average."""
    groups: dict[str, list[Decimal]] = defaultdict(list)
    for reading in readings:
        groups[reading.effective_owner].append(_delta(reading))

    rollups = []
    for username in sorted(groups):
        deltas = groups[username]
        total = sum(deltas, Decimal("0"))
        rollups.append(
            UserRollup(
                username=username,
                total_kwh=round_kwh(total),
                count=len(deltas),
                min_kwh=min(deltas),
                max_kwh=max(deltas),
                avg_kwh=_average(total, len(deltas)),
            )
        )
    return rollups


def rollup_by_month_and_user(
    readings: Iterable[Reading],
    users: Sequence[str] | None = None,
) -> list[MonthRollup]:
    """
    Twelve rows of per-owner totals, one per UTC calendar month.

    Every row carries a value for every user (zero when the user recorded
    nothing that month). ``users`` defaults to the owners found in the set.
    """
    readings = list(readings)
    if users is None:
        users = sorted({r.effective_owner for r in readings})

    sums: dict[str, dict[str, Decimal]] = {m: defaultdict(Decimal) for m in MONTHS}
    for reading in readings:
        month = f"{from_utc_ms(reading.timestamp).month:02d}"
        sums[month][reading.effective_owner] += _delta(reading)

    return [
        MonthRollup(
            month=month,
            totals={user: round_kwh(sums[month].get(user, Decimal("0"))) for user in users},
        )
        for month in MONTHS
    ]


def summarize(readings: Iterable[Reading]) -> ReadingsSummary:
    """Total, count, average per reading and the covered time span."""
    total = Decimal("0")
    count = 0
    first: int | None = None
    last: int | None = None

    for reading in readings:
        total += _delta(reading)
        count += 1
        first = reading.timestamp if first is None else min(first, reading.timestamp)
        last = reading.timestamp if last is None else max(last, reading.timestamp)

    return ReadingsSummary(
        total_kwh=round_kwh(total),
        count=count,
        avg_per_reading=_average(total, count),
        first_timestamp=first,
        last_timestamp=last,
    )


def report_rows(readings: Iterable[Reading]) -> list[ReportRow]:
    """Detail lines ordered by owner, then chronologically."""
    ordered = sorted(readings, key=lambda r: (r.effective_owner, r.timestamp))
    return [
        ReportRow(
            username=r.effective_owner,
            timestamp=r.timestamp,
            start_kwh=round_kwh(to_decimal(r.start_kwh)),
            end_kwh=round_kwh(to_decimal(r.end_kwh)),
            delta_kwh=_delta(r),
            notes=" ".join((r.notes or "").split()),
            created_by=r.created_by,
            on_behalf=bool(r.on_behalf),
        )
        for r in ordered
    ]


def build_yearly_report(readings: Iterable[Reading], year: int, generated_at: int) -> YearlyReport:
    readings = list(readings)
    users = rollup_by_user(readings)
    return YearlyReport(
        year=year,
        generated_at=generated_at,
        summary=summarize(readings),
        users=users,
        months=rollup_by_month_and_user(readings, [u.username for u in users]),
        rows=report_rows(readings),
    )
