"""Calendar windows in UTC milliseconds for year/month selectors."""

import re
from datetime import UTC, datetime, timedelta

from household_meter.core.errors import ValidationError
from household_meter.schemas.summary import TimeWindow

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

MIN_YEAR = 1
MAX_YEAR = 9998


def to_utc_ms(moment: datetime) -> int:
    """Convert an aware datetime to integer milliseconds since the epoch."""
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def from_utc_ms(timestamp_ms: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=timestamp_ms)


def utc_now_ms() -> int:
    return to_utc_ms(datetime.now(UTC))


def period_label(timestamp_ms: int) -> str:
    """Year-month label (``YYYY-MM``) of the UTC month containing the timestamp."""
    moment = from_utc_ms(timestamp_ms)
    return f"{moment.year:04d}-{moment.month:02d}"


def month_start_ms(timestamp_ms: int) -> int:
    moment = from_utc_ms(timestamp_ms)
    return to_utc_ms(datetime(moment.year, moment.month, 1, tzinfo=UTC))


def month_window(timestamp_ms: int) -> tuple[int, int]:
    """Half-open ``[start, end)`` window of the UTC month containing the timestamp."""
    moment = from_utc_ms(timestamp_ms)
    return _month_bounds(moment.year, moment.month)


def _month_bounds(year: int, month: int) -> tuple[int, int]:
    start = datetime(year, month, 1, tzinfo=UTC)
    if month == 12:
        end = datetime(year + 1, 1, 1, tzinfo=UTC)
    else:
        end = datetime(year, month + 1, 1, tzinfo=UTC)
    return to_utc_ms(start), to_utc_ms(end)


def _parse_int(value: object) -> int | None:
    """Lenient integer parsing: take the leading signed digits, else None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def parse_year_month(year: object = None, month: object = None) -> TimeWindow:
    """
    Convert optional year/month selectors into a half-open UTC window.

    A missing or unparseable year means the current UTC year. A missing or
    out-of-range month selects the whole calendar year.
    """
    parsed_year = _parse_int(year)
    if parsed_year is None:
        parsed_year = datetime.now(UTC).year
    if not MIN_YEAR <= parsed_year <= MAX_YEAR:
        raise ValidationError(f"Year {parsed_year} is out of range.")

    parsed_month = _parse_int(month)
    if parsed_month is not None and 1 <= parsed_month <= 12:
        start, end = _month_bounds(parsed_year, parsed_month)
        return TimeWindow(
            year=parsed_year,
            month=parsed_month,
            start_timestamp=start,
            end_timestamp=end,
        )

    return TimeWindow(
        year=parsed_year,
        month=None,
        start_timestamp=to_utc_ms(datetime(parsed_year, 1, 1, tzinfo=UTC)),
        end_timestamp=to_utc_ms(datetime(parsed_year + 1, 1, 1, tzinfo=UTC)),
    )
