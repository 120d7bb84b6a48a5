"""kWh value helpers shared by delta computation and aggregation."""

from decimal import ROUND_HALF_UP, Decimal

from household_meter.core.config import settings


def to_decimal(value: object) -> Decimal:
    """Coerce a stored or submitted kWh value to Decimal; missing values count as zero."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_kwh(value: Decimal, step: Decimal | None = None) -> Decimal:
    """
    Round half-up to the nearest multiple of the configured step.

    With the default step of 0.001 this is rounding to three decimal places;
    a step of 0.5 or 0.1 gives the coarser household display rule.
    """
    step = step if step is not None else settings.KWH_ROUNDING_STEP
    units = (to_decimal(value) / step).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return (units * step).quantize(step)
