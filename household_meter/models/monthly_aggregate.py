"""MonthlyAggregate database model - a recomputable per-owner monthly total."""

from decimal import Decimal

from sqlalchemy import BigInteger, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from household_meter.core.database import Base


def aggregate_key(owner: str, period: str) -> str:
    """Row key for an owner's monthly total, e.g. ``ACCOUNT#alice#2024-03``."""
    return f"ACCOUNT#{owner}#{period}"


class MonthlyAggregate(Base):
    """Running kWh total for one owner and calendar month (cache, not source of truth)."""

    __tablename__ = "monthly_aggregates"

    id: Mapped[str] = mapped_column(String(300), primary_key=True)
    username: Mapped[str] = mapped_column(String(255), index=True)
    period: Mapped[str] = mapped_column(String(7))  # YYYY-MM
    total_kwh: Mapped[Decimal] = mapped_column(Numeric(precision=14, scale=3), default=Decimal("0"))
    timestamp: Mapped[int] = mapped_column(BigInteger)  # Month start, UTC milliseconds
    updated_at: Mapped[int] = mapped_column(BigInteger)  # UTC milliseconds
    global_pk: Mapped[str] = mapped_column(String(300))
