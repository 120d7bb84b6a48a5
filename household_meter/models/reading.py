"""Reading database model - the central ledger."""

from decimal import Decimal

from sqlalchemy import BigInteger, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from household_meter.core.config import settings
from household_meter.core.database import Base

# Partition marker shared by every reading so one index orders them all by time
GLOBAL_PK = "ALL_READINGS"


class Reading(Base):
    """One observation of the shared household meter."""

    __tablename__ = "readings"
    __table_args__ = (Index("ix_readings_global_pk_timestamp", "global_pk", "timestamp"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)

    # Attribution
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    owner_username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    on_behalf: Mapped[bool] = mapped_column(default=False)
    username: Mapped[str | None] = mapped_column(String(255), nullable=True)  # Legacy display name

    # Meter values (using Decimal for precision)
    start_kwh: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=3))
    end_kwh: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=3))
    delta_kwh: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=3))

    notes: Mapped[str] = mapped_column(String(2000), default="")
    timestamp: Mapped[int] = mapped_column(BigInteger)  # UTC milliseconds
    global_pk: Mapped[str] = mapped_column(String(32), default=GLOBAL_PK)

    @property
    def effective_owner(self) -> str:
        """Owner for grouping: new field first, then the legacy display name."""
        return self.owner_username or self.username or settings.UNKNOWN_USERNAME
