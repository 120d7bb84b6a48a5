"""Schemas for time windows, rollups and reports."""

from pydantic import BaseModel, Field


class TimeWindow(BaseModel):
    """Half-open UTC interval ``[start_timestamp, end_timestamp)`` in milliseconds."""

    year: int
    month: int | None = None
    start_timestamp: int = Field(serialization_alias="startTimestamp")
    end_timestamp: int = Field(serialization_alias="endTimestamp")


class UserRollup(BaseModel):
    """Consumption statistics for one owner."""

    username: str
    total_kwh: float = Field(serialization_alias="totalKWh")
    count: int
    min_kwh: float = Field(serialization_alias="minKWh")
    max_kwh: float = Field(serialization_alias="maxKWh")
    avg_kwh: float = Field(serialization_alias="avgKWh")


class MonthRollup(BaseModel):
    """Per-owner totals for one calendar month (``01``..``12``)."""

    month: str
    totals: dict[str, float]


class ReadingsSummary(BaseModel):
    """Totals across a whole set of readings."""

    total_kwh: float = Field(serialization_alias="totalKWh")
    count: int
    avg_per_reading: float = Field(serialization_alias="avgPerReading")
    first_timestamp: int | None = Field(default=None, serialization_alias="firstTimestamp")
    last_timestamp: int | None = Field(default=None, serialization_alias="lastTimestamp")


class PeriodSummary(BaseModel):
    """Per-user consumption for a year or month window."""

    year: int
    month: int | None
    start_timestamp: int = Field(serialization_alias="startTimestamp")
    end_timestamp: int = Field(serialization_alias="endTimestamp")
    summary: ReadingsSummary
    users: list[UserRollup]


class ReportRow(BaseModel):
    """Detail line of the yearly report."""

    username: str
    timestamp: int
    start_kwh: float = Field(serialization_alias="startKWh")
    end_kwh: float = Field(serialization_alias="endKWh")
    delta_kwh: float = Field(serialization_alias="deltaKWh")
    notes: str
    created_by: str | None = Field(serialization_alias="createdBy")
    on_behalf: bool = Field(serialization_alias="onBehalf")


class YearlyReport(BaseModel):
    """Everything a yearly report renderer needs."""

    year: int
    generated_at: int = Field(serialization_alias="generatedAt")
    summary: ReadingsSummary
    users: list[UserRollup]
    months: list[MonthRollup]
    rows: list[ReportRow]


class AccountSummary(BaseModel):
    """Monthly total for one owner."""

    username: str
    period: str
    total_kwh: float = Field(serialization_alias="totalKWh")
