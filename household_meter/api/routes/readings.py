"""Reading routes for ledger operations."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from household_meter.api.dependencies import get_current_principal, get_current_username
from household_meter.core.database import get_db
from household_meter.schemas.reading import (
    LatestKWhResponse,
    ReadingCreate,
    ReadingCreated,
    ReadingResponse,
)
from household_meter.schemas.summary import PeriodSummary
from household_meter.services import readings as reading_service

router = APIRouter(tags=["readings"], dependencies=[Depends(get_current_principal)])


@router.get("/readings", response_model=list[ReadingResponse])
def list_readings(
    year: str | None = Query(None, description="Calendar year, defaults to the current year"),
    month: str | None = Query(None, description="Month 1-12; omit for the whole year"),
    db: Session = Depends(get_db),
) -> list[ReadingResponse]:
    """List readings in a year or month, newest first."""
    readings = reading_service.list_readings(db, year, month)
    return [ReadingResponse.model_validate(r) for r in readings]


@router.post(
    "/readings",
    response_model=ReadingCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_reading(
    reading_data: ReadingCreate,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
) -> ReadingCreated:
    """
    Record the current meter value.

    The previous value and the delta are derived from the most recent reading.
    Set ``forUsername`` to attribute the reading to another household member.
    """
    reading = reading_service.create_reading(db, username, reading_data)
    return ReadingCreated(reading=ReadingResponse.model_validate(reading))


@router.get("/readings/summary", response_model=PeriodSummary)
def get_period_summary(
    year: str | None = Query(None),
    month: str | None = Query(None),
    db: Session = Depends(get_db),
) -> PeriodSummary:
    """Per-user consumption for a year or month."""
    return reading_service.period_summary(db, year, month)


@router.delete("/readings/{reading_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reading(
    reading_id: str,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
) -> Response:
    """Delete a reading. Only its creator may delete it."""
    reading_service.delete_reading(db, reading_id, username)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/latest-kwh", response_model=LatestKWhResponse)
def get_latest_kwh(db: Session = Depends(get_db)) -> LatestKWhResponse:
    """Get the most recent meter value (0 when nothing has been recorded)."""
    return LatestKWhResponse(latest_end_kwh=reading_service.latest_kwh(db))
