"""Report data routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from household_meter.api.dependencies import get_current_principal
from household_meter.core.database import get_db
from household_meter.schemas.summary import YearlyReport
from household_meter.services import readings as reading_service

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
    dependencies=[Depends(get_current_principal)],
)


@router.get("/yearly", response_model=YearlyReport)
def get_yearly_report(
    year: str | None = Query(None, description="Calendar year, defaults to the current year"),
    db: Session = Depends(get_db),
) -> YearlyReport:
    """
    Get the yearly report data.

    Includes the overall summary, per-user statistics, a twelve-month
    per-user table and every reading ordered by user and time.
    """
    return reading_service.yearly_report(db, year)
