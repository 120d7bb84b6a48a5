"""Per-account monthly totals."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from household_meter.api.dependencies import get_current_principal
from household_meter.core.database import get_db
from household_meter.schemas.summary import AccountSummary
from household_meter.services import readings as reading_service

router = APIRouter(
    prefix="/accounts",
    tags=["accounts"],
    dependencies=[Depends(get_current_principal)],
)


@router.get("/{username}/summary", response_model=AccountSummary)
def get_account_summary(
    username: str,
    year: str | None = Query(None),
    month: str | None = Query(None),
    db: Session = Depends(get_db),
) -> AccountSummary:
    """Get an account's total consumption for one month."""
    return reading_service.account_summary(db, username, year, month)
