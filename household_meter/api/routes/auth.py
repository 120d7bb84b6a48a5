"""Identity routes."""

from fastapi import APIRouter, Depends

from household_meter.api.dependencies import get_current_username
from household_meter.schemas.user import UsernameResponse

router = APIRouter(tags=["identity"])


@router.get("/username", response_model=UsernameResponse)
def get_username(username: str = Depends(get_current_username)) -> UsernameResponse:
    """Return the display name of the current principal."""
    return UsernameResponse(username=username)
