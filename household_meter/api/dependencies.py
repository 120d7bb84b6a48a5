"""Request dependencies for cookie-based identity."""

from fastapi import Depends, Request

from household_meter.core.config import settings
from household_meter.schemas.user import Principal
from household_meter.services.auth import resolve_principal


def get_current_principal(request: Request) -> Principal:
    """Resolve the caller from the auth cookie and attach it to the request state."""
    principal = resolve_principal(request.cookies.get(settings.AUTH_COOKIE_NAME))
    request.state.principal = principal
    request.state.claims = principal.claims
    return principal


def get_current_username(principal: Principal = Depends(get_current_principal)) -> str:
    return principal.username
