"""Identity resolution from upstream-validated JWTs."""

import logging
from collections.abc import Mapping
from typing import Any

from jose import JWTError, jwt

from household_meter.core.config import settings
from household_meter.core.errors import AuthenticationError
from household_meter.schemas.user import Principal

logger = logging.getLogger(__name__)


def decode_token(token: object) -> dict[str, Any]:
    """
    Decode a token's claims without verifying its signature.

    Signature verification happens upstream (the access proxy that sets the
    cookie), so only the structure is checked here.

    Raises:
        AuthenticationError: If the token is missing, not a string, or does
            not decode to a JSON object.
    """
    if not token or not isinstance(token, str):
        raise AuthenticationError("Authentication required: No token provided or invalid type.")

    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as exc:
        logger.warning("Rejected undecodable token: %s", exc)
        raise AuthenticationError("Authentication failed: Invalid token.") from exc

    if not isinstance(claims, Mapping):
        raise AuthenticationError("Authentication failed: Invalid token structure.")
    return dict(claims)


def extract_username(claims: Mapping[str, Any], claim_path: str | None = None) -> str:
    """Follow a dotted claim path (e.g. ``custom.family_name``) to the display name."""
    path = claim_path or settings.USERNAME_CLAIM_PATH
    value: Any = claims
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return settings.UNKNOWN_USERNAME
        value = value.get(part)

    if isinstance(value, str) and value.strip():
        return value
    return settings.UNKNOWN_USERNAME


def resolve_principal(token: object) -> Principal:
    claims = decode_token(token)
    return Principal(username=extract_username(claims), claims=claims)
