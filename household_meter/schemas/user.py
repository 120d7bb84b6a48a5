"""Identity schemas."""

from typing import Any

from pydantic import BaseModel


class Principal(BaseModel):
    """The authenticated caller, resolved from an upstream-validated token."""

    username: str
    claims: dict[str, Any]


class UsernameResponse(BaseModel):
    username: str
