"""Error taxonomy shared by services and mapped to HTTP responses in main."""

from fastapi import status


class MeterError(Exception):
    """Base class for errors surfaced to API clients as ``{message, error}``."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, error: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error = error

    def to_body(self) -> dict[str, str]:
        body = {"message": self.message}
        if self.error:
            body["error"] = self.error
        return body


class AuthenticationError(MeterError):
    """Missing or malformed identity token."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ValidationError(MeterError):
    """Malformed or semantically invalid input."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthorizationError(MeterError):
    """The record exists but the requester may not act on it."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(MeterError):
    status_code = status.HTTP_404_NOT_FOUND


class StoreError(MeterError):
    """Infrastructure failure in the persistence layer."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
