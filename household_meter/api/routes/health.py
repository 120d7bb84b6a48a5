"""Health check route."""

from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
def health_check() -> dict[str, str]:
    """Liveness probe; does not require authentication."""
    return {"status": "healthy", "service": "household-meter"}
