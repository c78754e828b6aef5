"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/llm", status_code=status.HTTP_200_OK)
def health_llm() -> dict:
    """Check on demand whether the Gemini credential is configured and accepted."""
    from ...services.llm.client import check_readiness

    try:
        return {"service": "gemini", **check_readiness()}
    except Exception as e:
        return {"service": "gemini", "configured": False, "reachable": False, "error": str(e)}
