from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Exempt from rate limiting by default (``RATE_LIMIT_EXEMPT_PATHS``) so load
    balancer probes never consume client budgets.

    Returns:
        dict: A dictionary with a single "status" key set to "ok".
    """

    return {"status": "ok"}
