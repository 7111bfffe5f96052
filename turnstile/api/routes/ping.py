from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Ping"])


@router.get("/ping")
def ping() -> dict:
    """Minimal rate limited endpoint.

    Useful to inspect the ``X-RateLimit-*`` headers a client receives.
    """

    return {"pong": True}
