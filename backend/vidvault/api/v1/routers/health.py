# vidvault/api/v1/routers/health.py
import time

from fastapi import APIRouter

from vidvault.config import settings
from vidvault.core.db import ping_db
from vidvault.core.policies import utc_now

router = APIRouter(prefix="/health", tags=["health"])

_STARTED_AT = time.monotonic()


@router.get("")
async def health():
    """Liveness plus a database round trip. Always 200; check `status`."""
    db_ok = await ping_db()
    return {
        "status": "ok" if db_ok else "degraded",
        "timestamp": utc_now().isoformat(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "environment": settings.env,
        "version": settings.VERSION,
        "service": settings.SERVICE_NAME,
        "database": "up" if db_ok else "down",
        "mail": "configured" if settings.mail_configured else "not_configured",
    }


@router.get("/ping")
async def ping():
    return {"message": "pong", "timestamp": utc_now().isoformat()}
