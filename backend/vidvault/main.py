# vidvault/main.py
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from vidvault.config import settings
from vidvault.core.db import init_db, close_db
from vidvault.core.bootstrap import ensure_admin_account
from vidvault.core.errors import ServiceError, service_error_handler, unhandled_error_handler
from vidvault.core.rate_limit import limiter
from vidvault.services.auth_service import AuthService
from vidvault.services.catalog_service import CatalogService
from vidvault.services.mailer import EmailSender
from vidvault.services.user_service import UserService

from vidvault.api.v1.routers import admin, auth, health, videos

logger = logging.getLogger("uvicorn.error")

TOKEN_SWEEP_JOB_ID = "cleanup_expired_tokens"

app = FastAPI(title=settings.APP_NAME, version=settings.VERSION)

# Service graph, shared by every request through app.state (see api/v1/deps.py)
app.state.mailer = EmailSender(settings)
app.state.user_service = UserService()
app.state.auth_service = AuthService(app.state.user_service, app.state.mailer, settings)
app.state.catalog_service = CatalogService()

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Typed service failures -> {"detail": {"code", "message"}}
app.add_exception_handler(ServiceError, service_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

scheduler = AsyncIOScheduler(timezone="UTC")


async def sweep_expired_tokens() -> None:
    await app.state.auth_service.cleanup_expired_tokens()


@app.on_event("startup")
async def on_startup():
    await init_db()
    # Make sure ADMIN_EMAIL has an account on first run
    await ensure_admin_account()
    # Log whether mail can go out; never blocks startup
    await app.state.mailer.verify()

    scheduler.add_job(
        sweep_expired_tokens,
        trigger="interval",
        hours=1,
        id=TOKEN_SWEEP_JOB_ID,
        replace_existing=True,
        max_instances=1,
    )
    if not scheduler.running:
        scheduler.start()
    logger.info("[startup] %s %s ready (env=%s)", settings.SERVICE_NAME, settings.VERSION, settings.env)


@app.on_event("shutdown")
async def on_shutdown():
    if scheduler.running:
        scheduler.shutdown(wait=False)
    await close_db()


# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(videos.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")
app.include_router(health.router, prefix="/api/v1")
