"""
Bootstrap module for application initialization.
Handles initial setup tasks such as creating the admin account on first startup.
"""
import logging

from vidvault.config import settings
from vidvault.models.user import User
from vidvault.services.user_service import normalize_email

logger = logging.getLogger("uvicorn.error")


async def ensure_admin_account() -> None:
    """
    Make sure the account named by ADMIN_EMAIL exists and is active.
    Does nothing when ADMIN_EMAIL is not set.

    Note: whether that account may use admin routes is decided by ADMIN_EMAILS.
    """
    if not settings.admin_email:
        return

    email = normalize_email(settings.admin_email)
    user = await User.get_or_none(email=email)
    if user is None:
        user = await User.create(email=email, first_name="Admin")
        logger.warning("[bootstrap] Created admin account -> email=%s id=%s", user.email, user.id)
    elif not user.is_active:
        user.is_active = True
        await user.save(update_fields=["is_active", "updated_at"])
        logger.warning("[bootstrap] Reactivated admin account -> email=%s", user.email)

    if settings.admin_emails and email not in settings.admin_emails:
        logger.warning("[bootstrap] ADMIN_EMAIL %s is not listed in ADMIN_EMAILS", email)
