"""
Services Module

Business logic behind the HTTP routes:
- Mail delivery (SMTP)
- User directory
- Authentication (e-mail login codes, session credentials)
- Video catalog and entitlements
"""

from .mailer import EmailSender, MailDeliveryError
from .user_service import UserService, normalize_email
from .auth_service import AuthService
from .catalog_service import CatalogService, VideoFilter

__all__ = [
    "EmailSender",
    "MailDeliveryError",
    "UserService",
    "normalize_email",
    "AuthService",
    "CatalogService",
    "VideoFilter",
]
