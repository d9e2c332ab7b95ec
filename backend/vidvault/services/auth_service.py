"""
E-mail one-time-code authentication.

Flow: request_token -> code mailed to the user -> validate_token -> signed session
credential. Codes are 6 uppercase alphanumerics, valid for 10 minutes, single use.
"""
import datetime as dt
import logging
import secrets
import string

from vidvault.config import Settings, settings as default_settings
from vidvault.core.errors import (
    NotFound,
    RateLimited,
    SendFailure,
    ServiceError,
    Unauthorized,
)
from vidvault.core.policies import token_is_valid, utc_now
from vidvault.core.security import create_access_token
from vidvault.models.token import Token, TokenPurpose
from vidvault.models.user import User
from vidvault.services.mailer import EmailSender, MailDeliveryError
from vidvault.services.user_service import UserService, normalize_email

logger = logging.getLogger("uvicorn.error")

CODE_LENGTH = 6
CODE_ALPHABET = string.ascii_uppercase + string.digits
TOKEN_TTL = dt.timedelta(minutes=10)
RATE_WINDOW = dt.timedelta(minutes=5)
RATE_MAX_REQUESTS = 3


def generate_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


class AuthService:
    def __init__(self, users: UserService, mailer: EmailSender,
                 settings: Settings = default_settings):
        self.users = users
        self.mailer = mailer
        self.settings = settings

    # ------------------------------------------------------------------
    # Login code issuance
    # ------------------------------------------------------------------
    async def request_token(self, email: str, ip_address: str | None = None,
                            user_agent: str | None = None) -> dict:
        """
        Issue a login code for `email` and mail it.

        Raises:
            RateLimited: 3+ codes requested for this email in the last 5 minutes
            SendFailure: mail delivery failed (production mode only; otherwise the
                         code is logged and the request succeeds)
            ServiceError: anything unexpected, logged with stack
        """
        email = normalize_email(email)
        try:
            await self._check_rate_limit(email)

            user = await self.users.find_or_create_by_email(email)
            if not user.is_active:
                logger.info("[auth] token requested for deactivated account %s; nothing sent", email)
                return self._confirmation(email)

            await self._invalidate_outstanding(user, TokenPurpose.LOGIN)

            code = generate_code()
            await Token.create(
                user=user,
                code=code,
                purpose=TokenPurpose.LOGIN,
                expires_at=utc_now() + TOKEN_TTL,
                ip_address=ip_address,
                user_agent=user_agent[:500] if user_agent else None,
            )

            await self._deliver(user.email, code)
        except ServiceError:
            raise
        except Exception:
            logger.exception("[auth] token request failed for %s", email)
            raise ServiceError("Could not process token request", code="TOKEN_REQUEST_FAILED")

        logger.info("[auth] login code issued for %s from %s", email, ip_address)
        return self._confirmation(email)

    @staticmethod
    def _confirmation(email: str) -> dict:
        return {"message": "Access code sent to your email", "email": email}

    async def _deliver(self, email: str, code: str) -> None:
        try:
            await self.mailer.send_login_token(email, code)
        except MailDeliveryError:
            if self.settings.is_production:
                raise SendFailure()
            logger.warning("[auth] mail delivery failed (env=%s); login code for %s is %s",
                           self.settings.env, email, code)

    async def _check_rate_limit(self, email: str) -> None:
        since = utc_now() - RATE_WINDOW
        recent = await Token.filter(user__email=email, created_at__gte=since).count()
        if recent >= RATE_MAX_REQUESTS:
            logger.warning("[auth] rate limit hit for %s (%d codes in window)", email, recent)
            raise RateLimited()

    async def _invalidate_outstanding(self, user: User, purpose: TokenPurpose) -> int:
        return await Token.filter(user=user, purpose=purpose, is_used=False).update(
            is_used=True, used_at=utc_now()
        )

    # ------------------------------------------------------------------
    # Login code exchange
    # ------------------------------------------------------------------
    async def validate_token(self, email: str, code: str) -> tuple[str, User]:
        """
        Exchange a login code for a session credential.

        Unknown account, wrong code, used code and expired code all raise the same
        Unauthorized so callers cannot probe which accounts exist.
        """
        email = normalize_email(email)
        code = (code or "").strip().upper()
        try:
            user = await self.users.find_by_email(email)
            if not user:
                raise Unauthorized()

            token = await Token.filter(
                user=user, code=code, purpose=TokenPurpose.LOGIN, is_used=False
            ).first()
            if not token or not token_is_valid(token):
                raise Unauthorized("Invalid or expired code")

            # Conditional update: only one concurrent caller can flip is_used
            consumed = await Token.filter(id=token.id, is_used=False).update(
                is_used=True, used_at=utc_now()
            )
            if not consumed:
                raise Unauthorized("Invalid or expired code")

            await self.users.update_last_login(user.id)
            await user.refresh_from_db()
        except ServiceError:
            raise
        except Exception:
            logger.exception("[auth] code validation failed for %s", email)
            raise ServiceError("Could not validate code", code="TOKEN_VALIDATION_FAILED")

        logger.info("[auth] login for %s (%s)", user.email, user.id)
        return self.issue_credential(user), user

    def issue_credential(self, user: User) -> str:
        return create_access_token(str(user.id), user.email)

    async def resolve_session_user(self, user_id: str) -> User:
        """Map a credential subject back to an active user, else Unauthorized."""
        try:
            return await self.users.get(user_id)
        except NotFound:
            raise Unauthorized("User not found", code="AUTH_USER_NOT_FOUND")

    async def logout(self, user_id) -> dict:
        # Credentials are not revoked; they expire on their own.
        logger.info("[auth] logout for user %s", user_id)
        return {"message": "Logged out"}

    # ------------------------------------------------------------------
    # Maintenance and reporting
    # ------------------------------------------------------------------
    async def cleanup_expired_tokens(self) -> int:
        """Delete every token past its expiry. Never raises."""
        try:
            deleted = await Token.filter(expires_at__lt=utc_now()).delete()
        except Exception:
            logger.exception("[auth] expired token cleanup failed")
            return 0
        if deleted:
            logger.info("[auth] removed %d expired tokens", deleted)
        return deleted

    async def get_auth_stats(self) -> dict:
        now = utc_now()
        midnight = dt.datetime.now().astimezone().replace(hour=0, minute=0, second=0, microsecond=0)
        today = Token.filter(created_at__gte=midnight.astimezone(dt.timezone.utc))
        return {
            "totalTokensToday": await today.count(),
            "successfulLoginsToday": await today.filter(is_used=True).count(),
            "abandonedTokens": await Token.filter(is_used=False, expires_at__lt=now).count(),
        }
