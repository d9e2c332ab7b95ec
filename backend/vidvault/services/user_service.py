"""
User directory.

Accounts are keyed by lowercased email. Lookups used by authentication only see
active accounts; admin lookups (`get_any`) also see deactivated ones.
"""
import datetime as dt
import logging
from typing import Optional

from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q

from vidvault.core.errors import Conflict, NotFound
from vidvault.core.policies import utc_now
from vidvault.models.user import User

logger = logging.getLogger("uvicorn.error")

_EDITABLE_FIELDS = ("first_name", "last_name", "is_active")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class UserService:
    async def find_by_email(self, email: str) -> Optional[User]:
        return await User.get_or_none(email=normalize_email(email), is_active=True)

    async def find_any_by_email(self, email: str) -> Optional[User]:
        return await User.get_or_none(email=normalize_email(email))

    async def find_or_create_by_email(self, email: str) -> User:
        user = await self.find_any_by_email(email)
        if user:
            return user
        try:
            user = await User.create(email=normalize_email(email))
        except IntegrityError:
            # Concurrent first request for the same address
            user = await User.get(email=normalize_email(email))
        else:
            logger.info("[users] created %s (%s)", user.email, user.id)
        return user

    async def create(self, email: str, first_name: str | None = None,
                     last_name: str | None = None, is_active: bool = True) -> User:
        email = normalize_email(email)
        if await User.filter(email=email).exists():
            raise Conflict("Email already registered", code="EMAIL_EXISTS")
        try:
            user = await User.create(
                email=email, first_name=first_name, last_name=last_name, is_active=is_active,
            )
        except IntegrityError:
            raise Conflict("Email already registered", code="EMAIL_EXISTS")
        logger.info("[users] created %s (%s)", user.email, user.id)
        return user

    async def get(self, user_id: str) -> User:
        """Active user by id."""
        user = await User.get_or_none(id=user_id, is_active=True)
        if not user:
            raise NotFound(f"User {user_id} not found", code="USER_NOT_FOUND")
        return user

    async def get_any(self, user_id: str) -> User:
        """User by id regardless of the active flag (audit/admin)."""
        user = await User.get_or_none(id=user_id)
        if not user:
            raise NotFound(f"User {user_id} not found", code="USER_NOT_FOUND")
        return user

    async def update(self, user_id: str, **changes) -> User:
        user = await self.get_any(user_id)
        for field in _EDITABLE_FIELDS:
            if changes.get(field) is not None:
                setattr(user, field, changes[field])
        await user.save()
        return user

    async def deactivate(self, user_id: str) -> User:
        user = await self.get_any(user_id)
        user.is_active = False
        await user.save(update_fields=["is_active", "updated_at"])
        logger.info("[users] deactivated %s (%s)", user.email, user.id)
        return user

    async def update_last_login(self, user_id) -> None:
        await User.filter(id=user_id).update(last_login_at=utc_now())

    async def search(self, query: str | None = None, limit: int = 10, offset: int = 0,
                     include_inactive: bool = False) -> tuple[list[User], int]:
        qs = User.all().order_by("-created_at")
        if not include_inactive:
            qs = qs.filter(is_active=True)
        if query:
            qs = qs.filter(
                Q(email__icontains=query)
                | Q(first_name__icontains=query)
                | Q(last_name__icontains=query)
            )
        total = await qs.count()
        rows = await qs.offset(offset).limit(limit)
        return rows, total

    async def count_active(self) -> int:
        return await User.filter(is_active=True).count()

    async def recently_active(self, days: int = 30) -> list[User]:
        since = utc_now() - dt.timedelta(days=days)
        return await User.filter(is_active=True, last_login_at__gte=since).order_by("-last_login_at")
