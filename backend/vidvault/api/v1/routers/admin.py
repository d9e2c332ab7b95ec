# vidvault/api/v1/routers/admin.py
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status

from vidvault.api.v1.deps import get_mailer, get_user_service, require_admin
from vidvault.api.v1.serializers import user_to_dict
from vidvault.models.user import User
from vidvault.schemas.admin import AdminNotifyIn, AdminUserCreateIn, AdminUserUpdateIn
from vidvault.services.mailer import EmailSender
from vidvault.services.user_service import UserService

router = APIRouter(prefix="/admin", tags=["admin"])


# ==============================================================================
# User Management Interface
#     Prefix: /api/v1/admin/users
# ==============================================================================
@router.get("/users", dependencies=[Depends(require_admin)])
async def list_users(
    q: str | None = Query(default=None, description="Fuzzy search by email/first/last name"),
    includeInactive: bool = Query(default=False),
    offset: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    users: UserService = Depends(get_user_service),
):
    """
    Get paginated list of users (admin only), newest first.

    Args:
        q: Optional search query, case-insensitive substring
        includeInactive: Also list deactivated accounts
        offset: Number of items to skip (for pagination)
        limit: Maximum number of items to return (1-100)
    """
    rows, total = await users.search(q, limit=limit, offset=offset, include_inactive=includeInactive)
    return {
        "success": True,
        "data": {"items": [user_to_dict(u) for u in rows], "offset": offset, "limit": limit, "total": total},
    }


@router.get("/users/activity", dependencies=[Depends(require_admin)])
async def user_activity(
    days: int = Query(30, ge=1, le=365),
    users: UserService = Depends(get_user_service),
):
    """Active account count and the accounts that logged in within `days` days."""
    recent = await users.recently_active(days)
    return {
        "success": True,
        "data": {
            "activeUsers": await users.count_active(),
            "days": days,
            "recentlyActive": [user_to_dict(u) for u in recent],
        },
    }


@router.post("/users", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_user(
    body: AdminUserCreateIn,
    users: UserService = Depends(get_user_service),
    mailer: EmailSender = Depends(get_mailer),
):
    """
    Create an account ahead of its first login and send a welcome mail.

    Raises:
        409 EMAIL_EXISTS: The address is already registered
    """
    u = await users.create(body.email, first_name=body.firstName, last_name=body.lastName)
    await mailer.send_welcome_email(u.email, u.first_name)
    return {"success": True, "data": user_to_dict(u)}


@router.get("/users/{user_id}", dependencies=[Depends(require_admin)])
async def get_user_detail(user_id: uuid.UUID, users: UserService = Depends(get_user_service)):
    """Any user by id, deactivated ones included."""
    return {"success": True, "data": user_to_dict(await users.get_any(user_id))}


@router.patch("/users/{user_id}", dependencies=[Depends(require_admin)])
async def update_user(
    user_id: uuid.UUID,
    body: AdminUserUpdateIn,
    users: UserService = Depends(get_user_service),
):
    """Only provided fields are changed. `isActive` may reactivate an account."""
    u = await users.update(
        user_id,
        first_name=body.firstName,
        last_name=body.lastName,
        is_active=body.isActive,
    )
    return {"success": True, "data": user_to_dict(u)}


@router.delete("/users/{user_id}")
async def deactivate_user(
    user_id: uuid.UUID,
    current_admin: User = Depends(require_admin),
    users: UserService = Depends(get_user_service),
):
    """
    Deactivate a user account (admin only).

    Accounts are never removed: the row stays, `isActive` becomes false and the
    user can no longer log in. Grants are kept.

    Raises:
        HTTPException (400): If an admin tries to deactivate themselves
        404 USER_NOT_FOUND: Unknown id
    """
    if str(current_admin.id) == str(user_id):
        raise HTTPException(
            status_code=400,
            detail={"code": "CANNOT_DEACTIVATE_SELF", "message": "Cannot deactivate yourself"},
        )
    u = await users.deactivate(user_id)
    return {"success": True, "data": user_to_dict(u)}


@router.post("/users/{user_id}/notify", dependencies=[Depends(require_admin)])
async def notify_user(
    user_id: uuid.UUID,
    body: AdminNotifyIn,
    users: UserService = Depends(get_user_service),
    mailer: EmailSender = Depends(get_mailer),
):
    """Send a free-form notification mail. Delivery is best effort."""
    u = await users.get(user_id)
    await mailer.send_notification_email(u.email, body.subject, body.content)
    return {"success": True, "data": {"ok": True}}
