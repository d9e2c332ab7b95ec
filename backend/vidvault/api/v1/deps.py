# vidvault/api/v1/deps.py
from fastapi import Depends, Header, HTTPException, Request, status

from vidvault.config import settings
from vidvault.core.errors import Unauthorized
from vidvault.core.security import decode_access_token
from vidvault.models.user import User
from vidvault.services.auth_service import AuthService
from vidvault.services.catalog_service import CatalogService
from vidvault.services.mailer import EmailSender
from vidvault.services.user_service import UserService


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": code, "message": message},
    )


# ------------------------------------------------------------------------------
# Service accessors (the graph is built once in main.py and kept on app.state)
# ------------------------------------------------------------------------------
def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def get_mailer(request: Request) -> EmailSender:
    return request.app.state.mailer


# ------------------------------------------------------------------------------
# Guards
# ------------------------------------------------------------------------------
async def get_current_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    This dependency extracts and validates the session credential from either:
    1. Authorization header (Bearer token) - preferred method
    2. HttpOnly cookie (accessToken) - fallback method

    Returns:
        User: The authenticated, active user

    Raises:
        HTTPException (401): If no credential is provided (AUTH_REQUIRED)
        HTTPException (401): If the credential is invalid or expired (AUTH_INVALID_TOKEN)
        HTTPException (401): If the subject is unknown or deactivated (AUTH_USER_NOT_FOUND)

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": str(user.id)}
    """
    token = None
    # 1) Prioritize Authorization: Bearer xxx
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    # 2) Secondly HttpOnly Cookie: accessToken
    if not token:
        token = request.cookies.get("accessToken")

    if not token:
        raise _unauthorized("AUTH_REQUIRED", "Authentication required")

    try:
        payload = decode_access_token(token)
        user_id: str = payload["sub"]
    except Exception:
        raise _unauthorized("AUTH_INVALID_TOKEN", "Invalid or expired session")

    auth_service = get_auth_service(request)
    try:
        return await auth_service.resolve_session_user(user_id)
    except Unauthorized as e:
        raise _unauthorized(e.code, e.message)
    except Exception:
        # Malformed subject (not a UUID)
        raise _unauthorized("AUTH_INVALID_TOKEN", "Invalid or expired session")


async def require_admin(current: User = Depends(get_current_user)) -> User:
    """
    FastAPI dependency for back-office routes.

    When ADMIN_EMAILS is configured the caller's email must be on that list;
    when it is empty any authenticated user passes.

    Raises:
        HTTPException (403): If the caller is not an administrator (FORBIDDEN_ADMIN_ONLY)
        HTTPException (401): If the caller is not authenticated (from get_current_user)
    """
    allowed = settings.admin_emails
    if allowed and current.email.lower() not in allowed:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "FORBIDDEN_ADMIN_ONLY", "message": "Administrator access required"},
        )
    return current
