# vidvault/api/v1/routers/auth.py
from fastapi import APIRouter, Depends, Request, Response
from slowapi.util import get_remote_address

from vidvault.api.v1.deps import get_auth_service, get_current_user, require_admin
from vidvault.api.v1.serializers import user_to_dict
from vidvault.config import settings
from vidvault.core.rate_limit import REQUEST_TOKEN_LIMIT, VALIDATE_TOKEN_LIMIT, limiter
from vidvault.models.user import User
from vidvault.schemas.auth import RequestTokenIn, ValidateTokenIn
from vidvault.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        "accessToken",
        token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.jwt_expires_minutes * 60,
    )


@router.post("/request-token")
@limiter.limit(REQUEST_TOKEN_LIMIT)
async def request_token(
    request: Request,
    body: RequestTokenIn,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Mail a one-time login code to the given address.

    Unknown addresses get an account created on the fly. The code itself is
    never part of the response.

    Returns:
        dict: {"success": True, "data": {"message", "email"}}

    Raises:
        429 RATE_LIMITED: Too many codes for this email (3 per 5 minutes) or
                          too many calls from this IP (5 per 5 minutes)
        503 TOKEN_REQUEST_FAILED: Mail delivery failed (production only)
    """
    data = await auth.request_token(
        body.email,
        ip_address=get_remote_address(request),
        user_agent=request.headers.get("user-agent"),
    )
    return {"success": True, "data": data}


@router.post("/validate-token")
@limiter.limit(VALIDATE_TOKEN_LIMIT)
async def validate_token(
    request: Request,
    response: Response,
    body: ValidateTokenIn,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Exchange a login code for a session credential.

    The credential is returned in the body and also set as the HttpOnly
    `accessToken` cookie for browser clients.

    Raises:
        401 AUTH_INVALID_CREDENTIALS: Unknown email, wrong, used or expired code
    """
    token, user = await auth.validate_token(body.email, body.code)
    _set_session_cookie(response, token)
    return {
        "success": True,
        "data": {
            "accessToken": token,
            "user": user_to_dict(user),
            "message": "Login successful",
        },
    }


@router.post("/logout")
async def logout(
    response: Response,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Clear the session cookie.

    Note:
        The credential itself stays valid until it expires; there is no
        server-side revocation list.
    """
    data = await auth.logout(user.id)
    response.delete_cookie("accessToken")
    return {"success": True, "data": data}


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    """Current authenticated user."""
    return {"success": True, "data": user_to_dict(user)}


@router.get("/refresh")
async def refresh(
    response: Response,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Mint a fresh credential for the current user and reset the cookie."""
    token = auth.issue_credential(user)
    _set_session_cookie(response, token)
    return {"success": True, "data": {"accessToken": token, "user": user_to_dict(user)}}


@router.get("/stats", dependencies=[Depends(require_admin)])
async def stats(auth: AuthService = Depends(get_auth_service)):
    """Login-code statistics for today (admin only)."""
    return {"success": True, "data": await auth.get_auth_stats()}
