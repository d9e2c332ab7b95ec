# vidvault/core/security.py
"""
Session credential helpers.
Mints and verifies the signed JWT returned after a successful login-code exchange.
"""
import datetime as dt
import jwt  # PyJWT

from vidvault.config import settings

JWT_SECRET = settings.jwt_secret  # Secret key for JWT signing (use strong secret in production)
ACCESS_TOKEN_EXPIRE_MINUTES = settings.jwt_expires_minutes  # Token lifetime in minutes (default 24h)
JWT_ISSUER = settings.jwt_issuer
JWT_AUDIENCE = settings.jwt_audience
JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)


def create_access_token(user_id: str, email: str) -> str:
    """
    Create a signed session credential for a user.

    Args:
        user_id: User UUID string (becomes the `sub` claim)
        email: User email, carried for display and logging on the client side

    Returns:
        Encoded JWT string

    Token payload includes:
        - sub, email
        - iss / aud: fixed issuer and audience, checked on decode
        - iat / exp
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + dt.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_access_token(token: str) -> dict:
    """
    Decode and validate a session credential.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired
        jwt.InvalidTokenError: If the signature, issuer or audience does not match
    """
    return jwt.decode(
        token,
        JWT_SECRET,
        algorithms=[JWT_ALG],
        audience=JWT_AUDIENCE,
        issuer=JWT_ISSUER,
    )
