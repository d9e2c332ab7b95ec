# vidvault/schemas/auth.py
"""
Pydantic schemas for authentication endpoints.
Defines request models for the e-mail login-code flow.
"""
from pydantic import BaseModel, EmailStr, Field, field_validator

__all__ = ["RequestTokenIn", "ValidateTokenIn"]


class RequestTokenIn(BaseModel):
    """Ask for a login code to be mailed to `email`."""
    email: EmailStr


class ValidateTokenIn(BaseModel):
    """
    Exchange a mailed login code for a session credential.
    The code is case-insensitive on input; surrounding whitespace is ignored.
    """
    email: EmailStr
    code: str = Field(min_length=6, max_length=6)

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v
