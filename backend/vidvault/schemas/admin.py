# vidvault/schemas/admin.py
"""
Pydantic schemas for admin user management endpoints.
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

__all__ = ["AdminUserCreateIn", "AdminUserUpdateIn", "AdminNotifyIn"]


class AdminUserCreateIn(BaseModel):
    """Create an account ahead of its first login. A welcome mail is sent."""
    email: EmailStr
    firstName: Optional[str] = Field(default=None, max_length=100)
    lastName: Optional[str] = Field(default=None, max_length=100)


class AdminUserUpdateIn(BaseModel):
    """
    Request model for updating user information.
    All fields are optional - only provided fields will be updated.
    """
    firstName: Optional[str] = Field(default=None, max_length=100)
    lastName: Optional[str] = Field(default=None, max_length=100)
    isActive: Optional[bool] = None


class AdminNotifyIn(BaseModel):
    subject: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
