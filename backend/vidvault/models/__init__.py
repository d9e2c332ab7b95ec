"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User: account, identified by email
- Token: one-time login code (and other purposes)
- Video: catalog entry
- UserVideo: entitlement linking a user to a video, with watch progress
"""
from .user import User
from .token import Token, TokenPurpose
from .video import Video, VideoStatus
from .user_video import UserVideo, AccessType
