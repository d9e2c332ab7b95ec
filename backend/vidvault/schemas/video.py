# vidvault/schemas/video.py
"""
Pydantic schemas for video catalog and entitlement endpoints.
Input models use the camelCase keys the web client sends.
"""
import datetime as dt
import uuid
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from vidvault.models.user_video import AccessType
from vidvault.models.video import VideoStatus

__all__ = [
    "VideoCreateIn",
    "VideoUpdateIn",
    "AssignVideoIn",
    "WatchIn",
    "ProgressIn",
    "OrderField",
]

OrderField = Literal["createdAt", "updatedAt", "title", "viewCount", "durationSeconds"]


def _join_tags(v):
    """Tags may be sent as a list or as a comma separated string; stored as the latter."""
    if isinstance(v, list):
        parts = [str(t).strip() for t in v if str(t).strip()]
        return ",".join(parts) if parts else None
    return v


class VideoCreateIn(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    url: str = Field(min_length=1, max_length=500)
    description: Optional[str] = None
    thumbnailUrl: Optional[str] = Field(default=None, max_length=500)
    duration: Optional[str] = Field(default=None, max_length=10)  # "MM:SS" or "HH:MM:SS"
    durationSeconds: Optional[int] = Field(default=None, ge=0)
    status: Optional[VideoStatus] = None
    category: Optional[str] = Field(default=None, max_length=100)
    tags: Optional[Union[str, List[str]]] = None
    fileSize: Optional[int] = Field(default=None, ge=0)
    resolution: Optional[str] = Field(default=None, max_length=10)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v):
        return _join_tags(v)

    def to_model_fields(self) -> dict:
        """Map to Video column names, dropping unset values."""
        mapping = {
            "title": self.title,
            "url": self.url,
            "description": self.description,
            "thumbnail_url": self.thumbnailUrl,
            "duration": self.duration,
            "duration_seconds": self.durationSeconds,
            "status": self.status,
            "category": self.category,
            "tags": self.tags,
            "file_size": self.fileSize,
            "resolution": self.resolution,
        }
        return {k: v for k, v in mapping.items() if v is not None}


class VideoUpdateIn(VideoCreateIn):
    """All fields optional - only provided fields will be updated."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    url: Optional[str] = Field(default=None, min_length=1, max_length=500)
    isActive: Optional[bool] = None

    def to_model_fields(self) -> dict:
        data = super().to_model_fields()
        if self.isActive is not None:
            data["is_active"] = self.isActive
        return data


class AssignVideoIn(BaseModel):
    """Grant a user access to a video. Re-assigning updates the existing grant."""
    userId: uuid.UUID
    videoId: int
    accessType: Optional[AccessType] = None
    expiresAt: Optional[dt.datetime] = None
    notes: Optional[str] = None

    @field_validator("expiresAt")
    @classmethod
    def assume_utc(cls, v: Optional[dt.datetime]):
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=dt.timezone.utc)
        return v


class WatchIn(BaseModel):
    position: Optional[int] = Field(default=None, ge=0)  # Seconds into the video


class ProgressIn(BaseModel):
    position: int = Field(ge=0)
