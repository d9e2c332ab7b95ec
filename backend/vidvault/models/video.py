# vidvault/models/video.py
"""
Database model for the video catalog.
Only metadata lives here; the asset itself is served from `url`.
"""
from enum import Enum
from tortoise import fields, models


class VideoStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Video(models.Model):
    """
    Video catalog entry.

    Relationships:
    - Has many UserVideo entitlements (related_name="entitlements")

    Removal is soft: status -> archived and is_active -> False.
    """
    id = fields.IntField(pk=True)  # Sequential id
    title = fields.CharField(max_length=255)
    description = fields.TextField(null=True)
    url = fields.CharField(max_length=500)
    thumbnail_url = fields.CharField(max_length=500, null=True)
    duration = fields.CharField(max_length=10, null=True)  # Display string, MM:SS or HH:MM:SS
    duration_seconds = fields.IntField(null=True)
    status = fields.CharEnumField(VideoStatus, max_length=50, default=VideoStatus.PUBLISHED)
    is_active = fields.BooleanField(default=True)
    category = fields.CharField(max_length=100, null=True, index=True)
    tags = fields.TextField(null=True)  # Comma separated
    view_count = fields.IntField(default=0)
    file_size = fields.BigIntField(null=True)  # Bytes
    resolution = fields.CharField(max_length=10, null=True)  # e.g. 1080p
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "videos"

    @property
    def tags_list(self) -> list[str]:
        if not self.tags:
            return []
        return [tag.strip() for tag in self.tags.split(",") if tag.strip()]
