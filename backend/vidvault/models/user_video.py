# vidvault/models/user_video.py
import uuid
from enum import Enum
from tortoise import fields, models


class AccessType(str, Enum):
    ASSIGNED = "assigned"
    PURCHASED = "purchased"
    TRIAL = "trial"
    ADMIN = "admin"


class UserVideo(models.Model):
    """
    Entitlement: grants one user access to one video and carries their watch state.
    - expires_at: null means no expiration
    - is_active: cleared on revoke, set again on re-assign
    - watch_position: last reported position in seconds
    - completion_percentage: 0-100, is_completed once it reaches 90
    - granted_by: free-form label of who granted access

    At most one row per (user, video).
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    access_type = fields.CharEnumField(AccessType, max_length=50, default=AccessType.ASSIGNED)
    expires_at = fields.DatetimeField(null=True)
    is_active = fields.BooleanField(default=True)
    first_viewed_at = fields.DatetimeField(null=True)
    last_viewed_at = fields.DatetimeField(null=True)
    view_count = fields.IntField(default=0)
    watch_position = fields.IntField(default=0)
    completion_percentage = fields.DecimalField(max_digits=5, decimal_places=2, default=0)
    is_completed = fields.BooleanField(default=False)
    granted_by = fields.CharField(max_length=255, null=True)
    notes = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    user = fields.ForeignKeyField(
        "models.User",
        related_name="entitlements",
        on_delete=fields.CASCADE,
    )
    video = fields.ForeignKeyField(
        "models.Video",
        related_name="entitlements",
        on_delete=fields.CASCADE,
    )

    class Meta:
        table = "user_videos"
        unique_together = (("user", "video"),)
