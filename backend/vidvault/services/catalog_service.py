"""
Video catalog and entitlement ledger.

User-facing reads only ever see videos that are published and active AND covered
by an active, unexpired entitlement. Admin operations work on the whole catalog;
deletes are soft.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from tortoise.exceptions import IntegrityError
from tortoise.expressions import F, Q

from vidvault.core.errors import Forbidden, NotFound
from vidvault.core.policies import (
    entitlement_has_access,
    progress_fields,
    summarize_entitlements,
    utc_now,
    video_is_published,
)
from vidvault.models.user import User
from vidvault.models.user_video import AccessType, UserVideo
from vidvault.models.video import Video, VideoStatus

logger = logging.getLogger("uvicorn.error")

# API sort key -> Video column
SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "title": "title",
    "viewCount": "view_count",
    "durationSeconds": "duration_seconds",
}

_VIDEO_FIELDS = (
    "title", "description", "url", "thumbnail_url", "duration", "duration_seconds",
    "status", "is_active", "category", "tags", "file_size", "resolution",
)


@dataclass
class VideoFilter:
    query: Optional[str] = None
    category: Optional[str] = None
    order_by: str = "createdAt"
    order_direction: str = "DESC"
    limit: int = 20
    offset: int = 0

    def ordering(self, prefix: str = "") -> str:
        column = SORT_FIELDS.get(self.order_by, "created_at")
        sign = "" if self.order_direction.upper() == "ASC" else "-"
        return f"{sign}{prefix}{column}"


def _text_match(query: str, prefix: str = "") -> Q:
    return (
        Q(**{f"{prefix}title__icontains": query})
        | Q(**{f"{prefix}description__icontains": query})
        | Q(**{f"{prefix}category__icontains": query})
        | Q(**{f"{prefix}tags__icontains": query})
    )


class CatalogService:
    # ------------------------------------------------------------------
    # User-facing
    # ------------------------------------------------------------------
    async def list_for_user(self, user_id, flt: VideoFilter) -> tuple[list[UserVideo], int]:
        """Entitled, published videos for a user. Each row has `.video` loaded."""
        now = utc_now()
        qs = UserVideo.filter(
            user_id=user_id,
            is_active=True,
            video__status=VideoStatus.PUBLISHED,
            video__is_active=True,
        ).filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))

        if flt.query:
            qs = qs.filter(_text_match(flt.query, prefix="video__"))
        if flt.category:
            qs = qs.filter(video__category=flt.category)

        total = await qs.count()
        rows = await (
            qs.order_by(flt.ordering(prefix="video__"))
            .offset(flt.offset)
            .limit(flt.limit)
            .prefetch_related("video")
        )
        return rows, total

    async def _accessible_entitlement(self, user_id, video_id: int) -> UserVideo:
        entitlement = await UserVideo.get_or_none(user_id=user_id, video_id=video_id).prefetch_related("video")
        if not entitlement:
            raise NotFound("Video not found or not shared with you", code="VIDEO_NOT_FOUND")
        if not entitlement_has_access(entitlement):
            logger.warning("[catalog] lapsed access: user %s video %s", user_id, video_id)
            raise Forbidden("Access to this video has expired", code="ACCESS_EXPIRED")
        if not video_is_published(entitlement.video):
            raise Forbidden("Video is not available", code="VIDEO_UNAVAILABLE")
        return entitlement

    async def get_for_user(self, user_id, video_id: int) -> UserVideo:
        return await self._accessible_entitlement(user_id, video_id)

    async def record_watch(self, user_id, video_id: int, position: Optional[int] = None) -> UserVideo:
        """
        Register a view and, when a position is given for a video of known length,
        update completion. The entitlement counter and the video counter are two
        separate single-statement updates.
        """
        entitlement = await self._accessible_entitlement(user_id, video_id)
        now = utc_now()

        changes = {"view_count": F("view_count") + 1, "last_viewed_at": now}
        if entitlement.first_viewed_at is None:
            changes["first_viewed_at"] = now
        duration = entitlement.video.duration_seconds
        if position is not None and duration:
            changes.update(progress_fields(position, duration))

        await UserVideo.filter(id=entitlement.id).update(**changes)
        await Video.filter(id=video_id).update(view_count=F("view_count") + 1)

        await entitlement.refresh_from_db()
        await entitlement.video.refresh_from_db()
        logger.info("[catalog] view recorded: user %s video %s position %s", user_id, video_id, position)
        return entitlement

    async def get_categories(self) -> list[str]:
        values = await (
            Video.filter(status=VideoStatus.PUBLISHED, is_active=True, category__isnull=False)
            .distinct()
            .values_list("category", flat=True)
        )
        return sorted({v for v in values if v})

    # ------------------------------------------------------------------
    # Entitlements (admin)
    # ------------------------------------------------------------------
    async def assign(self, user_id, video_id: int, access_type: Optional[AccessType] = None,
                     expires_at=None, notes: Optional[str] = None,
                     granted_by: Optional[str] = None) -> UserVideo:
        """
        Grant (or re-grant) access. One row per (user, video): an existing row is
        updated and reactivated, never duplicated.
        """
        if not await Video.filter(id=video_id).exists():
            raise NotFound("Video not found", code="VIDEO_NOT_FOUND")
        if not await User.filter(id=user_id).exists():
            raise NotFound("User not found", code="USER_NOT_FOUND")

        entitlement = await UserVideo.get_or_none(user_id=user_id, video_id=video_id)
        if entitlement is None:
            try:
                entitlement = await UserVideo.create(
                    user_id=user_id,
                    video_id=video_id,
                    access_type=access_type or AccessType.ASSIGNED,
                    expires_at=expires_at,
                    notes=notes,
                    granted_by=granted_by,
                )
                logger.info("[catalog] video %s assigned to user %s", video_id, user_id)
                return entitlement
            except IntegrityError:
                # Lost a race with a concurrent first assignment; update that row instead
                entitlement = await UserVideo.get(user_id=user_id, video_id=video_id)

        entitlement.access_type = access_type or entitlement.access_type
        entitlement.expires_at = expires_at or entitlement.expires_at
        entitlement.notes = notes or entitlement.notes
        entitlement.granted_by = granted_by or entitlement.granted_by
        entitlement.is_active = True
        await entitlement.save()
        logger.info("[catalog] video %s re-assigned to user %s", video_id, user_id)
        return entitlement

    async def revoke(self, user_id, video_id: int) -> None:
        updated = await UserVideo.filter(user_id=user_id, video_id=video_id).update(is_active=False)
        if not updated:
            raise NotFound("Assignment not found", code="ASSIGNMENT_NOT_FOUND")
        logger.info("[catalog] access revoked: user %s video %s", user_id, video_id)

    async def get_stats(self, video_id: Optional[int] = None) -> dict:
        qs = UserVideo.all()
        if video_id is not None:
            qs = qs.filter(video_id=video_id)
        return summarize_entitlements(await qs)

    # ------------------------------------------------------------------
    # Catalog (admin)
    # ------------------------------------------------------------------
    async def create_video(self, **data) -> Video:
        video = await Video.create(**{k: v for k, v in data.items() if k in _VIDEO_FIELDS and v is not None})
        logger.info("[catalog] video created: %s (id=%s)", video.title, video.id)
        return video

    async def get_video(self, video_id: int) -> Video:
        """Any video by id, archived included."""
        video = await Video.get_or_none(id=video_id)
        if not video:
            raise NotFound("Video not found", code="VIDEO_NOT_FOUND")
        return video

    async def update_video(self, video_id: int, **changes) -> Video:
        video = await self.get_video(video_id)
        for field, value in changes.items():
            if field in _VIDEO_FIELDS and value is not None:
                setattr(video, field, value)
        await video.save()
        logger.info("[catalog] video updated: %s (id=%s)", video.title, video.id)
        return video

    async def delete_video(self, video_id: int) -> None:
        video = await self.get_video(video_id)
        video.is_active = False
        video.status = VideoStatus.ARCHIVED
        await video.save(update_fields=["is_active", "status", "updated_at"])
        logger.info("[catalog] video archived: %s (id=%s)", video.title, video.id)

    async def list_videos(self, include_archived: bool = False) -> list[Video]:
        qs = Video.all().order_by("-created_at")
        if not include_archived:
            qs = qs.filter(is_active=True)
        return await qs

    async def search_catalog(self, query: str, limit: int = 10, offset: int = 0) -> tuple[list[Video], int]:
        """Substring search over the whole (non-deleted) catalog, any status."""
        qs = Video.filter(is_active=True)
        if query:
            qs = qs.filter(_text_match(query))
        total = await qs.count()
        rows = await qs.order_by("-created_at").offset(offset).limit(limit)
        return rows, total
