# vidvault/core/policies.py
"""
Access rules and progress arithmetic.
Plain functions over model instances (or anything with the same attributes), so
they can be unit tested without a database.
"""
import datetime as dt
from typing import Iterable, Optional

from vidvault.models.video import VideoStatus

COMPLETION_THRESHOLD = 90  # Percent watched at which a video counts as completed


def utc_now() -> dt.datetime:
    """Current UTC datetime with timezone information."""
    return dt.datetime.now(dt.timezone.utc)


def token_is_valid(token, now: Optional[dt.datetime] = None) -> bool:
    """A token is valid iff unused and not past its expiry."""
    now = now or utc_now()
    return not token.is_used and now <= token.expires_at


def entitlement_has_access(entitlement, now: Optional[dt.datetime] = None) -> bool:
    """Active and either open-ended or not yet expired."""
    if not entitlement.is_active:
        return False
    if entitlement.expires_at is None:
        return True
    now = now or utc_now()
    return now < entitlement.expires_at


def video_is_published(video) -> bool:
    return video.status == VideoStatus.PUBLISHED and video.is_active


def completion_percentage(position: int, total_seconds: int) -> int:
    """round(position / total * 100), clamped to 0..100."""
    if not total_seconds or total_seconds <= 0:
        return 0
    percent = round(position / total_seconds * 100)
    return max(0, min(100, percent))


def progress_fields(position: int, total_seconds: int) -> dict:
    """Column values for a reported watch position on a video of known length."""
    percent = completion_percentage(position, total_seconds)
    return {
        "watch_position": position,
        "completion_percentage": percent,
        "is_completed": percent >= COMPLETION_THRESHOLD,
    }


def summarize_entitlements(rows: Iterable) -> dict:
    """
    Aggregate viewing statistics over entitlement rows.

    - totalViews: sum of per-entitlement view counts
    - uniqueViewers: rows viewed at least once
    - completionRate: completed / uniqueViewers * 100, 2 decimals, 0 without viewers
    - averageWatchTime: mean watch position over all rows, rounded
    """
    rows = list(rows)
    total_views = sum(r.view_count for r in rows)
    unique_viewers = sum(1 for r in rows if r.view_count > 0)
    completed = sum(1 for r in rows if r.is_completed)

    completion_rate = (completed / unique_viewers) * 100 if unique_viewers else 0
    average_watch = sum(r.watch_position for r in rows) / len(rows) if rows else 0

    return {
        "totalViews": total_views,
        "uniqueViewers": unique_viewers,
        "completionRate": round(completion_rate, 2),
        "averageWatchTime": round(average_watch),
    }
