# vidvault/api/v1/serializers.py
"""
Model -> JSON projections shared by the routers.
Keys are camelCase; datetimes are ISO 8601 strings.
"""
from vidvault.models.user import User
from vidvault.models.user_video import UserVideo
from vidvault.models.video import Video


def _iso(value):
    return value.isoformat() if value else None


def user_to_dict(u: User) -> dict:
    """Public projection of a user account."""
    return {
        "id": str(u.id),
        "email": u.email,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "fullName": u.full_name,
        "isActive": u.is_active,
        "lastLoginAt": _iso(u.last_login_at),
        "createdAt": _iso(u.created_at),
    }


def video_to_dict(v: Video) -> dict:
    return {
        "id": v.id,
        "title": v.title,
        "description": v.description,
        "url": v.url,
        "thumbnailUrl": v.thumbnail_url,
        "duration": v.duration,
        "durationSeconds": v.duration_seconds,
        "status": v.status.value if hasattr(v.status, "value") else v.status,
        "isActive": v.is_active,
        "category": v.category,
        "tags": v.tags_list,
        "viewCount": v.view_count,
        "fileSize": v.file_size,
        "resolution": v.resolution,
        "createdAt": _iso(v.created_at),
        "updatedAt": _iso(v.updated_at),
    }


def access_to_dict(e: UserVideo) -> dict:
    """The caller's own entitlement snapshot (progress and grant details)."""
    return {
        "accessType": e.access_type.value if hasattr(e.access_type, "value") else e.access_type,
        "expiresAt": _iso(e.expires_at),
        "isActive": e.is_active,
        "viewCount": e.view_count,
        "firstViewedAt": _iso(e.first_viewed_at),
        "lastViewedAt": _iso(e.last_viewed_at),
        "watchPosition": e.watch_position,
        "completionPercentage": float(e.completion_percentage or 0),
        "isCompleted": e.is_completed,
    }


def entitled_video_to_dict(e: UserVideo) -> dict:
    """A video as seen by an entitled user. `e.video` must be loaded."""
    data = video_to_dict(e.video)
    data["access"] = access_to_dict(e)
    return data


def assignment_to_dict(e: UserVideo) -> dict:
    """An entitlement row as seen from the back office."""
    data = access_to_dict(e)
    data.update({
        "id": str(e.id),
        "userId": str(e.user_id),
        "videoId": e.video_id,
        "grantedBy": e.granted_by,
        "notes": e.notes,
        "createdAt": _iso(e.created_at),
        "updatedAt": _iso(e.updated_at),
    })
    return data
