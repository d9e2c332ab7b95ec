# vidvault/api/v1/routers/videos.py
from __future__ import annotations

import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from vidvault.api.v1.deps import get_catalog_service, get_current_user, require_admin
from vidvault.api.v1.serializers import (
    assignment_to_dict,
    entitled_video_to_dict,
    video_to_dict,
)
from vidvault.models.user import User
from vidvault.schemas.video import (
    AssignVideoIn,
    OrderField,
    ProgressIn,
    VideoCreateIn,
    VideoUpdateIn,
    WatchIn,
)
from vidvault.services.catalog_service import CatalogService, VideoFilter

router = APIRouter(prefix="/videos", tags=["videos"])


def _video_filter(
    q: Optional[str] = Query(default=None, alias="query", description="Substring over title/description/category/tags"),
    category: Optional[str] = Query(default=None),
    orderBy: OrderField = Query(default="createdAt"),
    orderDirection: Literal["ASC", "DESC", "asc", "desc"] = Query(default="DESC"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> VideoFilter:
    return VideoFilter(
        query=q,
        category=category,
        order_by=orderBy,
        order_direction=orderDirection.upper(),
        limit=limit,
        offset=offset,
    )


async def _list_for_user(user: User, flt: VideoFilter, catalog: CatalogService) -> dict:
    rows, total = await catalog.list_for_user(user.id, flt)
    return {
        "success": True,
        "data": {
            "items": [entitled_video_to_dict(e) for e in rows],
            "total": total,
            "limit": flt.limit,
            "offset": flt.offset,
        },
    }


# ==============================================================================
# I. Viewer routes
# ==============================================================================
@router.get("")
async def list_videos(
    flt: VideoFilter = Depends(_video_filter),
    user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """
    Videos shared with the current user.

    Only published, active videos covered by an active, unexpired grant are
    returned. Each item carries the caller's progress under `access`.
    """
    return await _list_for_user(user, flt, catalog)


@router.get("/search")
async def search_videos(
    flt: VideoFilter = Depends(_video_filter),
    user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Same as the listing; kept as a separate path for the web client."""
    return await _list_for_user(user, flt, catalog)


@router.get("/categories")
async def list_categories(
    user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return {"success": True, "data": await catalog.get_categories()}


# ==============================================================================
# II. Back-office routes (admin)
#     Declared before /{video_id} so the static segments win.
# ==============================================================================
@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_video(body: VideoCreateIn, catalog: CatalogService = Depends(get_catalog_service)):
    video = await catalog.create_video(**body.to_model_fields())
    return {"success": True, "data": video_to_dict(video)}


@router.get("/admin/all", dependencies=[Depends(require_admin)])
async def admin_list_videos(
    includeArchived: bool = Query(default=False),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Whole catalog, any status. Soft-deleted videos only with includeArchived."""
    rows = await catalog.list_videos(include_archived=includeArchived)
    return {"success": True, "data": [video_to_dict(v) for v in rows]}


@router.get("/admin/search", dependencies=[Depends(require_admin)])
async def admin_search_videos(
    q: str = Query(default="", alias="query"),
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Substring search over the catalog, ignoring grants and publication status."""
    rows, total = await catalog.search_catalog(q, limit=limit, offset=offset)
    return {
        "success": True,
        "data": {"items": [video_to_dict(v) for v in rows], "total": total, "limit": limit, "offset": offset},
    }


@router.get("/admin/stats", dependencies=[Depends(require_admin)])
async def admin_stats(catalog: CatalogService = Depends(get_catalog_service)):
    return {"success": True, "data": await catalog.get_stats()}


@router.get("/admin/stats/{video_id}", dependencies=[Depends(require_admin)])
async def admin_video_stats(video_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    await catalog.get_video(video_id)
    return {"success": True, "data": await catalog.get_stats(video_id)}


@router.post("/admin/assign")
async def admin_assign_video(
    body: AssignVideoIn,
    admin: User = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """
    Grant a user access to a video.

    Re-assigning an existing pair updates access type, expiry and notes and
    reactivates the grant; it never creates a second row.
    """
    entitlement = await catalog.assign(
        body.userId,
        body.videoId,
        access_type=body.accessType,
        expires_at=body.expiresAt,
        notes=body.notes,
        granted_by=admin.email,
    )
    return {"success": True, "data": assignment_to_dict(entitlement)}


@router.delete("/admin/access/{user_id}/{video_id}", dependencies=[Depends(require_admin)])
async def admin_revoke_access(
    user_id: uuid.UUID,
    video_id: int,
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.revoke(user_id, video_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/admin/{video_id}", dependencies=[Depends(require_admin)])
async def admin_get_video(video_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    """Any video by id, archived ones included."""
    return {"success": True, "data": video_to_dict(await catalog.get_video(video_id))}


@router.patch("/admin/{video_id}", dependencies=[Depends(require_admin)])
async def admin_update_video(
    video_id: int,
    body: VideoUpdateIn,
    catalog: CatalogService = Depends(get_catalog_service),
):
    video = await catalog.update_video(video_id, **body.to_model_fields())
    return {"success": True, "data": video_to_dict(video)}


@router.delete("/admin/{video_id}", dependencies=[Depends(require_admin)])
async def admin_delete_video(video_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    """Soft delete: the video is archived and deactivated, grants are kept."""
    await catalog.delete_video(video_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==============================================================================
# III. Single video (viewer)
# ==============================================================================
@router.get("/{video_id}")
async def get_video(
    video_id: int,
    user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """
    Raises:
        404 VIDEO_NOT_FOUND: No grant for this video
        403 ACCESS_EXPIRED / VIDEO_UNAVAILABLE: Grant lapsed, or video unpublished
    """
    entitlement = await catalog.get_for_user(user.id, video_id)
    return {"success": True, "data": entitled_video_to_dict(entitlement)}


@router.post("/{video_id}/watch")
async def record_watch(
    video_id: int,
    body: Optional[WatchIn] = None,
    user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Register a view; an optional position (seconds) also updates progress."""
    position = body.position if body else None
    entitlement = await catalog.record_watch(user.id, video_id, position)
    return {"success": True, "data": entitled_video_to_dict(entitlement)}


@router.post("/{video_id}/progress")
async def update_progress(
    video_id: int,
    body: ProgressIn,
    user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    entitlement = await catalog.record_watch(user.id, video_id, body.position)
    return {"success": True, "data": entitled_video_to_dict(entitlement)}
