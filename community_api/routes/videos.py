"""FastAPI routes for videos."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Path, Query, Request

from community_api.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from community_api.db import get_session
from community_api.routes.common import page, read_with_engagement
from community_api.schemas import CreatedResponse, Page, VideoIn, VideoOut, VideoUpdate
from community_api.services.content import VideoRepository
from community_api.services.identity import client_info_from_request
from community_api.services.statistics import log_action

router = APIRouter(prefix="/videos", tags=["videos"])


@router.get("", response_model=Page[VideoOut])
def list_videos(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    q: Optional[str] = Query(None, min_length=1, description="Search term"),
) -> Dict[str, Any]:
    with get_session() as db:
        repo = VideoRepository(db)
        if q:
            return page(repo.search(q, limit, offset), repo.get_search_total_count(q), limit, offset, VideoOut)
        return page(repo.get_all(limit, offset), repo.get_total_count(), limit, offset, VideoOut)


@router.get("/trending", response_model=Page[VideoOut])
def trending_videos(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
) -> Dict[str, Any]:
    with get_session() as db:
        repo = VideoRepository(db)
        return page(repo.get_trending(limit, offset), repo.get_trending_total_count(), limit, offset, VideoOut)


@router.get("/{video_id}")
def get_video(request: Request, video_id: int = Path(..., ge=1)) -> Dict[str, Any]:
    with get_session() as db:
        return read_with_engagement(db, VideoRepository(db), video_id, request, VideoOut)


@router.post("", response_model=CreatedResponse, status_code=201)
def create_video(payload: VideoIn, request: Request) -> Dict[str, int]:
    """Create a video and log a video_create statistics event."""
    with get_session() as db:
        video_id = VideoRepository(db).create(**payload.model_dump())
        log_action(db, "video_create", video_id, client_info_from_request(request))
        return {"id": video_id}


@router.put("/{video_id}")
def update_video(payload: VideoUpdate, video_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    with get_session() as db:
        if not VideoRepository(db).update(video_id, **payload.model_dump(exclude_unset=True)):
            raise HTTPException(status_code=404, detail=f"Video {video_id} not found")
        return {"updated": True}


@router.delete("/{video_id}")
def delete_video(video_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    with get_session() as db:
        if not VideoRepository(db).delete(video_id):
            raise HTTPException(status_code=404, detail=f"Video {video_id} not found")
        return {"deleted": True}
