"""FastAPI routes for posts."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Path, Query, Request

from community_api.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from community_api.db import get_session
from community_api.routes.common import page, read_with_engagement
from community_api.schemas import CreatedResponse, Page, PostIn, PostOut, PostUpdate
from community_api.services.content import PostRepository

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=Page[PostOut])
def list_posts(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    q: Optional[str] = Query(None, min_length=1, description="Search term"),
) -> Dict[str, Any]:
    """List posts newest first, optionally filtered by a search term."""
    with get_session() as db:
        repo = PostRepository(db)
        if q:
            return page(repo.search(q, limit, offset), repo.get_search_total_count(q), limit, offset, PostOut)
        return page(repo.get_all(limit, offset), repo.get_total_count(), limit, offset, PostOut)


@router.get("/trending", response_model=Page[PostOut])
def trending_posts(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
) -> Dict[str, Any]:
    """Posts ranked by views*1 + likes*3 + shares*5."""
    with get_session() as db:
        repo = PostRepository(db)
        return page(repo.get_trending(limit, offset), repo.get_trending_total_count(), limit, offset, PostOut)


@router.get("/{post_id}")
def get_post(request: Request, post_id: int = Path(..., ge=1)) -> Dict[str, Any]:
    """Post detail; counts a view and reports the caller's like/share state."""
    with get_session() as db:
        repo = PostRepository(db)
        data = read_with_engagement(db, repo, post_id, request, PostOut)
        data["comment_count"] = repo.comment_count(post_id)
        return data


@router.post("", response_model=CreatedResponse, status_code=201)
def create_post(payload: PostIn) -> Dict[str, int]:
    with get_session() as db:
        return {"id": PostRepository(db).create(**payload.model_dump())}


@router.put("/{post_id}")
def update_post(payload: PostUpdate, post_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    with get_session() as db:
        if not PostRepository(db).update(post_id, **payload.model_dump(exclude_unset=True)):
            raise HTTPException(status_code=404, detail=f"Post {post_id} not found")
        return {"updated": True}


@router.delete("/{post_id}")
def delete_post(post_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    with get_session() as db:
        if not PostRepository(db).delete(post_id):
            raise HTTPException(status_code=404, detail=f"Post {post_id} not found")
        return {"deleted": True}
