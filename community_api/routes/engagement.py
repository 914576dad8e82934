"""
FastAPI routes for like/share toggles on every engageable content type.

Paths are /{collection}/{content_id}/like|share where collection is one of
posts, articles, comments, videos.
"""

from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Path, Request

from community_api.db import get_session
from community_api.models import ContentType
from community_api.services.content import get_repository
from community_api.services.identity import InvalidClientInfo, client_info_from_request
from community_api.services.statistics import log_action

router = APIRouter(tags=["engagement"])

COLLECTIONS = {f"{content_type.value}s": content_type for content_type in ContentType}


def _resolve(collection: str) -> ContentType:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown collection '{collection}'")


def _require_content(repo, content_id: int) -> None:
    if repo.get_by_id(content_id) is None:
        raise HTTPException(status_code=404, detail=f"{repo.entity_type.capitalize()} {content_id} not found")


@router.post("/{collection}/{content_id}/like")
def toggle_like(request: Request, collection: str, content_id: int = Path(..., ge=1)) -> Dict[str, Any]:
    """Like the content, or remove the caller's like if already present."""
    content_type = _resolve(collection)
    client = client_info_from_request(request)
    try:
        with get_session() as db:
            repo = get_repository(db, content_type)
            _require_content(repo, content_id)
            result = repo.toggle_like(content_id, client)
            if result["liked"]:
                log_action(db, f"{content_type.value}_like", content_id, client)
            return result
    except InvalidClientInfo as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{collection}/{content_id}/like")
def liked_state(request: Request, collection: str, content_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    content_type = _resolve(collection)
    with get_session() as db:
        repo = get_repository(db, content_type)
        return {"liked": repo.has_user_liked(content_id, client_info_from_request(request))}


@router.post("/{collection}/{content_id}/share")
def toggle_share(request: Request, collection: str, content_id: int = Path(..., ge=1)) -> Dict[str, Any]:
    """Share the content, or withdraw the caller's share if already present."""
    content_type = _resolve(collection)
    client = client_info_from_request(request)
    try:
        with get_session() as db:
            repo = get_repository(db, content_type)
            _require_content(repo, content_id)
            result = repo.toggle_share(content_id, client)
            if result["shared"]:
                log_action(db, f"{content_type.value}_share", content_id, client)
            return result
    except InvalidClientInfo as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{collection}/{content_id}/share")
def shared_state(request: Request, collection: str, content_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    content_type = _resolve(collection)
    with get_session() as db:
        repo = get_repository(db, content_type)
        return {"shared": repo.has_user_shared(content_id, client_info_from_request(request))}


@router.post("/{collection}/{content_id}/share/external")
def external_share(collection: str, content_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    """Count a share made outside the platform; not de-duplicated."""
    content_type = _resolve(collection)
    with get_session() as db:
        if not get_repository(db, content_type).increment_share_count(content_id):
            raise HTTPException(status_code=404, detail=f"{content_type.value.capitalize()} {content_id} not found")
        return {"counted": True}
