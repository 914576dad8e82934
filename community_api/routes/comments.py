# community_api/routes/comments.py
"""FastAPI routes for comments."""

from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, Path

from community_api.db import get_session
from community_api.schemas import CommentIn, CommentOut, CommentUpdate, CreatedResponse
from community_api.services.content import CommentRepository

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/post/{post_id}", response_model=List[CommentOut])
def get_post_comments(
    post_id: int = Path(..., description="ID of the post", ge=1),
) -> List[CommentOut]:
    """All comments on a post, oldest first."""
    with get_session() as db:
        return [CommentOut.model_validate(c) for c in CommentRepository(db).get_by_post_id(post_id)]


@router.get("/{comment_id}", response_model=CommentOut)
def get_comment(comment_id: int = Path(..., ge=1)) -> CommentOut:
    with get_session() as db:
        comment = CommentRepository(db).get_by_id(comment_id)
        if comment is None:
            raise HTTPException(status_code=404, detail=f"Comment {comment_id} not found")
        return CommentOut.model_validate(comment)


@router.post("", response_model=CreatedResponse, status_code=201)
def create_comment(payload: CommentIn) -> Dict[str, Any]:
    try:
        with get_session() as db:
            return {"id": CommentRepository(db).create(**payload.model_dump())}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{comment_id}")
def update_comment(payload: CommentUpdate, comment_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    with get_session() as db:
        if not CommentRepository(db).update(comment_id, content=payload.content):
            raise HTTPException(status_code=404, detail=f"Comment {comment_id} not found")
        return {"updated": True}


@router.delete("/{comment_id}")
def delete_comment(comment_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    with get_session() as db:
        if not CommentRepository(db).delete(comment_id):
            raise HTTPException(status_code=404, detail=f"Comment {comment_id} not found")
        return {"deleted": True}
