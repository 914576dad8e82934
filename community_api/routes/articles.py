"""FastAPI routes for articles."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Path, Query, Request

from community_api.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from community_api.db import get_session
from community_api.models import ArticleStatus
from community_api.routes.common import page, read_with_engagement
from community_api.schemas import ArticleIn, ArticleOut, ArticleUpdate, CreatedResponse, Page
from community_api.services.content import ArticleRepository

router = APIRouter(prefix="/articles", tags=["articles"])


@router.get("", response_model=Page[ArticleOut])
def list_articles(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    status: Optional[ArticleStatus] = Query(None),
    q: Optional[str] = Query(None, min_length=1, description="Search term (published articles only)"),
) -> Dict[str, Any]:
    with get_session() as db:
        repo = ArticleRepository(db)
        if q:
            return page(repo.search(q, limit, offset), repo.get_search_total_count(q), limit, offset, ArticleOut)
        return page(
            repo.get_all(limit, offset, status=status),
            repo.get_total_count(status=status),
            limit,
            offset,
            ArticleOut,
        )


@router.get("/featured", response_model=Page[ArticleOut])
def featured_articles(
    limit: int = Query(5, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
) -> Dict[str, Any]:
    with get_session() as db:
        repo = ArticleRepository(db)
        return page(repo.get_featured(limit, offset), repo.get_featured_total_count(), limit, offset, ArticleOut)


@router.get("/trending", response_model=Page[ArticleOut])
def trending_articles(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
) -> Dict[str, Any]:
    """Published articles ranked by views*1 + likes*3 + shares*5."""
    with get_session() as db:
        repo = ArticleRepository(db)
        return page(repo.get_trending(limit, offset), repo.get_trending_total_count(), limit, offset, ArticleOut)


@router.get("/{article_id}")
def get_article(request: Request, article_id: int = Path(..., ge=1)) -> Dict[str, Any]:
    with get_session() as db:
        return read_with_engagement(db, ArticleRepository(db), article_id, request, ArticleOut)


@router.post("", response_model=CreatedResponse, status_code=201)
def create_article(payload: ArticleIn) -> Dict[str, int]:
    with get_session() as db:
        return {"id": ArticleRepository(db).create(**payload.model_dump())}


@router.put("/{article_id}")
def update_article(payload: ArticleUpdate, article_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    with get_session() as db:
        if not ArticleRepository(db).update(article_id, **payload.model_dump(exclude_unset=True)):
            raise HTTPException(status_code=404, detail=f"Article {article_id} not found")
        return {"updated": True}


@router.delete("/{article_id}")
def delete_article(article_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    with get_session() as db:
        if not ArticleRepository(db).delete(article_id):
            raise HTTPException(status_code=404, detail=f"Article {article_id} not found")
        return {"deleted": True}
