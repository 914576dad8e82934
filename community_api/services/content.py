"""
Content repositories for posts, articles, comments, videos and events.

Routine CRUD, pagination and search. Engageable repositories also expose
the like/share/view operations bound to their content type.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import extract, func, or_
from sqlalchemy.orm import Session

from community_api.models import (
    Article,
    ArticleStatus,
    Comment,
    ContentType,
    Event,
    EventStatus,
    Like,
    Post,
    Share,
    Video,
)
from community_api.services import counters, engagement, statistics
from community_api.services.identity import ClientInfo

logger = logging.getLogger(__name__)

# Weights for the trending popularity score
VIEW_WEIGHT = 1
LIKE_WEIGHT = 3
SHARE_WEIGHT = 5


class ContentRepository:
    """CRUD and listing for one content table."""

    model = None
    entity_type: str = ""
    search_columns: tuple = ()
    order_column: str = "created_at"
    editable_fields: tuple = ()

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self):
        return self.db.query(self.model)

    def _search_filter(self, term: str):
        pattern = f"%{term}%"
        return or_(*[getattr(self.model, col).ilike(pattern) for col in self.search_columns])

    def _search_query(self, term: str):
        return self._base_query().filter(self._search_filter(term))

    def create(self, **fields) -> int:
        obj = self.model(**fields)
        self.db.add(obj)
        self.db.flush()
        logger.info("Created %s %s", self.entity_type, obj.id)
        return obj.id

    def get_by_id(self, content_id: int):
        return self.db.query(self.model).filter(self.model.id == content_id).first()

    def get_all(self, limit: int = 10, offset: int = 0) -> List[Any]:
        return (
            self._base_query()
            .order_by(getattr(self.model, self.order_column).desc(), self.model.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def get_total_count(self) -> int:
        return self._base_query().count()

    def search(self, term: str, limit: int = 10, offset: int = 0) -> List[Any]:
        return (
            self._search_query(term)
            .order_by(getattr(self.model, self.order_column).desc(), self.model.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def get_search_total_count(self, term: str) -> int:
        return self._search_query(term).count()

    def update(self, content_id: int, **fields) -> bool:
        obj = self.get_by_id(content_id)
        if obj is None:
            return False
        for name, value in fields.items():
            if name in self.editable_fields and value is not None:
                setattr(obj, name, value)
        obj.updated_at = datetime.utcnow()
        self.db.flush()
        return True

    def delete(self, content_id: int) -> bool:
        obj = self.get_by_id(content_id)
        if obj is None:
            return False
        statistics.delete_for_entity(self.db, self.entity_type, content_id)
        self.db.delete(obj)
        self.db.flush()
        logger.info("Deleted %s %s", self.entity_type, content_id)
        return True


class EngageableRepository(ContentRepository):
    """Content that carries like/share/view counters."""

    content_type: ContentType = None

    def _popularity_score(self):
        return (
            self.model.view_count * VIEW_WEIGHT
            + self.model.like_count * LIKE_WEIGHT
            + self.model.shared_count * SHARE_WEIGHT
        )

    def _trending_query(self):
        return self._base_query()

    def get_trending(self, limit: int = 10, offset: int = 0) -> List[Any]:
        return (
            self._trending_query()
            .order_by(self._popularity_score().desc(), getattr(self.model, self.order_column).desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def get_trending_total_count(self) -> int:
        return self._trending_query().count()

    def toggle_like(self, content_id: int, client: ClientInfo) -> Dict[str, Any]:
        return engagement.toggle_like(self.db, self.content_type, content_id, client)

    def has_user_liked(self, content_id: int, client: ClientInfo) -> bool:
        return engagement.has_user_liked(self.db, self.content_type, content_id, client)

    def toggle_share(self, content_id: int, client: ClientInfo) -> Dict[str, Any]:
        return engagement.toggle_share(self.db, self.content_type, content_id, client)

    def has_user_shared(self, content_id: int, client: ClientInfo) -> bool:
        return engagement.has_user_shared(self.db, self.content_type, content_id, client)

    def increment_share_count(self, content_id: int) -> bool:
        return counters.increment_share_count(self.db, self.content_type, content_id)

    def increment_view_count(self, content_id: int) -> bool:
        return counters.increment_view_count(self.db, self.content_type, content_id)

    def _delete_ledger_rows(self, content_id: int) -> None:
        for ledger_model in (Like, Share):
            self.db.query(ledger_model).filter(
                ledger_model.content_type == self.content_type,
                ledger_model.content_id == content_id,
            ).delete(synchronize_session=False)

    def delete(self, content_id: int) -> bool:
        if self.get_by_id(content_id) is None:
            return False
        self._delete_ledger_rows(content_id)
        return super().delete(content_id)


class PostRepository(EngageableRepository):
    model = Post
    entity_type = "post"
    content_type = ContentType.post
    search_columns = ("title", "content", "author")
    editable_fields = ("title", "content")

    def delete(self, content_id: int) -> bool:
        # Comments go with the post; clear their ledger and statistics rows first
        comments = CommentRepository(self.db)
        for comment in comments.get_by_post_id(content_id):
            comments.delete(comment.id)
        return super().delete(content_id)

    def comment_count(self, post_id: int) -> int:
        return self.db.query(func.count(Comment.id)).filter(Comment.post_id == post_id).scalar()


class ArticleRepository(EngageableRepository):
    model = Article
    entity_type = "article"
    content_type = ContentType.article
    search_columns = ("title", "content", "tags")
    editable_fields = ("title", "content", "excerpt", "status", "tags", "featured")

    def _published(self):
        return self._base_query().filter(Article.status == ArticleStatus.published)

    def create(self, **fields) -> int:
        if fields.get("status") == ArticleStatus.published:
            fields.setdefault("published_at", datetime.utcnow())
        return super().create(**fields)

    def get_all(self, limit: int = 10, offset: int = 0, status: Optional[str] = None) -> List[Article]:
        query = self._base_query()
        if status:
            query = query.filter(Article.status == ArticleStatus(status))
        return query.order_by(Article.created_at.desc(), Article.id.desc()).limit(limit).offset(offset).all()

    def get_total_count(self, status: Optional[str] = None) -> int:
        query = self._base_query()
        if status:
            query = query.filter(Article.status == ArticleStatus(status))
        return query.count()

    def _search_query(self, term: str):
        return self._published().filter(self._search_filter(term))

    def _trending_query(self):
        return self._published()

    def get_featured(self, limit: int = 5, offset: int = 0) -> List[Article]:
        return (
            self._published()
            .filter(Article.featured.is_(True))
            .order_by(Article.published_at.desc(), Article.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def get_featured_total_count(self) -> int:
        return self._published().filter(Article.featured.is_(True)).count()

    def update(self, content_id: int, **fields) -> bool:
        article = self.get_by_id(content_id)
        if article is None:
            return False
        # Stamp published_at on the first transition to published
        if fields.get("status") == ArticleStatus.published and article.status != ArticleStatus.published:
            article.published_at = datetime.utcnow()
        return super().update(content_id, **fields)


class CommentRepository(EngageableRepository):
    model = Comment
    entity_type = "comment"
    content_type = ContentType.comment
    search_columns = ("content", "author")
    editable_fields = ("content",)

    def create(self, **fields) -> int:
        post_id = fields.get("post_id")
        if self.db.query(Post.id).filter(Post.id == post_id).first() is None:
            raise ValueError(f"Post {post_id} not found")
        return super().create(**fields)

    def get_by_post_id(self, post_id: int) -> List[Comment]:
        return (
            self.db.query(Comment)
            .filter(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )


class VideoRepository(EngageableRepository):
    model = Video
    entity_type = "video"
    content_type = ContentType.video
    search_columns = ("title", "description", "author")
    editable_fields = ("title", "description", "url")


class EventRepository(ContentRepository):
    model = Event
    entity_type = "event"
    search_columns = ("title", "description", "location")
    order_column = "event_date"
    editable_fields = (
        "title", "description", "event_date", "duration_minutes", "location",
        "meeting_link", "max_participants", "status", "priority",
    )

    def _published(self):
        return self._base_query().filter(Event.status == EventStatus.published)

    def _filtered(self, filters: Dict[str, Any]):
        query = self._base_query()
        now = datetime.utcnow()
        if filters.get("status"):
            query = query.filter(Event.status == filters["status"])
        if filters.get("priority"):
            query = query.filter(Event.priority == filters["priority"])
        if filters.get("upcoming"):
            query = query.filter(Event.event_date > now)
        if filters.get("past"):
            query = query.filter(Event.event_date < now)
        if filters.get("today"):
            start = datetime(now.year, now.month, now.day)
            query = query.filter(Event.event_date >= start, Event.event_date < start + timedelta(days=1))
        return query

    def get_all(self, limit: int = 10, offset: int = 0, filters: Optional[Dict[str, Any]] = None) -> List[Event]:
        return (
            self._filtered(filters or {})
            .order_by(Event.event_date.asc(), Event.id.asc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def get_total_count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        return self._filtered(filters or {}).count()

    def _search_query(self, term: str):
        return self._published().filter(self._search_filter(term))

    def search(self, term: str, limit: int = 10, offset: int = 0) -> List[Event]:
        return (
            self._search_query(term)
            .order_by(Event.event_date.asc(), Event.id.asc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    def get_upcoming(self, limit: int = 5) -> List[Event]:
        return (
            self._published()
            .filter(Event.event_date > datetime.utcnow())
            .order_by(Event.event_date.asc())
            .limit(limit)
            .all()
        )

    def get_by_date_range(self, start: datetime, end: datetime, status: Optional[str] = None) -> List[Event]:
        query = self._base_query().filter(Event.event_date.between(start, end))
        if status:
            query = query.filter(Event.status == status)
        return query.order_by(Event.event_date.asc()).all()

    def increment_view_count(self, content_id: int) -> bool:
        updated = (
            self.db.query(Event)
            .filter(Event.id == content_id)
            .update({Event.view_count: Event.view_count + 1}, synchronize_session=False)
        )
        return updated > 0

    def get_stats(self) -> Dict[str, int]:
        """Counts of total, published, upcoming, today, this-week and this-month events."""
        now = datetime.utcnow()
        today = datetime(now.year, now.month, now.day)
        week_start = today - timedelta(days=today.weekday())
        published = self._published()

        return {
            "total": self._base_query().count(),
            "published": published.count(),
            "upcoming": published.filter(Event.event_date > now).count(),
            "today": published.filter(
                Event.event_date >= today, Event.event_date < today + timedelta(days=1)
            ).count(),
            "this_week": published.filter(
                Event.event_date >= week_start, Event.event_date < week_start + timedelta(days=7)
            ).count(),
            "this_month": published.filter(
                extract("year", Event.event_date) == now.year,
                extract("month", Event.event_date) == now.month,
            ).count(),
        }


REPOSITORIES = {
    ContentType.post: PostRepository,
    ContentType.article: ArticleRepository,
    ContentType.comment: CommentRepository,
    ContentType.video: VideoRepository,
}


def get_repository(db: Session, content_type) -> EngageableRepository:
    """Repository for an engageable content type."""
    try:
        return REPOSITORIES[ContentType(content_type)](db)
    except ValueError:
        raise ValueError(f"Invalid content_type. Must be one of: {[t.value for t in ContentType]}")
