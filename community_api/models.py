from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean, Column, Integer, String, DateTime, Text, ForeignKey, Enum, UniqueConstraint, Index, CheckConstraint
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class ContentType(str, PyEnum):
    post = "post"
    article = "article"
    comment = "comment"
    video = "video"


class EngagementAction(str, PyEnum):
    like = "like"
    share = "share"


class ArticleStatus(str, PyEnum):
    draft = "draft"
    published = "published"


class EventStatus(str, PyEnum):
    draft = "draft"
    published = "published"
    cancelled = "cancelled"


class EventPriority(str, PyEnum):
    low = "low"
    normal = "normal"
    high = "high"


class EngagementCountersMixin:
    """Denormalized engagement counters shared by every engageable entity."""

    like_count = Column(Integer, nullable=False, default=0, server_default="0")
    shared_count = Column(Integer, nullable=False, default=0, server_default="0")
    view_count = Column(Integer, nullable=False, default=0, server_default="0")


class Post(EngagementCountersMixin, Base):
    __tablename__ = "posts"
    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    author = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("like_count >= 0", name="ck_posts_like_count"),
        CheckConstraint("shared_count >= 0", name="ck_posts_shared_count"),
    )

Index("idx_posts_created", Post.created_at.desc())


class Article(EngagementCountersMixin, Base):
    __tablename__ = "articles"
    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=True)
    author = Column(String(100), nullable=False)
    status = Column(Enum(ArticleStatus, name="article_status"), nullable=False, default=ArticleStatus.draft)
    tags = Column(String(255), nullable=True)
    featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    published_at = Column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("like_count >= 0", name="ck_articles_like_count"),
        CheckConstraint("shared_count >= 0", name="ck_articles_shared_count"),
    )

Index("idx_articles_status_published", Article.status, Article.published_at)


class Comment(EngagementCountersMixin, Base):
    __tablename__ = "comments"
    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    author = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    post = relationship("Post", back_populates="comments")

    __table_args__ = (
        CheckConstraint("like_count >= 0", name="ck_comments_like_count"),
        CheckConstraint("shared_count >= 0", name="ck_comments_shared_count"),
    )


class Video(EngagementCountersMixin, Base):
    __tablename__ = "videos"
    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    url = Column(String(500), nullable=False)
    author = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    __table_args__ = (
        CheckConstraint("like_count >= 0", name="ck_videos_like_count"),
        CheckConstraint("shared_count >= 0", name="ck_videos_shared_count"),
    )


class Event(Base):
    __tablename__ = "events"
    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_date = Column(DateTime, nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False, default=60)
    location = Column(String(255), nullable=True)
    meeting_link = Column(String(500), nullable=True)
    max_participants = Column(Integer, nullable=True)
    status = Column(Enum(EventStatus, name="event_status"), nullable=False, default=EventStatus.draft)
    priority = Column(Enum(EventPriority, name="event_priority"), nullable=False, default=EventPriority.normal)
    created_by = Column(String(100), nullable=True)
    view_count = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)


class Like(Base):
    __tablename__ = "likes"
    id = Column(Integer, primary_key=True)
    # Identity key: client fingerprint or network IP
    user_ip = Column(String(45), nullable=False)
    user_agent = Column(String(255), nullable=False)
    content_type = Column(Enum(ContentType, name="content_type"), nullable=False)
    content_id = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_ip", "user_agent", "content_type", "content_id", name="uq_likes_identity_content"),
    )

Index("idx_likes_content", Like.content_type, Like.content_id)


class Share(Base):
    __tablename__ = "shares"
    id = Column(Integer, primary_key=True)
    user_ip = Column(String(45), nullable=False)
    user_agent = Column(String(255), nullable=False)
    content_type = Column(Enum(ContentType, name="content_type"), nullable=False)
    content_id = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_ip", "user_agent", "content_type", "content_id", name="uq_shares_identity_content"),
    )

Index("idx_shares_content", Share.content_type, Share.content_id)


class Statistic(Base):
    __tablename__ = "statistics"
    id = Column(Integer, primary_key=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(Integer, nullable=False)
    action = Column(String(100), nullable=False)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(Text, nullable=True)
    country = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

Index("idx_statistics_entity", Statistic.entity_type, Statistic.entity_id, Statistic.created_at)
Index("idx_statistics_created", Statistic.created_at)


# Content models that carry engagement counters
CONTENT_MODELS = {
    ContentType.post: Post,
    ContentType.article: Article,
    ContentType.comment: Comment,
    ContentType.video: Video,
}

LEDGER_MODELS = {
    EngagementAction.like: Like,
    EngagementAction.share: Share,
}
