"""
Pydantic request/response models shared by the content routers.
"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from community_api.models import ArticleStatus, EventPriority, EventStatus

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """Pagination envelope."""

    items: List[T] = Field(..., description="Items on this page")
    total: int = Field(..., description="Total matching items")
    limit: int = Field(..., description="Page size")
    offset: int = Field(..., description="Offset of the first item")


class EngagementCounts(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    like_count: int = 0
    shared_count: int = 0
    view_count: int = 0


class PostIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1, max_length=100)


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None


class PostOut(EngagementCounts):
    id: int
    title: str
    content: str
    author: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class ArticleIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    excerpt: Optional[str] = None
    author: str = Field(..., min_length=1, max_length=100)
    status: ArticleStatus = ArticleStatus.draft
    tags: Optional[str] = Field(None, max_length=255)
    featured: bool = False


class ArticleUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    content: Optional[str] = None
    excerpt: Optional[str] = None
    status: Optional[ArticleStatus] = None
    tags: Optional[str] = Field(None, max_length=255)
    featured: Optional[bool] = None


class ArticleOut(EngagementCounts):
    id: int
    title: str
    content: str
    excerpt: Optional[str] = None
    author: str
    status: ArticleStatus
    tags: Optional[str] = None
    featured: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None


class CommentIn(BaseModel):
    post_id: int = Field(..., ge=1)
    author: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1)


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1)


class CommentOut(EngagementCounts):
    id: int
    post_id: int
    author: str
    content: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class VideoIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    url: str = Field(..., min_length=1, max_length=500)
    author: str = Field(..., min_length=1, max_length=100)


class VideoUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    url: Optional[str] = Field(None, max_length=500)


class VideoOut(EngagementCounts):
    id: int
    title: str
    description: Optional[str] = None
    url: str
    author: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class EventIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    event_date: datetime
    duration_minutes: int = Field(60, ge=1)
    location: Optional[str] = Field(None, max_length=255)
    meeting_link: Optional[str] = Field(None, max_length=500)
    max_participants: Optional[int] = Field(None, ge=1)
    status: EventStatus = EventStatus.draft
    priority: EventPriority = EventPriority.normal
    created_by: Optional[str] = Field(None, max_length=100)


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    event_date: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(None, ge=1)
    location: Optional[str] = Field(None, max_length=255)
    meeting_link: Optional[str] = Field(None, max_length=500)
    max_participants: Optional[int] = Field(None, ge=1)
    status: Optional[EventStatus] = None
    priority: Optional[EventPriority] = None


class EventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    event_date: datetime
    duration_minutes: int
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    max_participants: Optional[int] = None
    status: EventStatus
    priority: EventPriority
    created_by: Optional[str] = None
    view_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class CreatedResponse(BaseModel):
    id: int = Field(..., description="ID of the created row")
