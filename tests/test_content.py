"""Tests for content repositories."""

from datetime import datetime, timedelta

import pytest

from community_api.models import (
    ArticleStatus,
    ContentType,
    EventPriority,
    EventStatus,
    Like,
    Share,
    Statistic,
)
from community_api.services import statistics
from community_api.services.content import (
    ArticleRepository,
    CommentRepository,
    EventRepository,
    PostRepository,
    VideoRepository,
    get_repository,
)
from community_api.services.identity import ClientInfo

VISITOR = ClientInfo(ip="203.0.113.5", user_agent="UA-X")


class TestPostRepository:

    def test_crud(self, db):
        repo = PostRepository(db)
        post_id = repo.create(title="First", content="Hello world", author="alice")

        assert repo.get_by_id(post_id).title == "First"
        assert repo.update(post_id, title="Renamed", author="mallory") is True

        post = repo.get_by_id(post_id)
        assert post.title == "Renamed"
        assert post.author == "alice"
        assert post.updated_at is not None

        assert repo.delete(post_id) is True
        assert repo.get_by_id(post_id) is None
        assert repo.update(post_id, title="Gone") is False
        assert repo.delete(post_id) is False

    def test_pagination_newest_first(self, db):
        repo = PostRepository(db)
        now = datetime.utcnow()
        for i in range(5):
            repo.create(title=f"Post {i}", content="Body", author="alice", created_at=now - timedelta(hours=i))

        first_page = repo.get_all(limit=2, offset=0)
        second_page = repo.get_all(limit=2, offset=2)

        assert [p.title for p in first_page] == ["Post 0", "Post 1"]
        assert [p.title for p in second_page] == ["Post 2", "Post 3"]
        assert repo.get_total_count() == 5

    def test_search_is_case_insensitive(self, db):
        repo = PostRepository(db)
        repo.create(title="Gardening tips", content="Tomatoes", author="alice")
        repo.create(title="Cooking", content="Fresh TOMATOES soup", author="bob")
        repo.create(title="Cycling", content="Routes", author="carol")

        results = repo.search("tomatoes")

        assert {p.title for p in results} == {"Gardening tips", "Cooking"}
        assert repo.get_search_total_count("tomatoes") == 2

    def test_trending_score_weights(self, db):
        repo = PostRepository(db)
        viewed = repo.create(title="Viewed", content="Body", author="a", view_count=10)
        liked = repo.create(title="Liked", content="Body", author="b", like_count=3)
        shared = repo.create(title="Shared", content="Body", author="c", shared_count=3)

        ranked = [p.id for p in repo.get_trending()]

        # 3 shares (15) > 10 views (10) > 3 likes (9)
        assert ranked == [shared, viewed, liked]
        assert repo.get_trending_total_count() == 3

    def test_delete_removes_comments_ledger_and_statistics(self, db):
        posts = PostRepository(db)
        comments = CommentRepository(db)
        post_id = posts.create(title="Thread", content="Body", author="alice")
        comment_id = comments.create(post_id=post_id, author="bob", content="Reply")

        posts.toggle_like(post_id, VISITOR)
        comments.toggle_share(comment_id, VISITOR)
        statistics.record(db, "post", post_id, "post_view")
        statistics.record(db, "comment", comment_id, "comment_like")

        assert posts.comment_count(post_id) == 1
        assert posts.delete(post_id) is True

        assert comments.get_by_id(comment_id) is None
        assert db.query(Like).count() == 0
        assert db.query(Share).count() == 0
        assert db.query(Statistic).count() == 0

    def test_engagement_operations_bound_to_type(self, db):
        repo = PostRepository(db)
        post_id = repo.create(title="Bound", content="Body", author="alice")

        assert repo.toggle_like(post_id, VISITOR) == {"liked": True, "action": "liked"}
        assert repo.has_user_liked(post_id, VISITOR) is True
        assert repo.toggle_share(post_id, VISITOR) == {"shared": True, "action": "shared"}
        assert repo.has_user_shared(post_id, VISITOR) is True
        assert repo.increment_share_count(post_id) is True
        assert repo.increment_view_count(post_id) is True

        db.expire_all()
        post = repo.get_by_id(post_id)
        assert (post.like_count, post.shared_count, post.view_count) == (1, 2, 1)


class TestArticleRepository:

    def test_published_at_stamping(self, db):
        repo = ArticleRepository(db)
        published_id = repo.create(title="Live", content="Body", author="ed", status=ArticleStatus.published)
        draft_id = repo.create(title="Draft", content="Body", author="ed")

        assert repo.get_by_id(published_id).published_at is not None
        assert repo.get_by_id(draft_id).published_at is None

        repo.update(draft_id, status=ArticleStatus.published)
        assert repo.get_by_id(draft_id).published_at is not None

    def test_status_filter(self, db):
        repo = ArticleRepository(db)
        repo.create(title="Live", content="Body", author="ed", status=ArticleStatus.published)
        repo.create(title="Draft", content="Body", author="ed")

        assert [a.title for a in repo.get_all(status="draft")] == ["Draft"]
        assert repo.get_total_count(status="published") == 1
        assert repo.get_total_count() == 2

    def test_search_and_trending_only_published(self, db):
        repo = ArticleRepository(db)
        repo.create(title="Python tips", content="Body", author="ed", status=ArticleStatus.published)
        repo.create(title="Python drafts", content="Body", author="ed", view_count=100)

        assert [a.title for a in repo.search("python")] == ["Python tips"]
        assert [a.title for a in repo.get_trending()] == ["Python tips"]

    def test_featured(self, db):
        repo = ArticleRepository(db)
        repo.create(title="Cover story", content="Body", author="ed", status=ArticleStatus.published, featured=True)
        repo.create(title="Unpublished cover", content="Body", author="ed", featured=True)
        repo.create(title="Regular", content="Body", author="ed", status=ArticleStatus.published)

        assert [a.title for a in repo.get_featured()] == ["Cover story"]
        assert repo.get_featured_total_count() == 1


class TestCommentRepository:

    def test_create_requires_post(self, db):
        with pytest.raises(ValueError):
            CommentRepository(db).create(post_id=404, author="bob", content="Orphan")

    def test_comments_oldest_first(self, db):
        post_id = PostRepository(db).create(title="Thread", content="Body", author="alice")
        repo = CommentRepository(db)
        now = datetime.utcnow()
        repo.create(post_id=post_id, author="b", content="Second", created_at=now)
        repo.create(post_id=post_id, author="a", content="First", created_at=now - timedelta(minutes=5))

        assert [c.content for c in repo.get_by_post_id(post_id)] == ["First", "Second"]


class TestVideoRepository:

    def test_like_and_view(self, db):
        repo = VideoRepository(db)
        video_id = repo.create(title="Demo", url="https://example.com/v/1", author="dave")

        repo.toggle_like(video_id, VISITOR)
        repo.increment_view_count(video_id)

        db.expire_all()
        video = repo.get_by_id(video_id)
        assert (video.like_count, video.view_count) == (1, 1)


class TestEventRepository:

    def _create(self, repo, title, days, status=EventStatus.published, priority=EventPriority.normal):
        return repo.create(
            title=title,
            event_date=datetime.utcnow() + timedelta(days=days),
            status=status,
            priority=priority,
        )

    def test_filters(self, db):
        repo = EventRepository(db)
        self._create(repo, "Past meetup", -3)
        self._create(repo, "Future meetup", 3, priority=EventPriority.high)
        self._create(repo, "Draft meetup", 5, status=EventStatus.draft)

        assert [e.title for e in repo.get_all(filters={"past": True})] == ["Past meetup"]
        assert repo.get_total_count({"upcoming": True}) == 2
        assert [e.title for e in repo.get_all(filters={"priority": EventPriority.high})] == ["Future meetup"]
        assert [e.title for e in repo.get_all(filters={"status": EventStatus.draft})] == ["Draft meetup"]

    def test_upcoming_only_published(self, db):
        repo = EventRepository(db)
        self._create(repo, "Later", 10)
        self._create(repo, "Sooner", 2)
        self._create(repo, "Hidden", 1, status=EventStatus.draft)

        assert [e.title for e in repo.get_upcoming()] == ["Sooner", "Later"]

    def test_date_range(self, db):
        repo = EventRepository(db)
        self._create(repo, "In range", 2)
        self._create(repo, "Out of range", 20)
        now = datetime.utcnow()

        events = repo.get_by_date_range(now, now + timedelta(days=7))

        assert [e.title for e in events] == ["In range"]

    def test_stats(self, db):
        repo = EventRepository(db)
        self._create(repo, "Upcoming", 400)
        self._create(repo, "Draft", 1, status=EventStatus.draft)

        stats = repo.get_stats()

        assert stats["total"] == 2
        assert stats["published"] == 1
        assert stats["upcoming"] == 1
        assert set(stats) == {"total", "published", "upcoming", "today", "this_week", "this_month"}

    def test_view_count(self, db):
        repo = EventRepository(db)
        event_id = self._create(repo, "Viewed", 1)

        assert repo.increment_view_count(event_id) is True
        assert repo.increment_view_count(9999) is False


def test_get_repository():
    assert isinstance(get_repository(None, "post"), PostRepository)
    assert isinstance(get_repository(None, ContentType.comment), CommentRepository)
    with pytest.raises(ValueError):
        get_repository(None, "event")
