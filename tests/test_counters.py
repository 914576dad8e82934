"""Tests for denormalized counter maintenance and reconciliation."""

import pytest

from community_api.models import Comment, Like, Post, Share, Video
from community_api.services.counters import (
    decrement_counter,
    increment_counter,
    increment_share_count,
    increment_view_count,
    reconcile_counters,
)
from community_api.services.engagement import has_user_shared, toggle_like, toggle_share
from community_api.services.identity import ClientInfo


@pytest.fixture
def post(db):
    post = Post(title="Counters", content="Body", author="bob")
    db.add(post)
    db.flush()
    return post


def counters_of(db, model, content_id):
    row = db.query(model.like_count, model.shared_count, model.view_count).filter(model.id == content_id).one()
    return tuple(row)


class TestCounterUpdates:

    def test_increment_missing_row(self, db):
        assert increment_counter(db, "post", 999, "like_count") is False
        assert increment_view_count(db, "video", 999) is False

    def test_decrement_never_goes_negative(self, db, post):
        assert decrement_counter(db, "post", post.id, "like_count") is False
        assert counters_of(db, Post, post.id) == (0, 0, 0)

        increment_counter(db, "post", post.id, "like_count")
        assert decrement_counter(db, "post", post.id, "like_count") is True
        assert decrement_counter(db, "post", post.id, "like_count") is False
        assert counters_of(db, Post, post.id) == (0, 0, 0)

    def test_invalid_column(self, db, post):
        with pytest.raises(ValueError):
            increment_counter(db, "post", post.id, "title")

    def test_invalid_content_type(self, db):
        with pytest.raises(ValueError):
            increment_view_count(db, "playlist", 1)

    def test_view_count_increments(self, db, post):
        for _ in range(3):
            assert increment_view_count(db, "post", post.id) is True
        assert counters_of(db, Post, post.id) == (0, 0, 3)

    def test_raw_share_bypasses_ledger(self, db, post):
        """External shares are counted every time and never de-duplicated."""
        visitor = ClientInfo(ip="203.0.113.5", user_agent="UA-X")

        for _ in range(4):
            assert increment_share_count(db, "post", post.id) is True

        assert counters_of(db, Post, post.id) == (0, 4, 0)
        assert db.query(Share).count() == 0
        assert has_user_shared(db, "post", post.id, visitor) is False


class TestReconcile:

    def test_reconcile_repairs_like_drift(self, db, post):
        visitors = [ClientInfo(ip=f"198.51.100.{i}", user_agent="UA") for i in range(3)]
        for visitor in visitors:
            toggle_like(db, "post", post.id, visitor)
        db.query(Post).filter(Post.id == post.id).update({Post.like_count: 10}, synchronize_session=False)

        corrected = reconcile_counters(db, "post")

        assert corrected == {"post": 1}
        assert counters_of(db, Post, post.id)[0] == 3

    def test_reconcile_raises_low_share_count_only(self, db, post):
        visitor = ClientInfo(ip="203.0.113.5", user_agent="UA-X")
        toggle_share(db, "post", post.id, visitor)
        db.query(Post).filter(Post.id == post.id).update({Post.shared_count: 0}, synchronize_session=False)

        reconcile_counters(db, "post")
        assert counters_of(db, Post, post.id)[1] == 1

        # External shares above the ledger count are preserved
        increment_share_count(db, "post", post.id)
        increment_share_count(db, "post", post.id)
        assert reconcile_counters(db, "post") == {"post": 0}
        assert counters_of(db, Post, post.id)[1] == 3

    def test_reconcile_is_idempotent_across_types(self, db, post):
        comment = Comment(post_id=post.id, author="carol", content="Nice")
        video = Video(title="Clip", url="https://example.com/v/1", author="dave")
        db.add_all([comment, video])
        db.flush()
        visitor = ClientInfo(ip="203.0.113.5", user_agent="UA-X")
        toggle_like(db, "comment", comment.id, visitor)
        toggle_like(db, "video", video.id, visitor)

        db.query(Like).filter(Like.content_type == "video").delete(synchronize_session=False)

        first = reconcile_counters(db)
        second = reconcile_counters(db)

        assert first == {"post": 0, "article": 0, "comment": 0, "video": 1}
        assert second == {"post": 0, "article": 0, "comment": 0, "video": 0}
        assert counters_of(db, Comment, comment.id)[0] == 1
        assert counters_of(db, Video, video.id)[0] == 0

    def test_reconcile_rejects_unknown_type(self, db):
        with pytest.raises(ValueError):
            reconcile_counters(db, "event")
