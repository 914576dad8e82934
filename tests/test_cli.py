"""Tests for the maintenance CLI."""

from datetime import datetime, timedelta

from typer.testing import CliRunner

from community_api.cli import app
from community_api.models import Post, Statistic

runner = CliRunner()


def test_reconcile_reports_corrections(session_factory):
    with session_factory() as db:
        db.add(Post(title="Drifted", content="Body", author="alice", like_count=5))
        db.commit()

    result = runner.invoke(app, ["reconcile", "--type", "post"])

    assert result.exit_code == 0
    assert "post" in result.output
    with session_factory() as db:
        assert db.query(Post.like_count).scalar() == 0


def test_reconcile_unknown_type(session_factory):
    result = runner.invoke(app, ["reconcile", "--type", "event"])
    assert result.exit_code == 1


def test_clean_stats(session_factory):
    with session_factory() as db:
        db.add_all([
            Statistic(entity_type="post", entity_id=1, action="post_view",
                      created_at=datetime.utcnow() - timedelta(days=40)),
            Statistic(entity_type="post", entity_id=1, action="post_view"),
        ])
        db.commit()

    result = runner.invoke(app, ["clean-stats", "--days", "30"])

    assert result.exit_code == 0
    assert "Removed 1 statistics rows" in result.output
    with session_factory() as db:
        assert db.query(Statistic).count() == 1


def test_top_content_and_daily_summary(session_factory):
    with session_factory() as db:
        for entity_id in (3, 3, 8):
            db.add(Statistic(entity_type="video", entity_id=entity_id, action="video_view", ip_address="203.0.113.5"))
        db.commit()

    top = runner.invoke(app, ["top-content", "video"])
    daily = runner.invoke(app, ["daily-summary", "--type", "video"])

    assert top.exit_code == 0
    assert "Top 2 video by view" in top.output
    assert daily.exit_code == 0
    assert "video_view" in daily.output


def test_daily_summary_rejects_bad_date(session_factory):
    result = runner.invoke(app, ["daily-summary", "--date", "19-10-2026"])
    assert result.exit_code == 1
