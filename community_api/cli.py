# community_api/cli.py
from datetime import datetime
from typing import Optional

import typer

from community_api.config import STATS_RETENTION_DAYS
from community_api.db import get_session
from community_api.services import seeder
from community_api.services.counters import reconcile_counters
from community_api.services.statistics import clean_old_stats, get_daily_summary, get_top_content

app = typer.Typer(help="Community API maintenance CLI")


@app.command("seed")
def seed_cmd(
    posts: int = typer.Option(200, help="Number of posts"),
    articles: int = typer.Option(50, help="Number of articles"),
    videos: int = typer.Option(30, help="Number of videos"),
    events: int = typer.Option(20, help="Number of events"),
    clients: int = typer.Option(300, help="Number of anonymous visitors"),
):
    """Populate the database with demo data."""
    # Set deterministic seeds for reproducible data
    seeder.seed_random_generators()

    with get_session() as db:
        ps = seeder.make_posts(db, posts)
        arts = seeder.make_articles(db, articles)
        cs = seeder.make_comments(db, ps)
        vs = seeder.make_videos(db, videos)
        seeder.make_events(db, events)
        visitors = seeder.make_clients(clients)
        seeder.make_engagements(
            db,
            {"post": ps, "article": arts, "comment": cs, "video": vs},
            visitors,
        )
    typer.echo(
        f"Seed complete: posts={posts}, articles={articles}, comments={len(cs)}, "
        f"videos={videos}, events={events}"
    )


@app.command("clean-stats")
def clean_stats_cmd(
    days: int = typer.Option(STATS_RETENTION_DAYS, "--days", "-d", help="Days of statistics to keep", min=0),
):
    """Delete statistics events older than the retention window."""
    try:
        with get_session() as db:
            deleted = clean_old_stats(db, days)
        typer.echo(f"✓ Removed {deleted:,} statistics rows older than {days} days")
    except Exception as e:
        typer.echo(f"❌ Error cleaning statistics: {e}", err=True)
        raise typer.Exit(1)


@app.command("reconcile")
def reconcile_cmd(
    content_type: Optional[str] = typer.Option(
        None, "--type", "-t", help="Content type: post, article, comment or video (default: all)"
    ),
):
    """Recompute like/share counters from the engagement ledger."""
    try:
        with get_session() as db:
            corrected = reconcile_counters(db, content_type)
    except ValueError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)

    typer.echo("\n🔧 Counter reconciliation:")
    typer.echo("─" * 30)
    for ctype, rows in corrected.items():
        typer.echo(f"{ctype:<10} {rows:>6,} rows corrected")


@app.command("top-content")
def top_content_cmd(
    entity_type: str = typer.Argument(..., help="Entity type, e.g. article"),
    action: str = typer.Option("view", "--action", "-a", help="Action verb or full action name"),
    limit: int = typer.Option(10, "--limit", "-l", help="Number of results (1-100)", min=1, max=100),
    days: int = typer.Option(30, "--days", "-d", help="Trailing window in days", min=1),
):
    """Show the most active entities of a type."""
    with get_session() as db:
        rows = get_top_content(db, entity_type, action=action, limit=limit, days=days, use_cache=False)

    if not rows:
        typer.echo(f"No {entity_type} activity in the last {days} days")
        return

    typer.echo(f"\n🏆 Top {len(rows)} {entity_type} by {action} (last {days} days):")
    typer.echo("─" * 50)
    typer.echo(f"{'#':<3} {'ID':<10} {'Total':<10} {'Unique':<10}")
    for i, row in enumerate(rows, 1):
        typer.echo(f"{i:<3} {row['entity_id']:<10} {row['total_count']:<10,} {row['unique_count']:<10,}")


@app.command("daily-summary")
def daily_summary_cmd(
    date: Optional[str] = typer.Option(None, "--date", help="Day in YYYY-MM-DD format"),
    entity_type: Optional[str] = typer.Option(None, "--type", "-t", help="Entity type filter"),
):
    """Show daily event totals."""
    if date:
        try:
            datetime.strptime(date, "%Y-%m-%d")
        except ValueError:
            typer.echo("❌ Date must be in YYYY-MM-DD format", err=True)
            raise typer.Exit(1)

    with get_session() as db:
        rows = get_daily_summary(db, date, entity_type)

    if not rows:
        typer.echo("No statistics found")
        return

    typer.echo("\n📊 Daily summary:")
    typer.echo("─" * 70)
    typer.echo(f"{'Date':<12} {'Type':<10} {'Action':<20} {'Count':<10} {'Unique':<10}")
    typer.echo("─" * 70)
    for row in rows:
        typer.echo(
            f"{row['date']:<12} {row['entity_type']:<10} {row['action']:<20} "
            f"{row['count']:<10,} {row['unique_users']:<10,}"
        )


if __name__ == "__main__":
    app()
