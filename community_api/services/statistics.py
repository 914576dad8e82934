# community_api/services/statistics.py
"""
Statistics recorder and aggregator.

An append-only log of raw engagement/view events, independent of the
engagement ledger. Duplicate entries are expected: this is the input for
analytics, not a de-duplication store.

Action names follow the "<entity_type>_<verb>" convention (e.g.
"article_view", "video_create"); log_action derives the entity type from
the text before the first underscore.
"""

import logging
from datetime import date as date_type, datetime, timedelta
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import desc, func
from sqlalchemy.orm import Session
from tenacity import retry, stop_after_attempt, wait_exponential

from community_api.cache import redis_client
from community_api.config import (
    DB_RETRY_ATTEMPTS,
    DB_RETRY_MAX_WAIT,
    DB_RETRY_MIN_WAIT,
    STATS_CACHE_TTL_SECONDS,
    STATS_RETENTION_DAYS,
)
from community_api.models import Statistic
from community_api.services.identity import ClientInfo

logger = logging.getLogger(__name__)

ACTION_DELIMITER = "_"

KNOWN_ACTIONS = (
    "post_view",
    "post_like",
    "post_share",
    "article_view",
    "article_like",
    "article_share",
    "comment_like",
    "comment_share",
    "video_view",
    "video_like",
    "video_share",
    "video_create",
    "event_view",
)

read_retry = retry(
    stop=stop_after_attempt(DB_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=DB_RETRY_MIN_WAIT, max=DB_RETRY_MAX_WAIT),
    reraise=True,
)


def entity_type_from_action(action: str) -> str:
    """Return the entity type encoded in an action name ("video_create" -> "video")."""
    return action.split(ACTION_DELIMITER, 1)[0]


def _full_action_name(entity_type: str, action: str) -> str:
    if ACTION_DELIMITER in action:
        return action
    return f"{entity_type}{ACTION_DELIMITER}{action}"


def _clip(value: Optional[str], column) -> Optional[str]:
    """Cut a client-supplied value to its column width; empty values become NULL."""
    if not value:
        return None
    return value[:column.type.length]


def record(
    db: Session,
    entity_type: str,
    entity_id: int,
    action: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    country: Optional[str] = None,
    city: Optional[str] = None,
) -> int:
    """
    Append a statistics event.

    Client-supplied ip, country and city are cut to their column widths.

    Returns:
        ID of the new row
    """
    stat = Statistic(
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        ip_address=_clip(ip_address, Statistic.ip_address),
        user_agent=user_agent or None,
        country=_clip(country, Statistic.country),
        city=_clip(city, Statistic.city),
        created_at=datetime.utcnow(),
    )
    db.add(stat)
    db.flush()
    return stat.id


def log_action(db: Session, action: str, entity_id: int, client: ClientInfo) -> int:
    """Record an action, deriving the entity type from the action name."""
    return record(
        db,
        entity_type_from_action(action),
        entity_id,
        action,
        client.ip,
        client.user_agent,
        client.country,
        client.city,
    )


def get_by_entity(db: Session, entity_type: str, entity_id: int, action: Optional[str] = None) -> List[Statistic]:
    """All events for one entity, newest first."""
    query = db.query(Statistic).filter(Statistic.entity_type == entity_type, Statistic.entity_id == entity_id)
    if action:
        query = query.filter(Statistic.action == action)
    return query.order_by(Statistic.created_at.desc(), Statistic.id.desc()).all()


def get_count(db: Session, entity_type: str, entity_id: int, action: str) -> int:
    return (
        db.query(func.count(Statistic.id))
        .filter(
            Statistic.entity_type == entity_type,
            Statistic.entity_id == entity_id,
            Statistic.action == action,
        )
        .scalar()
    )


@read_retry
def get_daily_summary(
    db: Session,
    date: Optional[Union[date_type, str]] = None,
    entity_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Daily totals grouped by day, entity type and action.

    Args:
        db: Database session
        date: Restrict to a single day
        entity_type: Restrict to one entity type

    Returns:
        List of dicts with date, entity_type, action, count, unique_users
    """
    day = func.date(Statistic.created_at)
    query = db.query(
        day.label("date"),
        Statistic.entity_type,
        Statistic.action,
        func.count(Statistic.id).label("count"),
        func.count(func.distinct(Statistic.ip_address)).label("unique_users"),
    )

    if date:
        query = query.filter(day == (date.isoformat() if isinstance(date, date_type) else date))
    if entity_type:
        query = query.filter(Statistic.entity_type == entity_type)

    rows = (
        query.group_by(day, Statistic.entity_type, Statistic.action)
        .order_by(desc("date"), Statistic.entity_type, Statistic.action)
        .all()
    )

    return [
        {
            "date": str(row.date),
            "entity_type": row.entity_type,
            "action": row.action,
            "count": row.count,
            "unique_users": row.unique_users,
        }
        for row in rows
    ]


@read_retry
def _query_top_content(db: Session, entity_type: str, action: str, limit: int, days: int) -> List[Dict[str, Any]]:
    cutoff = datetime.utcnow() - timedelta(days=days)
    total = func.count(Statistic.id).label("total_count")
    rows = (
        db.query(
            Statistic.entity_id,
            total,
            func.count(func.distinct(Statistic.ip_address)).label("unique_count"),
        )
        .filter(
            Statistic.entity_type == entity_type,
            Statistic.action == action,
            Statistic.created_at >= cutoff,
        )
        .group_by(Statistic.entity_id)
        .order_by(desc("total_count"), Statistic.entity_id)
        .limit(limit)
        .all()
    )
    return [
        {"entity_id": row.entity_id, "total_count": row.total_count, "unique_count": row.unique_count}
        for row in rows
    ]


def get_top_content(
    db: Session,
    entity_type: str,
    action: str = "view",
    limit: int = 10,
    days: int = 30,
    use_cache: bool = True,
) -> List[Dict[str, Any]]:
    """
    Most active entities of a type within a trailing window.

    The action is matched exactly as given. A bare verb ("view") that matches
    no rows falls back to the prefixed name ("article_view").

    Args:
        db: Database session
        entity_type: Entity type to rank
        action: Action name, bare verb or full "<entity_type>_<verb>"
        limit: Maximum rows to return
        days: Trailing window in days
        use_cache: Serve from Redis when the cache is enabled

    Returns:
        List of dicts with entity_id, total_count, unique_count
    """
    cache_key = f"stats:top:{entity_type}:{action}:{limit}:{days}"

    if use_cache:
        cached = redis_client.get_json(cache_key)
        if cached is not None:
            return cached

    result = _query_top_content(db, entity_type, action, limit, days)
    full_action = _full_action_name(entity_type, action)
    if not result and full_action != action:
        result = _query_top_content(db, entity_type, full_action, limit, days)

    if use_cache:
        redis_client.set_json(cache_key, result, STATS_CACHE_TTL_SECONDS)
    return result


@read_retry
def get_geographic_stats(db: Session, entity_type: Optional[str] = None, days: int = 30) -> List[Dict[str, Any]]:
    """Event counts grouped by (country, city) within a trailing window."""
    cutoff = datetime.utcnow() - timedelta(days=days)
    query = db.query(
        Statistic.country,
        Statistic.city,
        func.count(Statistic.id).label("count"),
        func.count(func.distinct(Statistic.ip_address)).label("unique_users"),
    ).filter(Statistic.created_at >= cutoff, Statistic.country.isnot(None))

    if entity_type:
        query = query.filter(Statistic.entity_type == entity_type)

    rows = (
        query.group_by(Statistic.country, Statistic.city)
        .order_by(desc("count"), Statistic.country, Statistic.city)
        .all()
    )
    return [
        {"country": row.country, "city": row.city, "count": row.count, "unique_users": row.unique_users}
        for row in rows
    ]


def delete_for_entity(db: Session, entity_type: str, entity_id: int) -> int:
    """Drop all events of a deleted entity."""
    return (
        db.query(Statistic)
        .filter(Statistic.entity_type == entity_type, Statistic.entity_id == entity_id)
        .delete(synchronize_session=False)
    )


def clean_old_stats(db: Session, days_to_keep: int = STATS_RETENTION_DAYS) -> int:
    """
    Retention sweep: delete events older than the retention window.

    Returns:
        Number of rows removed
    """
    cutoff = datetime.utcnow() - timedelta(days=days_to_keep)
    deleted = (
        db.query(Statistic)
        .filter(Statistic.created_at < cutoff)
        .delete(synchronize_session=False)
    )
    logger.info("Removed %d statistics rows older than %s", deleted, cutoff.isoformat())
    return deleted
