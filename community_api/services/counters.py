"""
Denormalized engagement counter maintenance.

Counters live on the content rows (like_count, shared_count, view_count) and
are moved with single-row conditional UPDATEs. A periodic reconciliation pass
recomputes them from the engagement ledger.
"""

import logging
from typing import Dict, Optional

from sqlalchemy import and_, func, select, update
from sqlalchemy.orm import Session

from community_api.models import CONTENT_MODELS, ContentType, Like, Share

logger = logging.getLogger(__name__)

COUNTER_COLUMNS = ("like_count", "shared_count", "view_count")


def get_content_model(content_type):
    """Resolve the ORM model for an engageable content type."""
    try:
        return CONTENT_MODELS[ContentType(content_type)]
    except (KeyError, ValueError):
        raise ValueError(f"Invalid content_type. Must be one of: {[t.value for t in ContentType]}")


def _counter_column(model, column: str):
    if column not in COUNTER_COLUMNS:
        raise ValueError(f"Invalid counter column. Must be one of: {list(COUNTER_COLUMNS)}")
    return getattr(model, column)


def increment_counter(db: Session, content_type, content_id: int, column: str) -> bool:
    """
    Unconditionally add one to a counter.

    Returns:
        True if the content row exists and was updated
    """
    model = get_content_model(content_type)
    counter = _counter_column(model, column)
    result = db.execute(
        update(model)
        .where(model.id == content_id)
        .values({counter: counter + 1})
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


def decrement_counter(db: Session, content_type, content_id: int, column: str) -> bool:
    """
    Subtract one from a counter, never going below zero.

    A decrement that matches no row (counter already at zero) is a no-op.

    Returns:
        True if the counter was decremented
    """
    model = get_content_model(content_type)
    counter = _counter_column(model, column)
    result = db.execute(
        update(model)
        .where(and_(model.id == content_id, counter > 0))
        .values({counter: counter - 1})
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        logger.debug("Clamped %s decrement on %s %s at zero", column, content_type, content_id)
        return False
    return True


def increment_view_count(db: Session, content_type, content_id: int) -> bool:
    """Raw view increment, one per content read."""
    return increment_counter(db, content_type, content_id, "view_count")


def increment_share_count(db: Session, content_type, content_id: int) -> bool:
    """Raw share increment for external shares; never touches the ledger."""
    return increment_counter(db, content_type, content_id, "shared_count")


def reconcile_counters(db: Session, content_type: Optional[str] = None) -> Dict[str, int]:
    """
    Recompute like/share counters from the engagement ledger.

    like_count is set to the exact ledger count. shared_count is only raised
    to the ledger count, since raw external shares are not in the ledger.
    Only rows whose counter disagrees are written, so the pass is idempotent
    and safe to run alongside live toggles.

    Args:
        db: Database session
        content_type: Restrict to one content type (all types if None)

    Returns:
        Mapping of content type to number of corrected rows
    """
    types = [ContentType(content_type)] if content_type else list(CONTENT_MODELS)
    corrected: Dict[str, int] = {}

    for ctype in types:
        model = CONTENT_MODELS[ctype]

        like_total = (
            select(func.count(Like.id))
            .where(Like.content_type == ctype, Like.content_id == model.id)
            .scalar_subquery()
        )
        share_total = (
            select(func.count(Share.id))
            .where(Share.content_type == ctype, Share.content_id == model.id)
            .scalar_subquery()
        )

        likes_fixed = db.execute(
            update(model)
            .where(model.like_count != like_total)
            .values(like_count=like_total)
            .execution_options(synchronize_session=False)
        ).rowcount
        shares_fixed = db.execute(
            update(model)
            .where(model.shared_count < share_total)
            .values(shared_count=share_total)
            .execution_options(synchronize_session=False)
        ).rowcount

        corrected[ctype.value] = likes_fixed + shares_fixed
        if corrected[ctype.value]:
            logger.info(
                "Reconciled %s counters: %d like rows, %d share rows corrected",
                ctype.value, likes_fixed, shares_fixed,
            )

    return corrected
