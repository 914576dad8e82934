"""
Engagement ledger and toggle protocol.

Likes and shares are recorded per (identity, user agent, content) in the
likes/shares tables. Presence of a row means "engaged". Toggling flips that
state and moves the denormalized counter on the content row.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from community_api.models import ContentType, EngagementAction, LEDGER_MODELS
from community_api.services.counters import (
    decrement_counter,
    get_content_model,
    increment_counter,
)
from community_api.services.identity import ClientInfo, normalize_user_agent, resolve_identity_key

logger = logging.getLogger(__name__)

COUNTER_FOR_ACTION = {
    EngagementAction.like: "like_count",
    EngagementAction.share: "shared_count",
}

PAST_TENSE = {
    EngagementAction.like: "liked",
    EngagementAction.share: "shared",
}


@dataclass
class ToggleResult:
    """Outcome of a toggle call."""
    engaged: bool
    action: str

    def as_response(self, key: str) -> Dict[str, Union[bool, str]]:
        """Shape the result as {<key>: bool, "action": str}."""
        return {key: self.engaged, "action": self.action}


class EngagementLedger:
    """Idempotent toggle over one engagement action (like or share)."""

    def __init__(self, action: EngagementAction):
        self.action = EngagementAction(action)
        self.model = LEDGER_MODELS[self.action]
        self.counter = COUNTER_FOR_ACTION[self.action]

    def _natural_key(self, content_type: ContentType, content_id: int, client: ClientInfo):
        return (
            self.model.user_ip == resolve_identity_key(client),
            self.model.user_agent == normalize_user_agent(client),
            self.model.content_type == content_type,
            self.model.content_id == content_id,
        )

    def _find_record(self, db: Session, content_type: ContentType, content_id: int, client: ClientInfo):
        return db.query(self.model).filter(*self._natural_key(content_type, content_id, client)).first()

    def _insert_record(self, db: Session, content_type: ContentType, content_id: int, client: ClientInfo) -> bool:
        """
        Insert a ledger row inside a savepoint.

        Returns:
            False if the natural-key constraint rejected the row, meaning a
            concurrent request already recorded this engagement
        """
        record = self.model(
            user_ip=resolve_identity_key(client),
            user_agent=normalize_user_agent(client),
            content_type=content_type,
            content_id=content_id,
        )
        try:
            with db.begin_nested():
                db.add(record)
        except IntegrityError:
            logger.info(
                "Concurrent %s on %s %s already recorded; treating as engaged",
                self.action.value, content_type.value, content_id,
            )
            return False
        return True

    def toggle(self, db: Session, content_type, content_id: int, client: ClientInfo) -> ToggleResult:
        """
        Flip engagement state for the client on a piece of content.

        Args:
            db: Database session
            content_type: Engageable content type
            content_id: ID of the content row
            client: Requesting client metadata

        Returns:
            ToggleResult with the new engagement state
        """
        if content_id is None:
            raise ValueError("content_id is required")
        content_type = ContentType(content_type)
        model = get_content_model(content_type)
        if db.query(model.id).filter(model.id == content_id).first() is None:
            raise ValueError(f"{content_type.value.capitalize()} {content_id} not found")
        verb = PAST_TENSE[self.action]

        existing = self._find_record(db, content_type, content_id, client)
        if existing is not None:
            deleted = (
                db.query(self.model)
                .filter(*self._natural_key(content_type, content_id, client))
                .delete(synchronize_session=False)
            )
            # Only the request that removed the row moves the counter
            if deleted:
                decrement_counter(db, content_type, content_id, self.counter)
            logger.debug("un%s %s %s", verb, content_type.value, content_id)
            return ToggleResult(engaged=False, action=f"un{verb}")

        if self._insert_record(db, content_type, content_id, client):
            increment_counter(db, content_type, content_id, self.counter)
        logger.debug("%s %s %s", verb, content_type.value, content_id)
        return ToggleResult(engaged=True, action=verb)

    def has_engaged(self, db: Session, content_type, content_id: int, client: ClientInfo) -> bool:
        """Check whether the client currently has this engagement recorded."""
        content_type = ContentType(content_type)
        return self._find_record(db, content_type, content_id, client) is not None

    def count(self, db: Session, content_type, content_id: int) -> int:
        """Count ledger rows for a piece of content."""
        return (
            db.query(self.model)
            .filter(self.model.content_type == ContentType(content_type), self.model.content_id == content_id)
            .count()
        )


like_ledger = EngagementLedger(EngagementAction.like)
share_ledger = EngagementLedger(EngagementAction.share)


def toggle_like(db: Session, content_type, content_id: int, client: ClientInfo) -> Dict[str, Union[bool, str]]:
    """Toggle a like; returns {"liked": bool, "action": "liked"|"unliked"}."""
    return like_ledger.toggle(db, content_type, content_id, client).as_response("liked")


def has_user_liked(db: Session, content_type, content_id: int, client: ClientInfo) -> bool:
    return like_ledger.has_engaged(db, content_type, content_id, client)


def toggle_share(db: Session, content_type, content_id: int, client: ClientInfo) -> Dict[str, Union[bool, str]]:
    """Toggle a share; returns {"shared": bool, "action": "shared"|"unshared"}."""
    return share_ledger.toggle(db, content_type, content_id, client).as_response("shared")


def has_user_shared(db: Session, content_type, content_id: int, client: ClientInfo) -> bool:
    return share_ledger.has_engaged(db, content_type, content_id, client)


def engagement_state(db: Session, content_type, content_id: int, client: Optional[ClientInfo]) -> Dict[str, bool]:
    """Liked/shared flags for a content read; both False without a client."""
    if client is None:
        return {"liked": False, "shared": False}
    return {
        "liked": has_user_liked(db, content_type, content_id, client),
        "shared": has_user_shared(db, content_type, content_id, client),
    }
