"""
Helpers shared by the content routers.
"""

from typing import Any, Dict

from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from community_api.services.content import EngageableRepository
from community_api.services.engagement import engagement_state
from community_api.services.identity import client_info_from_request
from community_api.services.statistics import log_action


def read_with_engagement(db: Session, repo: EngageableRepository, content_id: int, request: Request, schema) -> Dict[str, Any]:
    """
    Load a content item for a client read.

    Counts the view, logs a "<type>_view" statistics event and reports
    whether the caller has liked/shared the item.
    """
    if not repo.increment_view_count(content_id):
        raise HTTPException(status_code=404, detail=f"{repo.entity_type.capitalize()} {content_id} not found")

    client = client_info_from_request(request)
    log_action(db, f"{repo.entity_type}_view", content_id, client)

    obj = repo.get_by_id(content_id)
    data = schema.model_validate(obj).model_dump()
    data.update(engagement_state(db, repo.content_type, content_id, client))
    return data


def page(items, total: int, limit: int, offset: int, schema) -> Dict[str, Any]:
    return {
        "items": [schema.model_validate(item) for item in items],
        "total": total,
        "limit": limit,
        "offset": offset,
    }
