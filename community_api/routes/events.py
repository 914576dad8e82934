"""FastAPI routes for events."""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Path, Query, Request

from community_api.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from community_api.db import get_session
from community_api.models import EventPriority, EventStatus
from community_api.routes.common import page
from community_api.schemas import CreatedResponse, EventIn, EventOut, EventUpdate, Page
from community_api.services.content import EventRepository
from community_api.services.identity import client_info_from_request
from community_api.services.statistics import log_action

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=Page[EventOut])
def list_events(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    status: Optional[EventStatus] = Query(None),
    priority: Optional[EventPriority] = Query(None),
    upcoming: bool = Query(False),
    past: bool = Query(False),
    today: bool = Query(False),
    q: Optional[str] = Query(None, min_length=1, description="Search term (published events only)"),
) -> Dict[str, Any]:
    with get_session() as db:
        repo = EventRepository(db)
        if q:
            return page(repo.search(q, limit, offset), repo.get_search_total_count(q), limit, offset, EventOut)
        filters = {"status": status, "priority": priority, "upcoming": upcoming, "past": past, "today": today}
        return page(repo.get_all(limit, offset, filters), repo.get_total_count(filters), limit, offset, EventOut)


@router.get("/upcoming")
def upcoming_events(limit: int = Query(5, ge=1, le=MAX_PAGE_SIZE)) -> Dict[str, Any]:
    with get_session() as db:
        events = EventRepository(db).get_upcoming(limit)
        return {"items": [EventOut.model_validate(e) for e in events]}


@router.get("/range")
def events_in_range(
    start: datetime = Query(...),
    end: datetime = Query(...),
    status: Optional[EventStatus] = Query(None),
) -> Dict[str, Any]:
    if end < start:
        raise HTTPException(status_code=400, detail="end must not be before start")
    with get_session() as db:
        events = EventRepository(db).get_by_date_range(start, end, status)
        return {"items": [EventOut.model_validate(e) for e in events]}


@router.get("/stats")
def event_stats() -> Dict[str, int]:
    with get_session() as db:
        return EventRepository(db).get_stats()


@router.get("/{event_id}", response_model=EventOut)
def get_event(request: Request, event_id: int = Path(..., ge=1)) -> EventOut:
    with get_session() as db:
        repo = EventRepository(db)
        if not repo.increment_view_count(event_id):
            raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
        log_action(db, "event_view", event_id, client_info_from_request(request))
        return EventOut.model_validate(repo.get_by_id(event_id))


@router.post("", response_model=CreatedResponse, status_code=201)
def create_event(payload: EventIn) -> Dict[str, int]:
    with get_session() as db:
        return {"id": EventRepository(db).create(**payload.model_dump())}


@router.put("/{event_id}")
def update_event(payload: EventUpdate, event_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    with get_session() as db:
        if not EventRepository(db).update(event_id, **payload.model_dump(exclude_unset=True)):
            raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
        return {"updated": True}


@router.delete("/{event_id}")
def delete_event(event_id: int = Path(..., ge=1)) -> Dict[str, bool]:
    with get_session() as db:
        if not EventRepository(db).delete(event_id):
            raise HTTPException(status_code=404, detail=f"Event {event_id} not found")
        return {"deleted": True}
