"""
FastAPI routes for statistics aggregates.
"""

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Path, Query
from pydantic import BaseModel, ConfigDict, Field

from community_api.config import STATS_RETENTION_DAYS
from community_api.db import get_session
from community_api.services import statistics


class DailySummaryRow(BaseModel):
    """Response model for one day/entity/action bucket."""

    date: str = Field(..., description="Day (YYYY-MM-DD)")
    entity_type: str = Field(..., description="Entity type")
    action: str = Field(..., description="Action name")
    count: int = Field(..., description="Total events")
    unique_users: int = Field(..., description="Distinct IP addresses")


class TopContentRow(BaseModel):
    """Response model for a top content entry."""

    entity_id: int = Field(..., description="Entity ID")
    total_count: int = Field(..., description="Total events in window")
    unique_count: int = Field(..., description="Distinct IP addresses in window")


class GeoRow(BaseModel):
    """Response model for a geographic bucket."""

    country: str = Field(..., description="Country")
    city: Optional[str] = Field(None, description="City")
    count: int = Field(..., description="Total events")
    unique_users: int = Field(..., description="Distinct IP addresses")


class StatisticOut(BaseModel):
    """Response model for a raw statistics event."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    entity_type: str
    entity_id: int
    action: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    created_at: datetime


router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("/daily", response_model=List[DailySummaryRow])
def daily_summary(
    day: Optional[date] = Query(None, alias="date", description="Restrict to one day"),
    entity_type: Optional[str] = Query(None),
) -> List[DailySummaryRow]:
    with get_session() as db:
        return [DailySummaryRow(**row) for row in statistics.get_daily_summary(db, day, entity_type)]


@router.get("/top/{entity_type}", response_model=List[TopContentRow])
def top_content(
    entity_type: str = Path(..., min_length=1),
    action: str = Query("view", min_length=1),
    limit: int = Query(10, ge=1, le=100),
    days: int = Query(30, ge=1, le=3650),
) -> List[TopContentRow]:
    with get_session() as db:
        rows = statistics.get_top_content(db, entity_type, action=action, limit=limit, days=days)
        return [TopContentRow(**row) for row in rows]


@router.get("/geo", response_model=List[GeoRow])
def geographic_stats(
    entity_type: Optional[str] = Query(None),
    days: int = Query(30, ge=1, le=3650),
) -> List[GeoRow]:
    with get_session() as db:
        return [GeoRow(**row) for row in statistics.get_geographic_stats(db, entity_type, days)]


@router.get("/entity/{entity_type}/{entity_id}", response_model=List[StatisticOut])
def entity_events(
    entity_type: str,
    entity_id: int = Path(..., ge=1),
    action: Optional[str] = Query(None),
) -> List[StatisticOut]:
    with get_session() as db:
        return [StatisticOut.model_validate(row) for row in statistics.get_by_entity(db, entity_type, entity_id, action)]


@router.delete("/cleanup")
def cleanup(days_to_keep: int = Query(STATS_RETENTION_DAYS, ge=0)) -> dict:
    """Retention sweep; normally run from the CLI on a schedule."""
    try:
        with get_session() as db:
            deleted = statistics.clean_old_stats(db, days_to_keep)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error cleaning statistics: {str(e)}")
    return {"deleted": deleted, "days_to_keep": days_to_keep}
