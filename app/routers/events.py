from fastapi import APIRouter, Depends, Body
from sqlalchemy.orm import Session
from typing import Optional
import math

from app.core.config import settings
from app.core.database import get_db
from app.schemas.event import (
    EventResponse,
    EventsListResponse,
    CalendarEventsResponse,
    EventDetailResponse,
    ShareRequest,
    ShareResponse,
)
from app.services.event_service import EventService

router = APIRouter(tags=["Events"])


@router.get("/api/events/health")
def health_check():
    return {
        "status": "healthy",
        "service": f"{settings.PROJECT_NAME} Events API",
        "version": settings.VERSION,
    }


@router.get("/api/events", response_model=EventsListResponse)
def list_events(
    category: str = "all",
    page: int = 1,
    limit: int = 12,
    period: str = "upcoming",
    featured: bool = False,
    db: Session = Depends(get_db)
):
    events, total_count = EventService(db).get_public_events(
        category=category,
        period=period,
        featured=featured,
        page=page,
        limit=limit
    )

    offset = (page - 1) * limit
    return EventsListResponse(
        events=[EventResponse(**event.to_dict()) for event in events],
        hasMore=offset + len(events) < total_count,
        currentPage=page,
        totalPages=math.ceil(total_count / limit),
        totalEvents=total_count
    )


@router.get("/api/events/calendar", response_model=CalendarEventsResponse)
def calendar_events(
    month: Optional[int] = None,
    year: Optional[int] = None,
    category: str = "all",
    period: str = "upcoming",
    db: Session = Depends(get_db)
):
    events = EventService(db).get_calendar_events(
        month=month,
        year=year,
        category=category,
        period=period
    )
    return CalendarEventsResponse(events=[EventResponse(**event.to_dict()) for event in events])


@router.get("/events/{slug}", response_model=EventDetailResponse)
def event_details(slug: str, db: Session = Depends(get_db)):
    event = EventService(db).get_event_by_slug(slug)
    return EventDetailResponse(event=EventResponse(**event.to_dict()))


@router.post("/api/events/{event_id}/share", response_model=ShareResponse)
def track_share(
    event_id: str,
    share: Optional[ShareRequest] = Body(None),
    db: Session = Depends(get_db)
):
    platform = share.platform if share else "unknown"
    EventService(db).track_share(event_id, platform)
    return ShareResponse()
