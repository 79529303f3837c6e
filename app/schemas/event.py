from pydantic import BaseModel, Field
from typing import Optional, List


class EventResponse(BaseModel):
    id: str
    slug: str
    title: str
    description: Optional[str] = None
    shortDescription: Optional[str] = None
    category: Optional[str] = None
    eventDate: Optional[str] = None
    location: Optional[str] = None
    imageUrl: Optional[str] = None
    status: str
    isFeatured: bool
    registration: Optional[dict] = None
    currentAttendees: int
    createdAt: Optional[str] = None


class EventsListResponse(BaseModel):
    success: bool = True
    events: List[EventResponse]
    hasMore: bool
    currentPage: int
    totalPages: int
    totalEvents: int


class CalendarEventsResponse(BaseModel):
    success: bool = True
    events: List[EventResponse]


class EventDetailResponse(BaseModel):
    success: bool = True
    event: EventResponse


class ShareRequest(BaseModel):
    platform: str = Field("unknown", max_length=50)


class ShareResponse(BaseModel):
    success: bool = True
    message: str = "Share tracked successfully"
