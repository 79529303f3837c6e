from typing import Optional, List, Tuple
from sqlalchemy.orm import Session, Query
from sqlalchemy import update
from datetime import datetime, timezone
from app.models.event import Event, EventStatus


# Grouped category filters used by the events page tabs
CATEGORY_GROUPS = {
    "news": ["educational", "community-service", "fundraising"],
    "events": ["cultural", "social", "religious", "interfaith"],
}

CALENDAR_LIMIT = 100


class EventRepository:

    def __init__(self, db: Session):
        self.db = db

    def _public_query(self) -> Query:
        return self.db.query(Event).filter(
            Event.status == EventStatus.PUBLISHED,
            Event.is_public == True,
            Event.is_archived == False
        )

    def _apply_category(self, query: Query, category: Optional[str]) -> Query:
        if not category or category == "all":
            return query
        if category in CATEGORY_GROUPS:
            return query.filter(Event.category.in_(CATEGORY_GROUPS[category]))
        return query.filter(Event.category == category)

    def _apply_period(self, query: Query, period: str, now: datetime) -> Query:
        if period == "upcoming":
            return query.filter(Event.event_date >= now)
        if period == "past":
            return query.filter(Event.event_date < now)
        return query

    def get_by_id(self, event_id: str) -> Optional[Event]:
        return self.db.query(Event).filter(Event.id == event_id).first()

    def find_by_slug_public(self, slug: str) -> Optional[Event]:
        return self._public_query().filter(Event.slug == slug).first()

    def get_public_events(
        self,
        category: Optional[str] = None,
        period: str = "upcoming",
        featured: bool = False,
        page: int = 1,
        limit: int = 12
    ) -> Tuple[List[Event], int]:
        now = datetime.now(timezone.utc)
        query = self._public_query()
        query = self._apply_period(query, period, now)
        query = self._apply_category(query, category)

        if featured:
            query = query.filter(Event.is_featured == True)

        total_count = query.count()

        if period == "upcoming":
            query = query.order_by(Event.event_date)
        else:
            query = query.order_by(Event.event_date.desc())

        offset = (page - 1) * limit
        events = query.offset(offset).limit(limit).all()
        return events, total_count

    def get_calendar_events(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
        category: Optional[str] = None,
        period: str = "upcoming"
    ) -> List[Event]:
        """
        Events for a calendar view.

        Args:
            month: Zero-based month (0 = January), used together with year
            year: Four digit year
            category: Category or category group filter
            period: Fallback period filter when no month/year is given

        Returns:
            List[Event]: At most CALENDAR_LIMIT events ordered by date
        """
        query = self._public_query()

        if month is not None and year is not None:
            start = datetime(year, month + 1, 1, tzinfo=timezone.utc)
            if month == 11:
                end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
            else:
                end = datetime(year, month + 2, 1, tzinfo=timezone.utc)
            query = query.filter(Event.event_date >= start, Event.event_date < end)
        else:
            query = self._apply_period(query, period, datetime.now(timezone.utc))

        query = self._apply_category(query, category)

        return query.order_by(Event.event_date).limit(CALENDAR_LIMIT).all()

    def increment_attendee_count(self, event_id: str, count: int = 1) -> None:
        self.db.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(current_attendees=Event.current_attendees + count)
        )
        self.db.commit()

    def set_attendee_count(self, event_id: str, count: int) -> None:
        self.db.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(current_attendees=count)
        )
        self.db.commit()

    def increment_views(self, event_id: str) -> None:
        self.db.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(views=Event.views + 1)
        )
        self.db.commit()

    def increment_shares(self, event_id: str) -> bool:
        result = self.db.execute(
            update(Event)
            .where(Event.id == event_id)
            .values(shares=Event.shares + 1)
        )
        self.db.commit()
        return result.rowcount > 0
