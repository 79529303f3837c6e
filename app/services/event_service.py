from typing import Optional, List, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
import logging

from app.core.exceptions import NotFoundError, ValidationFailedError
from app.models.event import Event
from app.repositories.event_repository import EventRepository

logger = logging.getLogger(__name__)

VALID_PERIODS = ["upcoming", "past", "all"]


class EventService:

    def __init__(self, db: Session):
        self.db = db
        self.event_repo = EventRepository(db)

    def _validate_period(self, period: str) -> None:
        if period not in VALID_PERIODS:
            raise ValidationFailedError(f"period must be one of: {', '.join(VALID_PERIODS)}")

    def get_public_events(
        self,
        category: Optional[str] = "all",
        period: str = "upcoming",
        featured: bool = False,
        page: int = 1,
        limit: int = 12
    ) -> Tuple[List[Event], int]:
        if page < 1:
            raise ValidationFailedError("Page number must be at least 1")

        if limit < 1 or limit > 100:
            raise ValidationFailedError("Limit must be between 1 and 100")

        self._validate_period(period)

        events, total_count = self.event_repo.get_public_events(
            category=category,
            period=period,
            featured=featured,
            page=page,
            limit=limit
        )
        logger.info(
            f"Fetched {len(events)} events for period: {period}, "
            f"category: {category}, page: {page}"
        )
        return events, total_count

    def get_calendar_events(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
        category: Optional[str] = "all",
        period: str = "upcoming"
    ) -> List[Event]:
        if (month is None) != (year is None):
            raise ValidationFailedError("month and year must be provided together")

        if month is not None and not 0 <= month <= 11:
            raise ValidationFailedError("month must be between 0 (January) and 11 (December)")

        if year is not None and not 1 <= year <= 9998:
            raise ValidationFailedError("year is out of range")

        self._validate_period(period)

        return self.event_repo.get_calendar_events(
            month=month,
            year=year,
            category=category,
            period=period
        )

    def get_event_by_slug(self, slug: str) -> Event:
        event = self.event_repo.find_by_slug_public(slug)

        if not event:
            logger.warning(f"Event not found with slug: {slug}")
            raise NotFoundError("Event not found")

        try:
            self.event_repo.increment_views(event.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating view count: {str(e)}")

        return event

    def track_share(self, event_id: str, platform: str = "unknown") -> None:
        try:
            updated = self.event_repo.increment_shares(event_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating share count: {str(e)}")
            return

        if updated:
            logger.info(f"Event {event_id} shared on {platform}")
        else:
            logger.warning(f"Share tracked for unknown event {event_id}")
