"""
Registration eligibility decision table.

The registration page and the submission endpoint both call
evaluate_eligibility so what a visitor is shown matches what is enforced.
"""
import enum
from datetime import datetime, timezone
from typing import Optional

from app.schemas.registration_policy import RegistrationPolicy


class Eligibility(str, enum.Enum):
    OPEN = "open"
    CLOSED_BY_FLAG = "closed_by_flag"
    CLOSED_BY_DEADLINE = "closed_by_deadline"
    CLOSED_EVENT_PASSED = "closed_event_passed"
    FULL = "full"
    WAITLIST = "waitlist"

    @property
    def message(self) -> str:
        return ELIGIBILITY_MESSAGES[self]

    @property
    def accepts_submissions(self) -> bool:
        return self in (Eligibility.OPEN, Eligibility.WAITLIST)

    @property
    def page_status(self) -> str:
        """Coarse status shown on the registration page: open, closed, full or waitlist."""
        if self in (Eligibility.CLOSED_BY_FLAG, Eligibility.CLOSED_BY_DEADLINE, Eligibility.CLOSED_EVENT_PASSED):
            return "closed"
        return self.value


ELIGIBILITY_MESSAGES = {
    Eligibility.OPEN: "",
    Eligibility.CLOSED_BY_FLAG: "Registration is currently closed for this event.",
    Eligibility.CLOSED_BY_DEADLINE: "The registration deadline has passed.",
    Eligibility.CLOSED_EVENT_PASSED: "This event has already occurred.",
    Eligibility.FULL: "This event is fully booked.",
    Eligibility.WAITLIST: "This event is full. You can join the waitlist.",
}


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def capacity_outcome(policy: RegistrationPolicy, current_count: int) -> Eligibility:
    if policy.maxAttendees is not None and current_count >= policy.maxAttendees:
        return Eligibility.WAITLIST if policy.waitlistEnabled else Eligibility.FULL
    return Eligibility.OPEN


def evaluate_eligibility(
    policy: RegistrationPolicy,
    event_date: Optional[datetime],
    now: datetime,
    current_count: int
) -> Eligibility:
    """
    Evaluate whether an event currently accepts registrations.

    Rules are checked in order and the first match wins: the open flag, the
    registration deadline, the event date, then capacity.

    Args:
        policy: The event's registration policy
        event_date: When the event takes place, if scheduled
        now: Current time
        current_count: Number of confirmed registrations

    Returns:
        Eligibility: The decision
    """
    now = as_utc(now)

    if not policy.isOpen:
        return Eligibility.CLOSED_BY_FLAG

    deadline = as_utc(policy.registrationDeadline)
    if deadline is not None and now > deadline:
        return Eligibility.CLOSED_BY_DEADLINE

    event_date = as_utc(event_date)
    if event_date is not None and now > event_date:
        return Eligibility.CLOSED_EVENT_PASSED

    return capacity_outcome(policy, current_count)
