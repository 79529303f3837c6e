from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
import logging

from app.core.exceptions import (
    NotFoundError,
    ValidationFailedError,
    EligibilityClosedError,
    DuplicateRegistrationError,
    PersistenceError,
    ConfirmationNumberConflictError,
)
from app.repositories.event_repository import EventRepository
from app.repositories.registration_repository import RegistrationRepository
from app.models.event import Event
from app.models.registration import Registration, RegistrationStatus
from app.schemas.registration_policy import RegistrationPolicy
from app.schemas.registration import RequestMetadata, WaiverSubmission
from app.services.eligibility import Eligibility, evaluate_eligibility
from app.services import registration_validator
from app.utils.confirmation import generate_confirmation_number, generate_qr_code
from app.utils.email_service import EmailService

logger = logging.getLogger(__name__)

DEFAULT_CONFIRMATION_MESSAGE = "Thank you for registering! You will receive a confirmation email shortly."
WAITLIST_MESSAGE = "You have been added to the waitlist. We will contact you if a spot becomes available."
REGISTRATION_UNAVAILABLE = "Event not found or registration is not available."


@dataclass
class RegistrationOutcome:
    registration: Registration
    is_waitlisted: bool
    message: str
    counter_update_failed: bool = False

    @property
    def confirmation_number(self) -> str:
        return self.registration.confirmation_number


class RegistrationService:

    def __init__(self, db: Session):
        self.db = db
        self.event_repo = EventRepository(db)
        self.registration_repo = RegistrationRepository(db)
        self.email_service = EmailService()

    def _load_policy(self, event: Event) -> Optional[RegistrationPolicy]:
        try:
            return event.registration_policy
        except ValidationError as e:
            logger.error(f"Event {event.slug} has an invalid registration policy: {e}")
            raise PersistenceError()

    def _get_registrable_event(self, slug: str) -> Tuple[Event, RegistrationPolicy]:
        event = self.event_repo.find_by_slug_public(slug)
        policy = self._load_policy(event) if event else None

        if not event or not policy or not policy.isRequired:
            logger.warning(f"Registration attempted for unavailable event: {slug}")
            raise NotFoundError(REGISTRATION_UNAVAILABLE)

        return event, policy

    def submit_registration(
        self,
        slug: str,
        submission: Dict[str, Any],
        request_meta: Optional[RequestMetadata] = None,
        now: Optional[datetime] = None
    ) -> RegistrationOutcome:
        now = now or datetime.now(timezone.utc)
        request_meta = request_meta or RequestMetadata()

        try:
            event, policy = self._get_registrable_event(slug)
            return self._register(event, policy, submission, request_meta, now)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(f"Error in submit_registration for {slug}: {e}")
            raise PersistenceError()

    def _register(
        self,
        event: Event,
        policy: RegistrationPolicy,
        submission: Dict[str, Any],
        request_meta: RequestMetadata,
        now: datetime
    ) -> RegistrationOutcome:
        form_data = dict(submission)
        raw_waiver = form_data.pop("waiver", None)
        fields = policy.sorted_fields()

        eligibility = evaluate_eligibility(
            policy,
            event.event_date,
            now,
            self.registration_repo.count_confirmed(event.id)
        )
        if not eligibility.accepts_submissions:
            raise EligibilityClosedError(eligibility)

        email = registration_validator.resolve_email(fields, form_data)
        if not email:
            raise ValidationFailedError(registration_validator.EMAIL_REQUIRED_ERROR)

        if self.registration_repo.exists_for_email(event.id, email):
            raise DuplicateRegistrationError()

        waiver_submission = self._parse_waiver(raw_waiver)
        result = registration_validator.validate(fields, form_data, policy.waiver, waiver_submission)
        if not result.is_valid:
            raise ValidationFailedError(result.message, errors=result.errors)

        # The count may have moved since the eligibility check; admission is re-decided here
        admission = self.registration_repo.try_admit(event.id, policy.maxAttendees)
        is_waitlisted = not admission.admitted
        if is_waitlisted and not policy.waitlistEnabled:
            raise EligibilityClosedError(Eligibility.FULL)

        waiver_data = None
        if policy.waiver_enabled and waiver_submission is not None:
            waiver_data = self._build_waiver_record(policy, waiver_submission, request_meta, now)

        registration_fields = dict(
            event_id=event.id,
            email=email,
            registration_data=form_data,
            status=RegistrationStatus.WAITLISTED if is_waitlisted else RegistrationStatus.CONFIRMED,
            waiver=waiver_data,
            user_agent=request_meta.userAgent,
            ip_address=request_meta.ipAddress,
            referrer=request_meta.referrer
        )
        try:
            registration = self.registration_repo.create(
                confirmation_number=self._new_confirmation_number(now),
                **registration_fields
            )
        except ConfirmationNumberConflictError:
            logger.warning(f"Confirmation number collision for event {event.id}, retrying once")
            registration = self.registration_repo.create(
                confirmation_number=self._new_confirmation_number(now),
                **registration_fields
            )

        counter_update_failed = False
        if not is_waitlisted:
            counter_update_failed = not self.update_attendee_counter(event.id)

        logger.info(
            f"New registration for event {event.title}: {email} "
            f"({'waitlisted' if is_waitlisted else 'confirmed'})"
        )

        if is_waitlisted:
            message = WAITLIST_MESSAGE
        else:
            message = policy.confirmationMessage or DEFAULT_CONFIRMATION_MESSAGE

        try:
            self.email_service.send_registration_confirmation(
                event=event,
                registration=registration,
                message=message,
                qr_code=generate_qr_code(registration.confirmation_number)
            )
        except Exception as e:
            logger.warning(f"Failed to send confirmation email to {email}: {str(e)}")

        return RegistrationOutcome(
            registration=registration,
            is_waitlisted=is_waitlisted,
            message=message,
            counter_update_failed=counter_update_failed
        )

    def _parse_waiver(self, raw_waiver: Any) -> Optional[WaiverSubmission]:
        if raw_waiver is None:
            return None
        try:
            return WaiverSubmission.model_validate(raw_waiver)
        except ValidationError as e:
            # Treated as missing; validate_waiver reports what the policy requires
            logger.warning(f"Malformed waiver submission ignored: {e}")
            return None

    def _build_waiver_record(
        self,
        policy: RegistrationPolicy,
        waiver: WaiverSubmission,
        request_meta: RequestMetadata,
        now: datetime
    ) -> dict:
        policy_acks = policy.waiver.acknowledgments
        acknowledgments = []
        for index, ack in enumerate(waiver.acknowledgments):
            text = ack.text
            if text is None and index < len(policy_acks):
                text = policy_acks[index].text
            accepted_at = (ack.acceptedAt or now) if ack.accepted else None
            acknowledgments.append({
                "text": text,
                "accepted": ack.accepted,
                "acceptedAt": accepted_at.isoformat() if accepted_at else None,
            })

        signature = None
        if waiver.signature and waiver.signature.value:
            signature = {
                "type": waiver.signature.type,
                "value": waiver.signature.value,
                "signedAt": (waiver.signature.signedAt or now).isoformat(),
                "ipAddress": request_meta.ipAddress,
            }

        return {
            "acknowledged": True,
            "acknowledgments": acknowledgments,
            "signature": signature,
        }

    def _new_confirmation_number(self, now: datetime) -> str:
        confirmation_number = generate_confirmation_number(now)
        while self.registration_repo.get_by_confirmation_number(confirmation_number):
            confirmation_number = generate_confirmation_number(now)
        return confirmation_number

    def update_attendee_counter(self, event_id: str) -> bool:
        """
        Best-effort increment of the cached attendee counter.

        The registration row is the source of truth, so a failure here is
        logged and reported to the caller instead of undoing the registration.
        reconcile_attendee_count repairs the cache.
        """
        try:
            self.event_repo.increment_attendee_count(event_id)
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Failed to update attendee count for event {event_id}: {str(e)}")
            return False

    def reconcile_attendee_count(self, event_id: str) -> int:
        event = self.event_repo.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event not found")

        confirmed = self.registration_repo.count_confirmed(event_id)
        if event.current_attendees != confirmed:
            logger.info(
                f"Reconciling attendee count for event {event.slug}: "
                f"{event.current_attendees} -> {confirmed}"
            )
            self.event_repo.set_attendee_count(event_id, confirmed)
        return confirmed

    def get_registration_page(self, slug: str, now: Optional[datetime] = None) -> Optional[dict]:
        """
        Data for rendering the registration form.

        Returns:
            Optional[dict]: Page data, or None when the event does not take
            registrations and the visitor belongs on the event page instead
        """
        now = now or datetime.now(timezone.utc)

        event = self.event_repo.find_by_slug_public(slug)
        if not event:
            logger.warning(f"Event not found with slug: {slug}")
            raise NotFoundError("Event not found")

        policy = self._load_policy(event)
        if not policy or not policy.isRequired:
            return None

        current_count = self.registration_repo.count_confirmed(event.id)
        eligibility = evaluate_eligibility(policy, event.event_date, now, current_count)

        spots_remaining = None
        if policy.maxAttendees is not None:
            spots_remaining = max(0, policy.maxAttendees - current_count)

        return {
            "event": event.to_dict(),
            "fields": [f.model_dump(mode="json") for f in policy.sorted_fields()],
            "waiver": policy.waiver.model_dump(mode="json") if policy.waiver_enabled else None,
            "registrationStatus": eligibility.page_status,
            "statusMessage": eligibility.message,
            "spotsRemaining": spots_remaining,
            "isWaitlist": eligibility == Eligibility.WAITLIST,
        }

    def get_registration_status(self, event_id: str) -> dict:
        event = self.event_repo.get_by_id(event_id)
        if not event:
            raise NotFoundError("Event not found")

        policy = self._load_policy(event) or RegistrationPolicy()
        current_count = self.registration_repo.count_confirmed(event_id)
        waitlist_count = self.registration_repo.count_waitlisted(event_id)
        max_attendees = policy.maxAttendees

        return {
            "registrationRequired": policy.isRequired,
            "isOpen": policy.isOpen,
            "currentAttendees": current_count,
            "maxAttendees": max_attendees,
            "spotsRemaining": max(0, max_attendees - current_count) if max_attendees else None,
            "waitlistEnabled": policy.waitlistEnabled,
            "waitlistCount": waitlist_count,
            "isFull": current_count >= max_attendees if max_attendees else False,
        }
