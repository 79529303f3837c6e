import logging

from pydantic import EmailStr, TypeAdapter, ValidationError

from app.core.exceptions import ValidationFailedError, EmailDeliveryError
from app.schemas.contact import ContactRequest, ContactMessage
from app.utils.email_service import EmailService

logger = logging.getLogger(__name__)

email_adapter = TypeAdapter(EmailStr)

SUCCESS_MESSAGE = "Your message has been sent successfully! We'll get back to you soon."


class ContactService:

    def __init__(self):
        self.email_service = EmailService()

    def _clean(self, request: ContactRequest) -> ContactMessage:
        required = [request.firstName, request.lastName, request.email, request.subject, request.message]
        if any(value is None or not value.strip() for value in required):
            raise ValidationFailedError("Please fill in all required fields")

        try:
            email = email_adapter.validate_python(request.email.strip())
        except ValidationError:
            raise ValidationFailedError("Please enter a valid email address")

        return ContactMessage(
            firstName=request.firstName.strip(),
            lastName=request.lastName.strip(),
            email=email.lower(),
            phone=request.phone.strip() if request.phone else "",
            subject=request.subject.strip(),
            message=request.message.strip()
        )

    def submit(self, request: ContactRequest) -> str:
        contact = self._clean(request)

        # Staff must get the message; the auto-reply is a courtesy
        if not self.email_service.send_contact_notification(contact):
            logger.error(f"Contact form delivery failed for {contact.email}")
            raise EmailDeliveryError()

        if not self.email_service.send_contact_auto_reply(contact):
            logger.warning(f"Contact auto-reply failed for {contact.email}")

        logger.info(f"Contact form submitted successfully by {contact.email} - Subject: {contact.subject}")
        return SUCCESS_MESSAGE
