from app.models.event import Event
from app.models.registration import Registration
from app.schemas.contact import ContactMessage
from app.core.config import settings
from datetime import datetime, timezone
import html
import logging
import smtplib
import base64
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.mime.image import MIMEImage
from typing import Optional

logger = logging.getLogger(__name__)


def _html_wrap(content: str, qr_block: str = "") -> str:
    return f"""
    <html>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
        {html.escape(content).replace(chr(10), '<br>')}
        {qr_block}
    </body>
    </html>
    """


class EmailService:
    def __init__(self):
        self.mode = settings.EMAIL_MODE.lower()

        if self.mode not in ["mock", "smtp"]:
            logger.warning(f"Invalid EMAIL_MODE '{self.mode}', defaulting to 'mock'")
            self.mode = "mock"

        logger.debug(f"EmailService initialized in '{self.mode}' mode")

    def _send_smtp_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        reply_to: Optional[str] = None,
        qr_code_base64: Optional[str] = None
    ) -> bool:
        try:
            msg = MIMEMultipart('related')
            msg['Subject'] = subject
            msg['From'] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL}>"
            msg['To'] = to_email
            if reply_to:
                msg['Reply-To'] = reply_to

            msg.attach(MIMEText(html_content, 'html'))

            if qr_code_base64:
                if qr_code_base64.startswith('data:image/png;base64,'):
                    qr_code_base64 = qr_code_base64.replace('data:image/png;base64,', '')

                image = MIMEImage(base64.b64decode(qr_code_base64), name='qr_code.png')
                image.add_header('Content-ID', '<qr_code>')
                image.add_header('Content-Disposition', 'inline', filename='qr_code.png')
                msg.attach(image)

            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
                if settings.SMTP_USE_TLS:
                    server.starttls()

                if settings.SMTP_USER:
                    server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)

                server.send_message(msg)

            logger.info(f"SMTP email sent successfully to {to_email}")
            return True

        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send SMTP email to {to_email}: {str(e)}")
            return False

    def _print_mock_email(
        self,
        to_email: str,
        subject: str,
        content: str
    ):
        email_display = f"""
==================================================================
                    MOCK EMAIL (Console Only)
==================================================================

TO: {to_email}
SUBJECT: {subject}

{content}

==================================================================
        """
        logger.info(f"Mock email logged for {to_email}")
        print(email_display)

    def _deliver(
        self,
        to_email: str,
        subject: str,
        content: str,
        reply_to: Optional[str] = None,
        qr_code_base64: Optional[str] = None
    ) -> bool:
        if self.mode == "smtp":
            qr_block = '<p><img src="cid:qr_code" alt="Confirmation QR code"></p>' if qr_code_base64 else ''
            html_content = _html_wrap(content, qr_block)
            return self._send_smtp_email(to_email, subject, html_content, reply_to, qr_code_base64)

        self._print_mock_email(to_email, subject, content)
        return True

    def send_registration_confirmation(
        self,
        event: Event,
        registration: Registration,
        message: str,
        qr_code: Optional[str] = None
    ) -> bool:
        """
        Send the registrant their confirmation number.

        Args:
            event: The event registered for
            registration: The stored registration
            message: The confirmation or waitlist message shown on screen
            qr_code: Data URL of the confirmation number as a QR code

        Returns:
            bool: True if email sent successfully
        """
        event_date = event.event_date.strftime('%B %d, %Y %I:%M %p') if event.event_date else 'TBD'

        if registration.is_waitlisted:
            subject = f"Waitlist Confirmation - {event.title}"
        else:
            subject = f"Registration Confirmed - {event.title}"

        content = f"""
Hello,

{message}

EVENT DETAILS:
   Event: {event.title}
   Date: {event_date}
   Location: {event.location or 'TBD'}

YOUR REGISTRATION:
   Confirmation Number: {registration.confirmation_number}
   Status: {registration.status.value.title()}

Please keep this email and bring your confirmation number to check-in.

- {settings.ORGANIZATION_NAME}
        """

        return self._deliver(
            registration.email,
            subject,
            content,
            qr_code_base64=qr_code
        )

    def send_contact_notification(self, contact: ContactMessage) -> bool:
        received = datetime.now(timezone.utc).strftime('%B %d, %Y %I:%M %p UTC')
        phone_line = f"\n   Phone: {contact.phone}" if contact.phone else ""

        content = f"""
New contact form submission

CONTACT DETAILS:
   Name: {contact.full_name}
   Email: {contact.email}{phone_line}
   Subject: {contact.subject_label}

MESSAGE:
{contact.message}

This message was sent from the {settings.ORGANIZATION_NAME} website contact form.
Received: {received}
        """

        return self._deliver(
            settings.CONTACT_EMAIL,
            f"Website Contact: {contact.subject_label}",
            content,
            reply_to=contact.email
        )

    def send_contact_auto_reply(self, contact: ContactMessage) -> bool:
        content = f"""
Dear {contact.firstName},

Thank you for reaching out to {settings.ORGANIZATION_NAME}! We have received your
message regarding {contact.subject_label} and will respond within 24 hours.

Your message:
{contact.message}

- {settings.ORGANIZATION_NAME}
        """

        return self._deliver(
            contact.email,
            f"Thank you for contacting {settings.ORGANIZATION_NAME}",
            content
        )
