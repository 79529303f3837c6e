"""
Application error taxonomy.

Services raise these instead of HTTPException so every failure reaches the
client in the same `{success: false, message, errors?}` envelope.
"""
from typing import List, Optional
from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed."

    def __init__(self, message: Optional[str] = None, errors: Optional[List[str]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ValidationFailedError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class EligibilityClosedError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, eligibility, message: Optional[str] = None):
        self.eligibility = eligibility
        super().__init__(message or eligibility.message)


class DuplicateRegistrationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "You have already registered for this event with this email address."


class PersistenceError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unable to process registration. Please try again."


class EmailDeliveryError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = (
        "There was an error sending your message. "
        "Please try again or contact us directly."
    )


class ConfirmationNumberConflictError(PersistenceError):
    """Another registration took the confirmation number between check and insert."""
