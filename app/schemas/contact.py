from pydantic import BaseModel
from typing import Optional


SUBJECT_LABELS = {
    "general": "General Inquiry",
    "membership": "Membership Information",
    "events": "Events & Programs",
    "volunteer": "Volunteer Opportunities",
    "donations": "Donations & Support",
    "media": "Media & Press",
    "other": "Other",
}


class ContactRequest(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class ContactMessage(BaseModel):
    """A contact form submission after trimming and validation."""
    firstName: str
    lastName: str
    email: str
    phone: str = ""
    subject: str
    message: str

    @property
    def full_name(self) -> str:
        return f"{self.firstName} {self.lastName}"

    @property
    def subject_label(self) -> str:
        return SUBJECT_LABELS.get(self.subject, "General Inquiry")


class ContactResponse(BaseModel):
    success: bool = True
    message: str
