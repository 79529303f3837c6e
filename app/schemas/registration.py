from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime


class AcknowledgmentSubmission(BaseModel):
    text: Optional[str] = None
    accepted: bool = False
    acceptedAt: Optional[datetime] = None


class SignatureSubmission(BaseModel):
    type: Literal["type", "draw"] = "type"
    value: Optional[str] = Field(None, description="Typed name or a data URL of the drawn signature")
    signedAt: Optional[datetime] = None


class WaiverSubmission(BaseModel):
    acknowledged: Optional[bool] = None
    acknowledgments: List[AcknowledgmentSubmission] = Field(default_factory=list)
    signature: Optional[SignatureSubmission] = None


class RequestMetadata(BaseModel):
    userAgent: Optional[str] = None
    ipAddress: Optional[str] = None
    referrer: Optional[str] = None


class RegistrationSubmitResponse(BaseModel):
    success: bool = True
    message: str
    confirmationNumber: str
    isWaitlisted: bool


class RegistrationStatusResponse(BaseModel):
    success: bool = True
    registrationRequired: bool
    isOpen: bool
    currentAttendees: int
    maxAttendees: Optional[int] = None
    spotsRemaining: Optional[int] = None
    waitlistEnabled: bool
    waitlistCount: int
    isFull: bool


class RegistrationPageResponse(BaseModel):
    success: bool = True
    event: dict
    fields: List[dict]
    waiver: Optional[dict] = None
    registrationStatus: str
    statusMessage: str
    spotsRemaining: Optional[int] = None
    isWaitlist: bool
