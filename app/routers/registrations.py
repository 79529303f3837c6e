from fastapi import APIRouter, Depends, Body, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import Any, Dict

from app.core.config import settings
from app.core.database import get_db
from app.schemas.registration import (
    RequestMetadata,
    RegistrationSubmitResponse,
    RegistrationStatusResponse,
    RegistrationPageResponse,
)
from app.services.registration_service import RegistrationService

router = APIRouter(tags=["Registration"])


def _request_metadata(request: Request) -> RequestMetadata:
    return RequestMetadata(
        userAgent=request.headers.get("user-agent"),
        ipAddress=request.client.host if request.client else None,
        referrer=request.headers.get("referer")
    )


@router.get("/api/registrations/health")
def health_check():
    return {
        "status": "healthy",
        "service": f"{settings.PROJECT_NAME} Registration API",
        "version": settings.VERSION,
    }


@router.get("/events/{slug}/register", response_model=RegistrationPageResponse)
def registration_page(slug: str, db: Session = Depends(get_db)):
    page = RegistrationService(db).get_registration_page(slug)
    if page is None:
        return RedirectResponse(url=f"/events/{slug}", status_code=status.HTTP_303_SEE_OTHER)
    return RegistrationPageResponse(**page)


@router.post(
    "/events/{slug}/register",
    response_model=RegistrationSubmitResponse,
    status_code=status.HTTP_201_CREATED
)
def submit_registration(
    slug: str,
    request: Request,
    submission: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db)
):
    """
    Submit a registration form.

    The body maps field names to values (arrays for checkbox groups) and may
    carry a nested `waiver` object with `acknowledgments` and `signature`.
    """
    outcome = RegistrationService(db).submit_registration(
        slug,
        submission,
        request_meta=_request_metadata(request)
    )
    return RegistrationSubmitResponse(
        message=outcome.message,
        confirmationNumber=outcome.confirmation_number,
        isWaitlisted=outcome.is_waitlisted
    )


@router.get("/api/events/{event_id}/registration-status", response_model=RegistrationStatusResponse)
def registration_status(event_id: str, db: Session = Depends(get_db)):
    return RegistrationStatusResponse(**RegistrationService(db).get_registration_status(event_id))
