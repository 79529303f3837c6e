from fastapi import APIRouter

from app.schemas.contact import ContactRequest, ContactResponse
from app.services.contact_service import ContactService

router = APIRouter(tags=["Contact"])


@router.post("/contact", response_model=ContactResponse)
def submit_contact_form(contact: ContactRequest):
    return ContactResponse(message=ContactService().submit(contact))
