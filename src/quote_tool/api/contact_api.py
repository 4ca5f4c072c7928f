"""
Contact API - FastAPI router for form submissions and analytics pings.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..services.submission_service import ContactRequest, SubmissionService
from .state import get_submission_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["contact"])


class ContactPayload(BaseModel):
    """Request model for the contact form. Presence is checked by the service."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    industry: Optional[str] = None
    website_type: Optional[str] = Field(None, alias="website-type")
    message: Optional[str] = None
    quote: Optional[dict] = None
    calculator_data: Optional[str] = Field(None, alias="calculator-data")


class AnalyticsEvent(BaseModel):
    """Request model for an analytics ping."""
    event: Optional[str] = None
    parameters: dict[str, Any] = {}
    timestamp: Optional[str] = None
    url: Optional[str] = None


@router.post("/contact")
async def submit_contact(
    payload: ContactPayload,
    service: SubmissionService = Depends(get_submission_service),
):
    """Validate a contact request and relay it by email."""
    contact = ContactRequest.from_payload(payload.model_dump(by_alias=True))

    validation = service.validate(contact)
    if not validation.valid:
        return JSONResponse(status_code=400, content={"success": False, "error": validation.errors[0]})

    result = await service.submit(contact, validate=False)
    return JSONResponse(status_code=200 if result.success else 500, content=result.to_dict())


@router.post("/analytics")
async def track_event(event: AnalyticsEvent, request: Request):
    """Log an analytics event. Always acknowledges so tracking never breaks the page."""
    logger.info(
        "Analytics event %s url=%s params=%s ua=%s ip=%s",
        event.event,
        event.url,
        event.parameters,
        request.headers.get("user-agent"),
        request.headers.get("x-forwarded-for") or (request.client.host if request.client else None),
    )
    return {"success": True}
