"""
Intake API routes - extraction only, no document required.
"""
from fastapi import APIRouter

from intakefill.app.api.v1.forms.routes import check_intake_text
from intakefill.app.schemas.intake import ExtractedRecord, IntakeTextIn
from intakefill.app.services.intake_extractor import parse_intake

router = APIRouter()


@router.post("/parse", response_model=ExtractedRecord)
def parse_intake_text(payload: IntakeTextIn):
    """Extract client name, book title, contact details, word count and services."""
    return parse_intake(check_intake_text(payload.text))
