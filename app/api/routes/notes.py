"""
Appointment Notes Endpoint.

Tags clinical keywords in free-text appointment notes.
"""

import logging

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from app.core.intelligence import get_clinical_assistant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["Notes"])


class KeywordsRequest(BaseModel):
    """Notes keyword extraction request."""

    notes: str = Field(
        ...,
        max_length=10000,
        description="Free-text appointment notes",
        examples=["Pt reports floaters OD x2 weeks. On latanoprost. Follow up in 3 months."],
    )


class KeywordOut(BaseModel):
    text: str
    category: str


class KeywordsResponse(BaseModel):
    """Extracted keywords."""

    keywords: list[KeywordOut]
    source: str = Field(..., description='"model" or "rules"')


@router.post(
    "/keywords",
    response_model=KeywordsResponse,
    status_code=status.HTTP_200_OK,
    summary="Extract notes keywords",
    description="Tag symptoms, medications, procedures and conditions in appointment notes.",
)
async def keywords(request: KeywordsRequest) -> KeywordsResponse:
    """Extract keywords from appointment notes."""
    analysis = await get_clinical_assistant().analyze_notes(request.notes)
    return KeywordsResponse(**analysis.to_dict())
