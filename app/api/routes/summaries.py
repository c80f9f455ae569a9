"""
Record Summary Endpoint.

Summarizes patient, examination, appointment and SOAP records.
"""

import logging
import datetime as dt
from typing import Any, Optional

from fastapi import APIRouter, status
from pydantic import AliasChoices, BaseModel, Field

from app.core.intelligence import SummaryType, get_clinical_assistant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/summaries", tags=["Summaries"])


class SummaryRequest(BaseModel):
    """Record summary request."""

    entity_type: SummaryType = Field(
        ...,
        validation_alias=AliasChoices("entity_type", "entityType"),
        description="patient, examination, appointment or soap",
    )
    data: dict[str, Any] = Field(
        ...,
        validation_alias=AliasChoices("data", "entity_data", "entityData"),
        description="The record, as stored by the clinic",
    )
    today: Optional[dt.date] = Field(
        default=None,
        description="Reference date for ages (defaults to the server date)",
    )


class SummaryResponse(BaseModel):
    """Generated summary."""

    summary: str
    entity_type: str
    source: str = Field(..., description='"model" or "rules"')


@router.post(
    "",
    response_model=SummaryResponse,
    status_code=status.HTTP_200_OK,
    summary="Summarize a record",
    description="Write a clinical summary of a patient, examination, appointment or SOAP note.",
)
async def summarize(request: SummaryRequest) -> SummaryResponse:
    """Summarize one clinical record."""
    summary = await get_clinical_assistant().generate_summary(
        request.entity_type,
        request.data,
        today=request.today,
    )
    logger.info(f"Wrote {summary.entity_type} summary from {summary.source}")
    return SummaryResponse(**summary.to_dict())
