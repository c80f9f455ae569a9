"""
Appointment Search Endpoint.

Runs the natural-language appointment finder against the caller's
booked-slot list and patient directory.
"""

import logging
import datetime as dt
from typing import Optional

from fastapi import APIRouter, status
from pydantic import AliasChoices, BaseModel, Field

from app.core.intelligence.criteria import PatientRecord
from app.core.scheduling import (
    BookedSlot,
    get_appointment_finder,
    get_response_generator,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scheduling", tags=["Scheduling"])


class BookedSlotIn(BaseModel):
    """Slot already taken in the appointment book."""

    date: dt.date
    start_time: dt.time = Field(
        ...,
        validation_alias=AliasChoices("start_time", "startTime"),
    )
    end_time: Optional[dt.time] = Field(
        default=None,
        validation_alias=AliasChoices("end_time", "endTime"),
    )
    doctor_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("doctor_id", "doctorId"),
    )

    def to_booked_slot(self) -> BookedSlot:
        return BookedSlot(
            date=self.date,
            start_time=self.start_time.replace(tzinfo=None),
            end_time=self.end_time.replace(tzinfo=None) if self.end_time else None,
            doctor_id=self.doctor_id,
        )


class PatientIn(BaseModel):
    """Patient directory entry used to resolve names to ids."""

    id: str
    first_name: str = Field(..., validation_alias=AliasChoices("first_name", "firstName"))
    last_name: str = Field(..., validation_alias=AliasChoices("last_name", "lastName"))

    def to_record(self) -> PatientRecord:
        return PatientRecord(id=self.id, first_name=self.first_name, last_name=self.last_name)


class SearchRequest(BaseModel):
    """Appointment search request."""

    text: str = Field(
        ...,
        max_length=1000,
        description="Scheduling request in plain English",
        examples=["next Tuesday afternoon with Dr. Johnson for a follow-up"],
    )
    booked_slots: list[BookedSlotIn] = Field(
        default_factory=list,
        description="Slots already booked",
    )
    patients: list[PatientIn] = Field(
        default_factory=list,
        description="Patient directory",
    )
    today: Optional[dt.date] = Field(
        default=None,
        description="Reference date for relative phrases (defaults to the server date)",
    )


class SearchResponse(BaseModel):
    """Ranked appointment slots."""

    perfect: list[dict] = Field(..., description="Up to 3 slots scoring above the threshold")
    close: list[dict] = Field(..., description="Up to 5 next-best slots")
    search_criteria: dict = Field(..., description="What the finder understood")
    message: str = Field(..., description="Listing of the slots, or the no-results message")


@router.post(
    "/search",
    response_model=SearchResponse,
    status_code=status.HTTP_200_OK,
    summary="Find appointment slots",
    description="Find open appointment slots matching a plain-English request.",
)
async def search(request: SearchRequest) -> SearchResponse:
    """
    Find appointment slots.

    Extracts date, time, doctor, patient and appointment type from the
    request text, generates open slots over the search window, and
    returns them ranked as perfect and close matches.
    """
    finder = get_appointment_finder()
    result = finder.search(
        request.text,
        booked_slots=[b.to_booked_slot() for b in request.booked_slots],
        patients=[p.to_record() for p in request.patients],
        today=request.today,
    )

    data = result.to_dict()
    return SearchResponse(
        perfect=data["perfect"],
        close=data["close"],
        search_criteria=data["search_criteria"],
        message=get_response_generator().format_result(result),
    )
