"""
Scheduling Module

Provides the natural-language appointment finder: slot generation,
scoring/ranking and result formatting.

Usage:
    from app.core.scheduling import find_appointments, BookedSlot

    result = find_appointments(
        "next Tuesday afternoon with Dr. Johnson for a follow-up",
        booked_slots=[BookedSlot.from_dict(row) for row in rows],
    )
    for slot in result.perfect:
        print(slot.date, slot.start_time, slot.doctor_name, slot.score)
"""

# Types
from app.core.scheduling.types import (
    BookedSlot,
    CandidateSlot,
    DEFAULT_ROSTER,
    Provider,
    SearchCriteria,
    SearchResult,
)

# Slot Generation
from app.core.scheduling.slots import SlotGenerator, get_slot_generator

# Ranking
from app.core.scheduling.ranking import RankedSlots, SlotRanker, score_slot

# Response Text
from app.core.scheduling.response import (
    NO_SLOTS_MESSAGE,
    ResponseGenerator,
    get_response_generator,
)

# Appointment Finder (main orchestrator)
from app.core.scheduling.engine import (
    AppointmentFinder,
    get_appointment_finder,
    find_appointments,
)

__all__ = [
    # Types
    "BookedSlot",
    "CandidateSlot",
    "DEFAULT_ROSTER",
    "Provider",
    "SearchCriteria",
    "SearchResult",
    # Slot Generation
    "SlotGenerator",
    "get_slot_generator",
    # Ranking
    "RankedSlots",
    "SlotRanker",
    "score_slot",
    # Response Text
    "NO_SLOTS_MESSAGE",
    "ResponseGenerator",
    "get_response_generator",
    # Appointment Finder
    "AppointmentFinder",
    "get_appointment_finder",
    "find_appointments",
]
