"""
Appointment Finder - Main Orchestrator.

Turns a free-text scheduling request into ranked appointment slots:

    text -> CriteriaExtractor -> SlotGenerator -> SlotRanker -> SearchResult

The finder never writes anything. The caller books the slot the user
picks through its own appointment store.
"""

import logging
import time
from datetime import date
from typing import Iterable, Optional, Sequence

from app.core.intelligence.criteria import (
    CriteriaExtractor,
    ExtractedCriteria,
    PatientRecord,
    format_time_for_display,
    get_criteria_extractor,
)
from app.core.scheduling.ranking import SlotRanker
from app.core.scheduling.slots import SlotGenerator, get_slot_generator
from app.core.scheduling.types import (
    BookedSlot,
    DEFAULT_ROSTER,
    Provider,
    SearchCriteria,
    SearchResult,
)

logger = logging.getLogger(__name__)


class AppointmentFinder:
    """
    Natural-language appointment slot finder.

    Coordinates:
    - Criteria extraction
    - Slot generation against the booked-slot list
    - Scoring and ranking
    - Criteria echo for display
    """

    def __init__(
        self,
        extractor: Optional[CriteriaExtractor] = None,
        generator: Optional[SlotGenerator] = None,
        ranker: Optional[SlotRanker] = None,
        roster: Sequence[Provider] = DEFAULT_ROSTER,
    ):
        """Initialize finder with optional dependencies.

        Args:
            extractor: Criteria extractor
            generator: Slot generator
            ranker: Slot ranker
            roster: Providers offered to patients
        """
        self._extractor = extractor
        self._generator = generator
        self._ranker = ranker
        self.roster = tuple(roster)

    def _get_extractor(self) -> CriteriaExtractor:
        if self._extractor is None:
            self._extractor = get_criteria_extractor()
        return self._extractor

    def _get_generator(self) -> SlotGenerator:
        if self._generator is None:
            self._generator = get_slot_generator()
        return self._generator

    def _get_ranker(self) -> SlotRanker:
        if self._ranker is None:
            self._ranker = SlotRanker()
        return self._ranker

    def search(
        self,
        text: str,
        booked_slots: Iterable[BookedSlot] = (),
        patients: Iterable[PatientRecord] = (),
        today: Optional[date] = None,
    ) -> SearchResult:
        """Find appointment slots for a scheduling request.

        Args:
            text: Free-text request, e.g. "next Tuesday afternoon with Dr. Johnson"
            booked_slots: Slots already taken in the appointment book
            patients: Patient directory for resolving names
            today: Reference date for relative phrases (defaults to today)

        Returns:
            SearchResult with perfect and close matches
        """
        start_time = time.time()

        criteria = self._get_extractor().extract(text, patients=list(patients), today=today)
        candidates = self._get_generator().generate(criteria, booked_slots, self.roster)

        ranker = self._get_ranker()
        ranker.score_all(candidates, criteria)
        ranked = ranker.rank(candidates)

        result = SearchResult(
            perfect=ranked.perfect,
            close=ranked.close,
            search_criteria=self.describe(criteria),
        )

        processing_time_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Appointment search: {len(candidates)} candidates, "
            f"{len(result.perfect)} perfect, {len(result.close)} close "
            f"({processing_time_ms:.1f}ms)"
        )
        return result

    @staticmethod
    def describe(criteria: ExtractedCriteria) -> SearchCriteria:
        """Build the display echo of the extracted criteria."""
        time_range = None
        window = criteria.time_window
        if window:
            if window.end:
                time_range = (
                    f"Between {format_time_for_display(window.start)} "
                    f"and {format_time_for_display(window.end)}"
                )
            else:
                time_range = f"Around {format_time_for_display(window.start)}"

        date_range = None
        if criteria.target_date:
            target = criteria.target_date
            date_range = f"Starting {target.strftime('%b')} {target.day}, {target.year}"

        return SearchCriteria(
            date_range=date_range,
            time_range=time_range,
            doctor_preference=(
                f"Dr. {criteria.doctor_preference.capitalize()}"
                if criteria.doctor_preference
                else None
            ),
            patient_name=criteria.patient_name,
            appointment_type=(
                criteria.appointment_type.label if criteria.appointment_type else None
            ),
        )


# Singleton
_finder: Optional[AppointmentFinder] = None


def get_appointment_finder() -> AppointmentFinder:
    """Get singleton AppointmentFinder."""
    global _finder
    if _finder is None:
        _finder = AppointmentFinder()
    return _finder


def find_appointments(
    text: str,
    booked_slots: Iterable[BookedSlot] = (),
    patients: Iterable[PatientRecord] = (),
    today: Optional[date] = None,
) -> SearchResult:
    """Convenience function to run an appointment search."""
    return get_appointment_finder().search(text, booked_slots, patients, today)
