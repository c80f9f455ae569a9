"""
Response text for appointment search results.

Template-based messages shown next to the ranked slot lists.
"""

import logging
from typing import Optional

from app.core.intelligence.criteria.clock import format_time_for_display
from app.core.scheduling.types import CandidateSlot, SearchCriteria, SearchResult

logger = logging.getLogger(__name__)


NO_SLOTS_MESSAGE = "No slots match your criteria. Try different dates or times."


class ResponseGenerator:
    """Builds user-facing text for a SearchResult."""

    def no_results(self, criteria: Optional[SearchCriteria] = None) -> str:
        """Explicit empty-result message.

        Args:
            criteria: What was searched for, echoed back when available

        Returns:
            Message text
        """
        if criteria is None:
            return NO_SLOTS_MESSAGE

        searched = self.format_criteria(criteria)
        if not searched:
            return NO_SLOTS_MESSAGE
        return f"{NO_SLOTS_MESSAGE}\nSearched: {searched}"

    def format_criteria(self, criteria: SearchCriteria) -> str:
        """One line summary, e.g. "Starting Oct 20, 2026 · Dr. Johnson"."""
        parts = [
            criteria.date_range,
            criteria.time_range,
            criteria.doctor_preference,
            criteria.patient_name,
            criteria.appointment_type,
        ]
        return " · ".join(part for part in parts if part)

    def format_slot(self, slot: CandidateSlot) -> str:
        """e.g. "Tue, Oct 20 at 2:00 PM with Dr. Johnson"."""
        day = f"{slot.date.strftime('%a, %b')} {slot.date.day}"
        return f"{day} at {format_time_for_display(slot.start_time)} with {slot.doctor_name}"

    def format_result(self, result: SearchResult) -> str:
        """Format both match lists for display.

        Args:
            result: Ranked search result

        Returns:
            Numbered slot listing, or the empty-result message
        """
        if result.is_empty:
            return self.no_results(result.search_criteria)

        lines: list[str] = []
        index = 1

        if result.perfect:
            lines.append("Perfect matches:")
            for slot in result.perfect:
                lines.append(f"{index}. {self.format_slot(slot)}")
                index += 1

        if result.close:
            if lines:
                lines.append("")
            lines.append("Close matches:" if result.perfect else "No exact matches. Closest options:")
            for slot in result.close:
                lines.append(f"{index}. {self.format_slot(slot)}")
                index += 1

        return "\n".join(lines)


# Singleton
_generator: Optional[ResponseGenerator] = None


def get_response_generator() -> ResponseGenerator:
    """Get singleton ResponseGenerator."""
    global _generator
    if _generator is None:
        _generator = ResponseGenerator()
    return _generator
