"""
Slot Generator.

Enumerates open appointment slots for a search window: consecutive
weekdays x roster x half-hour grid, minus anything already booked.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Iterator, Optional, Sequence

from app.config import get_settings
from app.core.intelligence.criteria.types import ExtractedCriteria
from app.core.scheduling.types import BookedSlot, CandidateSlot, DEFAULT_ROSTER, Provider

logger = logging.getLogger(__name__)

# date.weekday() values
WEEKEND_DAYS = {5, 6}


def build_time_grid(first: time, last: time, step_minutes: int) -> list[time]:
    """Slot start times from first to last inclusive."""
    grid: list[time] = []
    current = datetime.combine(date.min, first)
    end = datetime.combine(date.min, last)
    step = timedelta(minutes=step_minutes)
    while current <= end:
        grid.append(current.time())
        current += step
    return grid


def add_minutes(value: time, minutes: int) -> time:
    """Add minutes to a time of day, carrying into the hour."""
    return (datetime.combine(date.min, value) + timedelta(minutes=minutes)).time()


class SlotGenerator:
    """
    Builds the candidate space for one search.

    Iteration order is day, then provider, then time of day. The ranker
    relies on that order to break score ties.
    """

    def __init__(
        self,
        window_days: Optional[int] = None,
        slot_minutes: Optional[int] = None,
        first_slot: Optional[time] = None,
        last_slot: Optional[time] = None,
    ):
        """Initialize generator.

        Args:
            window_days: Calendar days scanned from the target date
            slot_minutes: Slot length and grid spacing
            first_slot: First slot start of the day
            last_slot: Last slot start of the day (inclusive)
        """
        settings = get_settings()
        self.window_days = window_days or settings.search_window_days
        self.slot_minutes = slot_minutes or settings.slot_duration_minutes
        self.time_grid = build_time_grid(
            first_slot or settings.first_slot,
            last_slot or settings.last_slot,
            self.slot_minutes,
        )

    def generate(
        self,
        criteria: ExtractedCriteria,
        booked_slots: Iterable[BookedSlot] = (),
        roster: Sequence[Provider] = DEFAULT_ROSTER,
    ) -> list[CandidateSlot]:
        """Enumerate open slots matching the criteria.

        Args:
            criteria: Extracted search criteria
            booked_slots: Slots already taken
            roster: Providers to consider

        Returns:
            Open slots in day/provider/time order
        """
        booked = list(booked_slots)
        start_date = criteria.target_date or date.today() + timedelta(days=1)
        providers = [p for p in roster if p.matches(criteria.doctor_preference)]

        if not providers:
            logger.info(f"No provider matches preference {criteria.doctor_preference!r}")

        generated = list(self._iter_slots(criteria, start_date, providers, booked))
        logger.debug(
            f"Generated {len(generated)} open slots from {start_date} "
            f"for {len(providers)} provider(s), {len(booked)} booked"
        )
        return generated

    def _iter_slots(
        self,
        criteria: ExtractedCriteria,
        start_date: date,
        providers: list[Provider],
        booked: list[BookedSlot],
    ) -> Iterator[CandidateSlot]:
        for day_offset in range(self.window_days):
            current = start_date + timedelta(days=day_offset)
            if current.weekday() in WEEKEND_DAYS:
                continue

            for provider in providers:
                for start in self.time_grid:
                    if criteria.time_window and not criteria.time_window.contains(start):
                        continue
                    if self._is_booked(current, start, provider, criteria, booked):
                        continue

                    yield CandidateSlot(
                        date=current,
                        start_time=start,
                        end_time=add_minutes(start, self.slot_minutes),
                        doctor_id=provider.id,
                        doctor_name=provider.display_name,
                        patient_id=criteria.patient_id,
                        patient_name=criteria.patient_name,
                        appointment_type=criteria.appointment_type,
                    )

    @staticmethod
    def _is_booked(
        day: date,
        start: time,
        provider: Provider,
        criteria: ExtractedCriteria,
        booked: list[BookedSlot],
    ) -> bool:
        """Check a slot against the appointment book.

        Without a doctor preference any booking at that date and time
        blocks the slot for every provider. With a preference only
        bookings for this provider, or bookings with no doctor, block it.
        """
        for entry in booked:
            if entry.date != day or entry.start_time != start:
                continue
            if not criteria.doctor_preference:
                return True
            if entry.doctor_id is None or entry.doctor_id == provider.id:
                return True
        return False


# Singleton
_generator: Optional[SlotGenerator] = None


def get_slot_generator() -> SlotGenerator:
    """Get singleton SlotGenerator."""
    global _generator
    if _generator is None:
        _generator = SlotGenerator()
    return _generator
