"""
Slot scoring and ranking.

Score = 100
        - 10 per day after the target date
        - min(50, minutes away from the preferred time / 5)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.config import get_settings
from app.core.intelligence.criteria.types import ExtractedCriteria
from app.core.scheduling.types import CandidateSlot

logger = logging.getLogger(__name__)

BASE_SCORE = 100.0
DAY_PENALTY = 10.0
MAX_TIME_PENALTY = 50.0
MINUTES_PER_POINT = 5.0


def score_slot(slot: CandidateSlot, criteria: ExtractedCriteria, day_offset: int) -> float:
    """Score how well a slot fits the request.

    Args:
        slot: Candidate slot
        criteria: Extracted criteria (preferred time is the window start)
        day_offset: Days between the target date and the slot date

    Returns:
        Score; 100 is an exact fit on the target day
    """
    score = BASE_SCORE - DAY_PENALTY * day_offset

    preferred = criteria.preferred_time
    if preferred is not None:
        preferred_minutes = preferred.hour * 60 + preferred.minute
        difference = abs(slot.start_minutes - preferred_minutes)
        score -= min(MAX_TIME_PENALTY, difference / MINUTES_PER_POINT)

    return score


@dataclass
class RankedSlots:
    """Perfect and close matches, best first."""

    perfect: list[CandidateSlot]
    close: list[CandidateSlot]


class SlotRanker:
    """Orders scored slots and splits them into perfect and close matches."""

    def __init__(
        self,
        perfect_threshold: Optional[float] = None,
        max_perfect: Optional[int] = None,
        max_close: Optional[int] = None,
    ):
        settings = get_settings()
        self.perfect_threshold = (
            settings.perfect_match_threshold if perfect_threshold is None else perfect_threshold
        )
        self.max_perfect = settings.max_perfect_matches if max_perfect is None else max_perfect
        self.max_close = settings.max_close_matches if max_close is None else max_close

    def score_all(self, slots: list[CandidateSlot], criteria: ExtractedCriteria) -> list[CandidateSlot]:
        """Set the score of every slot relative to the target date."""
        target = criteria.target_date
        for slot in slots:
            day_offset = (slot.date - target).days if target else 0
            slot.score = score_slot(slot, criteria, day_offset)
        return slots

    def rank(self, slots: list[CandidateSlot]) -> RankedSlots:
        """Partition scored slots.

        sorted() is stable, so equal scores keep generation order
        (day, provider, time of day).
        """
        ordered = sorted(slots, key=lambda slot: slot.score, reverse=True)

        perfect = [slot for slot in ordered if slot.score > self.perfect_threshold]
        close = [slot for slot in ordered if slot.score <= self.perfect_threshold]

        logger.debug(f"Ranked {len(ordered)} slots: {len(perfect)} perfect, {len(close)} close")

        return RankedSlots(
            perfect=perfect[: self.max_perfect],
            close=close[: self.max_close],
        )
