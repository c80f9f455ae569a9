"""Tests for search result text."""

import pytest
from datetime import date, time

from app.core.scheduling.response import NO_SLOTS_MESSAGE, ResponseGenerator
from app.core.scheduling.types import CandidateSlot, SearchCriteria, SearchResult


def make_slot(start: time, doctor: str = "Johnson", day: date = date(2026, 10, 20)) -> CandidateSlot:
    return CandidateSlot(
        date=day,
        start_time=start,
        end_time=time(start.hour, start.minute + 30) if start.minute < 30 else time(start.hour + 1, 0),
        doctor_id=f"dr-{doctor.lower()}",
        doctor_name=f"Dr. {doctor}",
    )


class TestResponseGenerator:
    """Test ResponseGenerator."""

    @pytest.fixture
    def generator(self):
        return ResponseGenerator()

    @pytest.fixture
    def criteria(self):
        return SearchCriteria(
            date_range="Starting Oct 20, 2026",
            time_range="Between 12:00 PM and 5:00 PM",
            doctor_preference="Dr. Johnson",
        )

    def test_no_results(self, generator):
        assert generator.no_results() == NO_SLOTS_MESSAGE

    def test_no_results_echoes_criteria(self, generator, criteria):
        message = generator.no_results(criteria)
        assert message.startswith(NO_SLOTS_MESSAGE)
        assert "Searched: Starting Oct 20, 2026 · Between 12:00 PM and 5:00 PM · Dr. Johnson" in message

    def test_no_results_with_empty_criteria(self, generator):
        assert generator.no_results(SearchCriteria()) == NO_SLOTS_MESSAGE

    def test_format_slot(self, generator):
        slot = make_slot(time(14, 0))
        assert generator.format_slot(slot) == "Tue, Oct 20 at 2:00 PM with Dr. Johnson"

    def test_format_result_empty(self, generator, criteria):
        result = SearchResult(search_criteria=criteria)
        assert generator.format_result(result).startswith(NO_SLOTS_MESSAGE)

    def test_format_result_both_lists(self, generator, criteria):
        result = SearchResult(
            perfect=[make_slot(time(12, 0))],
            close=[make_slot(time(13, 0)), make_slot(time(12, 0), day=date(2026, 10, 21))],
            search_criteria=criteria,
        )

        lines = generator.format_result(result).split("\n")

        assert lines[0] == "Perfect matches:"
        assert lines[1] == "1. Tue, Oct 20 at 12:00 PM with Dr. Johnson"
        assert lines[2] == ""
        assert lines[3] == "Close matches:"
        assert lines[4] == "2. Tue, Oct 20 at 1:00 PM with Dr. Johnson"
        assert lines[5] == "3. Wed, Oct 21 at 12:00 PM with Dr. Johnson"

    def test_format_result_close_only(self, generator):
        result = SearchResult(close=[make_slot(time(9, 30), doctor="Smith")])

        text = generator.format_result(result)

        assert text.startswith("No exact matches. Closest options:")
        assert "1. Tue, Oct 20 at 9:30 AM with Dr. Smith" in text
