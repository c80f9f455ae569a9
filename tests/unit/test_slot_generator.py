"""Tests for the slot generator."""

import pytest
from datetime import date, time, timezone

from app.core.intelligence.criteria import AppointmentType, ExtractedCriteria, TimeWindow
from app.core.scheduling.slots import SlotGenerator, add_minutes, build_time_grid
from app.core.scheduling.types import BookedSlot, DEFAULT_ROSTER, Provider

# Monday
TODAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)
FRIDAY = date(2026, 10, 23)


class TestTimeGrid:
    """Test slot grid helpers."""

    def test_default_grid(self):
        grid = build_time_grid(time(8, 0), time(17, 0), 30)
        assert grid[0] == time(8, 0)
        assert grid[-1] == time(17, 0)
        assert len(grid) == 19

    def test_add_minutes_carries_hour(self):
        assert add_minutes(time(8, 30), 30) == time(9, 0)
        assert add_minutes(time(16, 45), 30) == time(17, 15)


class TestBookedSlot:
    """Test BookedSlot parsing."""

    def test_from_snake_case(self):
        slot = BookedSlot.from_dict({
            "date": "2026-10-20",
            "start_time": "09:00:00",
            "end_time": "09:30:00",
            "doctor_id": "dr-smith",
        })
        assert slot.date == TUESDAY
        assert slot.start_time == time(9, 0)
        assert slot.end_time == time(9, 30)
        assert slot.doctor_id == "dr-smith"

    def test_from_camel_case_without_doctor(self):
        slot = BookedSlot.from_dict({"date": "2026-10-20", "startTime": "14:30"})
        assert slot.start_time == time(14, 30)
        assert slot.end_time is None
        assert slot.doctor_id is None

    def test_utc_offset_dropped(self):
        slot = BookedSlot.from_dict({
            "date": "2026-10-20",
            "start_time": "08:00:00+00:00",
            "end_time": time(8, 30, tzinfo=timezone.utc),
        })
        assert slot.start_time == time(8, 0)
        assert slot.start_time.tzinfo is None
        assert slot.end_time == time(8, 30)

    def test_utc_booking_blocks_grid_slot(self):
        slot = BookedSlot.from_dict({"date": "2026-10-20", "start_time": "08:00:00+00:00"})
        criteria = ExtractedCriteria(target_date=TUESDAY)

        slots = SlotGenerator().generate(criteria, [slot], DEFAULT_ROSTER)

        assert not any(s.date == TUESDAY and s.start_time == time(8, 0) for s in slots)


class TestSlotGenerator:
    """Test candidate slot enumeration."""

    @pytest.fixture
    def generator(self):
        return SlotGenerator(
            window_days=7,
            slot_minutes=30,
            first_slot=time(8, 0),
            last_slot=time(17, 0),
        )

    def test_unfiltered_window(self, generator):
        criteria = ExtractedCriteria(target_date=TUESDAY)
        slots = generator.generate(criteria)

        # Tue-Fri plus the following Monday, two providers, 19 starts a day
        assert len(slots) == 5 * 2 * 19
        assert {s.date for s in slots} == {
            date(2026, 10, 20),
            date(2026, 10, 21),
            date(2026, 10, 22),
            date(2026, 10, 23),
            date(2026, 10, 26),
        }

    def test_no_weekend_candidates(self, generator):
        slots = generator.generate(ExtractedCriteria(target_date=FRIDAY))
        assert slots
        assert all(s.date.weekday() < 5 for s in slots)

    def test_weekend_target_starts_on_monday(self, generator):
        slots = generator.generate(ExtractedCriteria(target_date=date(2026, 10, 24)))
        assert slots[0].date == date(2026, 10, 26)

    def test_generation_order(self, generator):
        slots = generator.generate(ExtractedCriteria(target_date=TUESDAY))
        assert slots[0].doctor_name == "Dr. Johnson"
        assert slots[0].start_time == time(8, 0)
        assert slots[1].start_time == time(8, 30)
        assert slots[19].doctor_name == "Dr. Smith"
        assert slots[38].date == date(2026, 10, 21)

    def test_slot_fields(self, generator):
        criteria = ExtractedCriteria(
            target_date=TUESDAY,
            patient_name="John Smith",
            patient_id="p-1",
            appointment_type=AppointmentType.FOLLOW_UP,
        )
        slot = generator.generate(criteria)[0]

        assert slot.end_time == time(8, 30)
        assert slot.doctor_id == "dr-johnson"
        assert slot.score == 100.0
        assert slot.patient_id == "p-1"
        assert slot.patient_name == "John Smith"
        assert slot.appointment_type == AppointmentType.FOLLOW_UP

    def test_doctor_preference_filters_roster(self, generator):
        criteria = ExtractedCriteria(target_date=TUESDAY, doctor_preference="john")
        slots = generator.generate(criteria)
        assert slots
        assert {s.doctor_name for s in slots} == {"Dr. Johnson"}

    def test_unknown_doctor_yields_nothing(self, generator):
        criteria = ExtractedCriteria(target_date=TUESDAY, doctor_preference="patel")
        assert generator.generate(criteria) == []

    def test_time_window_is_half_open(self, generator):
        criteria = ExtractedCriteria(
            target_date=TUESDAY,
            time_window=TimeWindow(start=time(12, 0), end=time(17, 0)),
        )
        starts = {s.start_time for s in generator.generate(criteria)}
        assert min(starts) == time(12, 0)
        assert max(starts) == time(16, 30)
        assert time(17, 0) not in starts

    def test_booking_without_preference_blocks_all_providers(self, generator):
        criteria = ExtractedCriteria(target_date=TUESDAY)
        booked = [BookedSlot(date=TUESDAY, start_time=time(9, 0), doctor_id="dr-smith")]

        slots = generator.generate(criteria, booked)

        assert not any(s.date == TUESDAY and s.start_time == time(9, 0) for s in slots)

    def test_booking_for_other_doctor_does_not_block_preferred(self, generator):
        criteria = ExtractedCriteria(target_date=TUESDAY, doctor_preference="johnson")
        booked = [BookedSlot(date=TUESDAY, start_time=time(9, 0), doctor_id="dr-smith")]

        slots = generator.generate(criteria, booked)

        assert any(s.date == TUESDAY and s.start_time == time(9, 0) for s in slots)

    def test_booking_without_doctor_blocks_preferred(self, generator):
        criteria = ExtractedCriteria(target_date=TUESDAY, doctor_preference="johnson")
        booked = [BookedSlot(date=TUESDAY, start_time=time(9, 0))]

        slots = generator.generate(criteria, booked)

        assert not any(s.date == TUESDAY and s.start_time == time(9, 0) for s in slots)

    def test_never_double_books(self, generator):
        criteria = ExtractedCriteria(target_date=TUESDAY, doctor_preference="smith")
        booked = [
            BookedSlot(date=TUESDAY, start_time=time(8, 0), doctor_id="dr-smith"),
            BookedSlot(date=TUESDAY, start_time=time(10, 30), doctor_id="dr-smith"),
            BookedSlot(date=date(2026, 10, 22), start_time=time(15, 0)),
        ]

        slots = generator.generate(criteria, booked)

        for slot in slots:
            for entry in booked:
                assert not (
                    slot.date == entry.date
                    and slot.start_time == entry.start_time
                    and entry.doctor_id in (None, slot.doctor_id)
                )

    def test_custom_roster(self, generator):
        roster = [Provider(id="dr-patel", name="Patel")]
        slots = generator.generate(ExtractedCriteria(target_date=TUESDAY), roster=roster)
        assert {s.doctor_id for s in slots} == {"dr-patel"}

    def test_default_roster(self):
        assert [p.display_name for p in DEFAULT_ROSTER] == ["Dr. Johnson", "Dr. Smith"]

    def test_provider_matching_is_case_insensitive(self):
        provider = Provider(id="dr-johnson", name="Johnson")
        assert provider.matches("JOHN")
        assert provider.matches(None)
        assert not provider.matches("smith")
