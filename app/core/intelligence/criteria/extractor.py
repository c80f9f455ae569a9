"""
Rules-based criteria extraction for appointment search requests.

Extracts: target date, time-of-day window, doctor preference,
patient reference and appointment type from free text.

Extraction is best-effort. Nothing here raises on odd input; a
fragment that cannot be understood simply leaves its field unset,
which the slot generator treats as "no constraint".
"""

import logging
import re
from datetime import date, timedelta
from typing import Iterable, Optional

from .clock import CLOCK_TIME, one_hour_after, parse_clock_time
from .types import AppointmentType, ExtractedCriteria, PatientRecord, TimeWindow

logger = logging.getLogger(__name__)


WEEKDAYS = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]

MONTHS = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

_WEEKDAY_ALT = "|".join(WEEKDAYS)

# ==================================
# Date Patterns (checked in order)
# ==================================

CALENDAR_DATE_PATTERNS = [
    # "on tuesday, march 3rd"
    r"\b(?:on|for)\s+(\w+day,?\s+\w+\s+\d{1,2}(?:st|nd|rd|th)?)\b",
    # "on march 3rd", "for jan 15"
    r"\b(?:on|for)\s+(\w+\s+\d{1,2}(?:st|nd|rd|th)?)\b",
    # "2026-03-14"
    r"\b(\d{4}-\d{1,2}-\d{1,2})\b",
    # "3/14/2026", "03-14-26"
    r"\b(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})\b",
]

TODAY_PATTERN = r"\btoday\b"
TOMORROW_PATTERN = r"\btomorrow\b"
NEXT_WEEKDAY_PATTERN = rf"\bnext\s+({_WEEKDAY_ALT})\b"
THIS_WEEKDAY_PATTERN = rf"\bthis\s+({_WEEKDAY_ALT})\b"

# ==================================
# Time Patterns
# ==================================

TIME_RANGE_PATTERN = rf"\bbetween\s+({CLOCK_TIME})\s+and\s+({CLOCK_TIME})"
SINGLE_TIME_PATTERNS = [
    rf"\b(?:at|around)\s+({CLOCK_TIME})",
    rf"\b({CLOCK_TIME})",
]

# Named periods: (keyword, start, end)
DAY_PERIODS = [
    ("morning", "8:00am", "12:00pm"),
    ("afternoon", "12:00pm", "5:00pm"),
    ("evening", "4:00pm", "7:00pm"),
]

# ==================================
# Doctor / Patient Patterns
# ==================================

DOCTOR_PATTERNS = [
    r"\b(?:with|see)\s+(?:dr\.?|doctor)\s+(\w+)",
    r"\b(?:dr\.?|doctor)\s+(\w+)",
]

PATIENT_PATTERNS = [
    # "for John Smith", "patient Jane Doe"
    r"(?i:\bfor|\bpatient)\s+([A-Z][a-z]+\s+[A-Z][a-z]+)",
    # "John Smith needs", "Jane Doe's appointment"
    r"\b([A-Z][a-z]+\s+[A-Z][a-z]+)(?i:'s appointment|\s+needs|\s+would like)",
]

# Words that follow "dr"/"for" in scheduling phrases but are never names
NOT_A_NAME = {
    "today", "tomorrow", "next", "this", "on", "at", "in", "for", "the",
    "dr", "doctor", *WEEKDAYS, *MONTHS,
}

# ==================================
# Appointment Types (first match wins)
# ==================================

APPOINTMENT_TYPE_KEYWORDS: list[tuple[AppointmentType, list[str]]] = [
    (AppointmentType.NEW_PATIENT, ["new patient", "first visit", "initial"]),
    (AppointmentType.FOLLOW_UP, ["follow-up", "follow up", "checkup"]),
    (AppointmentType.EMERGENCY, ["emergency", "urgent"]),
    (AppointmentType.OTHER, ["consultation"]),
]


class CriteriaExtractor:
    """
    Parses a scheduling request into ExtractedCriteria.

    Usage:
        extractor = CriteriaExtractor()
        criteria = extractor.extract("next Tuesday afternoon with Dr. Johnson")
        print(criteria.target_date, criteria.time_window)
    """

    def __init__(self):
        """Compile all patterns once."""
        self._calendar_patterns = [
            re.compile(pattern, re.IGNORECASE) for pattern in CALENDAR_DATE_PATTERNS
        ]
        self._today = re.compile(TODAY_PATTERN, re.IGNORECASE)
        self._tomorrow = re.compile(TOMORROW_PATTERN, re.IGNORECASE)
        self._next_weekday = re.compile(NEXT_WEEKDAY_PATTERN, re.IGNORECASE)
        self._this_weekday = re.compile(THIS_WEEKDAY_PATTERN, re.IGNORECASE)

        self._time_range = re.compile(TIME_RANGE_PATTERN, re.IGNORECASE)
        self._single_times = [
            re.compile(pattern, re.IGNORECASE) for pattern in SINGLE_TIME_PATTERNS
        ]

        self._doctor_patterns = [
            re.compile(pattern, re.IGNORECASE) for pattern in DOCTOR_PATTERNS
        ]
        # Case matters for names; the patterns carry scoped flags instead
        self._patient_patterns = [re.compile(pattern) for pattern in PATIENT_PATTERNS]

    def extract(
        self,
        text: str,
        patients: Optional[Iterable[PatientRecord]] = None,
        today: Optional[date] = None,
    ) -> ExtractedCriteria:
        """
        Extract search criteria from a scheduling request.

        Args:
            text: Free-text request (typed or transcribed)
            patients: Patient directory used to resolve patient names
            today: Reference date for relative phrases (defaults to today)

        Returns:
            ExtractedCriteria; target_date is always set
        """
        today = today or date.today()
        criteria = ExtractedCriteria()
        text = (text or "").strip()
        lowered = text.lower()

        self._resolve_date(lowered, today, criteria)
        self._resolve_time(lowered, criteria)
        criteria.doctor_preference = self._resolve_doctor(lowered)
        self._resolve_patient(text, patients or [], criteria)
        criteria.appointment_type = self._resolve_appointment_type(lowered)

        logger.debug(f"Extracted criteria: {criteria.to_dict()}")
        return criteria

    # ==================================
    # Date
    # ==================================

    def _resolve_date(self, lowered: str, today: date, criteria: ExtractedCriteria) -> None:
        """Apply the first date rule that matches, else default to tomorrow."""
        for pattern in self._calendar_patterns:
            match = pattern.search(lowered)
            if not match:
                continue
            parsed = self._parse_calendar_date(match.group(1), today)
            if parsed:
                criteria.target_date = parsed
                criteria.date_raw = match.group(1)
                return

        match = self._today.search(lowered)
        if match:
            criteria.target_date = today
            criteria.date_raw = match.group(0)
            return

        match = self._tomorrow.search(lowered)
        if match:
            criteria.target_date = today + timedelta(days=1)
            criteria.date_raw = match.group(0)
            return

        match = self._next_weekday.search(lowered)
        if match:
            days_until = self._days_until(today, match.group(1))
            criteria.target_date = today + timedelta(days=days_until or 7)
            criteria.date_raw = match.group(0)
            return

        match = self._this_weekday.search(lowered)
        if match:
            criteria.target_date = today + timedelta(days=self._days_until(today, match.group(1)))
            criteria.date_raw = match.group(0)
            return

        criteria.target_date = today + timedelta(days=1)

    @staticmethod
    def _days_until(today: date, weekday_name: str) -> int:
        """Days from today until the named weekday (0 if it is today)."""
        return (WEEKDAYS.index(weekday_name.lower()) - today.weekday()) % 7

    @staticmethod
    def _parse_calendar_date(token: str, today: date) -> Optional[date]:
        """Parse an explicit date token; None if it is not a real date."""
        token = re.sub(r"(\d)(?:st|nd|rd|th)\b", r"\1", token.strip())
        token = re.sub(r"^\w+day,?\s+", "", token)

        try:
            iso = re.fullmatch(r"(\d{4})-(\d{1,2})-(\d{1,2})", token)
            if iso:
                return date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)))

            numeric = re.fullmatch(r"(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})", token)
            if numeric:
                year = int(numeric.group(3))
                if year < 100:
                    year += 2000
                return date(year, int(numeric.group(1)), int(numeric.group(2)))

            named = re.fullmatch(r"([a-z]+)\.?\s+(\d{1,2})", token)
            if named and named.group(1) in MONTHS:
                month = MONTHS[named.group(1)]
                day = int(named.group(2))
                candidate = date(today.year, month, day)
                # "march 3" said in November means next March
                if candidate < today:
                    candidate = date(today.year + 1, month, day)
                return candidate
        except ValueError:
            logger.debug(f"Ignoring impossible date: {token}")

        return None

    # ==================================
    # Time
    # ==================================

    def _resolve_time(self, lowered: str, criteria: ExtractedCriteria) -> None:
        """Apply the first time rule that matches; leave unset otherwise."""
        match = self._time_range.search(lowered)
        if match:
            start = parse_clock_time(match.group(1))
            end = parse_clock_time(match.group(2))
            if start and end:
                criteria.time_window = TimeWindow(start=start, end=end)
                criteria.time_raw = match.group(0)
                return

        for pattern in self._single_times:
            match = pattern.search(lowered)
            if not match:
                continue
            start = parse_clock_time(match.group(1))
            if start:
                criteria.time_window = TimeWindow(start=start, end=one_hour_after(start))
                criteria.time_raw = match.group(1)
                return

        for keyword, start, end in DAY_PERIODS:
            if keyword in lowered:
                criteria.time_window = TimeWindow(
                    start=parse_clock_time(start),
                    end=parse_clock_time(end),
                )
                criteria.time_raw = keyword
                return

    # ==================================
    # Doctor / Patient / Type
    # ==================================

    def _resolve_doctor(self, lowered: str) -> Optional[str]:
        """Return the doctor name fragment, e.g. "johnson"."""
        for pattern in self._doctor_patterns:
            for match in pattern.finditer(lowered):
                name = match.group(1)
                if name not in NOT_A_NAME and not name.isdigit():
                    return name
        return None

    def _resolve_patient(
        self,
        text: str,
        patients: Iterable[PatientRecord],
        criteria: ExtractedCriteria,
    ) -> None:
        """Find a patient name and resolve it against the directory."""
        for pattern in self._patient_patterns:
            for match in pattern.finditer(text):
                name = match.group(1)
                if name.split()[0].lower() in NOT_A_NAME:
                    continue
                criteria.patient_name = name
                criteria.patient_id = self._lookup_patient_id(name, patients)
                return

    @staticmethod
    def _lookup_patient_id(name: str, patients: Iterable[PatientRecord]) -> Optional[str]:
        """Exact, case-insensitive full-name match."""
        wanted = name.casefold()
        for patient in patients:
            if patient.full_name.casefold() == wanted:
                return patient.id
        return None

    @staticmethod
    def _resolve_appointment_type(lowered: str) -> Optional[AppointmentType]:
        for appointment_type, keywords in APPOINTMENT_TYPE_KEYWORDS:
            if any(keyword in lowered for keyword in keywords):
                return appointment_type
        return None


# Singleton
_extractor: Optional[CriteriaExtractor] = None


def get_criteria_extractor() -> CriteriaExtractor:
    """Get singleton CriteriaExtractor."""
    global _extractor
    if _extractor is None:
        _extractor = CriteriaExtractor()
    return _extractor


def extract_criteria(
    text: str,
    patients: Optional[Iterable[PatientRecord]] = None,
    today: Optional[date] = None,
) -> ExtractedCriteria:
    """Convenience function to extract criteria."""
    return get_criteria_extractor().extract(text, patients=patients, today=today)
