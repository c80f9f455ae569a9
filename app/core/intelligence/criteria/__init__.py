"""Scheduling criteria extraction module."""

from .types import AppointmentType, ExtractedCriteria, PatientRecord, TimeWindow
from .clock import format_time_for_display, parse_clock_time
from .extractor import (
    CriteriaExtractor,
    get_criteria_extractor,
    extract_criteria,
)

__all__ = [
    # Types
    "AppointmentType",
    "ExtractedCriteria",
    "PatientRecord",
    "TimeWindow",
    # Clock helpers
    "format_time_for_display",
    "parse_clock_time",
    # Extractor
    "CriteriaExtractor",
    "get_criteria_extractor",
    "extract_criteria",
]
