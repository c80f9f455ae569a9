"""Criteria types for appointment search requests."""

from dataclasses import dataclass
from datetime import date, time
from enum import Enum
from typing import Optional


class AppointmentType(str, Enum):
    """Types of appointments the front desk books."""

    NEW_PATIENT = "new-patient"
    FOLLOW_UP = "follow-up"
    EMERGENCY = "emergency"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Human readable label, e.g. "Follow Up"."""
        return self.value.replace("-", " ").title()


@dataclass(frozen=True)
class PatientRecord:
    """Entry of the caller-supplied patient directory."""

    id: str
    first_name: str
    last_name: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_dict(cls, data: dict) -> "PatientRecord":
        """Create from a directory row (camelCase or snake_case keys)."""
        return cls(
            id=str(data.get("id", "")),
            first_name=data.get("first_name", data.get("firstName", "")),
            last_name=data.get("last_name", data.get("lastName", "")),
        )


@dataclass(frozen=True)
class TimeWindow:
    """Half-open time-of-day window [start, end)."""

    start: time
    end: Optional[time] = None

    def contains(self, value: time) -> bool:
        """Check if a slot start time falls inside the window."""
        if value < self.start:
            return False
        if self.end is not None and value >= self.end:
            return False
        return True

    @property
    def start_minutes(self) -> int:
        return self.start.hour * 60 + self.start.minute


@dataclass
class ExtractedCriteria:
    """Structured intent parsed from a free-text scheduling request.

    Every field is optional; an unset field means "no constraint".
    """

    # Date
    target_date: Optional[date] = None
    date_raw: Optional[str] = None       # "next tuesday", "3/14/2026"

    # Time of day
    time_window: Optional[TimeWindow] = None
    time_raw: Optional[str] = None       # "2pm", "afternoon"

    # Doctor name fragment as typed ("johnson")
    doctor_preference: Optional[str] = None

    # Patient
    patient_name: Optional[str] = None
    patient_id: Optional[str] = None

    appointment_type: Optional[AppointmentType] = None

    def has_any(self) -> bool:
        """Check if anything beyond the default date was extracted."""
        return any([
            self.date_raw,
            self.time_window,
            self.doctor_preference,
            self.patient_name,
            self.appointment_type,
        ])

    @property
    def preferred_time(self) -> Optional[time]:
        """Time of day that scoring measures distance from."""
        return self.time_window.start if self.time_window else None

    def to_dict(self) -> dict:
        """Convert to dict, excluding None values."""
        result = {}
        if self.target_date:
            result["target_date"] = self.target_date.isoformat()
        if self.date_raw:
            result["date_raw"] = self.date_raw
        if self.time_window:
            result["time_start"] = self.time_window.start.strftime("%H:%M")
            if self.time_window.end:
                result["time_end"] = self.time_window.end.strftime("%H:%M")
        if self.time_raw:
            result["time_raw"] = self.time_raw
        if self.doctor_preference:
            result["doctor_preference"] = self.doctor_preference
        if self.patient_name:
            result["patient_name"] = self.patient_name
        if self.patient_id:
            result["patient_id"] = self.patient_id
        if self.appointment_type:
            result["appointment_type"] = self.appointment_type.value
        return result
