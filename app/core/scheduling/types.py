"""Slot and result types for the appointment finder."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional, Union

from app.core.intelligence.criteria.types import AppointmentType


def _parse_date(value: Union[str, date]) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _parse_time(value: Union[str, time]) -> time:
    """Accept "HH:MM" or "HH:MM:SS". Offsets are dropped; the grid is wall-clock."""
    if isinstance(value, str):
        value = time.fromisoformat(value)
    return value.replace(tzinfo=None)


@dataclass(frozen=True)
class Provider:
    """Doctor on the clinic roster."""

    id: str
    name: str  # Surname, e.g. "Johnson"

    @property
    def display_name(self) -> str:
        return f"Dr. {self.name}"

    def matches(self, preference: Optional[str]) -> bool:
        """Case-insensitive substring match on the provider name."""
        if not preference:
            return True
        return preference.lower() in self.name.lower()

    @classmethod
    def from_dict(cls, data: dict) -> "Provider":
        return cls(id=str(data.get("id", "")), name=data.get("name", ""))


DEFAULT_ROSTER: tuple[Provider, ...] = (
    Provider(id="dr-johnson", name="Johnson"),
    Provider(id="dr-smith", name="Smith"),
)


@dataclass(frozen=True)
class BookedSlot:
    """Slot already taken in the appointment book."""

    date: date
    start_time: time
    end_time: Optional[time] = None
    doctor_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "BookedSlot":
        """Create from an appointment row (camelCase or snake_case keys)."""
        start = data.get("start_time", data.get("startTime"))
        end = data.get("end_time", data.get("endTime"))
        return cls(
            date=_parse_date(data["date"]),
            start_time=_parse_time(start),
            end_time=_parse_time(end) if end else None,
            doctor_id=data.get("doctor_id", data.get("doctorId")),
        )


@dataclass
class CandidateSlot:
    """Open slot offered to the user. Built fresh for every search."""

    date: date
    start_time: time
    end_time: time
    doctor_id: Optional[str]
    doctor_name: str
    score: float = 100.0
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    appointment_type: Optional[AppointmentType] = None

    @property
    def start_minutes(self) -> int:
        return self.start_time.hour * 60 + self.start_time.minute

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M:%S"),
            "end_time": self.end_time.strftime("%H:%M:%S"),
            "doctor_id": self.doctor_id,
            "doctor_name": self.doctor_name,
            "score": self.score,
            "patient_id": self.patient_id,
            "patient_name": self.patient_name,
            "appointment_type": self.appointment_type.value if self.appointment_type else None,
        }


@dataclass
class SearchCriteria:
    """Display echo of what the finder understood."""

    date_range: Optional[str] = None        # "Starting Oct 20, 2026"
    time_range: Optional[str] = None        # "Between 12:00 PM and 5:00 PM"
    doctor_preference: Optional[str] = None  # "Dr. Johnson"
    patient_name: Optional[str] = None
    appointment_type: Optional[str] = None  # "Follow Up"

    def to_dict(self) -> dict:
        """Convert to dict, excluding None values."""
        return {key: value for key, value in self.__dict__.items() if value is not None}


@dataclass
class SearchResult:
    """Ranked outcome of one appointment search."""

    perfect: list[CandidateSlot] = field(default_factory=list)
    close: list[CandidateSlot] = field(default_factory=list)
    search_criteria: SearchCriteria = field(default_factory=SearchCriteria)

    @property
    def is_empty(self) -> bool:
        return not self.perfect and not self.close

    @property
    def best(self) -> Optional[CandidateSlot]:
        """Highest-ranked slot, if any."""
        if self.perfect:
            return self.perfect[0]
        if self.close:
            return self.close[0]
        return None

    def to_dict(self) -> dict:
        return {
            "perfect": [slot.to_dict() for slot in self.perfect],
            "close": [slot.to_dict() for slot in self.close],
            "search_criteria": self.search_criteria.to_dict(),
        }
