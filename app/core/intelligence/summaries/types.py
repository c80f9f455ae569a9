"""Summary types for clinical record summaries."""

from dataclasses import dataclass
from enum import Enum


class SummaryType(str, Enum):
    """Kinds of clinical record that can be summarized."""

    PATIENT = "patient"
    EXAMINATION = "examination"
    APPOINTMENT = "appointment"
    SOAP = "soap"


@dataclass
class Summary:
    """Plain-text summary of one record."""

    text: str
    entity_type: str
    source: str = "rules"  # "rules" or "model"

    def to_dict(self) -> dict:
        return {
            "summary": self.text,
            "entity_type": self.entity_type,
            "source": self.source,
        }
