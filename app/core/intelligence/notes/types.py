"""Keyword types for appointment notes analysis."""

from dataclasses import dataclass, field
from enum import Enum


class KeywordCategory(str, Enum):
    """Clinical categories a notes keyword can belong to."""

    SYMPTOM = "symptom"
    MEDICATION = "medication"
    PROCEDURE = "procedure"
    CONDITION = "condition"
    OTHER = "other"


@dataclass(frozen=True)
class Keyword:
    """Keyword found in appointment notes."""

    text: str
    category: KeywordCategory

    def to_dict(self) -> dict:
        return {"text": self.text, "category": self.category.value}


@dataclass
class NotesAnalysis:
    """Keywords extracted from one set of notes."""

    keywords: list[Keyword] = field(default_factory=list)
    source: str = "rules"  # "rules" or "model"

    def by_category(self, category: KeywordCategory) -> list[Keyword]:
        return [k for k in self.keywords if k.category == category]

    def add(self, keyword: Keyword) -> bool:
        """Add a keyword unless the same text is already present.

        Returns:
            True if the keyword was added
        """
        wanted = keyword.text.lower()
        if any(k.text.lower() == wanted for k in self.keywords):
            return False
        self.keywords.append(keyword)
        return True

    def to_dict(self) -> dict:
        return {
            "keywords": [k.to_dict() for k in self.keywords],
            "source": self.source,
        }
