"""Appointment notes keyword module."""

from .types import Keyword, KeywordCategory, NotesAnalysis
from .keywords import (
    NotesKeywordExtractor,
    get_notes_keyword_extractor,
    extract_keywords,
)

__all__ = [
    # Types
    "Keyword",
    "KeywordCategory",
    "NotesAnalysis",
    # Extractor
    "NotesKeywordExtractor",
    "get_notes_keyword_extractor",
    "extract_keywords",
]
