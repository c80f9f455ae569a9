"""
Intelligence Layer Module

Provides scheduling criteria extraction, appointment notes keywords,
natural-language form filling, record summaries and the model-backed
clinical assistant.

Usage:
    from app.core.intelligence import (
        extract_criteria,
        extract_keywords,
        fill_form,
        get_clinical_assistant,
    )

    # Scheduling criteria
    criteria = extract_criteria("next Tuesday afternoon with Dr. Smith")
    print(criteria.doctor_preference)  # "smith"

    # Notes keywords (rules only)
    analysis = extract_keywords("Pt on latanoprost, reports floaters")

    # Model-backed with rules fallback
    assistant = get_clinical_assistant()
    analysis = await assistant.analyze_notes(notes)
"""

# Criteria Extraction
from app.core.intelligence.criteria.types import (
    AppointmentType,
    ExtractedCriteria,
    PatientRecord,
    TimeWindow,
)
from app.core.intelligence.criteria.extractor import (
    CriteriaExtractor,
    get_criteria_extractor,
    extract_criteria,
)

# Notes Keywords
from app.core.intelligence.notes.types import Keyword, KeywordCategory, NotesAnalysis
from app.core.intelligence.notes.keywords import (
    NotesKeywordExtractor,
    get_notes_keyword_extractor,
    extract_keywords,
)

# Form Filling
from app.core.intelligence.forms.types import FieldOption, FormField
from app.core.intelligence.forms.filler import (
    FormFiller,
    get_form_filler,
    fill_form,
)

# Summaries
from app.core.intelligence.summaries.types import Summary, SummaryType
from app.core.intelligence.summaries.templates import (
    SummaryWriter,
    get_summary_writer,
    write_summary,
)

# Clinical Assistant
from app.core.intelligence.assistant import (
    ClinicalAssistant,
    FormFillResult,
    get_clinical_assistant,
)

__all__ = [
    # Criteria
    "AppointmentType",
    "ExtractedCriteria",
    "PatientRecord",
    "TimeWindow",
    "CriteriaExtractor",
    "get_criteria_extractor",
    "extract_criteria",
    # Notes
    "Keyword",
    "KeywordCategory",
    "NotesAnalysis",
    "NotesKeywordExtractor",
    "get_notes_keyword_extractor",
    "extract_keywords",
    # Forms
    "FieldOption",
    "FormField",
    "FormFiller",
    "get_form_filler",
    "fill_form",
    # Summaries
    "Summary",
    "SummaryType",
    "SummaryWriter",
    "get_summary_writer",
    "write_summary",
    # Assistant
    "ClinicalAssistant",
    "FormFillResult",
    "get_clinical_assistant",
]
