"""
Clinical text assistant.

Uses Claude for notes keyword extraction, form filling and record
summaries when an API key is configured, and falls back to the local
rules otherwise. Callers always get a result; the `source` field says
which backend produced it.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Union

from app.config import settings
from app.infra.claude import ClaudeClient, ClaudeClientError, get_claude_client

from .forms import FormField, FormFiller, get_form_filler
from .notes import (
    Keyword,
    KeywordCategory,
    NotesAnalysis,
    NotesKeywordExtractor,
    get_notes_keyword_extractor,
)
from .notes.keywords import MIN_NOTES_LENGTH
from .summaries import Summary, SummaryType, SummaryWriter, get_summary_writer

logger = logging.getLogger(__name__)


NOTES_PROMPT = """You are assisting the front desk of an ophthalmology clinic.

Extract the clinically relevant keywords from the appointment notes below.

## Categories
- symptom: what the patient reports (floaters, blurry vision, pain)
- medication: eye drops and other drugs (latanoprost, artificial tears)
- procedure: tests, surgeries, follow-ups, referrals
- condition: diagnoses (glaucoma, cataract, dry eye)
- other: insurance or urgency flags

## Notes

"{notes}"

## Response

Respond with ONLY valid JSON:
{{
    "keywords": [
        {{"text": "<keyword, lowercase>", "category": "<category>"}}
    ]
}}"""


FORM_PROMPT = """You fill in clinical forms for an ophthalmology practice.

{context}

## Fields
{fields}

## Text

"{text}"

## Rules
- Only fill fields the text clearly provides a value for
- Dates as YYYY-MM-DD, heights in cm, weights in kg
- Visual acuity as Snellen fractions (20/40), IOP as whole mmHg
- For select fields use one of the listed option values

## Response

Respond with ONLY valid JSON mapping field name to value:
{{
    "<field name>": <value>
}}"""


SUMMARY_PROMPT = """You are a medical assistant in an ophthalmology practice.

Write a concise {title} from the record below. Use professional,
clinical language.

## Record

{record}

## Include
{sections}

## Response

Respond with the summary text only, with headings and line breaks as needed."""

# (title, sections) per record type
SUMMARY_OUTLINES = {
    SummaryType.PATIENT: (
        "patient summary",
        [
            "Basic demographics (age, gender)",
            "Relevant medical history",
            "Allergies and medications",
            "Insurance information",
            "Contact details",
        ],
    ),
    SummaryType.EXAMINATION: (
        "examination summary",
        [
            "Chief complaint",
            "Visual acuity findings",
            "Intraocular pressure values",
            "Key anterior and posterior segment findings",
            "Diagnosis and plan",
            "Follow-up recommendations",
        ],
    ),
    SummaryType.APPOINTMENT: (
        "appointment summary",
        [
            "Date and time",
            "Appointment type and status",
            "Key notes or reasons for visit",
            "Action items based on the status",
        ],
    ),
    SummaryType.SOAP: (
        "SOAP note summary",
        [
            "Key subjective complaints",
            "Important objective findings",
            "Assessment and diagnoses (with ICD-10 codes if available)",
            "Treatment plan and follow-up recommendations",
            "MIPS compliance if relevant",
        ],
    ),
}


@dataclass
class FormFillResult:
    """Filled form fields and the backend that filled them."""

    fields: list[FormField] = field(default_factory=list)
    source: str = "rules"  # "rules" or "model"

    def to_dict(self) -> dict:
        return {
            "fields": [f.to_dict() for f in self.fields],
            "source": self.source,
        }


class ClinicalAssistant:
    """
    Model-backed clinical text assistant with local fallback.

    Usage:
        assistant = ClinicalAssistant()
        analysis = await assistant.analyze_notes("Pt reports floaters OD")
        result = await assistant.fill_form("IOP 16 OD, 18 OS", fields)
        summary = await assistant.generate_summary("examination", exam)
    """

    def __init__(
        self,
        claude_client: Optional[ClaudeClient] = None,
        keyword_extractor: Optional[NotesKeywordExtractor] = None,
        form_filler: Optional[FormFiller] = None,
        summary_writer: Optional[SummaryWriter] = None,
    ):
        """Initialize assistant.

        Args:
            claude_client: Optional Claude client (for testing)
            keyword_extractor: Optional rules fallback for notes
            form_filler: Optional rules fallback for forms
            summary_writer: Optional template fallback for summaries
        """
        self._client = claude_client
        self._keywords = keyword_extractor or get_notes_keyword_extractor()
        self._filler = form_filler or get_form_filler()
        self._summaries = summary_writer or get_summary_writer()

    async def _get_client(self) -> Optional[ClaudeClient]:
        """Get the Claude client, or None when no API key is configured."""
        if self._client is None and settings.assistant_enabled:
            try:
                self._client = await get_claude_client()
            except ValueError as e:
                logger.warning(f"Claude unavailable, using rules: {e}")
        return self._client

    async def analyze_notes(self, notes: Optional[str]) -> NotesAnalysis:
        """
        Extract keywords from appointment notes.

        Args:
            notes: Free-text appointment notes

        Returns:
            NotesAnalysis from the model, or from the rules on any failure
        """
        if not notes or len(notes.strip()) < MIN_NOTES_LENGTH:
            return NotesAnalysis(source="rules")

        client = await self._get_client()
        if client is None:
            return self._keywords.extract(notes)

        start_time = time.time()
        try:
            data = await client.generate_json(
                prompt=NOTES_PROMPT.format(notes=notes.strip()),
                max_tokens=512,
            )
            analysis = self._parse_keywords(data)
        except (ClaudeClientError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Notes analysis fell back to rules: {e}")
            return self._keywords.extract(notes)

        logger.debug(
            f"Model extracted {len(analysis.keywords)} keywords "
            f"in {(time.time() - start_time) * 1000:.0f}ms"
        )
        return analysis

    async def fill_form(
        self,
        text: str,
        fields: Iterable[FormField],
        context_hint: Optional[str] = None,
    ) -> FormFillResult:
        """
        Fill form fields from free text.

        Args:
            text: Dictated or typed description
            fields: Form fields; never modified
            context_hint: Optional description of the form, e.g. "pre-testing"

        Returns:
            FormFillResult with copies of the fields
        """
        fields = list(fields)
        if not text or not text.strip() or not fields:
            return FormFillResult(fields=self._filler.fill("", fields), source="rules")

        client = await self._get_client()
        if client is None:
            return FormFillResult(fields=self._filler.fill(text, fields), source="rules")

        try:
            data = await client.generate_json(
                prompt=FORM_PROMPT.format(
                    context=f"## Form\n{context_hint}" if context_hint else "",
                    fields=self._describe_fields(fields),
                    text=text.strip(),
                ),
                max_tokens=1024,
            )
            if not isinstance(data, dict):
                raise ValueError(f"Expected JSON object, got {type(data).__name__}")
        except (ClaudeClientError, ValueError) as e:
            logger.warning(f"Form fill fell back to rules: {e}")
            return FormFillResult(fields=self._filler.fill(text, fields), source="rules")

        return FormFillResult(fields=self._merge(fields, data), source="model")

    async def generate_summary(
        self,
        entity_type: Union[SummaryType, str],
        data: Optional[dict],
        today: Optional[date] = None,
    ) -> Summary:
        """
        Summarize a patient, examination, appointment or SOAP record.

        Args:
            entity_type: patient, examination, appointment or soap
            data: The record
            today: Reference date for the template fallback

        Returns:
            Summary from the model, or from the templates on any failure
        """
        try:
            summary_type = SummaryType(entity_type)
        except ValueError:
            return self._summaries.write(entity_type, data, today=today)

        if not data:
            return self._summaries.write(summary_type, data, today=today)

        client = await self._get_client()
        if client is None:
            return self._summaries.write(summary_type, data, today=today)

        title, sections = SUMMARY_OUTLINES[summary_type]
        start_time = time.time()
        try:
            response = await client.generate(
                prompt=SUMMARY_PROMPT.format(
                    title=title,
                    record=json.dumps(data, indent=2, default=str),
                    sections="\n".join(f"{i}. {s}" for i, s in enumerate(sections, 1)),
                ),
                max_tokens=1000,
                temperature=0.3,
            )
            text = response.content.strip()
            if not text:
                raise ValueError("Empty summary")
        except (ClaudeClientError, ValueError, AttributeError) as e:
            logger.warning(f"Summary fell back to templates: {e}")
            return self._summaries.write(summary_type, data, today=today)

        logger.debug(
            f"Model wrote {summary_type.value} summary "
            f"in {(time.time() - start_time) * 1000:.0f}ms"
        )
        return Summary(text=text, entity_type=summary_type.value, source="model")

    @staticmethod
    def _parse_keywords(data: dict) -> NotesAnalysis:
        """Build a NotesAnalysis from the model's JSON reply."""
        analysis = NotesAnalysis(source="model")
        for item in data.get("keywords", []):
            text = str(item.get("text", "")).strip()
            if not text:
                continue
            try:
                category = KeywordCategory(str(item.get("category", "other")).lower())
            except ValueError:
                category = KeywordCategory.OTHER
            analysis.add(Keyword(text=text, category=category))
        return analysis

    @staticmethod
    def _describe_fields(fields: list[FormField]) -> str:
        lines = []
        for f in fields:
            line = f"- {f.name} ({f.type}): {f.label}"
            if f.options:
                line += f" [options: {', '.join(json.dumps(o.value) for o in f.options)}]"
            lines.append(line)
        return "\n".join(lines)

    @staticmethod
    def _merge(fields: list[FormField], data: dict) -> list[FormField]:
        """Apply non-empty model values to copies of the fields."""
        merged = []
        for f in fields:
            value = data.get(f.name)
            merged.append(FormField(
                id=f.id,
                name=f.name,
                type=f.type,
                label=f.label,
                value=f.value if value is None or value == "" else value,
                options=list(f.options) if f.options is not None else None,
            ))
        return merged


# Singleton
_assistant: Optional[ClinicalAssistant] = None


def get_clinical_assistant() -> ClinicalAssistant:
    """Get singleton ClinicalAssistant."""
    global _assistant
    if _assistant is None:
        _assistant = ClinicalAssistant()
    return _assistant
