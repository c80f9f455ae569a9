"""
Rules-based natural-language form filling.

Maps dictated or typed text ("IOP 16 OD, 18 OS. VA OD 20/40 sc, 20/20 cc")
onto the fields of intake, pre-testing and examination forms.

Each rule pairs a field matcher with a value extractor. Rules run in
table order; a later rule that finds a value overrides an earlier one.
Fields no rule can fill keep their current value.
"""

import copy
import logging
import re
from typing import Any, Callable, Iterable, Optional

from .types import FieldKey, FormField

logger = logging.getLogger(__name__)

FLAGS = re.IGNORECASE

# Sentence tail: stop at a period, newline or end of text
_TAIL = r"(.+?)(?:\.(?:\s|$)|\n|$)"


def _first_match(text: str, patterns: Iterable[str], flags: int = FLAGS) -> Optional[str]:
    """Return group 1 of the first pattern that matches."""
    for pattern in patterns:
        match = re.search(pattern, text, flags)
        if match and match.group(1):
            return match.group(1).strip()
    return None


def _as_iso_date(value: str) -> str:
    """Normalize M/D/YYYY to YYYY-MM-DD; ISO input is returned as-is."""
    if "/" in value:
        month, day, year = value.split("/")
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    return value


# ==================================
# Demographics
# ==================================

def fill_first_name(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [
        r"\bfirst\s+name\s+(?:is\s+)?([A-Za-z]+)",
        r"\bname\s+is\s+([A-Za-z]+)",
    ])


def fill_last_name(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [
        r"\blast\s+name\s+(?:is\s+)?([A-Za-z]+)",
        r"\bname\s+is\s+[A-Za-z]+\s+([A-Za-z]+)",
    ])


def fill_email(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [r"\b([A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,})\b"])


def fill_phone(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [r"(?<!\d)(\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4})(?!\d)"])


def fill_date(text: str, key: FieldKey) -> Optional[str]:
    value = _first_match(text, [
        r"\b(?:born|birth(?:day|date)?)\s+(?:on\s+|is\s+)?(\d{1,2}/\d{1,2}/\d{4})\b",
        r"\b(\d{1,2}/\d{1,2}/\d{4})\b",
        r"\b(\d{4}-\d{1,2}-\d{1,2})\b",
    ])
    return _as_iso_date(value) if value else None


def fill_age(text: str, key: FieldKey) -> Optional[int]:
    value = _first_match(text, [
        r"\b(\d{1,3})\s*(?:-\s*)?(?:years?|yrs?|y/?o)(?:\s*-?\s*old)?\b",
        r"\bage\s+(?:is\s+)?(\d{1,3})\b",
    ])
    return int(value) if value else None


def fill_gender(text: str, key: FieldKey) -> Optional[str]:
    lowered = text.lower()
    if re.search(r"\bfemale\b|\bwoman\b", lowered):
        return "female"
    if re.search(r"\bmale\b|\bman\b", lowered):
        return "male"
    if re.search(r"\bnon-?binary\b", lowered):
        return "other"
    return None


def fill_address(text: str, key: FieldKey) -> Optional[str]:
    match = re.search(
        r"\b\d+\s+[A-Za-z0-9\s,.]+?\b(?:Avenue|Ave|Street|St|Road|Rd|Drive|Dr|Lane|Ln|"
        r"Place|Pl|Court|Ct|Boulevard|Blvd)\b\.?",
        text,
        FLAGS,
    )
    if match:
        return match.group(0).strip()
    return _first_match(text, [r"\baddress\s+(?:is\s+)?([^.\n]+)"])


BLOOD_TYPE_PATTERNS = [
    r"\bblood\s+type\s+(?:is\s+)?(AB|A|B|O)\s*([+-])",
    r"\b(AB|A|B|O)\s*([+-])\s+blood\b",
    r"\btype\s+(AB|A|B|O)\s*([+-])",
]


def fill_blood_type(text: str, key: FieldKey) -> Optional[str]:
    for pattern in BLOOD_TYPE_PATTERNS:
        match = re.search(pattern, text, FLAGS)
        if match:
            return f"{match.group(1).upper()}{match.group(2)}"
    return None


def fill_height(text: str, key: FieldKey) -> Optional[float]:
    value = _first_match(text, [r"(\d+(?:\.\d+)?)\s*(?:cm|centimeters?)\b"])
    if value:
        return float(value)

    match = re.search(r"(\d)\s*(?:'|ft|feet|foot)\s*(?:(\d{1,2})\s*(?:\"|in|inches?)?)?", text, FLAGS)
    if match:
        inches = int(match.group(1)) * 12 + int(match.group(2) or 0)
        return float(round(inches * 2.54))
    return None


def fill_weight(text: str, key: FieldKey) -> Optional[float]:
    value = _first_match(text, [r"(\d+(?:\.\d+)?)\s*(?:kg|kilograms?)\b"])
    if value:
        return float(value)

    value = _first_match(text, [r"(\d+(?:\.\d+)?)\s*(?:lbs?|pounds?)\b"])
    if value:
        return round(float(value) * 0.45359237, 1)
    return None


def fill_emergency_contact_name(text: str, key: FieldKey) -> Optional[str]:
    # Names must be capitalized; the lead-in is case-insensitive
    return _first_match(text, [
        r"(?i:emergency\s+contact(?:'s)?\s+name\s+(?:is\s+)?)([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)",
        r"(?i:emergency\s+contact\s+(?:is\s+)?)([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)",
    ], flags=0)


def fill_emergency_contact_relationship(text: str, key: FieldKey) -> Optional[str]:
    value = _first_match(text, [
        r"\bemergency\s+contact\s+relationship\s+(?:is\s+)?([A-Za-z]+)",
        r"\bemergency\s+contact\s+is\s+(?:my|a|the|her|his)\s+([A-Za-z]+)",
        r"\(([A-Za-z]+)\)",
    ])
    return value.lower() if value else None


def fill_language(text: str, key: FieldKey) -> Optional[str]:
    value = _first_match(text, [
        r"\b(?:preferred\s+)?language\s+(?:is\s+)?([A-Za-z]+)",
        r"\bspeaks\s+([A-Za-z]+)",
    ])
    return value.capitalize() if value else None


def fill_occupation(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [
        r"\boccupation\s+(?:is\s+)?([A-Za-z ]+?)(?:[.,;\n]|$)",
        r"\bworks\s+as\s+an?\s+([A-Za-z ]+?)(?:[.,;\n]|$)",
    ])


# ==================================
# Social History
# ==================================

def fill_smoking(text: str, key: FieldKey) -> Optional[str]:
    lowered = text.lower()
    if any(p in lowered for p in ("never smoke", "non-smoker", "nonsmoker", "does not smoke", "doesn't smoke")):
        return "Never smoker"
    if any(p in lowered for p in ("former smoke", "quit smoking", "ex-smoker")):
        return "Former smoker"
    if any(p in lowered for p in ("current smoke", "does smoke", "smokes")):
        return "Current smoker"
    return None


def fill_alcohol(text: str, key: FieldKey) -> Optional[str]:
    lowered = text.lower()
    if any(p in lowered for p in ("no alcohol", "doesn't drink", "does not drink")):
        return "None"
    if "occasional" in lowered or "socially" in lowered:
        return "Occasional"
    if "moderate" in lowered:
        return "Moderate"
    if "heavy" in lowered or "daily" in lowered:
        return "Heavy"
    return None


# ==================================
# Clinical History
# ==================================

def fill_chief_complaint(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [
        rf"\bcomplaint\s+(?:is\s+|of\s+)?{_TAIL}",
        rf"\bpresents\s+with\s+{_TAIL}",
        r"\bwith\s+(.+?)(?:\s+for\b|\s+since\b|\.(?:\s|$)|\n|$)",
    ])


def fill_allergies(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [rf"\ballerg(?:y|ies|ic)\s+(?:to\s+)?{_TAIL}"])


def fill_medications(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [rf"\bmedications?\s+(?:include\s+|are\s+|is\s+)?{_TAIL}"])


def fill_family_history(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [rf"\bfamily\s+(?:medical\s+)?history\s+(?:of\s+)?{_TAIL}"])


def fill_insurance(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [rf"\binsurance\s+(?:is\s+|provider\s+is\s+)?{_TAIL}"])


# ==================================
# Eye Examination
# ==================================

EYE_TERMS = {
    "righteye": (r"(?:right(?:\s+eye)?|OD)", "OD"),
    "lefteye": (r"(?:left(?:\s+eye)?|OS)", "OS"),
}

ACUITY = r"(\d{2,3}/\d{2,3})\b"


def _acuity_patterns(eye: str, corrected: bool) -> list[str]:
    eye_term, code = EYE_TERMS[eye]
    if corrected:
        return [
            rf"\bVA\s+{code}\s+(?:is\s+)?\d+/\d+\s+sc,?\s+{ACUITY}\s+cc\b",
            rf"\b{eye_term}\s+(?:vision\s+)?(?:is\s+)?(?:corrected\s+to\s+)?{ACUITY}\s+(?:cc|with\s+correction)\b",
            rf"\b{eye_term}\b[^.;]*?\bcorrected\s+to\s+{ACUITY}",
        ]
    return [
        rf"\bVA\s+{code}\s+(?:is\s+)?{ACUITY}\s+sc\b",
        rf"\b(?:uncorrected\s+)?{eye_term}\s+(?:uncorrected\s+)?(?:vision\s+|VA\s+)?(?:is\s+)?{ACUITY}(?!\s+(?:cc|with\s+correction))",
        rf"\bvision\s+{eye_term}\s+(?:is\s+)?{ACUITY}(?!\s+(?:cc|with\s+correction))",
    ]


def fill_visual_acuity(text: str, key: FieldKey) -> Optional[str]:
    if key.eye not in EYE_TERMS or key.leaf not in ("uncorrected", "corrected"):
        return None
    return _first_match(text, _acuity_patterns(key.eye, corrected=key.leaf == "corrected"))


def fill_intraocular_pressure(text: str, key: FieldKey) -> Optional[int]:
    if key.eye not in EYE_TERMS:
        return None
    eye_term, _ = EYE_TERMS[key.eye]
    # "IOP 16/18" lists OD then OS
    pair = r"\bIOP:?\s+(?:is\s+)?(\d{1,2})\s*/\s*(\d{1,2})\b"
    patterns = [
        rf"\bIOP:?\s+{eye_term}\s+(?:is\s+)?(\d{{1,2}})\b",
        rf"\bIOP:?\s+(?:is\s+)?(\d{{1,2}})\s*(?:mm\s*Hg)?\s+{eye_term}\b",
        rf"\b(\d{{1,2}})\s*mm\s*Hg\s+{eye_term}\b",
        rf"\bIOP\b[^.]*?\b{eye_term}\s*:?\s*(\d{{1,2}})\b(?!\s*/)",
        rf"\bIOP\b[^.]*?\b(\d{{1,2}})\s+{eye_term}\b",
        rf"\bpressure\D{{0,20}}?(\d{{1,2}})\s*(?:mm\s*Hg)?\s+{eye_term}\b",
    ]
    value = _first_match(text, patterns)
    if value is None:
        match = re.search(pair, text, FLAGS)
        if match:
            value = match.group(1) if key.eye == "righteye" else match.group(2)
    return int(value) if value else None


COMMON_DIAGNOSES = [
    ("myopia", "H52.1"),
    ("hyperopia", "H52.0"),
    ("astigmatism", "H52.2"),
    ("presbyopia", "H52.4"),
    ("cataract", "H25"),
    ("glaucoma", "H40"),
    ("macular degeneration", "H35.3"),
    ("dry eye", "H04.12"),
    ("conjunctivitis", "H10"),
    ("keratitis", "H16"),
]


def fill_diagnosis(text: str, key: FieldKey) -> Optional[str]:
    lowered = text.lower()
    found = [
        f"{code} - {term.capitalize()}"
        for term, code in COMMON_DIAGNOSES
        if term in lowered
    ]
    return ", ".join(found) if found else None


def fill_anterior_segment(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [
        r"\banterior\s+segment[^.]*?\b(?:shows|reveals|with)\s+([^.]+)",
        r"\banterior\s+segment[:\s]+([^.]+)",
        r"\bslit\s+lamp[^.]*?\b(?:shows|reveals|with)\s+([^.]+)",
    ])


def fill_posterior_segment(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [
        r"\bposterior\s+segment[^.]*?\b(?:shows|reveals|with)\s+([^.]+)",
        r"\bposterior\s+segment[:\s]+([^.]+)",
        r"\bfund(?:oscopic|us)\s+exam[^.]*?\b(?:shows|reveals|with)\s+([^.]+)",
    ])


def fill_plan(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [
        r"\bplan\b[^.]*?\b(?:is|includes)\s+([^.]+)",
        r"\bplan[:\s]+([^.]+)",
        r"\brecommend(?:ations|ed)?[:\s]+([^.]+)",
        r"\bprescribed?[:\s]+([^.]+)",
    ])


def fill_follow_up(text: str, key: FieldKey) -> Optional[str]:
    return _first_match(text, [
        r"\bfollow[-\s]?up[^.]*?\b(?:in|after)\s+([^.]+)",
        r"\breturn[^.]*?\b(?:in|after)\s+([^.]+)",
        r"\b(?:come\s+back|see\s+again)[^.]*?\b(?:in|after)\s+([^.]+)",
    ])


# ==================================
# Rule Table
# ==================================

FieldMatcher = Callable[[FieldKey], bool]
ValueExtractor = Callable[[str, FieldKey], Optional[Any]]

FIELD_RULES: list[tuple[str, FieldMatcher, ValueExtractor]] = [
    ("first_name", lambda k: k.has_word("name") and k.has_word("first"), fill_first_name),
    ("last_name", lambda k: k.has_word("name") and k.has_word("last"), fill_last_name),
    ("email", lambda k: k.mentions("email"), fill_email),
    ("phone", lambda k: k.mentions("phone"), fill_phone),
    ("date", lambda k: k.has_word("date", "dob", "birthday") or k.type == "date", fill_date),
    ("age", lambda k: k.has_word("age"), fill_age),
    ("gender", lambda k: k.has_word("gender", "sex"), fill_gender),
    ("address", lambda k: k.has_word("address"), fill_address),
    ("blood_type", lambda k: k.has_word("blood"), fill_blood_type),
    ("height", lambda k: k.has_word("height"), fill_height),
    ("weight", lambda k: k.has_word("weight"), fill_weight),
    (
        "emergency_contact_name",
        lambda k: k.has_word("emergency") and k.has_word("name"),
        fill_emergency_contact_name,
    ),
    (
        "emergency_contact_relationship",
        lambda k: k.has_word("emergency") and k.has_word("relationship"),
        fill_emergency_contact_relationship,
    ),
    ("language", lambda k: k.has_word("language"), fill_language),
    ("occupation", lambda k: k.has_word("occupation"), fill_occupation),
    ("smoking", lambda k: k.mentions("smok", "tobacco"), fill_smoking),
    ("alcohol", lambda k: k.mentions("alcohol"), fill_alcohol),
    ("chief_complaint", lambda k: k.has_word("complaint"), fill_chief_complaint),
    ("allergies", lambda k: k.mentions("allerg"), fill_allergies),
    ("medications", lambda k: k.mentions("medication"), fill_medications),
    ("family_history", lambda k: k.has_word("family") and k.has_word("history"), fill_family_history),
    ("insurance", lambda k: k.has_word("insurance"), fill_insurance),
    ("visual_acuity", lambda k: k.parent == "vision", fill_visual_acuity),
    (
        "intraocular_pressure",
        lambda k: k.parent in ("intraocularpressure", "iop"),
        fill_intraocular_pressure,
    ),
    ("diagnosis", lambda k: k.leaf == "diagnosis" or k.label == "diagnosis", fill_diagnosis),
    (
        "anterior_segment",
        lambda k: k.leaf == "anteriorsegment" or "anterior segment" in k.label,
        fill_anterior_segment,
    ),
    (
        "posterior_segment",
        lambda k: k.leaf == "posteriorsegment" or "posterior segment" in k.label,
        fill_posterior_segment,
    ),
    (
        "plan",
        lambda k: k.leaf == "plan" or (k.has_word("plan") and k.leaf != "followup"),
        fill_plan,
    ),
    (
        "follow_up",
        lambda k: k.leaf == "followup" or k.mentions("follow up", "follow-up"),
        fill_follow_up,
    ),
]


class FormFiller:
    """
    Fills form fields from free text using FIELD_RULES.

    Usage:
        filler = FormFiller()
        fields = filler.fill("IOP 16 OD and 18 OS", fields)
    """

    def __init__(self, rules: Optional[list[tuple[str, FieldMatcher, ValueExtractor]]] = None):
        self.rules = rules if rules is not None else FIELD_RULES

    def fill(self, text: str, fields: Iterable[FormField]) -> list[FormField]:
        """
        Fill fields from text.

        Args:
            text: Dictated or typed description
            fields: Form fields; never modified

        Returns:
            Copies of the fields with extracted values applied
        """
        updated = [copy.deepcopy(f) for f in fields]
        if not text or not text.strip():
            return updated

        filled = 0
        for form_field in updated:
            key = FieldKey.for_field(form_field)
            for rule_name, matches, extract in self.rules:
                if not matches(key):
                    continue
                value = extract(text, key)
                if value is not None:
                    form_field.value = value
                    filled += 1
                    logger.debug(f"Rule {rule_name} filled field {form_field.name}")

        logger.debug(f"Form filler applied {filled} values to {len(updated)} fields")
        return updated


# Singleton
_filler: Optional[FormFiller] = None


def get_form_filler() -> FormFiller:
    """Get singleton FormFiller."""
    global _filler
    if _filler is None:
        _filler = FormFiller()
    return _filler


def fill_form(text: str, fields: Iterable[FormField]) -> list[FormField]:
    """Convenience function to fill a form."""
    return get_form_filler().fill(text, fields)
