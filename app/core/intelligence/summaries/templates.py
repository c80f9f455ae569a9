"""
Template summaries for patient, examination, appointment and SOAP records.

Records are the clinic's JSON rows. Keys are read in camelCase
("dateOfBirth") with a snake_case fallback ("date_of_birth").
"""

import logging
import re
from datetime import date, time
from typing import Any, Optional, Union

from app.core.intelligence.criteria.clock import format_time_for_display

from .types import Summary, SummaryType

logger = logging.getLogger(__name__)

UNSUPPORTED_SUMMARY = "Unable to generate summary for this entity type."

# Next steps shown for each appointment status
STATUS_KEY_POINTS = {
    "checked-in": [
        "Patient has checked in and is waiting to be seen.",
        "Pre-testing may be required before the examination.",
    ],
    "in-progress": [
        "Patient is currently being examined.",
        "Documentation should be completed promptly after the examination.",
    ],
    "completed": [
        "Appointment has been completed.",
        "Follow-up should be scheduled if recommended in the examination.",
    ],
    "cancelled": [
        "This appointment was cancelled.",
        "Patient should be contacted to reschedule if necessary.",
    ],
}

# (pattern, complaint) checked against the subjective section
SOAP_COMPLAINT_CUES = [
    (r"\bblur", "blurry vision"),
    (r"\bpain", "eye pain"),
    (r"\bred(?:ness|dened|dish)?\b", "redness"),
    (r"\bitch", "itchiness"),
    (r"\bburn", "burning sensation"),
    (r"\bdischarge", "discharge"),
    (r"\bdry", "dry eyes"),
    (r"\bfloat", "floaters"),
    (r"\bflash", "flashes of light"),
    (r"\bdouble", "double vision"),
]

SOAP_ACUITY_PATTERNS = [
    r"VA\s+OD\s+(\d+/\d+)[^.]*VA\s+OS\s+(\d+/\d+)",
    r"VA\s+OD\s+(\d+/\d+).*?OS\s+(\d+/\d+)",
]

SOAP_PRESSURE_PATTERNS = [
    r"IOP[^0-9]*(\d+)[^0-9]*OD[^0-9]*(\d+)[^0-9]*OS",
    r"IOP[^0-9]*(\d+)[^0-9]*(\d+)",
]


# ==================================
# Record helpers
# ==================================

def _get(data: dict, key: str) -> Any:
    """Read a camelCase key, falling back to its snake_case spelling."""
    if key in data:
        return data[key]
    return data.get(re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower())


def _as_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value if item]


def _parse_record_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _format_record_date(value: Any) -> str:
    if not value:
        return "No date"
    parsed = _parse_record_date(value)
    if parsed is None:
        return str(value)
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


def _format_record_time(value: Any) -> str:
    if not value:
        return "N/A"
    try:
        parsed = value if isinstance(value, time) else time.fromisoformat(str(value))
    except ValueError:
        return str(value)
    return format_time_for_display(parsed.replace(tzinfo=None))


def _age_on(birth: date, today: date) -> int:
    return today.year - birth.year - ((today.month, today.day) < (birth.month, birth.day))


def _article(word: str) -> str:
    """'a' or 'an' for the spoken form of word ("an 80-year-old")."""
    if word[:1].lower() in "aeiou" or word.startswith("8") or re.match(r"1[18]-", word):
        return "an"
    return "a"


# ==================================
# Templates
# ==================================

def patient_summary(patient: dict, today: Optional[date] = None) -> str:
    """Narrative summary of a patient record."""
    today = today or date.today()
    name = " ".join(p for p in (_get(patient, "firstName"), _get(patient, "lastName")) if p)

    birth = _parse_record_date(_get(patient, "dateOfBirth") or "")
    descriptor = " ".join(
        part for part in (
            f"{_age_on(birth, today)}-year-old" if birth else "",
            _get(patient, "gender") or "patient",
        ) if part
    )
    opening = f"{name or 'The patient'} is {_article(descriptor)} {descriptor}"
    occupation = _get(patient, "occupation")
    sentences = [f"{opening} who works as a {occupation}." if occupation else f"{opening}."]

    background = _get(patient, "background") or {}
    background_info = []
    if background.get("language"):
        background_info.append(f"Their primary language is {background['language']}")
    ethnicity_race = ", ".join(
        v for v in (background.get("ethnicity"), background.get("race")) if v
    )
    if ethnicity_race:
        background_info.append(f"their ethnicity/race is {ethnicity_race}")
    if background_info:
        sentences.append(" and ".join(background_info) + ".")

    height, weight = _get(patient, "height"), _get(patient, "weight")
    physical = []
    if height and weight:
        physical.append(f"{height} cm tall and weighs {weight} kg")
    elif height:
        physical.append(f"{height} cm tall")
    elif weight:
        physical.append(f"weighs {weight} kg")
    if _get(patient, "bloodType"):
        physical.append(f"blood type {_get(patient, 'bloodType')}")
    if physical:
        sentences.append(f"The patient is {', '.join(physical)}.")

    if _get(patient, "medicalHistory"):
        sentences.append(f"Medical history includes {_get(patient, 'medicalHistory')}.")

    surgeries = _as_list(_get(patient, "surgeries"))
    if surgeries:
        sentences.append(f"Past surgical history includes {', '.join(surgeries)}.")

    allergies = _as_list(_get(patient, "allergies"))
    if allergies:
        sentences.append(f"The patient has known allergies to {', '.join(allergies)}.")
    else:
        sentences.append("No known allergies have been recorded.")

    medications = _as_list(_get(patient, "medications"))
    if medications:
        sentences.append(f"Currently taking {', '.join(medications)}.")
    else:
        sentences.append("No current medications are listed.")

    substance_use = _get(patient, "substanceUse") or {}
    lifestyle = []
    for key, label in (
        ("smoking", "smoking status"),
        ("alcohol", "alcohol use"),
        ("drugs", "recreational drug use"),
    ):
        if substance_use.get(key):
            lifestyle.append(f"{label}: {substance_use[key]}")
    for key, label in (("exercise", "exercise"), ("nutrition", "nutrition"), ("stress", "stress level")):
        if _get(patient, key):
            lifestyle.append(f"{label}: {_get(patient, key)}")
    if lifestyle:
        sentences.append(f"Lifestyle factors include {'; '.join(lifestyle)}.")

    if _get(patient, "familyHistory"):
        sentences.append(f"Family medical history: {_get(patient, 'familyHistory')}.")

    insurer = _get(patient, "insuranceProvider")
    if insurer:
        policy = _get(patient, "insurancePolicyNumber")
        sentences.append(
            f"Insurance is provided by {insurer} (Policy #{policy})." if policy
            else f"Insurance is provided by {insurer}."
        )

    lines = [" ".join(sentences)]

    contact = _get(patient, "emergencyContact") or {}
    if contact.get("name"):
        line = f"Emergency contact: {contact['name']}"
        if contact.get("relationship"):
            line += f" ({contact['relationship']})"
        if contact.get("phone"):
            line += f", Phone: {contact['phone']}"
        lines.append(line + ".")

    lines.append("Contact Information:")
    lines.append(f"- Phone: {_get(patient, 'phone') or 'Not provided'}")
    email, address = _get(patient, "email"), _get(patient, "address")
    lines.append(f"- Email: {email}" if email else "- No email provided")
    lines.append(f"- Address: {address}" if address else "- No address provided")

    return "\n".join(lines)


def examination_summary(examination: dict) -> str:
    """Sectioned summary of an eye examination."""
    lines = [
        f"Examination Summary ({_format_record_date(_get(examination, 'date'))})",
        "",
        f"Chief Complaint: {_get(examination, 'chiefComplaint') or 'Not recorded'}",
        "",
        "Visual Acuity:",
    ]

    vision = _get(examination, "vision")
    if vision:
        right = vision.get("rightEye") or {}
        left = vision.get("leftEye") or {}
        lines.append(
            f"- Right Eye (OD): {right.get('uncorrected') or 'N/A'} SC, "
            f"{right.get('corrected') or 'N/A'} CC"
        )
        lines.append(
            f"- Left Eye (OS): {left.get('uncorrected') or 'N/A'} SC, "
            f"{left.get('corrected') or 'N/A'} CC"
        )
    else:
        lines.append("- Not recorded")

    lines += ["", "Intraocular Pressure:"]
    pressure = _get(examination, "intraocularPressure")
    if pressure:
        lines.append(f"- Right Eye: {pressure.get('rightEye') or 'N/A'} mmHg")
        lines.append(f"- Left Eye: {pressure.get('leftEye') or 'N/A'} mmHg")
    else:
        lines.append("- Not recorded")

    diagnosis = _as_list(_get(examination, "diagnosis"))
    lines += [
        "",
        f"Anterior Segment: {_get(examination, 'anteriorSegment') or 'Not recorded'}",
        f"Posterior Segment: {_get(examination, 'posteriorSegment') or 'Not recorded'}",
        "",
        f"Diagnosis: {', '.join(diagnosis) if diagnosis else 'No diagnosis recorded'}",
        f"Plan: {_get(examination, 'plan') or 'No plan recorded'}",
        f"Follow-up: {_get(examination, 'followUp') or 'No follow-up recorded'}",
    ]
    return "\n".join(lines)


def appointment_summary(appointment: dict) -> str:
    """Summary of an appointment with next steps for its status."""
    start = _format_record_time(_get(appointment, "startTime"))
    kind = _get(appointment, "type")
    status = _get(appointment, "status")

    lines = [
        "Appointment Summary",
        "",
        f"Date: {_format_record_date(_get(appointment, 'date'))}",
        f"Time: {start} to {_format_record_time(_get(appointment, 'endTime'))}",
        f"Type: {kind.replace('-', ' ') if kind else 'Not specified'}",
        f"Status: {status.replace('-', ' ') if status else 'Not specified'}",
    ]

    if _get(appointment, "notes"):
        lines += ["", f"Notes: {_get(appointment, 'notes')}"]

    if status == "scheduled":
        points = [f"Patient is scheduled to arrive at {start}."]
        if kind:
            points.append(f"Appointment type is {kind.replace('-', ' ')}.")
    else:
        points = STATUS_KEY_POINTS.get(status, [])

    if points:
        lines += ["", "Key Points:"] + [f"- {point}" for point in points]
    return "\n".join(lines)


def soap_summary(soap_note: dict) -> str:
    """Condensed SOAP note: complaints, key findings, assessment, plan."""
    subjective = _get(soap_note, "subjective")
    if subjective:
        complaints = [
            complaint for pattern, complaint in SOAP_COMPLAINT_CUES
            if re.search(pattern, subjective, re.IGNORECASE)
        ]
        reported = ", ".join(complaints) if complaints else subjective.split(".")[0].strip()
    else:
        reported = "No subjective information recorded"
    lines = ["SOAP Note Summary", "", f"Patient Reported: {reported}.", "", "Key Findings:"]

    objective = _get(soap_note, "objective")
    if objective:
        for pattern in SOAP_ACUITY_PATTERNS:
            match = re.search(pattern, objective, re.IGNORECASE)
            if match:
                lines.append(f"- Visual Acuity: {match.group(1)} OD, {match.group(2)} OS")
                break
        for pattern in SOAP_PRESSURE_PATTERNS:
            match = re.search(pattern, objective, re.IGNORECASE)
            if match:
                lines.append(f"- IOP: {match.group(1)} mmHg OD, {match.group(2)} mmHg OS")
                break
    else:
        lines.append("- No objective findings recorded")

    lines += ["", "Assessment:"]
    codes = _get(soap_note, "icd10Codes") or []
    assessment = _get(soap_note, "assessment")
    if codes:
        lines += [f"- {c.get('code')}: {c.get('description')}" for c in codes]
    elif assessment:
        lines += [f"- {line.strip()}" for line in assessment.splitlines() if line.strip()][:3]
    else:
        lines.append("- No assessment recorded")

    lines += ["", "Plan:"]
    plan = _get(soap_note, "plan")
    if plan:
        lines += [f"- {line.strip()}" for line in plan.splitlines() if line.strip()][:3]
        if _get(soap_note, "returnToClinic"):
            lines.append(f"- Return to clinic in {_get(soap_note, 'returnToClinic')}")
    else:
        lines.append("- No plan recorded")

    if _get(soap_note, "mipsCompliant"):
        mips = "This note is MIPS compliant."
        categories = _as_list(_get(soap_note, "mipsCategories"))
        if categories:
            mips += f" Categories: {', '.join(categories)}"
        lines += ["", mips]

    return "\n".join(lines)


# ==================================
# Writer
# ==================================

class SummaryWriter:
    """
    Writes template summaries of clinical records.

    Usage:
        writer = SummaryWriter()
        summary = writer.write("examination", exam_record)
        print(summary.text)
    """

    def write(
        self,
        entity_type: Union[SummaryType, str],
        data: Optional[dict],
        today: Optional[date] = None,
    ) -> Summary:
        """
        Summarize one record.

        Args:
            entity_type: patient, examination, appointment or soap
            data: The record
            today: Reference date for ages (defaults to today)

        Returns:
            Summary with source "rules"
        """
        try:
            summary_type = SummaryType(entity_type)
        except ValueError:
            logger.warning(f"No summary template for {entity_type!r}")
            return Summary(text=UNSUPPORTED_SUMMARY, entity_type=str(entity_type))

        data = data or {}
        if summary_type == SummaryType.PATIENT:
            text = patient_summary(data, today=today)
        elif summary_type == SummaryType.EXAMINATION:
            text = examination_summary(data)
        elif summary_type == SummaryType.APPOINTMENT:
            text = appointment_summary(data)
        else:
            text = soap_summary(data)

        return Summary(text=text, entity_type=summary_type.value)


# Singleton
_writer: Optional[SummaryWriter] = None


def get_summary_writer() -> SummaryWriter:
    """Get singleton SummaryWriter."""
    global _writer
    if _writer is None:
        _writer = SummaryWriter()
    return _writer


def write_summary(
    entity_type: Union[SummaryType, str],
    data: Optional[dict],
    today: Optional[date] = None,
) -> Summary:
    """Convenience function to summarize a record."""
    return get_summary_writer().write(entity_type, data, today=today)
