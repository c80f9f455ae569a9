"""
Rules-based keyword extraction for appointment notes.

Tags ophthalmology symptoms, medications, procedures and conditions
mentioned in free-text notes so the front desk and technicians can see
them at a glance.
"""

import logging
from typing import Optional

from .types import Keyword, KeywordCategory, NotesAnalysis

logger = logging.getLogger(__name__)

# Notes shorter than this are still being typed
MIN_NOTES_LENGTH = 10


# ==================================
# Vocabulary
# ==================================

SYMPTOMS = [
    "blurry vision", "blurred vision", "headache", "migraine", "pain", "redness",
    "dry eyes", "tearing", "itching", "burning", "discharge", "photophobia",
    "light sensitivity", "floaters", "flashes", "double vision", "diplopia",
    "vision loss", "blind spot", "halos", "glare",
]

MEDICATIONS = [
    "latanoprost", "timolol", "brimonidine", "dorzolamide", "bimatoprost",
    "travoprost", "prednisolone", "ketorolac", "artificial tears",
    "cyclopentolate", "tropicamide", "atropine", "pilocarpine", "restasis",
    "xiidra", "olopatadine", "moxifloxacin", "tobramycin",
]

PROCEDURES = [
    "cataract surgery", "lasik", "prk", "vitrectomy", "laser", "trabeculectomy",
    "iridotomy", "yag", "intravitreal injection", "injection", "crosslinking",
    "corneal transplant", "pterygium removal", "istent", "selective laser trabeculoplasty",
    "slt", "fundus photography", "oct", "visual field", "refraction",
]

CONDITIONS = [
    "cataract", "glaucoma", "macular degeneration", "amd", "diabetic retinopathy",
    "dry eye", "conjunctivitis", "pink eye", "astigmatism", "myopia",
    "hyperopia", "presbyopia", "retinal detachment", "uveitis", "keratitis",
    "amblyopia", "strabismus",
]

VOCABULARY: list[tuple[KeywordCategory, list[str]]] = [
    (KeywordCategory.SYMPTOM, SYMPTOMS),
    (KeywordCategory.MEDICATION, MEDICATIONS),
    (KeywordCategory.PROCEDURE, PROCEDURES),
    (KeywordCategory.CONDITION, CONDITIONS),
]


class NotesKeywordExtractor:
    """
    Substring-based keyword tagger.

    Usage:
        extractor = NotesKeywordExtractor()
        analysis = extractor.extract("Pt reports floaters OD, on latanoprost")
        for keyword in analysis.keywords:
            print(keyword.category.value, keyword.text)
    """

    def __init__(self, min_length: int = MIN_NOTES_LENGTH):
        self.min_length = min_length

    def extract(self, notes: Optional[str]) -> NotesAnalysis:
        """
        Extract keywords from appointment notes.

        Args:
            notes: Free-text notes

        Returns:
            NotesAnalysis with unique keywords in category order
        """
        analysis = NotesAnalysis(source="rules")
        if not notes or len(notes.strip()) < self.min_length:
            return analysis

        lowered = notes.lower()

        for category, terms in VOCABULARY:
            for term in terms:
                if term in lowered:
                    analysis.add(Keyword(text=term, category=category))

        for keyword in self._derived_keywords(lowered):
            analysis.add(keyword)

        logger.debug(f"Extracted {len(analysis.keywords)} keywords from notes")
        return analysis

    @staticmethod
    def _derived_keywords(lowered: str) -> list[Keyword]:
        """Keywords implied by phrasing rather than named outright."""
        derived = []

        if "follow" in lowered and any(word in lowered for word in ("up", "week", "month")):
            derived.append(Keyword(text="follow-up", category=KeywordCategory.PROCEDURE))

        if "referral" in lowered or "referred" in lowered:
            derived.append(Keyword(text="referral", category=KeywordCategory.PROCEDURE))

        if "insurance" in lowered:
            derived.append(Keyword(text="insurance", category=KeywordCategory.OTHER))

        if "urgent" in lowered or "emergency" in lowered:
            derived.append(Keyword(text="urgent", category=KeywordCategory.OTHER))

        return derived


# Singleton
_extractor: Optional[NotesKeywordExtractor] = None


def get_notes_keyword_extractor() -> NotesKeywordExtractor:
    """Get singleton NotesKeywordExtractor."""
    global _extractor
    if _extractor is None:
        _extractor = NotesKeywordExtractor()
    return _extractor


def extract_keywords(notes: Optional[str]) -> NotesAnalysis:
    """Convenience function to extract notes keywords."""
    return get_notes_keyword_extractor().extract(notes)
