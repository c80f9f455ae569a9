"""Natural-language form filling module."""

from .types import FieldKey, FieldOption, FormField
from .filler import (
    COMMON_DIAGNOSES,
    FIELD_RULES,
    FormFiller,
    get_form_filler,
    fill_form,
)

__all__ = [
    # Types
    "FieldKey",
    "FieldOption",
    "FormField",
    # Filler
    "COMMON_DIAGNOSES",
    "FIELD_RULES",
    "FormFiller",
    "get_form_filler",
    "fill_form",
]
