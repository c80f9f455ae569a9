"""
Form Filling Endpoint.

Fills clinical form fields from dictated or typed text.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from app.core.intelligence import FieldOption, FormField, get_clinical_assistant

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forms", tags=["Forms"])


class FieldOptionIn(BaseModel):
    label: str
    value: Any


class FormFieldIn(BaseModel):
    """One form input. Dotted names address nested values."""

    id: str
    name: str = Field(..., examples=["vision.rightEye.uncorrected"])
    type: str = "text"
    label: str = ""
    value: Any = None
    options: Optional[list[FieldOptionIn]] = None

    def to_field(self) -> FormField:
        return FormField(
            id=self.id,
            name=self.name,
            type=self.type,
            label=self.label,
            value=self.value,
            options=(
                [FieldOption(label=o.label, value=o.value) for o in self.options]
                if self.options is not None
                else None
            ),
        )


class FillRequest(BaseModel):
    """Form fill request."""

    text: str = Field(
        ...,
        max_length=10000,
        description="Dictated or typed description",
        examples=["VA OD 20/40 sc, 20/20 cc. IOP 16 OD, 18 OS."],
    )
    fields: list[FormFieldIn] = Field(..., description="Fields to fill")
    context_hint: Optional[str] = Field(
        default=None,
        description="What kind of form this is, e.g. pre-testing",
    )


class FillResponse(BaseModel):
    """Filled fields."""

    fields: list[dict]
    source: str = Field(..., description='"model" or "rules"')


@router.post(
    "/fill",
    response_model=FillResponse,
    status_code=status.HTTP_200_OK,
    summary="Fill form fields",
    description="Fill form fields from natural-language text.",
)
async def fill(request: FillRequest) -> FillResponse:
    """Fill form fields from text. Fields the text does not cover keep their value."""
    result = await get_clinical_assistant().fill_form(
        request.text,
        [f.to_field() for f in request.fields],
        context_hint=request.context_hint,
    )
    return FillResponse(**result.to_dict())
