"""Form field types for natural-language form filling."""

import re
from dataclasses import dataclass, field
from typing import Any, Optional

_CAMEL_WORDS = re.compile(r"[A-Z]?[a-z]+|[A-Z]+(?![a-z])|\d+")


@dataclass
class FieldOption:
    label: str
    value: Any


@dataclass
class FormField:
    """One input of a clinical form.

    Dotted names address nested values, e.g. "vision.rightEye.uncorrected".
    """

    id: str
    name: str
    type: str
    label: str
    value: Any = None
    options: Optional[list[FieldOption]] = None

    @property
    def is_empty(self) -> bool:
        return self.value is None or self.value == ""

    @classmethod
    def from_dict(cls, data: dict) -> "FormField":
        options = data.get("options")
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            type=data.get("type", "text"),
            label=data.get("label", ""),
            value=data.get("value"),
            options=(
                [FieldOption(label=o.get("label", ""), value=o.get("value")) for o in options]
                if options is not None
                else None
            ),
        )

    def to_dict(self) -> dict:
        result = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "label": self.label,
            "value": self.value,
        }
        if self.options is not None:
            result["options"] = [{"label": o.label, "value": o.value} for o in self.options]
        return result


@dataclass
class FieldKey:
    """Normalized view of a field's name and label used for rule matching."""

    name: str                  # lowercased full name, e.g. "vision.righteye.uncorrected"
    label: str                 # lowercased label
    type: str
    parts: list[str] = field(default_factory=list)   # lowercased dotted parts
    words: set[str] = field(default_factory=set)     # camelCase + label words

    @classmethod
    def for_field(cls, form_field: FormField) -> "FieldKey":
        words: set[str] = set()
        for part in form_field.name.split("."):
            words.update(w.lower() for w in _CAMEL_WORDS.findall(part))
        words.update(re.findall(r"[a-z]+", form_field.label.lower()))

        return cls(
            name=form_field.name.lower(),
            label=form_field.label.lower(),
            type=form_field.type.lower(),
            parts=[p.lower() for p in form_field.name.split(".")],
            words=words,
        )

    @property
    def parent(self) -> str:
        return self.parts[0] if len(self.parts) > 1 else ""

    @property
    def eye(self) -> str:
        return self.parts[1] if len(self.parts) > 1 else ""

    @property
    def leaf(self) -> str:
        return self.parts[-1] if self.parts else ""

    def has_word(self, *candidates: str) -> bool:
        return any(c in self.words for c in candidates)

    def mentions(self, *fragments: str) -> bool:
        """Substring match against the name or the label."""
        return any(f in self.name or f in self.label for f in fragments)
