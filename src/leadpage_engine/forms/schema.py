"""Field schema for landing page forms."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List
import uuid

from ..errors import SchemaError


class FieldType(Enum):
    """Supported form field types."""
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    NUMBER = "number"
    SELECT = "select"
    TEXTAREA = "textarea"


FIELD_TYPES = {t.value for t in FieldType}


@dataclass
class FormField:
    """A single input definition on a landing page.

    ``type`` is kept as the raw string so that schemas stored with a type
    this version does not know about still load; the normalizer treats
    those as plain text.
    """
    id: str
    type: str = FieldType.TEXT.value
    label: str = ""
    placeholder: str = ""
    required: bool = False
    options: List[str] = field(default_factory=list)

    @property
    def field_type(self) -> FieldType:
        try:
            return FieldType(self.type)
        except ValueError:
            return FieldType.TEXT

    @property
    def is_known_type(self) -> bool:
        return self.type in FIELD_TYPES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormField":
        options = data.get("options") or []
        return cls(
            id=str(data.get("id") or uuid.uuid4()),
            type=str(data.get("type") or FieldType.TEXT.value),
            label=str(data.get("label") or ""),
            placeholder=str(data.get("placeholder") or ""),
            required=bool(data.get("required", False)),
            options=[str(o) for o in options],
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "placeholder": self.placeholder,
            "required": self.required,
        }
        if self.type == FieldType.SELECT.value:
            data["options"] = list(self.options)
        return data


def parse_fields(raw_fields: List[Dict[str, Any]]) -> List[FormField]:
    """Build an ordered field list from its JSON representation."""
    return [FormField.from_dict(f) for f in raw_fields or []]


def fields_to_json(fields: List[FormField]) -> List[Dict[str, Any]]:
    return [f.to_dict() for f in fields]


def validate_field_schema(fields: List[FormField]) -> List[FormField]:
    """Check an owner-authored field list before it is saved.

    Labels double as the keys of a lead's stored values, so they must be
    unique within a page.
    """
    seen_ids = set()
    seen_labels = set()

    for position, f in enumerate(fields, start=1):
        if not f.id.strip():
            raise SchemaError(f"Field #{position} has no id")
        if f.id in seen_ids:
            raise SchemaError(f"Duplicate field id: {f.id}")
        seen_ids.add(f.id)

        label = f.label.strip()
        if not label:
            raise SchemaError(f"Field #{position} has no label")
        if label in seen_labels:
            raise SchemaError(f"Duplicate field label: {label}")
        seen_labels.add(label)
        f.label = label

        if not f.is_known_type:
            raise SchemaError(f"Unsupported field type for {label}: {f.type}")

        if f.field_type == FieldType.SELECT:
            f.options = [o.strip() for o in f.options if o.strip()]
            if not f.options:
                raise SchemaError(f"Select field {label} needs at least one option")
        else:
            f.options = []

    return fields
