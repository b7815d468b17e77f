"""Validation and normalization of submitted form values."""

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..errors import FieldValidationError
from .schema import FieldType, FormField

MIN_PHONE_DIGITS = 10
NUMBER_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")

Number = Union[int, float]


@dataclass
class NormalizedSubmission:
    """Validated values in field order.

    Values stay attached to their field until the storage boundary, where
    ``as_form_data`` flattens them into the label-keyed mapping a lead stores.
    """
    values: List[Tuple[FormField, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.values)

    def get(self, field_id: str, default: Any = None) -> Any:
        for f, value in self.values:
            if f.id == field_id:
                return value
        return default

    def as_form_data(self) -> Dict[str, Any]:
        return {f.label: value for f, value in self.values}


def _as_text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw)


def _parse_number(text: str) -> Optional[Number]:
    # ASCII decimal notation only: no digit separators, no non-ASCII digits
    if not NUMBER_PATTERN.fullmatch(text):
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def normalize_value(form_field: FormField, raw: Any) -> Any:
    """Normalize one raw value according to its field type.

    Raises FieldValidationError naming the field label.
    """
    text = _as_text(raw)
    if form_field.field_type != FieldType.TEXTAREA:
        text = text.strip()

    def fail(message: str):
        raise FieldValidationError(form_field.id, form_field.label, message)

    kind = form_field.field_type if form_field.is_known_type else None

    if kind == FieldType.TEL:
        value = re.sub(r"\D", "", text)
        present = bool(value)
    else:
        value = text
        present = bool(text.strip())

    if form_field.required and not present:
        fail(f"{form_field.label} is required")

    if kind == FieldType.EMAIL:
        if present and "@" not in value:
            fail(f"{form_field.label} must be a valid email address")
        return value

    if kind == FieldType.TEL:
        if present and len(value) < MIN_PHONE_DIGITS:
            fail(f"{form_field.label} must have at least {MIN_PHONE_DIGITS} digits")
        return value

    if kind == FieldType.NUMBER:
        if not present:
            return None
        number = _parse_number(value)
        if number is None:
            fail(f"{form_field.label} must be a number")
        return number

    if kind == FieldType.SELECT:
        if present and value not in form_field.options:
            fail(f"{form_field.label} must be one of: {', '.join(form_field.options)}")
        return value

    # text, textarea and unknown types
    return value


def normalize_submission(
    fields: List[FormField], raw_values: Dict[str, Any]
) -> NormalizedSubmission:
    """Validate raw values (keyed by field id) against the page's fields.

    The first failing field aborts the whole submission.
    """
    raw_values = raw_values or {}
    submission = NormalizedSubmission()
    for f in fields:
        submission.values.append((f, normalize_value(f, raw_values.get(f.id))))
    return submission
