"""Form field schema and submission normalization."""

from .schema import FieldType, FormField, parse_fields, fields_to_json, validate_field_schema
from .normalizer import NormalizedSubmission, normalize_submission, normalize_value

__all__ = [
    "FieldType",
    "FormField",
    "parse_fields",
    "fields_to_json",
    "validate_field_schema",
    "NormalizedSubmission",
    "normalize_submission",
    "normalize_value",
]
