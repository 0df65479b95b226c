"""formguard validation system.

Two independent passes:
- Schema validation: is the form definition well-formed?
- Instance validation: does a submission conform to the form?

Callers run validate_form_meta once when a form is authored and
validate_form for every submission. The engine never chains the two.

Usage:
    from formguard.validation import validate_form, validate_form_meta

    meta = validate_form_meta(fields)
    result = await validate_form(submission, fields, files)
"""

from formguard.validation.instance import (
    FormValidator,
    extract_slugs,
    validate_form,
    validate_input,
)
from formguard.validation.meta import validate_form_meta, validate_validators_meta
from formguard.validation.payload import check_form_result, is_form_result
from formguard.validation.types import ValidationError, ValidationResult

__all__ = [
    # Types
    "ValidationError",
    "ValidationResult",
    # Schema validation
    "validate_form_meta",
    "validate_validators_meta",
    # Instance validation
    "FormValidator",
    "extract_slugs",
    "validate_form",
    "validate_input",
    # Payload shape
    "check_form_result",
    "is_form_result",
]
