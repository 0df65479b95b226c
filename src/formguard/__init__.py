"""formguard: validation of dynamically-configured form trees."""

from formguard.config import CaptchaSettings
from formguard.forms import (
    Field,
    FieldResult,
    FieldType,
    UploadedFile,
    Validators,
    make_fields_public,
)
from formguard.validation import (
    FormValidator,
    ValidationError,
    ValidationResult,
    validate_form,
    validate_form_meta,
    validate_input,
    validate_validators_meta,
)

__all__ = [
    "CaptchaSettings",
    "Field",
    "FieldResult",
    "FieldType",
    "FormValidator",
    "UploadedFile",
    "ValidationError",
    "ValidationResult",
    "Validators",
    "make_fields_public",
    "validate_form",
    "validate_form_meta",
    "validate_input",
    "validate_validators_meta",
]
