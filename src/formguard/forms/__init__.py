"""Form definitions: fields, validator rules, normalization and redaction.

Loading from files lives in formguard.forms.loader.
"""

from formguard.forms.normalization import (
    extract_file_paths,
    field_results_to_object,
    normalize_email,
    normalize_phone,
    object_to_field_results,
    preprocess_field_options,
)
from formguard.forms.redaction import make_fields_public
from formguard.forms.rules import (
    AddressRule,
    EmailRule,
    FileRule,
    LengthRule,
    NumberRule,
    PhoneRule,
    ReCaptchaRule,
    ValidatorKind,
    Validators,
)
from formguard.forms.types import (
    Field,
    FieldResult,
    FieldType,
    FormDefinitionError,
    FormguardError,
    GroupField,
    SelectField,
    SelectOption,
    SubmissionError,
    UploadedFile,
)

__all__ = [
    # Types
    "Field",
    "FieldResult",
    "FieldType",
    "GroupField",
    "SelectField",
    "SelectOption",
    "UploadedFile",
    # Errors
    "FormDefinitionError",
    "FormguardError",
    "SubmissionError",
    # Rules
    "AddressRule",
    "EmailRule",
    "FileRule",
    "LengthRule",
    "NumberRule",
    "PhoneRule",
    "ReCaptchaRule",
    "ValidatorKind",
    "Validators",
    # Normalization
    "extract_file_paths",
    "field_results_to_object",
    "normalize_email",
    "normalize_phone",
    "object_to_field_results",
    "preprocess_field_options",
    # Redaction
    "make_fields_public",
]
