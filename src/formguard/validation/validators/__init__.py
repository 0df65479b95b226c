"""Validator library for formguard.

One check per validator kind. All checks are synchronous except the
reCAPTCHA check, which verifies the token over the network.
"""

from formguard.validation.validators.library import (
    EMAIL_PATTERN,
    US_PHONE_PATTERN,
    age,
    array,
    boolean,
    email,
    file,
    number,
    parse_date,
    phone,
    required,
    string,
    values,
)
from formguard.validation.validators.recaptcha import recaptcha

__all__ = [
    "EMAIL_PATTERN",
    "US_PHONE_PATTERN",
    "age",
    "array",
    "boolean",
    "email",
    "file",
    "number",
    "parse_date",
    "phone",
    "recaptcha",
    "required",
    "string",
    "values",
]
