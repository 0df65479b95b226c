"""Validator library: one check per validator kind.

Each check takes a submitted value plus its rule options and returns a list of
failure messages. An empty list means the value passed. Checks never prefix
messages with the field slug; the instance validator does that.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

from formguard.forms.normalization import normalize_email
from formguard.forms.rules import FileRule, LengthRule, NumberRule
from formguard.forms.types import UploadedFile


# =============================================================================
# Format Patterns
# =============================================================================

# Email: Basic RFC 5322 compliant pattern
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$"
)

# US: optional leading country code 1, then 10 digits
US_PHONE_PATTERN = re.compile(r"^1?[0-9]{10}$")

# Decimal or exponent notation; "Infinity" is the only non-finite spelling.
NUMERIC_PATTERN = re.compile(
    r"[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|Infinity)"
)

_NON_DIGITS = re.compile(r"[^0-9]+")

# Date string formats accepted by the age check, besides ISO 8601.
_DATE_FORMATS = ("%m/%d/%Y", "%Y/%m/%d")


# =============================================================================
# Helpers
# =============================================================================


def is_number(value: Any) -> bool:
    """True for real numbers (not bools), excluding NaN."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def to_number(value: Any) -> float | None:
    """Parse a number or numeric string; None if it is not a valid number."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)
    if isinstance(value, str):
        text = value.strip()
        if not NUMERIC_PATTERN.fullmatch(text):
            return None
        return float(text)
    return None


def _same_value(a: Any, b: Any) -> bool:
    # 1 == True in Python; a whitelist of numbers must not accept booleans.
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def parse_date(value: Any) -> date | None:
    """Parse a birthdate-like value into a date, or None if it is not a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if is_number(value):
        # Epoch milliseconds
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
    return None


# =============================================================================
# Checks
# =============================================================================


def required(value: Any, optional: bool = False) -> list[str]:
    """Some value must be passed.

    None, NaN, False, blank strings, empty lists and empty mappings count
    as missing.
    """
    if optional:
        return []
    message = "A value is required."
    if value is None or value is False:
        return [message]
    if isinstance(value, float) and math.isnan(value):
        return [message]
    if isinstance(value, str) and not value.strip():
        return [message]
    if isinstance(value, (list, tuple, Mapping)) and not value:
        return [message]
    return []


def string(value: Any, options: LengthRule | None = None) -> list[str]:
    errors = []
    if not isinstance(value, str) or not value.strip():
        errors.append(f'Input value "{value}" is not a valid string.')
        return errors

    min_length = to_number(options.min_length) if options else None
    max_length = to_number(options.max_length) if options else None
    if min_length is not None and len(value) < min_length:
        errors.append(
            f'Input value "{value}" is too short. Minimum length is: {options.min_length}'
        )
    if max_length is not None and len(value) > max_length:
        errors.append(
            f'Input value "{value}" is too long. Maximum length is: {options.max_length}'
        )
    return errors


def number(value: Any, options: NumberRule | None = None) -> list[str]:
    num = to_number(value)
    if num is None:
        return [f'Input "{value}" is not a valid number.']

    errors = []
    minimum = to_number(options.min) if options else None
    maximum = to_number(options.max) if options else None
    if minimum is not None and num < minimum:
        errors.append(f'Input "{value}" is too low. Minimum value is: {options.min}')
    if maximum is not None and num > maximum:
        errors.append(f'Input "{value}" is too high. Maximum value is: {options.max}')
    return errors


def boolean(value: Any) -> list[str]:
    # Strict on true, lenient on absence so optional booleans validate.
    if value is True or value is False or value is None:
        return []
    return [f'Input is not a boolean: "{value}"']


def array(value: Any, options: LengthRule | None = None) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return [f'Input "{value}" is not an array.']

    errors = []
    min_length = to_number(options.min_length) if options else None
    max_length = to_number(options.max_length) if options else None
    if min_length is not None and len(value) < min_length:
        errors.append(
            f'Input "{value}" is too short. Minimum length is: {options.min_length}'
        )
    if max_length is not None and len(value) > max_length:
        errors.append(
            f'Input "{value}" is too long. Maximum length is: {options.max_length}'
        )
    return errors


def values(value: Any, whitelist: Any) -> list[str]:
    if not isinstance(whitelist, (list, tuple)) or not whitelist:
        return []
    if any(_same_value(value, allowed) for allowed in whitelist):
        return []
    return [f'Input "{value}" is not in the list of acceptable values.']


def age(value: Any, min_age: Any, today: date | None = None) -> list[str]:
    """Value must be a date at least ``min_age`` whole years before today.

    Compares calendar year, month and day rather than counting days, so leap
    years do not shift the boundary.
    """
    born = parse_date(value)
    if born is None:
        return [f'Input is not a valid date: "{value}"']

    now = today or date.today()
    target = to_number(min_age) or 0
    years = now.year - born.year
    months = now.month - born.month

    if years < target or (
        years == target and (months < 0 or (months == 0 and now.day < born.day))
    ):
        return [f'Input "{value}" does not meet the age requirement of: "{min_age}"']
    return []


def email(value: Any, restrictions: list[str | re.Pattern] | None = None) -> list[str]:
    """Value must be an email address that no restriction pattern matches.

    Restrictions are matched against the normalized address, so aliases of a
    blocked address are blocked as well.
    """
    errors = []
    bad_email = not isinstance(value, str) or not EMAIL_PATTERN.fullmatch(value)
    if bad_email:
        errors.append(f'Invalid email address: "{value}"')

    normalized = normalize_email(value) if isinstance(value, str) else None
    for restriction in restrictions or []:
        pattern = restriction if isinstance(restriction, re.Pattern) else re.compile(restriction)
        if normalized and pattern.search(normalized):
            bad_email = True

    if bad_email:
        errors.append(f'Email address does not meet validation requirements: "{value}"')
    return errors


def phone(value: Any, countries: list[str] | None = None) -> list[str]:
    if not value:
        return ["No phone number provided to validate."]

    cleaned = _NON_DIGITS.sub("", str(value))
    country_list = countries if isinstance(countries, list) and countries else ["US"]

    errors = []
    for country in country_list:
        # Only US shapes are implemented; other codes fall back to them.
        # TODO: validate area codes and exchange prefixes for US numbers
        if not US_PHONE_PATTERN.match(cleaned):
            errors.append(f'Input "{cleaned}" does not appear to be a valid phone number.')
    return errors


def file(upload: UploadedFile | None, options: FileRule | None) -> list[str]:
    errors = []
    if upload is None or not upload.payload:
        errors.append("File is empty.")

    size = upload.size if upload else None
    mimetype = upload.mimetype if upload else None

    if options is not None and options.max_bytes is not None:
        max_bytes = to_number(options.max_bytes)
        if not size or max_bytes is None or size > max_bytes:
            errors.append(
                f'File size "{size}" exceeds the maximum limit of: {options.max_bytes} bytes'
            )

    if options is not None and options.mime_types is not None:
        if not mimetype or mimetype not in options.mime_types:
            errors.append(f"File has an invalid mime-type: {mimetype}")

    return errors
