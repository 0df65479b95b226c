"""Schema (meta) validation for form definitions.

Checks that an authored field tree is well-formed before it is used to
validate submissions:
- slugs, display names and type tags
- group children and select options
- reCAPTCHA fields carrying their validator
- validator definitions (see validate_validators_meta)
- ``public`` only on top-level fields

Schema validation never raises; every problem becomes a ValidationError.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Callable

from formguard.forms.rules import (
    AddressRule,
    EmailRule,
    FileRule,
    LengthRule,
    NumberRule,
    PhoneRule,
    ReCaptchaRule,
    RuleOptions,
    ValidatorKind,
    Validators,
)
from formguard.forms.types import (
    Field,
    FieldType,
    FormDefinitionError,
    GroupField,
    SelectField,
)
from formguard.validation.types import ValidationError, ValidationResult
from formguard.validation.validators.library import to_number

SLUG_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


# =============================================================================
# Field Tree
# =============================================================================


def validate_form_meta(fields: Any, root: bool = True) -> ValidationResult:
    """Validate a field tree definition.

    Args:
        fields: Field objects or raw field mappings
        root: False when validating the children of a group

    Returns:
        ValidationResult with child errors merged flat
    """
    if not isinstance(fields, list) or not fields:
        return ValidationResult(
            valid=False,
            errors=[ValidationError(None, "No fields were provided.", "NO_FIELDS")],
        )

    errors: list[ValidationError] = []
    seen_slugs: set[str] = set()

    for index, raw in enumerate(fields):
        try:
            f = Field.from_dict(raw)
        except FormDefinitionError as e:
            slug = raw.get("slug") if isinstance(raw, Mapping) else None
            errors.append(ValidationError(
                slug if isinstance(slug, str) else None,
                f"Field at position {index} is not a valid field definition: {e}",
                "INVALID_FIELD",
            ))
            continue

        errors.extend(_validate_field(f, root, seen_slugs))

    return ValidationResult.from_errors(errors)


def _validate_field(f: Field, root: bool, seen_slugs: set[str]) -> list[ValidationError]:
    errors: list[ValidationError] = []
    slug = f.slug if isinstance(f.slug, str) else None

    if not slug or not SLUG_PATTERN.fullmatch(slug):
        errors.append(ValidationError(
            slug,
            f'Field "{f.slug}" has an invalid slug. Slugs must be alphanumeric '
            "and may contain underscores and dashes.",
            "INVALID_SLUG",
        ))
    elif slug in seen_slugs:
        errors.append(ValidationError(
            slug,
            f'Field "{slug}" is declared more than once at the same level.',
            "DUPLICATE_SLUG",
        ))
    else:
        seen_slugs.add(slug)

    if not isinstance(f.display_name, str) or not f.display_name:
        errors.append(ValidationError(
            slug, f'Field "{f.slug}" has an invalid display name.', "INVALID_DISPLAY_NAME"
        ))

    if not isinstance(f.type, FieldType):
        errors.append(ValidationError(
            slug, f'Field "{f.slug}" has an invalid type: "{f.type}".', "INVALID_TYPE"
        ))

    if isinstance(f, GroupField):
        if not f.fields:
            errors.append(ValidationError(
                slug, f'Field "{f.slug}" is a group but has no fields.', "EMPTY_GROUP"
            ))
        else:
            errors.extend(validate_form_meta(list(f.fields), root=False).errors)

    if isinstance(f, SelectField):
        if not f.options:
            errors.append(ValidationError(
                slug, f'Field "{f.slug}" is a select but has no options.', "MISSING_OPTIONS"
            ))
        for option in f.options:
            if not isinstance(option.value, str) or not option.value:
                errors.append(ValidationError(
                    slug, f'Field "{f.slug}" has an invalid option.', "INVALID_OPTION"
                ))

    if f.type is FieldType.RECAPTCHA:
        if f.validators is None or ValidatorKind.RECAPTCHA not in f.validators:
            errors.append(ValidationError(
                slug,
                f'Field "{f.slug}" is a reCaptcha but has no validator.',
                "MISSING_RECAPTCHA",
            ))

    if f.validators is not None:
        errors.extend(validate_validators_meta(f.validators).errors)

    if f.public and not root:
        errors.append(ValidationError(
            slug,
            f'Field "{f.slug}" is marked "public" but is not a top-level field. '
            "This option can only be used on top-level field elements.",
            "PUBLIC_NOT_ALLOWED",
        ))

    return errors


# =============================================================================
# Validator Definitions
# =============================================================================


def _invalid(kind: str, detail: str = "") -> ValidationError:
    message = f'Invalid validator "{kind}" provided.'
    if detail:
        message = f"{message} {detail}"
    return ValidationError(str(kind), message, "INVALID_VALIDATOR")


def _check_options(
    kind: str, value: Any, option_type: type[RuleOptions]
) -> tuple[RuleOptions | None, list[ValidationError]]:
    """Common shape checks for options objects.

    Returns the parsed options (None if unusable) and any shape errors.
    """
    if not isinstance(value, option_type):
        return None, [_invalid(kind, "Expected true or an options object.")]
    if value.extra:
        return value, [_invalid(kind, "Unexpected keys found.")]
    return value, []


def _length_bounds(kind: str, value: Any) -> list[ValidationError]:
    if value is True:
        return []
    options, errors = _check_options(kind, value, LengthRule)
    if options is None:
        return errors

    min_length = to_number(options.min_length) if options.min_length is not None else None
    max_length = to_number(options.max_length) if options.max_length is not None else None
    if options.min_length is not None and (min_length is None or min_length < 0):
        errors.append(_invalid(kind, 'A valid value for "minLength" is required.'))
    if options.max_length is not None and (max_length is None or max_length < 1):
        errors.append(_invalid(kind, 'A valid value for "maxLength" is required.'))
    if min_length is not None and max_length is not None and min_length > max_length:
        errors.append(_invalid(kind, '"minLength" value is greater than "maxLength" value.'))
    return errors


def _number_bounds(kind: str, value: Any) -> list[ValidationError]:
    if value is True:
        return []
    options, errors = _check_options(kind, value, NumberRule)
    if options is None:
        return errors

    minimum = to_number(options.min) if options.min is not None else None
    maximum = to_number(options.max) if options.max is not None else None
    if options.min is not None and minimum is None:
        errors.append(_invalid(kind, 'A valid value for "min" is required.'))
    if options.max is not None and maximum is None:
        errors.append(_invalid(kind, 'A valid value for "max" is required.'))
    if minimum is not None and maximum is not None and minimum > maximum:
        errors.append(_invalid(kind, '"min" value is greater than "max" value.'))
    return errors


def _address(kind: str, value: Any) -> list[ValidationError]:
    if not isinstance(value, AddressRule) or not (value.countries or value.states):
        return [_invalid(kind, "No countries and/or states provided.")]
    return []


def _phone(kind: str, value: Any) -> list[ValidationError]:
    if value is True:
        return []
    options, errors = _check_options(kind, value, PhoneRule)
    if options is None:
        return errors
    if not isinstance(options.requirements, list) or not options.requirements:
        errors.append(_invalid(kind, "No requirements provided."))
    return errors


def _email(kind: str, value: Any) -> list[ValidationError]:
    if value is True:
        return []
    options, errors = _check_options(kind, value, EmailRule)
    if options is None:
        return errors
    if not isinstance(options.restrictions, list) or not options.restrictions:
        errors.append(_invalid(kind, "No restrictions provided."))
        return errors
    for restriction in options.restrictions:
        try:
            re.compile(restriction)
        except (re.error, TypeError):
            errors.append(_invalid(kind, f'Restriction is not a valid pattern: "{restriction}".'))
    return errors


def _min_age(kind: str, value: Any) -> list[ValidationError]:
    if to_number(value) is None:
        return [_invalid(kind, f'Value isn\'t a number: "{value}".')]
    return []


def _file(kind: str, value: Any) -> list[ValidationError]:
    options, errors = _check_options(kind, value, FileRule)
    if options is None:
        return [_invalid(kind, "Expected an options object.")]

    max_bytes = to_number(options.max_bytes)
    valid_max_bytes = max_bytes is not None and max_bytes >= 0
    valid_mime_types = isinstance(options.mime_types, list)
    if not valid_max_bytes and not valid_mime_types:
        errors.append(_invalid(kind, 'A valid value for "maxBytes" and/or "mimeTypes" is required.'))
    return errors


def _recaptcha(kind: str, value: Any) -> list[ValidationError]:
    options, errors = _check_options(kind, value, ReCaptchaRule)
    if options is None:
        return [_invalid(kind, "Expected an options object.")]
    if not isinstance(options.site_key, str) or not options.site_key:
        errors.append(_invalid(kind, 'A valid value for "siteKey" is required.'))
    if not isinstance(options.secret, str) or not options.secret:
        errors.append(_invalid(kind, 'A valid value for "secret" is required.'))
    return errors


def _presence_only(kind: str, value: Any) -> list[ValidationError]:
    return []


_META_CHECKS: dict[str, Callable[[str, Any], list[ValidationError]]] = {
    ValidatorKind.REQUIRED.value: _presence_only,
    ValidatorKind.BOOLEAN.value: _presence_only,
    ValidatorKind.VALUES.value: _presence_only,
    ValidatorKind.GROUP.value: _presence_only,
    ValidatorKind.STRING.value: _length_bounds,
    ValidatorKind.ARRAY.value: _length_bounds,
    ValidatorKind.NUMBER.value: _number_bounds,
    ValidatorKind.ADDRESS.value: _address,
    ValidatorKind.PHONE.value: _phone,
    ValidatorKind.EMAIL.value: _email,
    ValidatorKind.MIN_AGE.value: _min_age,
    ValidatorKind.FILE.value: _file,
    ValidatorKind.RECAPTCHA.value: _recaptcha,
}


def validate_validators_meta(validators: Validators | Mapping[str, Any] | None) -> ValidationResult:
    """Validate that a validators bag is internally well-formed.

    Errors use the validator kind as their slug.
    """
    if not validators:
        return ValidationResult(valid=True)
    if not isinstance(validators, Validators):
        validators = Validators.from_dict(validators)

    errors: list[ValidationError] = []
    for kind, value in validators.items():
        check = _META_CHECKS.get(kind)
        if check is None:
            errors.append(_invalid(kind))
            continue
        errors.extend(check(kind, value))

    return ValidationResult.from_errors(errors)
