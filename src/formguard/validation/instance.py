"""Instance validation: checks a submission against a form definition.

The form definition is assumed to have passed validate_form_meta. Fields are
validated sequentially in declaration order so errors come back in a stable
order. Validation never raises: an exception in any branch is logged and
becomes a single synthetic error for that field, and sibling fields are
still validated.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Awaitable, Callable

import httpx

from formguard.config import CaptchaSettings
from formguard.forms.rules import ValidatorKind, Validators
from formguard.forms.types import (
    Field,
    FieldResult,
    FieldType,
    GroupField,
    SelectField,
    UploadedFile,
    coerce_fields,
    coerce_files,
    coerce_results,
    is_group_value,
)
from formguard.validation.types import ValidationError, ValidationResult
from formguard.validation.validators import library
from formguard.validation.validators.recaptcha import recaptcha

logger = logging.getLogger(__name__)


# Error code reported for each validator kind.
_KIND_CODES: dict[str, str] = {
    ValidatorKind.REQUIRED.value: "REQUIRED",
    ValidatorKind.STRING.value: "STRING",
    ValidatorKind.BOOLEAN.value: "BOOLEAN",
    ValidatorKind.NUMBER.value: "NUMBER",
    ValidatorKind.ARRAY.value: "ARRAY",
    ValidatorKind.MIN_AGE.value: "MIN_AGE",
    ValidatorKind.VALUES.value: "VALUES",
    ValidatorKind.EMAIL.value: "EMAIL",
    ValidatorKind.PHONE.value: "PHONE",
    ValidatorKind.FILE.value: "FILE",
    ValidatorKind.RECAPTCHA.value: "RECAPTCHA",
}


def extract_slugs(items: list[Any]) -> list[str]:
    """Collect slugs recursively from fields or submitted results.

    Group fields contribute their children; submitted values that are lists
    of FieldResult objects are treated as nested groups.
    """
    slugs: list[str] = []
    for item in items or []:
        slugs.append(item.slug)
        if isinstance(item, GroupField):
            slugs.extend(extract_slugs(item.fields))
        elif isinstance(item, FieldResult) and isinstance(item.value, list) and is_group_value(item.value):
            slugs.extend(extract_slugs(item.value))
    return slugs


def is_empty(value: Any) -> bool:
    """Values that an explicit ``required: false`` lets through unchecked."""
    if value is None or value is False or value == "":
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False


def _option(value: Any) -> Any:
    """Options object for a rule, or None for the ``true`` shorthand."""
    return None if value is True else value


class FormValidator:
    """Validates submissions against form definitions.

    Holds the reCAPTCHA settings and, optionally, a shared HTTP client used
    for verification calls.
    """

    def __init__(
        self,
        captcha: CaptchaSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.captcha = captcha or CaptchaSettings()
        self.http_client = http_client

        self._checks: dict[str, Callable[[Any, Any, Validators], Awaitable[list[str]]]] = {
            ValidatorKind.REQUIRED.value: self._check_required,
            ValidatorKind.STRING.value: self._check_string,
            ValidatorKind.BOOLEAN.value: self._check_boolean,
            ValidatorKind.NUMBER.value: self._check_number,
            ValidatorKind.MIN_AGE.value: self._check_age,
            ValidatorKind.VALUES.value: self._check_values,
            ValidatorKind.EMAIL.value: self._check_email,
            ValidatorKind.PHONE.value: self._check_phone,
            ValidatorKind.FILE.value: self._check_file,
            ValidatorKind.RECAPTCHA.value: self._check_recaptcha,
        }

    # -------------------------------------------------------------------------
    # Form
    # -------------------------------------------------------------------------

    async def validate_form(
        self,
        input: list[FieldResult] | list[dict] | None,
        fields: list[Field] | list[dict],
        files: list[UploadedFile] | list[dict] | None = None,
    ) -> ValidationResult:
        """Validate submitted results (and uploads) against a field tree.

        Args:
            input: Submitted field results
            fields: The form definition
            files: Upload descriptors, matched to file fields by name

        Returns:
            ValidationResult with errors in declaration order
        """
        if not fields:
            return ValidationResult(
                valid=False,
                errors=[ValidationError(
                    None, "No fields were provided. Validation is not possible", "NO_FIELDS"
                )],
            )

        try:
            return await self._validate_form(
                coerce_results(input), coerce_fields(fields), coerce_files(files)
            )
        except Exception as e:
            logger.exception("Form validation failed")
            return ValidationResult(
                valid=False,
                errors=[ValidationError(
                    None,
                    f"An error occurred while validating the form: {e}",
                    "INTERNAL_ERROR",
                )],
            )

    async def _validate_form(
        self,
        results: list[FieldResult],
        fields: list[Field],
        uploads: list[UploadedFile],
    ) -> ValidationResult:
        if not fields:
            return ValidationResult(
                valid=False,
                errors=[ValidationError(
                    None, "No fields were provided. Validation is not possible", "NO_FIELDS"
                )],
            )

        errors: list[ValidationError] = []

        submitted = extract_slugs(results) + [u.field_name for u in uploads]
        expected = set(extract_slugs(fields))
        for slug in submitted:
            if slug not in expected:
                errors.append(ValidationError(
                    slug, f'Input field "{slug}" was not expected.', "UNEXPECTED_FIELD"
                ))

        for f in fields:
            errors.extend(await self._validate_field(f, results, uploads))

        return ValidationResult.from_errors(errors)

    async def _validate_field(
        self,
        f: Field,
        results: list[FieldResult],
        uploads: list[UploadedFile],
    ) -> list[ValidationError]:
        errors: list[ValidationError] = []

        if f.type is FieldType.FILE:
            value = next((u for u in uploads if u.field_name == f.slug), None)
        else:
            match = next((r for r in results if r.slug == f.slug), None)
            value = match.value if match is not None else None

        validators = self.effective_validators(f, value)

        if isinstance(f, GroupField):
            errors.extend(await self._validate_group(f, value, uploads))
            # The nested result list is the group's single value, not a multi-value array.
            leaf = await self._safe_check(f.slug, value, validators, nested=True)
        else:
            leaf = await self._safe_check(f.slug, value, validators)

        errors.extend(leaf)
        return errors

    async def _validate_group(
        self,
        f: GroupField,
        value: Any,
        uploads: list[UploadedFile],
    ) -> list[ValidationError]:
        children = f.fields or []
        nested = value if isinstance(value, list) and is_group_value(value) else []
        child_slugs = set(extract_slugs(children))
        child_uploads = [u for u in uploads if u.field_name in child_slugs]

        try:
            result = await self._validate_form(nested, children, child_uploads)
        except Exception:
            logger.exception("Validation of group %r failed", f.slug)
            result = ValidationResult(
                valid=False,
                errors=[ValidationError(
                    f.slug,
                    f'An error occurred while validating the input for "{f.slug}".',
                    "INTERNAL_ERROR",
                )],
            )

        if result.valid:
            return []
        return [
            ValidationError(
                f.slug,
                f'Field "{f.slug}" is not valid: '
                "One or more of the fields in the group has validation errors.",
                "GROUP_INVALID",
            ),
            *result.errors,
        ]

    @staticmethod
    def effective_validators(f: Field, value: Any) -> Validators:
        """Validators to apply to one submitted value.

        Computed per call and never written back to the field:
        - a select without a non-empty ``values`` rule only accepts its options
        - ``allowMultiple`` with a list value enables ``array`` when not declared
        """
        validators = f.validators if f.validators is not None else Validators()

        if isinstance(f, SelectField) and not validators.get(ValidatorKind.VALUES):
            validators = validators.with_rule(
                ValidatorKind.VALUES, [o.value for o in f.options]
            )

        if f.allow_multiple and isinstance(value, list) and ValidatorKind.ARRAY not in validators:
            validators = validators.with_rule(ValidatorKind.ARRAY, True)

        return validators

    # -------------------------------------------------------------------------
    # Single value
    # -------------------------------------------------------------------------

    async def validate_input(
        self,
        value: Any,
        slug: str,
        validators: Validators | dict | None,
    ) -> ValidationResult:
        """Validate one submitted value against a validators bag.

        Messages are prefixed with the field slug. Never raises.
        """
        if validators is None:
            validators = Validators()
        elif not isinstance(validators, Validators):
            validators = Validators.from_dict(validators)

        errors = await self._safe_check(slug, value, validators)
        return ValidationResult.from_errors(errors)

    async def _safe_check(
        self,
        slug: str,
        value: Any,
        validators: Validators,
        nested: bool = False,
    ) -> list[ValidationError]:
        try:
            return await self._check_value(slug, value, validators, nested)
        except Exception:
            logger.exception("Validation of field %r failed", slug)
            return [ValidationError(
                slug,
                f'Field "{slug}" is not valid: An error occurred while validating the input.',
                "INTERNAL_ERROR",
            )]

    async def _check_value(
        self,
        slug: str,
        value: Any,
        validators: Validators,
        nested: bool = False,
    ) -> list[ValidationError]:
        # Only an explicit opt-out skips validation of an empty value.
        if validators.required is False and is_empty(value):
            return []

        if isinstance(value, (list, tuple)) and not nested:
            return await self._check_array(slug, value, validators)

        errors: list[ValidationError] = []
        for kind, options in validators.items():
            check = self._checks.get(kind)
            if check is None:
                # array/group/address carry no per-value check here
                continue
            for message in await check(value, options, validators):
                errors.append(_field_error(slug, kind, message))
        return errors

    async def _check_array(
        self,
        slug: str,
        value: list[Any] | tuple[Any, ...],
        validators: Validators,
    ) -> list[ValidationError]:
        array_rule = validators.get(ValidatorKind.ARRAY)
        if not array_rule:
            return [ValidationError(
                slug,
                f'Field "{slug}" is not valid: '
                "Input is an array but the field does not allow multiple values.",
                "MULTIPLE_NOT_ALLOWED",
            )]

        errors = [
            _field_error(slug, ValidatorKind.ARRAY.value, message)
            for message in library.array(value, _option(array_rule))
        ]
        rest = validators.without(ValidatorKind.ARRAY)
        for item in value:
            errors.extend(await self._check_value(slug, item, rest))
        return errors

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    async def _check_required(self, value: Any, options: Any, validators: Validators) -> list[str]:
        return library.required(value, optional=options is False)

    async def _check_string(self, value: Any, options: Any, validators: Validators) -> list[str]:
        return library.string(value, _option(options))

    async def _check_boolean(self, value: Any, options: Any, validators: Validators) -> list[str]:
        return library.boolean(value)

    async def _check_number(self, value: Any, options: Any, validators: Validators) -> list[str]:
        return library.number(value, _option(options))

    async def _check_age(self, value: Any, options: Any, validators: Validators) -> list[str]:
        return library.age(value, options)

    async def _check_values(self, value: Any, options: Any, validators: Validators) -> list[str]:
        return library.values(value, options or [])

    async def _check_email(self, value: Any, options: Any, validators: Validators) -> list[str]:
        rule = _option(options)
        return library.email(value, rule.restrictions if rule is not None else None)

    async def _check_phone(self, value: Any, options: Any, validators: Validators) -> list[str]:
        rule = _option(options)
        return library.phone(value, rule.requirements if rule is not None else None)

    async def _check_file(self, value: Any, options: Any, validators: Validators) -> list[str]:
        return library.file(value if isinstance(value, UploadedFile) else None, _option(options))

    async def _check_recaptcha(self, value: Any, options: Any, validators: Validators) -> list[str]:
        return await recaptcha(value, _option(options), self.captcha, self.http_client)


def _field_error(slug: str, kind: str, message: str) -> ValidationError:
    return ValidationError(
        slug,
        f'Field "{slug}" is not valid: {message}',
        _KIND_CODES.get(kind, kind.upper()),
    )


# =============================================================================
# Module-level API
# =============================================================================


async def validate_form(
    input: list[FieldResult] | list[dict] | None,
    fields: list[Field] | list[dict],
    files: list[UploadedFile] | list[dict] | None = None,
) -> ValidationResult:
    """Validate a submission with default settings (see FormValidator.validate_form)."""
    return await FormValidator().validate_form(input, fields, files)


async def validate_input(
    value: Any,
    slug: str,
    validators: Validators | dict | None,
) -> ValidationResult:
    """Validate one value with default settings (see FormValidator.validate_input)."""
    return await FormValidator().validate_input(value, slug, validators)
