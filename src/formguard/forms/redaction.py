"""Redaction of secrets before a form definition leaves the server."""

from __future__ import annotations

import copy
from typing import Any

from formguard.forms.rules import ReCaptchaRule, ValidatorKind, blank_secret
from formguard.forms.types import Field, FieldType, GroupField, coerce_fields


def make_fields_public(fields: list[Field] | list[dict[str, Any]]) -> list[Field]:
    """Return a deep copy of the fields with secret configuration removed.

    Currently this blanks the reCAPTCHA secret (the site key stays, the
    browser needs it). The input is never modified.
    """
    return [_make_public(f) for f in copy.deepcopy(coerce_fields(fields or []))]


def _make_public(f: Field) -> Field:
    if f.type is FieldType.RECAPTCHA and f.validators is not None:
        rule = f.validators.get(ValidatorKind.RECAPTCHA)
        if isinstance(rule, ReCaptchaRule) and rule.secret:
            f.validators = f.validators.with_rule(ValidatorKind.RECAPTCHA, blank_secret(rule))
    elif isinstance(f, GroupField):
        f.fields = [_make_public(child) for child in f.fields]
    return f
