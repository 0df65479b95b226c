"""Normalization helpers for form definitions and submitted data."""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import Any

from formguard.forms.types import Field, FieldResult, FieldType, GroupField, is_group_value

# Providers that ignore dots in the local part of an address.
FAKE_DOT_PROVIDERS = ("gmail.com", "googlemail.com")

# Alias domain -> canonical domain
ALIAS_DOMAINS = {"googlemail.com": "gmail.com"}

_PHONE_NOISE = re.compile(r"[.+\-\s]")


def normalize_email(email: str | None) -> str | None:
    """Create a reasonably canonical email address.

    Lowercases, strips "+tag" suffixes, and for providers that ignore dots
    removes them and folds alias domains. Used to stop users from submitting
    slight variations of one address.
    """
    if not email:
        return None

    local, _, domain = email.lower().partition("@")
    local = local.split("+", 1)[0]

    if domain in FAKE_DOT_PROVIDERS:
        local = local.replace(".", "")
        domain = ALIAS_DOMAINS.get(domain, domain)

    return f"{local}@{domain}"


def normalize_phone(phone: Any) -> str | None:
    if not phone:
        return None
    return _PHONE_NOISE.sub("", str(phone))


def field_results_to_object(
    results: list[FieldResult] | None,
    excluded_slugs: tuple[str, ...] | list[str] = (),
) -> dict[str, Any]:
    """Flatten submitted results into a nested dict keyed by slug."""
    obj: dict[str, Any] = {}
    for result in results or []:
        if not result.slug or result.slug in excluded_slugs:
            continue
        if isinstance(result.value, list) and result.value and is_group_value(result.value):
            obj[result.slug] = field_results_to_object(result.value, excluded_slugs)
        else:
            obj[result.slug] = result.value
    return obj


def object_to_field_results(obj: Mapping[str, Any]) -> list[FieldResult]:
    """Inverse of field_results_to_object: nested mappings become groups."""
    results = []
    for slug, value in obj.items():
        if isinstance(value, Mapping):
            value = object_to_field_results(value)
        results.append(FieldResult(slug=slug, value=value))
    return results


def preprocess_field_options(raw_fields: list[Any]) -> list[Any]:
    """Expand the flat-list shorthand for select options.

    ``options: [red, green]`` becomes ``options: [{value: red}, {value: green}]``.
    Returns a deep copy; the input is left untouched.
    """
    if not raw_fields:
        return raw_fields

    cloned = copy.deepcopy(raw_fields)
    for raw in cloned:
        if not isinstance(raw, dict):
            continue
        if raw.get("type") == FieldType.GROUP.value and isinstance(raw.get("fields"), list):
            raw["fields"] = preprocess_field_options(raw["fields"])
        if raw.get("type") == FieldType.SELECT.value:
            options = raw.get("options")
            if isinstance(options, list):
                raw["options"] = [
                    o if isinstance(o, Mapping) else {"value": o}
                    for o in options
                ]
            else:
                raw["options"] = []
    return cloned


def extract_file_paths(fields: list[Field], path: str = "") -> list[str]:
    """Dotted paths to every file field, e.g. ``documents.[].passport``."""
    paths = []
    prefix = f"{path}." if path else ""
    for f in fields:
        if f.type is FieldType.FILE:
            paths.append(f"{prefix}{f.slug}")
        elif isinstance(f, GroupField):
            paths.extend(extract_file_paths(f.fields, f"{prefix}{f.slug}.[]"))
    return paths
