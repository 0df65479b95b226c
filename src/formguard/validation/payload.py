"""Structural check for submitted payloads.

Validates that a submission has the shape ``[{slug, value}, ...]`` before it
is parsed into FieldResult objects. Values may be scalars, plain objects
(upload descriptors), lists of scalars, or nested result lists for groups.

The shape is described by a bundled JSON Schema (Draft 2020-12).
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as SchemaError

from formguard.validation.types import ValidationError

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"
_FIELD_RESULT_SCHEMA = "field_result.schema.json"


@lru_cache(maxsize=None)
def _validator() -> Draft202012Validator:
    with (_SCHEMAS_DIR / _FIELD_RESULT_SCHEMA).open() as fh:
        schema = json.load(fh)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def _json_path(error: SchemaError) -> str:
    """Convert a jsonschema error path to a readable string, e.g. ``[0]/value[1]``."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def check_form_result(value: Any, optional: bool = False) -> list[ValidationError]:
    """Check that a value is a list of field results.

    Args:
        value: The submission, or its JSON string encoding
        optional: Accept an empty/missing submission

    Returns:
        Structural errors; empty when the shape is valid.
    """
    if not value and optional:
        return []

    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except ValueError as e:
            return [ValidationError(None, f"Submission is not valid JSON: {e}", "INVALID_SUBMISSION")]

    errors = []
    for error in sorted(_validator().iter_errors(value), key=_json_path):
        path = _json_path(error)
        location = f" at {path}" if path else ""
        errors.append(ValidationError(
            None,
            f"Submission is not a list of field results{location}: {error.message}",
            "INVALID_SUBMISSION",
        ))

    if errors:
        logger.debug("Submission failed structural check with %d error(s)", len(errors))
    return errors


def is_form_result(value: Any, optional: bool = False) -> bool:
    return not check_form_result(value, optional)
