"""Load form definitions and submissions from YAML or JSON files.

A form file holds either a list of fields or a mapping with a ``fields`` key:

    fields:
      - slug: email
        displayName: Email
        type: email
        validators: {required: true, email: true}

A submission file holds a list of field results, a mapping with an ``input``
key, or a plain object keyed by slug (nested objects become groups).

PyYAML's safe loader reads both formats, JSON being a subset of YAML.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from formguard.forms.normalization import object_to_field_results, preprocess_field_options
from formguard.forms.types import (
    Field,
    FieldResult,
    FormDefinitionError,
    SubmissionError,
    coerce_fields,
    coerce_results,
)
from formguard.validation.payload import check_form_result

logger = logging.getLogger(__name__)


def _read(path: Path, error_type: type[Exception]) -> Any:
    try:
        with path.open() as fh:
            data = yaml.safe_load(fh)
    except OSError as e:
        raise error_type(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise error_type(f"Cannot parse {path}: {e}") from e

    if data is None:
        raise error_type(f"{path} is empty or contains only whitespace")
    return data


def parse_form(data: Any) -> list[Field]:
    """Turn a loaded form document into fields.

    Raises:
        FormDefinitionError: If the document is not a field list
    """
    if isinstance(data, Mapping):
        data = data.get("fields")
    if not isinstance(data, list):
        raise FormDefinitionError("A form must be a list of fields or a mapping with a 'fields' list")
    return coerce_fields(preprocess_field_options(data))


def load_form(path: Path) -> list[Field]:
    """Load a form definition file.

    The result is parsed but not schema-validated; run validate_form_meta on it.
    """
    fields = parse_form(_read(path, FormDefinitionError))
    logger.debug("Loaded %d top-level field(s) from %s", len(fields), path)
    return fields


def parse_submission(data: Any) -> list[FieldResult]:
    """Turn a loaded submission document into field results.

    Raises:
        SubmissionError: If the document does not have the submission shape
    """
    if isinstance(data, Mapping):
        if "input" not in data:
            return object_to_field_results(data)
        data = data["input"]

    issues = check_form_result(data)
    if issues:
        raise SubmissionError("; ".join(issue.message for issue in issues))
    return coerce_results(data)


def load_submission(path: Path) -> list[FieldResult]:
    results = parse_submission(_read(path, SubmissionError))
    logger.debug("Loaded %d submitted result(s) from %s", len(results), path)
    return results
