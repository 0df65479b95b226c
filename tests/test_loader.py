"""Tests for form/submission loading and the submission shape check."""

import json

import pytest

from formguard.forms.loader import load_form, load_submission, parse_form, parse_submission
from formguard.forms.types import (
    FieldResult,
    FormDefinitionError,
    GroupField,
    SelectField,
    SubmissionError,
)
from formguard.validation.payload import check_form_result, is_form_result

FORM_YAML = """\
fields:
  - slug: email
    displayName: Email
    type: email
    validators:
      required: true
      email: true
  - slug: color
    displayName: Color
    type: select
    options: [red, green]
  - slug: address
    displayName: Address
    type: group
    fields:
      - slug: city
        displayName: City
        type: text
"""


# =============================================================================
# Payload Shape
# =============================================================================


class TestCheckFormResult:
    def test_valid_flat(self):
        assert check_form_result([{"slug": "a", "value": "x"}, {"slug": "b", "value": 3}]) == []

    def test_valid_nested(self):
        value = [{"slug": "g", "value": [{"slug": "c", "value": ["x", "y"]}]}]
        assert is_form_result(value)

    def test_json_string(self):
        assert is_form_result(json.dumps([{"slug": "a", "value": None}]))

    def test_not_a_list(self):
        errors = check_form_result({"slug": "a"})
        assert errors
        assert all(e.code == "INVALID_SUBMISSION" for e in errors)

    def test_missing_slug(self):
        errors = check_form_result([{"slug": "a"}, {"value": 1}])
        assert len(errors) == 1
        assert "[1]" in errors[0].message

    def test_invalid_json(self):
        errors = check_form_result("[{")
        assert errors[0].message.startswith("Submission is not valid JSON")

    def test_optional_empty(self):
        assert check_form_result(None, optional=True) == []
        assert check_form_result(None)


# =============================================================================
# Forms
# =============================================================================


class TestLoadForm:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / "form.yaml"
        path.write_text(FORM_YAML)

        fields = load_form(path)
        assert [f.slug for f in fields] == ["email", "color", "address"]
        assert isinstance(fields[1], SelectField)
        assert [o.value for o in fields[1].options] == ["red", "green"]
        assert isinstance(fields[2], GroupField)

    def test_load_json_list(self, tmp_path):
        path = tmp_path / "form.json"
        path.write_text(json.dumps([{"slug": "a", "displayName": "A", "type": "text"}]))
        assert [f.slug for f in load_form(path)] == ["a"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "form.yaml"
        path.write_text("   \n")
        with pytest.raises(FormDefinitionError, match="empty"):
            load_form(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "form.yaml"
        path.write_text("fields: [unclosed")
        with pytest.raises(FormDefinitionError, match="Cannot parse"):
            load_form(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FormDefinitionError, match="Cannot read"):
            load_form(tmp_path / "nope.yaml")

    def test_wrong_shape(self):
        with pytest.raises(FormDefinitionError):
            parse_form({"form": []})


# =============================================================================
# Submissions
# =============================================================================


class TestLoadSubmission:
    def test_result_list(self):
        results = parse_submission([{"slug": "email", "value": "a@b.co"}])
        assert results == [FieldResult("email", "a@b.co")]

    def test_input_key(self):
        results = parse_submission({"input": [{"slug": "email", "value": "a@b.co"}]})
        assert results == [FieldResult("email", "a@b.co")]

    def test_plain_object(self):
        results = parse_submission({"email": "a@b.co", "address": {"city": "Boston"}})
        assert results == [
            FieldResult("email", "a@b.co"),
            FieldResult("address", [FieldResult("city", "Boston")]),
        ]

    def test_wrong_shape(self):
        with pytest.raises(SubmissionError, match="Submission is not a list of field results"):
            parse_submission({"input": {"email": "a@b.co"}})

    def test_load_file(self, tmp_path):
        path = tmp_path / "submission.json"
        path.write_text(json.dumps([{"slug": "email", "value": "a@b.co"}]))
        assert load_submission(path) == [FieldResult("email", "a@b.co")]
