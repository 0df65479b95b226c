"""Tests for form definition types and validator rules."""

import pytest

from formguard.forms.rules import (
    EmailRule,
    FileRule,
    LengthRule,
    ReCaptchaRule,
    ValidatorKind,
    Validators,
    blank_secret,
    option_keys,
    parse_rule,
)
from formguard.forms.types import (
    Field,
    FieldResult,
    FieldType,
    FormDefinitionError,
    GroupField,
    SelectField,
    SubmissionError,
    UploadedFile,
    coerce_results,
    is_group_value,
)


# =============================================================================
# Field Types
# =============================================================================


class TestFieldType:
    def test_parse_known_tag(self):
        assert FieldType.parse("select") is FieldType.SELECT

    def test_parse_member_passes_through(self):
        assert FieldType.parse(FieldType.FILE) is FieldType.FILE

    def test_parse_unknown_tag_keeps_raw_value(self):
        assert FieldType.parse("slider") == "slider"


class TestFieldFromDict:
    def test_text_field(self):
        f = Field.from_dict({
            "slug": "firstName",
            "displayName": "First name",
            "type": "text",
            "placeholderValue": "Jane",
            "validators": {"required": True},
        })
        assert type(f) is Field
        assert f.slug == "firstName"
        assert f.display_name == "First name"
        assert f.type is FieldType.TEXT
        assert f.placeholder_value == "Jane"
        assert f.validators.required is True

    def test_group_field_parses_children(self):
        f = Field.from_dict({
            "slug": "address",
            "displayName": "Address",
            "type": "group",
            "fields": [{"slug": "city", "displayName": "City", "type": "text"}],
        })
        assert isinstance(f, GroupField)
        assert [c.slug for c in f.fields] == ["city"]

    def test_select_field_parses_options(self):
        f = Field.from_dict({
            "slug": "color",
            "displayName": "Color",
            "type": "select",
            "options": [{"value": "red", "name": "Red"}],
        })
        assert isinstance(f, SelectField)
        assert f.options[0].value == "red"
        assert f.options[0].name == "Red"

    def test_field_passes_through(self):
        f = Field(slug="a", display_name="A", type=FieldType.TEXT)
        assert Field.from_dict(f) is f

    def test_non_mapping_raises(self):
        with pytest.raises(FormDefinitionError):
            Field.from_dict("not a field")

    def test_non_mapping_validators_raises(self):
        with pytest.raises(FormDefinitionError, match="invalid validators"):
            Field.from_dict({"slug": "a", "displayName": "A", "type": "text", "validators": [1]})

    def test_public_must_be_true_literal(self):
        f = Field.from_dict({"slug": "a", "displayName": "A", "type": "text", "public": "yes"})
        assert f.public is False

    def test_to_dict_omits_unset_attributes(self):
        data = {
            "slug": "color",
            "displayName": "Color",
            "type": "select",
            "options": [{"value": "red"}],
            "validators": {"required": True},
        }
        assert Field.from_dict(data).to_dict() == data


# =============================================================================
# Submission Types
# =============================================================================


class TestFieldResult:
    def test_nested_results_become_field_results(self):
        r = FieldResult.from_dict({
            "slug": "address",
            "value": [{"slug": "city", "value": "Boston"}],
        })
        assert r.value == [FieldResult("city", "Boston")]
        assert is_group_value(r.value)

    def test_scalar_list_stays_scalar(self):
        r = FieldResult.from_dict({"slug": "tags", "value": ["a", "b"]})
        assert r.value == ["a", "b"]
        assert not is_group_value(r.value)

    def test_to_dict_round_trips_groups(self):
        data = {"slug": "g", "value": [{"slug": "c", "value": 1}]}
        assert FieldResult.from_dict(data).to_dict() == data

    def test_coerce_results_empty(self):
        assert coerce_results(None) == []

    def test_non_mapping_raises(self):
        with pytest.raises(SubmissionError):
            FieldResult.from_dict(["slug", "value"])


class TestUploadedFile:
    def test_accepts_upload_layer_keys(self):
        upload = UploadedFile.from_dict({
            "fieldname": "resume",
            "mimetype": "application/pdf",
            "size": 3,
            "buffer": b"pdf",
            "originalname": "cv.pdf",
        })
        assert upload.field_name == "resume"
        assert upload.payload == b"pdf"
        assert upload.original_name == "cv.pdf"


# =============================================================================
# Validator Rules
# =============================================================================


class TestParseRule:
    def test_options_object_becomes_rule(self):
        rule = parse_rule("string", {"minLength": 2, "maxLength": 5})
        assert rule == LengthRule(min_length=2, max_length=5)

    def test_true_shorthand_kept(self):
        assert parse_rule("email", True) is True

    def test_unknown_option_keys_kept_as_extra(self):
        rule = parse_rule("file", {"maxBytes": 10, "color": "blue"})
        assert isinstance(rule, FileRule)
        assert rule.extra == {"color": "blue"}
        assert option_keys(rule) == ["maxBytes", "color"]

    def test_kind_without_options_type_kept_raw(self):
        assert parse_rule("values", {"a": 1}) == {"a": 1}


class TestValidators:
    def test_preserves_declaration_order(self):
        v = Validators.from_dict({"string": True, "required": True, "email": True})
        assert list(v) == ["string", "required", "email"]

    def test_required_is_tri_state(self):
        assert Validators.from_dict({}).required is None
        assert Validators.from_dict({"required": True}).required is True
        assert Validators.from_dict({"required": False}).required is False

    def test_kind_enum_and_string_keys_are_equivalent(self):
        v = Validators.from_dict({"reCaptcha": {"siteKey": "k", "secret": "s"}})
        assert ValidatorKind.RECAPTCHA in v
        assert "reCaptcha" in v
        assert v.get(ValidatorKind.RECAPTCHA) == ReCaptchaRule(site_key="k", secret="s")

    def test_with_rule_returns_copy(self):
        v = Validators.from_dict({"required": True})
        derived = v.with_rule(ValidatorKind.VALUES, ["a"])
        assert "values" in derived
        assert "values" not in v

    def test_without_returns_copy(self):
        v = Validators.from_dict({"array": True, "string": True})
        assert list(v.without(ValidatorKind.ARRAY)) == ["string"]
        assert len(v) == 2

    def test_to_dict_serializes_rules(self):
        data = {"required": True, "email": {"restrictions": ["x"]}}
        v = Validators.from_dict(data)
        assert isinstance(v.get("email"), EmailRule)
        assert v.to_dict() == data


class TestBlankSecret:
    def test_blanks_secret_only(self):
        rule = ReCaptchaRule(site_key="k", secret="shh", extra={"theme": "dark"})
        blanked = blank_secret(rule)
        assert blanked.secret == ""
        assert blanked.site_key == "k"
        assert blanked.extra == {"theme": "dark"}
        assert rule.secret == "shh"
