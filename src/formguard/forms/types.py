"""Core types for formguard form definitions and submissions.

A form is a tree of fields. Every field carries a type tag; the tag decides
which variant-specific attributes exist:
- group: nested child fields
- select: a list of options
- recaptcha / file: no extra attributes, but special validation handling

Submissions are lists of FieldResult objects. Uploaded files travel separately
as UploadedFile descriptors and are matched to file fields by name.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from formguard.forms.rules import Validators


class FormguardError(Exception):
    """Base error for formguard."""
    pass


class FormDefinitionError(FormguardError):
    """A form definition could not be parsed into fields."""
    pass


class SubmissionError(FormguardError):
    """A submission could not be parsed into field results."""
    pass


class FieldType(Enum):
    """Defines how a field is rendered and which attributes it carries."""

    GROUP = "group"
    TEXT = "text"
    CHECKBOX = "checkbox"
    SELECT = "select"
    HIDDEN = "hidden"
    RECAPTCHA = "recaptcha"
    EMAIL = "email"
    PHONE = "phone"
    STATE = "state"
    DATE = "date"
    FILE = "file"

    @classmethod
    def parse(cls, raw: Any) -> "FieldType | Any":
        """Return the matching member, or the raw value if the tag is unknown."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except ValueError:
            return raw


@dataclass
class SelectOption:
    value: Any
    name: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "SelectOption":
        if not isinstance(data, Mapping):
            raise FormDefinitionError(f"Invalid option: {data!r}")
        return cls(value=data.get("value"), name=data.get("name"))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"value": self.value}
        if self.name is not None:
            result["name"] = self.name
        return result


@dataclass
class Field:
    """One node of a form definition tree.

    Attributes:
        slug: Internal field name, unique among siblings
        display_name: User-visible field name
        type: FieldType tag (kept as the raw value when unknown)
        description: User-visible description
        placeholder_value: Value for an input's placeholder attribute
        initial_value: Value to pre-populate
        suggestions: Suggested values
        allow_multiple: Field may hold more than one value
        validators: Rules applied to submitted values
        public: Field may remain unencrypted (top-level fields only)
    """

    slug: str
    display_name: str
    type: FieldType | Any
    description: str | None = None
    placeholder_value: str | None = None
    initial_value: Any = None
    suggestions: list[SelectOption] = field(default_factory=list)
    allow_multiple: bool = False
    validators: Validators | None = None
    public: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> "Field":
        """Create a field (or the variant its type tag selects) from a JSON/YAML dict."""
        if isinstance(data, Field):
            return data
        if not isinstance(data, Mapping):
            raise FormDefinitionError(f"Field definition must be a mapping, got {type(data).__name__}")

        field_type = FieldType.parse(data.get("type"))
        raw_validators = data.get("validators")
        if raw_validators is not None and not isinstance(raw_validators, Mapping):
            raise FormDefinitionError(
                f'Field "{data.get("slug")}" has invalid validators: expected a mapping.'
            )
        raw_suggestions = data.get("suggestions") or []
        if not isinstance(raw_suggestions, list):
            raise FormDefinitionError(
                f'Field "{data.get("slug")}" has invalid suggestions: expected a list.'
            )

        kwargs: dict[str, Any] = dict(
            slug=data.get("slug", ""),
            display_name=data.get("displayName", ""),
            type=field_type,
            description=data.get("description"),
            placeholder_value=data.get("placeholderValue"),
            initial_value=data.get("initialValue"),
            suggestions=[SelectOption.from_dict(s) for s in raw_suggestions],
            allow_multiple=bool(data.get("allowMultiple", False)),
            validators=Validators.from_dict(raw_validators) if raw_validators is not None else None,
            public=data.get("public") is True,
        )

        variant = _FIELD_VARIANTS.get(field_type, cls)
        return variant._from_dict(data, kwargs)

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any], kwargs: dict[str, Any]) -> "Field":
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON shape, omitting unset attributes."""
        result: dict[str, Any] = {
            "slug": self.slug,
            "displayName": self.display_name,
            "type": self.type.value if isinstance(self.type, FieldType) else self.type,
        }
        if self.description is not None:
            result["description"] = self.description
        if self.placeholder_value is not None:
            result["placeholderValue"] = self.placeholder_value
        if self.initial_value is not None:
            result["initialValue"] = self.initial_value
        if self.suggestions:
            result["suggestions"] = [s.to_dict() for s in self.suggestions]
        if self.allow_multiple:
            result["allowMultiple"] = True
        if self.validators is not None:
            result["validators"] = self.validators.to_dict()
        if self.public:
            result["public"] = True
        return result


@dataclass
class GroupField(Field):
    fields: list[Field] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any], kwargs: dict[str, Any]) -> "GroupField":
        raw_fields = data.get("fields") or []
        if not isinstance(raw_fields, list):
            raise FormDefinitionError(
                f'Field "{kwargs["slug"]}" is a group but "fields" is not a list.'
            )
        return cls(**kwargs, fields=[Field.from_dict(f) for f in raw_fields])

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["fields"] = [f.to_dict() for f in self.fields]
        return result


@dataclass
class SelectField(Field):
    options: list[SelectOption] = field(default_factory=list)

    @classmethod
    def _from_dict(cls, data: Mapping[str, Any], kwargs: dict[str, Any]) -> "SelectField":
        raw_options = data.get("options") or []
        if not isinstance(raw_options, list):
            raise FormDefinitionError(
                f'Field "{kwargs["slug"]}" is a select but "options" is not a list.'
            )
        return cls(**kwargs, options=[SelectOption.from_dict(o) for o in raw_options])

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["options"] = [o.to_dict() for o in self.options]
        return result


_FIELD_VARIANTS: dict[Any, type[Field]] = {
    FieldType.GROUP: GroupField,
    FieldType.SELECT: SelectField,
}


def coerce_fields(fields: Any) -> list[Field]:
    """Parse a list of field definitions, passing Field objects through."""
    return [Field.from_dict(f) for f in fields]


# =============================================================================
# Submission Types
# =============================================================================


@dataclass
class UploadedFile:
    """An upload descriptor supplied by the upload layer."""

    field_name: str
    mimetype: str | None = None
    size: int | None = None
    payload: bytes | None = None
    original_name: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "UploadedFile":
        if isinstance(data, UploadedFile):
            return data
        if not isinstance(data, Mapping):
            raise SubmissionError(f"Upload descriptor must be a mapping, got {type(data).__name__}")
        return cls(
            field_name=data.get("fieldName", data.get("fieldname", "")),
            mimetype=data.get("mimetype"),
            size=data.get("size"),
            payload=data.get("payload", data.get("buffer")),
            original_name=data.get("originalName", data.get("originalname")),
        )


@dataclass
class FieldResult:
    """A submitted slug/value pair. Group values are nested FieldResult lists."""

    slug: str
    value: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> "FieldResult":
        if isinstance(data, FieldResult):
            return data
        if not isinstance(data, Mapping):
            raise SubmissionError(f"Field result must be a mapping, got {type(data).__name__}")
        value = data.get("value")
        if _is_result_list(value):
            value = [cls.from_dict(v) for v in value]
        return cls(slug=data.get("slug"), value=value)

    def to_dict(self) -> dict[str, Any]:
        value = self.value
        if is_group_value(value):
            value = [v.to_dict() for v in value]
        return {"slug": self.slug, "value": value}


def _is_result_list(value: Any) -> bool:
    return (
        isinstance(value, list)
        and bool(value)
        and all(
            isinstance(v, FieldResult) or (isinstance(v, Mapping) and v.get("slug"))
            for v in value
        )
    )


def is_group_value(value: Any) -> bool:
    """True when a submitted value is a nested list of field results."""
    return isinstance(value, list) and all(isinstance(v, FieldResult) for v in value)


def coerce_results(input: Any) -> list[FieldResult]:
    if not input:
        return []
    return [FieldResult.from_dict(i) for i in input]


def coerce_files(files: Any) -> list[UploadedFile]:
    if not files:
        return []
    return [UploadedFile.from_dict(f) for f in files]
