"""Validator rules attached to form fields.

A field's validators are an ordered bag of (kind, options) pairs. Most kinds
accept either the ``true`` shorthand or an options object:

    validators:
      required: true
      string: {minLength: 2, maxLength: 80}
      email: true

Options objects are parsed into the rule dataclasses below. Unknown kinds and
unknown option keys are kept as-is so schema validation can report them.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class ValidatorKind(str, Enum):
    """Known validator kinds, keyed by their JSON name."""

    REQUIRED = "required"
    STRING = "string"
    BOOLEAN = "boolean"
    NUMBER = "number"
    ARRAY = "array"
    MIN_AGE = "minAge"
    VALUES = "values"
    GROUP = "group"
    EMAIL = "email"
    PHONE = "phone"
    ADDRESS = "address"
    FILE = "file"
    RECAPTCHA = "reCaptcha"


# =============================================================================
# Rule Options
# =============================================================================


@dataclass
class RuleOptions:
    """Base for options objects.

    ``extra`` holds keys that are not part of the rule; schema validation
    rejects them.
    """

    extra: dict[str, Any] = field(default_factory=dict, kw_only=True)

    @classmethod
    def key_map(cls) -> dict[str, str]:
        return {}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RuleOptions":
        key_map = cls.key_map()
        kwargs = {attr: data[key] for key, attr in key_map.items() if key in data}
        extra = {k: v for k, v in data.items() if k not in key_map}
        return cls(**kwargs, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        result = {
            key: getattr(self, attr)
            for key, attr in self.key_map().items()
            if getattr(self, attr) is not None
        }
        result.update(self.extra)
        return result


@dataclass
class LengthRule(RuleOptions):
    """Length bounds for the ``string`` and ``array`` validators."""

    min_length: Any = None
    max_length: Any = None

    @classmethod
    def key_map(cls) -> dict[str, str]:
        return {"minLength": "min_length", "maxLength": "max_length"}


@dataclass
class NumberRule(RuleOptions):
    min: Any = None
    max: Any = None

    @classmethod
    def key_map(cls) -> dict[str, str]:
        return {"min": "min", "max": "max"}


@dataclass
class EmailRule(RuleOptions):
    # Regex strings; a normalized address matching any of them is rejected.
    restrictions: Any = None

    @classmethod
    def key_map(cls) -> dict[str, str]:
        return {"restrictions": "restrictions"}


@dataclass
class PhoneRule(RuleOptions):
    # Country codes the number must satisfy, e.g. ["US"].
    requirements: Any = None

    @classmethod
    def key_map(cls) -> dict[str, str]:
        return {"requirements": "requirements"}


@dataclass
class AddressRule(RuleOptions):
    countries: Any = None
    states: Any = None

    @classmethod
    def key_map(cls) -> dict[str, str]:
        return {"countries": "countries", "states": "states"}


@dataclass
class FileRule(RuleOptions):
    mime_types: Any = None
    max_bytes: Any = None

    @classmethod
    def key_map(cls) -> dict[str, str]:
        return {"mimeTypes": "mime_types", "maxBytes": "max_bytes"}


@dataclass
class ReCaptchaRule(RuleOptions):
    site_key: Any = None
    secret: Any = None

    @classmethod
    def key_map(cls) -> dict[str, str]:
        return {"siteKey": "site_key", "secret": "secret"}


# Kinds whose value may be an options object, and the type it parses into.
_OPTION_TYPES: dict[str, type[RuleOptions]] = {
    ValidatorKind.STRING.value: LengthRule,
    ValidatorKind.NUMBER.value: NumberRule,
    ValidatorKind.ARRAY.value: LengthRule,
    ValidatorKind.EMAIL.value: EmailRule,
    ValidatorKind.PHONE.value: PhoneRule,
    ValidatorKind.ADDRESS.value: AddressRule,
    ValidatorKind.FILE.value: FileRule,
    ValidatorKind.RECAPTCHA.value: ReCaptchaRule,
}


def parse_rule(kind: str, raw: Any) -> Any:
    """Parse a raw validator value. Options objects become rule dataclasses."""
    option_type = _OPTION_TYPES.get(kind)
    if option_type is not None and isinstance(raw, Mapping):
        return option_type.from_dict(raw)
    return raw


# =============================================================================
# Validators Bag
# =============================================================================


class Validators:
    """Ordered, immutable mapping of validator kind to its options.

    Declaration order is preserved; instance validation reports errors in
    that order. Use ``with_rule`` / ``without`` to derive a modified copy.
    """

    def __init__(self, rules: Mapping[str, Any] | None = None):
        self._rules: dict[str, Any] = {}
        for kind, value in (rules or {}).items():
            key = kind.value if isinstance(kind, ValidatorKind) else kind
            self._rules[key] = value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Validators":
        if isinstance(data, Validators):
            return data
        return cls({kind: parse_rule(kind, raw) for kind, raw in data.items()})

    def to_dict(self) -> dict[str, Any]:
        return {
            kind: value.to_dict() if isinstance(value, RuleOptions) else value
            for kind, value in self._rules.items()
        }

    @property
    def required(self) -> bool | None:
        """Tri-state: None when unspecified, otherwise the declared value."""
        if ValidatorKind.REQUIRED.value not in self._rules:
            return None
        return self._rules[ValidatorKind.REQUIRED.value]

    def get(self, kind: str, default: Any = None) -> Any:
        return self._rules.get(_key(kind), default)

    def with_rule(self, kind: str, value: Any) -> "Validators":
        rules = dict(self._rules)
        rules[_key(kind)] = value
        return Validators(rules)

    def without(self, kind: str) -> "Validators":
        rules = dict(self._rules)
        rules.pop(_key(kind), None)
        return Validators(rules)

    def items(self) -> Iterator[tuple[str, Any]]:
        return iter(list(self._rules.items()))

    def __contains__(self, kind: object) -> bool:
        return _key(kind) in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Validators):
            return NotImplemented
        return self._rules == other._rules

    def __repr__(self) -> str:
        return f"Validators({self._rules!r})"


def _key(kind: Any) -> Any:
    return kind.value if isinstance(kind, ValidatorKind) else kind


def option_keys(options: RuleOptions) -> list[str]:
    """JSON keys declared on an options object, including unknown ones."""
    declared = [k for k, attr in options.key_map().items() if getattr(options, attr) is not None]
    return declared + list(options.extra)


def blank_secret(rule: ReCaptchaRule) -> ReCaptchaRule:
    return replace(rule, secret="", extra=dict(rule.extra))


__all__ = [
    "AddressRule",
    "EmailRule",
    "FileRule",
    "LengthRule",
    "NumberRule",
    "PhoneRule",
    "ReCaptchaRule",
    "RuleOptions",
    "ValidatorKind",
    "Validators",
    "blank_secret",
    "option_keys",
    "parse_rule",
]
