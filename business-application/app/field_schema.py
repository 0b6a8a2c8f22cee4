"""Declarative field schemas for the Business Application form.

A FieldSchema describes one input: its key, label, value kind, format
pattern and optionality. A CollectionDefinition groups the component
schemas of one repeatable list (pharmacies, pharmacists).

Patterns are always matched against the whole value, the same way a
browser applies an input's ``pattern`` attribute.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from functools import lru_cache

from app.errors import UnknownFieldError


class FieldKind(str, Enum):
    """Value kind of a field. Drives the native constraint and input type."""

    TEXT = "text"
    EMAIL = "email"
    TELEPHONE = "telephone"
    ADDRESS = "address"
    STRUCTURED = "structured"


class FieldStatus(str, Enum):
    """Validity of a single value: no input, bad format, or acceptable."""

    EMPTY = "empty"
    INVALID = "invalid"
    VALID = "valid"


# Native format constraints implied by the kind, as browsers apply them to
# <input type="email"> (a dotless domain such as "a@localhost" is valid)
_NATIVE_PATTERNS: dict[FieldKind, str] = {
    FieldKind.EMAIL: (
        r"[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
        r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
        r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*"
    ),
}


@lru_cache(maxsize=None)
def compile_pattern(pattern: str) -> re.Pattern:
    """Compile *pattern* once; callers use ``fullmatch`` for anchoring."""
    return re.compile(pattern)


def matches_pattern(pattern: str, value: str) -> bool:
    """True when *pattern* matches all of *value*, never just a substring."""
    return compile_pattern(pattern).fullmatch(value) is not None


def is_blank(value: str | None) -> bool:
    return value is None or not str(value).strip()


@dataclass(frozen=True)
class FieldSchema:
    """A single input field."""

    key: str
    label: str
    kind: FieldKind = FieldKind.TEXT
    pattern: str | None = None
    placeholder: str | None = None
    optional: bool = False
    max_length: int | None = None
    format_hint: str = ""  # shown instead of the generic format message

    @property
    def required(self) -> bool:
        return not self.optional

    def matches(self, value: str) -> bool:
        """Check *value* against every format constraint of this field."""
        if self.max_length is not None and len(value) > self.max_length:
            return False
        native = _NATIVE_PATTERNS.get(self.kind)
        if native and not matches_pattern(native, value):
            return False
        if self.pattern and not matches_pattern(self.pattern, value):
            return False
        return True

    def status(self, value: str | None) -> FieldStatus:
        if is_blank(value):
            return FieldStatus.EMPTY
        return FieldStatus.VALID if self.matches(str(value)) else FieldStatus.INVALID

    def format_message(self) -> str:
        return self.format_hint or f"{self.label} format is invalid."

    def missing_message(self) -> str:
        return f"{self.label} is required."

    def to_dict(self) -> dict:
        d = asdict(self)
        d["kind"] = self.kind.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> FieldSchema:
        data = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        if "kind" in data:
            data["kind"] = FieldKind(data["kind"])
        return cls(**data)


@dataclass(frozen=True)
class CollectionDefinition:
    """A named repeatable list of structured entries."""

    name: str
    label: str
    item_label: str
    components: tuple[FieldSchema, ...] = field(default_factory=tuple)
    mandatory: bool = False
    add_label: str = "Add"

    def component(self, key: str) -> FieldSchema:
        for comp in self.components:
            if comp.key == key:
                return comp
        raise UnknownFieldError(key)

    def component_keys(self) -> list[str]:
        return [c.key for c in self.components]

    def draft_field_id(self, key: str) -> str:
        """Focus/control id of a component input in the add-row."""
        return f"{self.name}.draft.{key}"

    def entry_field_id(self, index: int, key: str) -> str:
        """Focus/control id of a component input in an existing entry."""
        return f"{self.name}[{index}].{key}"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "label": self.label,
            "item_label": self.item_label,
            "mandatory": self.mandatory,
            "add_label": self.add_label,
            "components": [c.to_dict() for c in self.components],
        }
