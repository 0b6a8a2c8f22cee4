"""Validation results and submission gating for the Business Application form.

Predicates here never touch the UI. They return a ValidationFailure (kind,
offending key, control to focus, message) or None, and the presentation
layer turns a failure into focus + a notification via ``notification_for``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Sequence

from app.errors import (  # noqa: F401 -- re-exported for callers
    FormEngineError,
    UnknownCategoryError,
    UnknownCollectionError,
    UnknownFieldError,
)
from app.field_schema import CollectionDefinition, FieldSchema, FieldStatus


# ---------------------------------------------------------------------------
# Failure taxonomy
# ---------------------------------------------------------------------------

CATEGORY_FOCUS = "businessType"


class FailureKind(str, Enum):
    MISSING_CATEGORY = "missing_category"
    MISSING = "missing"                  # InvalidField: required value absent
    FORMAT_MISMATCH = "format_mismatch"  # InvalidField: value fails its pattern
    EMPTY_COLLECTION = "empty_collection"
    DUPLICATE_ENTRY = "duplicate_entry"
    SUBMISSION_FAILED = "submission_failed"


@dataclass(frozen=True)
class ValidationFailure:
    """The single failure surfaced for one validation attempt."""

    kind: FailureKind
    key: str | None = None
    focus: str | None = None
    message: str = ""

    @property
    def is_invalid_field(self) -> bool:
        return self.kind in (FailureKind.MISSING, FailureKind.FORMAT_MISMATCH)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "key": self.key,
            "focus": self.focus,
            "message": self.message,
        }


class Severity(str, Enum):
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class Notification:
    """Fire-and-forget user message handed to the notification collaborator."""

    message: str
    severity: Severity = Severity.ERROR

    def to_dict(self) -> dict:
        return {"message": self.message, "severity": self.severity.value}


def notification_for(failure: ValidationFailure) -> Notification:
    return Notification(message=failure.message, severity=Severity.ERROR)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def check_field(schema: FieldSchema, value: str | None, focus: str | None = None) -> ValidationFailure | None:
    """Validate one value. Optional fields may be empty, never malformed."""
    status = schema.status(value)
    if status is FieldStatus.EMPTY:
        if schema.optional:
            return None
        return ValidationFailure(
            FailureKind.MISSING,
            key=schema.key,
            focus=focus or schema.key,
            message=schema.missing_message(),
        )
    if status is FieldStatus.INVALID:
        return ValidationFailure(
            FailureKind.FORMAT_MISMATCH,
            key=schema.key,
            focus=focus or schema.key,
            message=schema.format_message(),
        )
    return None


def check_draft(
    definition: CollectionDefinition,
    values: Mapping[str, str],
) -> ValidationFailure | None:
    """Validate an add-row.

    Every missing component is reported before any malformed one, so the
    user is sent to the first empty input even if an earlier one is wrong.
    """
    missing: ValidationFailure | None = None
    malformed: ValidationFailure | None = None
    for comp in definition.components:
        failure = check_field(comp, values.get(comp.key, ""), focus=definition.draft_field_id(comp.key))
        if failure is None:
            continue
        if failure.kind is FailureKind.MISSING and missing is None:
            missing = failure
        elif failure.kind is FailureKind.FORMAT_MISMATCH and malformed is None:
            malformed = failure
    return missing or malformed


def check_entry(
    definition: CollectionDefinition,
    index: int,
    values: Mapping[str, str],
) -> ValidationFailure | None:
    """Validate a committed entry (entries stay editable after being added)."""
    for comp in definition.components:
        failure = check_field(comp, values.get(comp.key, ""), focus=definition.entry_field_id(index, comp.key))
        if failure is not None:
            return ValidationFailure(
                failure.kind,
                key=definition.entry_field_id(index, comp.key),
                focus=failure.focus,
                message=failure.message,
            )
    return None


def validate_submission(
    category: str | None,
    fields: Iterable[FieldSchema],
    values: Mapping[str, str],
    collections: Sequence[tuple[CollectionDefinition, Sequence[Mapping[str, str]]]],
) -> ValidationFailure | None:
    """Gate a submission. Fail-fast: category, then fields, then collections.

    Args:
        category: The selected category key, or None.
        fields: Active category fields followed by the contact fields.
        values: Current field values keyed by field key.
        collections: (definition, entries) pairs in registry order.

    Returns:
        The first failure found, or None when the form may be submitted.
    """
    if not category:
        return ValidationFailure(
            FailureKind.MISSING_CATEGORY,
            focus=CATEGORY_FOCUS,
            message="Please choose a business type.",
        )

    for schema in fields:
        failure = check_field(schema, values.get(schema.key, ""))
        if failure is not None:
            return failure

    for definition, entries in collections:
        if definition.mandatory and not entries:
            first = definition.components[0].key if definition.components else ""
            return ValidationFailure(
                FailureKind.EMPTY_COLLECTION,
                key=definition.name,
                focus=definition.draft_field_id(first),
                message=f"Please add at least one {definition.item_label}.",
            )
        for index, entry in enumerate(entries):
            failure = check_entry(definition, index, entry)
            if failure is not None:
                return failure

    return None
