"""Repeatable collection editing (pharmacies, pharmacists).

A CollectionListEditor owns the committed entries of one collection plus
the draft add-row. Entries are positional: there is no stable id, and
removal is by index. Every draft component moves between EMPTY, INVALID
and VALID as it is edited; ``add`` commits the draft only when every
required component is VALID.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Mapping

from app.field_schema import CollectionDefinition, FieldSchema, FieldStatus
from app.validation import (
    FailureKind,
    ValidationFailure,
    check_draft,
    check_entry,
)

logger = logging.getLogger(__name__)

ENTER_KEY = "Enter"


@dataclass(frozen=True)
class CollectionPolicy:
    """Add-row behaviour that differs between deployments."""

    trim_whitespace: bool = False
    block_duplicates: bool = False
    add_on_enter: bool = True
    auto_advance: bool = False

    @classmethod
    def from_dict(cls, d: Mapping | None) -> CollectionPolicy:
        if not d or not isinstance(d, Mapping):
            if d:
                logger.warning("collection_policy_ignored type=%s", type(d).__name__)
            return cls()
        return cls(**{k: bool(v) for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass
class CollectionEntry:
    """One committed entry: component key -> value."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str:
        return self.values.get(key, "")

    def to_dict(self) -> dict[str, str]:
        return dict(self.values)


@dataclass(frozen=True)
class AddResult:
    ok: bool
    entry: CollectionEntry | None = None
    failure: ValidationFailure | None = None
    focus: str | None = None


class CollectionEntryEditor:
    """One row of a collection: per-component validity and removal."""

    def __init__(self, owner: CollectionListEditor, index: int) -> None:
        self._owner = owner
        self.index = index

    @property
    def definition(self) -> CollectionDefinition:
        return self._owner.definition

    @property
    def entry(self) -> CollectionEntry:
        return self._owner.entries[self.index]

    def status(self, key: str) -> FieldStatus:
        return self.definition.component(key).status(self.entry.get(key))

    def statuses(self) -> dict[str, FieldStatus]:
        return {comp.key: comp.status(self.entry.get(comp.key)) for comp in self.definition.components}

    def edit(self, key: str, value: str) -> FieldStatus:
        """Change a component in place and re-test it. Never blocks."""
        comp = self.definition.component(key)
        self.entry.values[key] = value
        return comp.status(value)

    def failure(self) -> ValidationFailure | None:
        return check_entry(self.definition, self.index, self.entry.values)

    def remove(self) -> CollectionEntry | None:
        return self._owner.remove(self.index)


class CollectionListEditor:
    """Entries of one collection plus its draft add-row."""

    def __init__(
        self,
        definition: CollectionDefinition,
        entries: list[Mapping[str, str]] | None = None,
        policy: CollectionPolicy | None = None,
    ) -> None:
        self.definition = definition
        self.policy = policy or CollectionPolicy()
        self.entries: list[CollectionEntry] = [
            CollectionEntry({k: str(v) for k, v in e.items() if k in definition.component_keys()})
            for e in entries or []
        ]
        self.draft: dict[str, str] = {}
        self.focus: str | None = None
        self.clear_draft()

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def name(self) -> str:
        return self.definition.name

    # -- Draft ----------------------------------------------------------------

    def _normalize(self, value: str) -> str:
        return value.strip() if self.policy.trim_whitespace else value

    def draft_status(self, key: str) -> FieldStatus:
        comp = self.definition.component(key)
        return comp.status(self._normalize(self.draft.get(key, "")))

    def draft_statuses(self) -> dict[str, FieldStatus]:
        return {comp.key: self.draft_status(comp.key) for comp in self.definition.components}

    def _draft_ready(self, comp: FieldSchema) -> bool:
        status = self.draft_status(comp.key)
        if comp.optional:
            return status is not FieldStatus.INVALID
        return status is FieldStatus.VALID

    @property
    def can_add(self) -> bool:
        return all(self._draft_ready(comp) for comp in self.definition.components)

    def edit_draft(self, key: str, value: str) -> FieldStatus:
        """Update one draft component and return its new state."""
        self.definition.component(key)
        self.draft[key] = value
        status = self.draft_status(key)
        if self.policy.auto_advance and status is FieldStatus.VALID:
            keys = self.definition.component_keys()
            position = keys.index(key)
            if position + 1 < len(keys):
                self.focus = self.definition.draft_field_id(keys[position + 1])
        return status

    def clear_draft(self) -> None:
        self.draft = {key: "" for key in self.definition.component_keys()}

    def _first_draft_focus(self) -> str | None:
        keys = self.definition.component_keys()
        return self.definition.draft_field_id(keys[0]) if keys else None

    # -- Add / remove -----------------------------------------------------------

    def add(self, values: Mapping[str, str] | None = None) -> AddResult:
        """Commit the draft as a new entry at the end of the list.

        Args:
            values: Optional draft values to apply before validating.

        Returns:
            AddResult. On failure the list and the draft are untouched and
            ``focus`` names the offending draft input.

        Raises:
            UnknownFieldError: if *values* names a key that is not a
                component; nothing is changed.
        """
        if values is not None:
            for key in values:
                self.definition.component(key)
            self.draft.update(values)

        candidate = {key: self._normalize(self.draft.get(key, "")) for key in self.definition.component_keys()}

        failure = check_draft(self.definition, candidate)
        if failure is None and self.policy.block_duplicates:
            if any(e.values == candidate for e in self.entries):
                failure = ValidationFailure(
                    FailureKind.DUPLICATE_ENTRY,
                    key=self.definition.name,
                    focus=self._first_draft_focus(),
                    message=f"This {self.definition.item_label} has already been added.",
                )
        if failure is not None:
            self.focus = failure.focus
            logger.debug("collection_add_rejected collection=%s kind=%s key=%s",
                         self.name, failure.kind.value, failure.key)
            return AddResult(ok=False, failure=failure, focus=failure.focus)

        entry = CollectionEntry(candidate)
        self.entries.append(entry)
        self.clear_draft()
        self.focus = self._first_draft_focus()
        logger.info("collection_add collection=%s size=%s", self.name, len(self.entries))
        return AddResult(ok=True, entry=entry, focus=self.focus)

    def handle_key(self, key: str) -> AddResult | None:
        """Keyboard shortcut in the add-row: Enter adds when enabled."""
        if key == ENTER_KEY and self.policy.add_on_enter:
            return self.add()
        return None

    def remove(self, index: int) -> CollectionEntry | None:
        """Delete the entry at *index*. Out-of-range indexes are ignored."""
        if not 0 <= index < len(self.entries):
            logger.debug("collection_remove_ignored collection=%s index=%s", self.name, index)
            return None
        entry = self.entries.pop(index)
        logger.info("collection_remove collection=%s index=%s size=%s", self.name, index, len(self.entries))
        return entry

    def reset(self) -> None:
        self.entries.clear()
        self.clear_draft()
        self.focus = None

    # -- Views ------------------------------------------------------------------

    def entry_editors(self) -> Iterator[CollectionEntryEditor]:
        for index in range(len(self.entries)):
            yield CollectionEntryEditor(self, index)

    def serialize(self) -> list[dict[str, str]]:
        return [e.to_dict() for e in self.entries]
