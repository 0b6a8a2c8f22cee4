"""Render field schemas into markup-agnostic field views."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Mapping

from app.collection_editor import CollectionListEditor
from app.field_schema import FieldSchema

# Floating-label layouts collapse on an empty placeholder
DEFAULT_PLACEHOLDER = " "

_INPUT_TYPES = {
    "text": "text",
    "email": "email",
    "telephone": "tel",
    "address": "text",
    "structured": "text",
}


@dataclass(frozen=True)
class FieldView:
    id: str
    label: str
    kind: str
    input_type: str
    value: str
    required: bool
    pattern: str | None
    placeholder: str
    max_length: int | None
    status: str

    def to_dict(self) -> dict:
        return asdict(self)


def render_field(schema: FieldSchema, value: str = "", field_id: str | None = None) -> FieldView:
    return FieldView(
        id=field_id or schema.key,
        label=schema.label,
        kind=schema.kind.value,
        input_type=_INPUT_TYPES.get(schema.kind.value, "text"),
        value=value,
        required=not schema.optional,
        pattern=schema.pattern,
        placeholder=schema.placeholder if schema.placeholder is not None else DEFAULT_PLACEHOLDER,
        max_length=schema.max_length,
        status=schema.status(value).value,
    )


def render_fields(
    schemas: Iterable[FieldSchema],
    prior_values: Mapping[str, str] | None = None,
) -> list[FieldView]:
    """Render schemas in declared order, filling values from *prior_values*."""
    values = prior_values or {}
    views: list[FieldView] = []
    for schema in schemas:
        value = values.get(schema.key)
        views.append(render_field(schema, "" if value is None else str(value)))
    return views


def render_collection(editor: CollectionListEditor) -> dict:
    """Render one collection: committed rows, the add-row and its state."""
    definition = editor.definition
    rows = []
    for row in editor.entry_editors():
        rows.append({
            "index": row.index,
            "fields": [
                render_field(comp, row.entry.get(comp.key), definition.entry_field_id(row.index, comp.key)).to_dict()
                for comp in definition.components
            ],
        })
    return {
        "name": definition.name,
        "label": definition.label,
        "add_label": definition.add_label,
        "mandatory": definition.mandatory,
        "entries": rows,
        "draft": [
            render_field(comp, editor.draft.get(comp.key, ""), definition.draft_field_id(comp.key)).to_dict()
            for comp in definition.components
        ],
        "can_add": editor.can_add,
    }
