"""FastAPI backend for the Business Application tool.

Provides endpoints for listing business types and their fields, checking
collection drafts, validating a complete application, and submitting it
to the journal service.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from app.collection_editor import CollectionListEditor
from app.field_renderer import render_fields
from app.form_controller import FormController
from app.form_definitions import (
    COLLECTIONS,
    CONTACT_FIELDS,
    get_collection,
    list_categories,
    load_collection_policy,
    resolve,
)
from app.journal_channel import JournalChannel
from app.schema import PriorValues
from app.validation import (
    FormEngineError,
    UnknownCategoryError,
    UnknownCollectionError,
    UnknownFieldError,
)

app = FastAPI(title="Business Application API")


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------

class DraftRequest(BaseModel):
    """Pending add-row values for one collection."""

    values: dict[str, str] = Field(default_factory=dict)


class ApplicationRequest(BaseModel):
    """A complete form state, as the client holds it."""

    id: str | None = None
    category: str | None = None
    fields: dict[str, str] = Field(default_factory=dict)
    collections: dict[str, list[dict[str, str]]] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def get_channel() -> JournalChannel:
    return JournalChannel()


def _raise_for(exc: FormEngineError) -> None:
    if isinstance(exc, (UnknownCategoryError, UnknownCollectionError)):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, UnknownFieldError):
        raise HTTPException(status_code=422, detail=str(exc))
    raise HTTPException(status_code=400, detail=str(exc))


def _controller_for(request: ApplicationRequest, notify=None) -> FormController:
    prior = PriorValues.from_dict(request.model_dump())
    try:
        return FormController(get_channel(), notify=notify, prior=prior)
    except FormEngineError as exc:
        _raise_for(exc)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/api/categories")
def list_business_types() -> list[dict[str, Any]]:
    """List all business types with their rendered fields."""
    return [
        {
            "key": definition.key,
            "name": definition.display_name,
            "fields": [v.to_dict() for v in render_fields(definition.schemas())],
        }
        for definition in list_categories()
    ]


@app.get("/api/categories/{key}/fields")
def get_category_fields(key: str) -> dict[str, Any]:
    """Rendered fields for one business type."""
    try:
        definition = resolve(key)
    except UnknownCategoryError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {
        "key": definition.key,
        "name": definition.display_name,
        "fields": [v.to_dict() for v in render_fields(definition.schemas())],
    }


@app.get("/api/contact-fields")
def get_contact_fields() -> list[dict[str, Any]]:
    return [v.to_dict() for v in render_fields(CONTACT_FIELDS)]


@app.get("/api/collections")
def list_collections() -> list[dict[str, Any]]:
    return [definition.to_dict() for definition in COLLECTIONS]


@app.post("/api/collections/{name}/draft")
def check_collection_draft(name: str, request: DraftRequest) -> dict[str, Any]:
    """Report per-component draft state and whether the draft can be added.

    Nothing is stored: the draft is evaluated against an empty list.
    """
    try:
        definition = get_collection(name)
    except UnknownCollectionError as exc:
        raise HTTPException(status_code=404, detail=str(exc))

    editor = CollectionListEditor(definition, policy=load_collection_policy())
    unknown = [k for k in request.values if k not in definition.component_keys()]
    if unknown:
        raise HTTPException(status_code=422, detail=f"Unknown components: {', '.join(unknown)}")
    for key, value in request.values.items():
        editor.edit_draft(key, value)

    statuses = {k: s.value for k, s in editor.draft_statuses().items()}
    can_add = editor.can_add
    result = editor.add()
    return {
        "collection": name,
        "statuses": statuses,
        "can_add": can_add,
        "failure": result.failure.to_dict() if result.failure else None,
        "entry": result.entry.to_dict() if result.entry else None,
    }


@app.post("/api/applications/validate")
def validate_application(request: ApplicationRequest) -> dict[str, Any]:
    """Run the submission gate over a posted form state.

    Returns the first failure (category, then fields, then collections),
    or the payload that would be submitted.
    """
    controller = _controller_for(request)
    failure = controller.validate()
    return {
        "ok": failure is None,
        "failure": failure.to_dict() if failure else None,
        "payload": controller.build_payload().to_dict() if failure is None else None,
    }


@app.post("/api/applications")
def submit_application(request: ApplicationRequest) -> dict[str, Any]:
    """Validate and submit an application to the journal service."""
    notifications: list[dict] = []
    controller = _controller_for(request, notify=lambda n: notifications.append(n.to_dict()))

    attempt = controller.submit()
    return {
        "status": attempt.status.value,
        "state": controller.state.value,
        "failure": attempt.failure.to_dict() if attempt.failure else None,
        "payload": attempt.payload.to_dict() if attempt.payload else None,
        "confirmation": controller.confirmation,
        "notifications": notifications,
    }
