"""Top-level controller for the Business Application form.

Owns the selected business type, the field values, one
CollectionListEditor per collection, and the submission state machine:

    EDITING -> SUBMITTING -> SUCCEEDED   (terminal, form state discarded)
                          -> FAILED      (still interactive, nothing cleared)

Collaborators are injected at construction: the submission channel that
transports the payload, an optional notifier for user messages, and
optional prior values for the accept/edit flow.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Protocol

from app.collection_editor import (
    AddResult,
    CollectionEntry,
    CollectionEntryEditor,
    CollectionListEditor,
    CollectionPolicy,
)
from app.field_renderer import render_collection, render_fields
from app.field_schema import FieldSchema, FieldStatus
from app.form_definitions import (
    COLLECTIONS,
    CONTACT_FIELDS,
    CategoryDefinition,
    get_collection,
    list_categories,
    load_collection_policy,
    resolve,
)
from app.schema import Payload, PriorValues, Submission, SubmissionResult
from app.validation import (
    FailureKind,
    Notification,
    Severity,
    UnknownCollectionError,
    UnknownFieldError,
    ValidationFailure,
    notification_for,
    validate_submission,
)

logger = logging.getLogger(__name__)

CONFIRMATION_MESSAGE = "Your application has been posted. Our team will contact you with the next steps"
SENT_MESSAGE = "Sent"
FAILED_MESSAGE = "Your application could not be sent. Please try again."


class ControllerState(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class AttemptStatus(str, Enum):
    SENT = "sent"          # payload handed to the channel
    REJECTED = "rejected"  # gating validation failed
    IGNORED = "ignored"    # already submitting, or already succeeded


@dataclass(frozen=True)
class SubmitAttempt:
    status: AttemptStatus
    failure: ValidationFailure | None = None
    payload: Payload | None = None


ResultCallback = Callable[[SubmissionResult], None]
Notifier = Callable[[Notification], None]


class SubmissionChannel(Protocol):
    def send(self, submission: Submission, callback: ResultCallback) -> None: ...

    def detach(self, handle: Any) -> None: ...


class FormController:
    """Business Application form state and submission orchestration."""

    def __init__(
        self,
        channel: SubmissionChannel,
        notify: Notifier | None = None,
        prior: PriorValues | None = None,
        policy: CollectionPolicy | None = None,
    ) -> None:
        self._channel = channel
        self._notify = notify
        self.policy = policy or load_collection_policy()
        self.state = ControllerState.EDITING
        self.category: CategoryDefinition | None = None
        self.values: dict[str, str] = {f.key: "" for f in CONTACT_FIELDS}
        self.collections: dict[str, CollectionListEditor] = {
            d.name: CollectionListEditor(d, policy=self.policy) for d in COLLECTIONS
        }
        self.identity: str | None = None
        self.focus: str | None = None
        self.last_failure: ValidationFailure | None = None
        self.confirmation: str | None = None
        if prior is not None:
            self._load(prior)

    def _load(self, prior: PriorValues) -> None:
        self.identity = prior.id
        if prior.category:
            self._activate(resolve(prior.category))
        active = {f.key for f in self.active_fields()}
        for key, value in prior.fields.items():
            if key in active:
                self.values[key] = value
        for name, entries in prior.collections.items():
            definition = get_collection(name)
            self.collections[name] = CollectionListEditor(definition, entries, self.policy)

    # -- Mode -------------------------------------------------------------------

    @property
    def is_accept(self) -> bool:
        return bool(self.identity)

    @property
    def submit_label(self) -> str:
        return "Accept" if self.is_accept else "Apply"

    @property
    def detached(self) -> bool:
        return self.state is ControllerState.SUCCEEDED

    def _accepting_input(self, action: str) -> bool:
        if self.detached:
            logger.debug("input_ignored action=%s state=%s", action, self.state.value)
            return False
        if self.state is ControllerState.FAILED:
            self.state = ControllerState.EDITING
        return True

    # -- Category and fields ----------------------------------------------------

    def _activate(self, definition: CategoryDefinition) -> None:
        if self.category is not None:
            for key in self.category.fields:
                self.values.pop(key, None)
        self.category = definition
        for key in definition.fields:
            self.values[key] = ""

    def select_category(self, key: str) -> CategoryDefinition | None:
        """Switch business type. Values of the previous type are discarded.

        Raises:
            UnknownCategoryError: if *key* is not a registered business type.
        """
        if not self._accepting_input("select_category"):
            return None
        definition = resolve(key)
        if self.category is definition:
            return definition
        previous = self.category.key if self.category else None
        self._activate(definition)
        logger.info("category_selected from=%s to=%s", previous, definition.key)
        return definition

    def active_fields(self) -> list[FieldSchema]:
        fields = self.category.schemas() if self.category else []
        return fields + list(CONTACT_FIELDS)

    def field_schema(self, key: str) -> FieldSchema:
        for schema in self.active_fields():
            if schema.key == key:
                return schema
        raise UnknownFieldError(key)

    def set_field(self, key: str, value: str) -> FieldStatus | None:
        if not self._accepting_input("set_field"):
            return None
        schema = self.field_schema(key)
        self.values[key] = value
        return schema.status(value)

    def field_status(self, key: str) -> FieldStatus:
        return self.field_schema(key).status(self.values.get(key, ""))

    # -- Collections ------------------------------------------------------------

    def collection(self, name: str) -> CollectionListEditor:
        try:
            return self.collections[name]
        except KeyError:
            raise UnknownCollectionError(name) from None

    def edit_draft(self, name: str, key: str, value: str) -> FieldStatus | None:
        if not self._accepting_input("edit_draft"):
            return None
        editor = self.collection(name)
        before = editor.focus
        status = editor.edit_draft(key, value)
        if editor.focus != before:
            self.focus = editor.focus
        return status

    def add_entry(self, name: str, values: Mapping[str, str] | None = None) -> AddResult | None:
        """Commit a collection's draft, reporting the failure if it is rejected."""
        if not self._accepting_input("add_entry"):
            return None
        result = self.collection(name).add(values)
        if result.failure is not None:
            self._report(result.failure)
        else:
            self.focus = result.focus
        return result

    def press_key(self, name: str, key: str) -> AddResult | None:
        if not self._accepting_input("press_key"):
            return None
        result = self.collection(name).handle_key(key)
        if result is not None:
            if result.failure is not None:
                self._report(result.failure)
            else:
                self.focus = result.focus
        return result

    def edit_entry(self, name: str, index: int, key: str, value: str) -> FieldStatus | None:
        if not self._accepting_input("edit_entry"):
            return None
        editor = self.collection(name)
        if not 0 <= index < len(editor):
            return None
        return CollectionEntryEditor(editor, index).edit(key, value)

    def remove_entry(self, name: str, index: int) -> CollectionEntry | None:
        if not self._accepting_input("remove_entry"):
            return None
        return self.collection(name).remove(index)

    # -- Validation and submission ---------------------------------------------

    def validate(self) -> ValidationFailure | None:
        """Run the submission gate without side effects."""
        return validate_submission(
            self.category.key if self.category else None,
            self.active_fields(),
            self.values,
            [(editor.definition, editor.serialize()) for editor in self.collections.values()],
        )

    def build_payload(self) -> Payload:
        return Payload(
            category=self.category.key if self.category else "",
            fields={f.key: self.values.get(f.key, "") for f in self.active_fields()},
            collections={name: editor.serialize() for name, editor in self.collections.items()},
            id=self.identity,
        )

    def _emit(self, notification: Notification) -> None:
        if self._notify is not None:
            self._notify(notification)

    def _report(self, failure: ValidationFailure) -> None:
        self.focus = failure.focus
        self.last_failure = failure
        self._emit(notification_for(failure))

    def submit(self) -> SubmitAttempt:
        """Validate and hand the payload to the submission channel.

        Only one submission may be in flight; calls made while SUBMITTING
        or after SUCCEEDED are ignored. Validation always restarts from the
        category check.
        """
        if self.state in (ControllerState.SUBMITTING, ControllerState.SUCCEEDED):
            logger.info("submit_ignored state=%s", self.state.value)
            return SubmitAttempt(AttemptStatus.IGNORED)

        failure = self.validate()
        if failure is not None:
            self.state = ControllerState.EDITING
            self._report(failure)
            logger.info("submit_rejected kind=%s key=%s", failure.kind.value, failure.key)
            return SubmitAttempt(AttemptStatus.REJECTED, failure=failure)

        payload = self.build_payload()
        submission = Submission(payload)
        self.state = ControllerState.SUBMITTING
        self.focus = None
        self.last_failure = None
        logger.info("submit_sent kind=%s category=%s", submission.kind, payload.category)
        try:
            self._channel.send(submission, self.on_submission_result)
        except Exception as exc:
            logger.warning("submission_send_failed error=%s", exc, exc_info=True)
            self.on_submission_result(SubmissionResult(error=str(exc)))
        return SubmitAttempt(AttemptStatus.SENT, payload=payload)

    def on_submission_result(self, result: SubmissionResult) -> None:
        """Callback from the submission channel."""
        if self.state is not ControllerState.SUBMITTING:
            logger.warning("submission_result_ignored state=%s", self.state.value)
            return
        if not result.ok:
            self.state = ControllerState.FAILED
            self.last_failure = ValidationFailure(
                FailureKind.SUBMISSION_FAILED,
                message=FAILED_MESSAGE,
            )
            logger.warning("submission_failed error=%s", result.error)
            self._emit(Notification(FAILED_MESSAGE, Severity.ERROR))
            return

        self.state = ControllerState.SUCCEEDED
        self.confirmation = CONFIRMATION_MESSAGE
        self._discard()
        logger.info("submission_succeeded")
        self._emit(Notification(SENT_MESSAGE, Severity.SUCCESS))
        self._channel.detach(result.handle)

    def _discard(self) -> None:
        self.category = None
        self.values = {}
        for editor in self.collections.values():
            editor.reset()
        self.focus = None
        self.last_failure = None

    # -- View -------------------------------------------------------------------

    def view(self) -> dict:
        """Derive the full renderable form (or the confirmation)."""
        if self.detached:
            return {"state": self.state.value, "confirmation": self.confirmation}
        selected = self.category.key if self.category else None
        return {
            "state": self.state.value,
            "submit_label": self.submit_label,
            "focus": self.focus,
            "error": self.last_failure.to_dict() if self.last_failure else None,
            "categories": [
                {"key": c.key, "name": c.display_name, "selected": c.key == selected}
                for c in list_categories()
            ],
            "category": selected,
            "fields": [v.to_dict() for v in render_fields(self.category.schemas(), self.values)] if self.category else [],
            "contact": [v.to_dict() for v in render_fields(CONTACT_FIELDS, self.values)],
            "collections": [render_collection(editor) for editor in self.collections.values()],
        }
