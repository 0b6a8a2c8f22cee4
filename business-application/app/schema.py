"""Data models exchanged with the form's collaborators.

PriorValues comes in from whoever pre-populates an edit/accept flow,
Submission goes out to the submission channel, and SubmissionResult comes
back. All models support JSON serialization via to_dict/from_dict.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

APPLICATION_KIND = "business-application"
ACCEPT_KIND = "business-accept"


@dataclass
class PriorValues:
    """Previously captured form state used to pre-populate the form."""

    category: str | None = None
    fields: dict[str, str] = field(default_factory=dict)
    collections: dict[str, list[dict[str, str]]] = field(default_factory=dict)
    id: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "fields": dict(self.fields),
            "collections": {k: [dict(e) for e in v] for k, v in self.collections.items()},
        }

    @classmethod
    def from_dict(cls, d: dict) -> PriorValues:
        collections: dict[str, list[dict[str, str]]] = {}
        for name, entries in (d.get("collections") or {}).items():
            rows = []
            for entry in entries or []:
                if isinstance(entry, dict):
                    rows.append({k: "" if v is None else str(v) for k, v in entry.items()})
            collections[name] = rows
        fields = {k: "" if v is None else str(v) for k, v in (d.get("fields") or {}).items()}
        return cls(
            category=d.get("category") or None,
            fields=fields,
            collections=collections,
            id=d.get("id") or None,
        )


@dataclass
class Payload:
    """The assembled application, ready for the submission channel."""

    category: str
    fields: dict[str, str] = field(default_factory=dict)
    collections: dict[str, list[dict[str, str]]] = field(default_factory=dict)
    id: str | None = None

    def to_dict(self) -> dict:
        d: dict = {
            "category": self.category,
            "fields": dict(self.fields),
            "collections": {k: [dict(e) for e in v] for k, v in self.collections.items()},
        }
        if self.id:
            d["id"] = self.id
        return d


@dataclass
class Submission:
    """A payload plus whether it is a new application or an accept/edit."""

    payload: Payload

    @property
    def kind(self) -> str:
        return ACCEPT_KIND if self.payload.id else APPLICATION_KIND

    @property
    def is_accept(self) -> bool:
        return bool(self.payload.id)

    def to_dict(self) -> dict:
        return {"type": self.kind, "data": self.payload.to_dict()}


@dataclass
class SubmissionResult:
    """What the submission channel reports back."""

    reply: list = field(default_factory=list)
    error: str | None = None
    handle: Any = None

    @property
    def ok(self) -> bool:
        return bool(self.reply) and not self.error

    @classmethod
    def from_dict(cls, d: dict, handle: Any = None) -> SubmissionResult:
        reply = d.get("reply")
        if reply is None:
            reply = []
        elif not isinstance(reply, list):
            reply = [reply]
        error = d.get("error")
        return cls(reply=reply, error=str(error) if error else None, handle=handle)
