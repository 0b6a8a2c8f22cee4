"""Tests for business-application/app/schema.py."""

from __future__ import annotations

from app.schema import Payload, PriorValues, Submission, SubmissionResult


class TestPriorValues:
    def test_from_dict_coerces_values(self):
        prior = PriorValues.from_dict({
            "id": "",
            "category": "soleTrader",
            "fields": {"name": "Acme", "telephone": 7123456789, "invoiceEmail": None},
            "collections": {"pharmacies": [{"ods": "FA123"}, "junk"], "pharmacists": None},
        })
        assert prior.id is None
        assert prior.fields == {"name": "Acme", "telephone": "7123456789", "invoiceEmail": ""}
        assert prior.collections == {"pharmacies": [{"ods": "FA123"}], "pharmacists": []}

    def test_from_empty_dict(self):
        prior = PriorValues.from_dict({})
        assert prior.category is None
        assert prior.fields == {}

    def test_to_dict(self):
        prior = PriorValues(category="partnership", fields={"name": "A"}, id="x")
        assert PriorValues.from_dict(prior.to_dict()) == prior


class TestSubmission:
    def test_new_application(self):
        submission = Submission(Payload(category="soleTrader"))
        assert submission.kind == "business-application"
        assert not submission.is_accept
        assert submission.to_dict() == {
            "type": "business-application",
            "data": {"category": "soleTrader", "fields": {}, "collections": {}},
        }

    def test_accept(self):
        submission = Submission(Payload(category="soleTrader", id="app-1"))
        assert submission.kind == "business-accept"
        assert submission.to_dict()["data"]["id"] == "app-1"


class TestSubmissionResult:
    def test_ok_requires_reply_and_no_error(self):
        assert SubmissionResult(reply=["x"]).ok
        assert not SubmissionResult().ok
        assert not SubmissionResult(reply=["x"], error="e").ok

    def test_from_dict(self):
        result = SubmissionResult.from_dict({"reply": {"id": 1}}, handle="h")
        assert result.reply == [{"id": 1}]
        assert result.handle == "h"
        assert SubmissionResult.from_dict({"reply": None, "error": ""}).error is None
