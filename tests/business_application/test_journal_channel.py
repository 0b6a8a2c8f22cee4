"""Tests for business-application/app/journal_channel.py — HTTP submission."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from app.journal_channel import JournalChannel
from app.schema import Payload, Submission


def _response(data=None, status=200):
    resp = MagicMock()
    resp.status_code = status
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Server Error")
    resp.json.return_value = data
    return resp


@pytest.fixture()
def submission():
    return Submission(Payload(category="soleTrader", fields={"name": "Acme"}, collections={"pharmacies": [{"ods": "FA123"}]}))


class TestPost:
    def test_posts_typed_payload(self, submission):
        channel = JournalChannel(url="http://journal.test/api", timeout=5, handle="h")
        with patch("app.journal_channel.requests.post", return_value=_response({"reply": [{"id": 1}]})) as mock_post:
            result = channel.post(submission)

        mock_post.assert_called_once_with(
            "http://journal.test/api",
            json={"type": "business-application", "data": submission.payload.to_dict()},
            timeout=5,
        )
        assert result.ok
        assert result.handle == "h"

    def test_uses_configured_defaults(self):
        channel = JournalChannel()
        assert channel.url == "http://localhost:8600/api/journal"
        assert channel.timeout == 30.0

    def test_empty_reply_is_failure(self, submission):
        with patch("app.journal_channel.requests.post", return_value=_response({"reply": []})):
            result = JournalChannel(url="http://j").post(submission)
        assert not result.ok

    def test_error_field_is_failure(self, submission):
        with patch("app.journal_channel.requests.post", return_value=_response({"reply": ["x"], "error": "nope"})):
            result = JournalChannel(url="http://j").post(submission)
        assert not result.ok
        assert result.error == "nope"

    def test_http_error(self, submission):
        with patch("app.journal_channel.requests.post", return_value=_response(status=500)):
            result = JournalChannel(url="http://j").post(submission)
        assert not result.ok
        assert "500" in result.error

    def test_connection_error(self, submission):
        with patch("app.journal_channel.requests.post", side_effect=requests.ConnectionError("refused")):
            result = JournalChannel(url="http://j").post(submission)
        assert not result.ok

    def test_invalid_json(self, submission):
        resp = requests.Response()
        resp.status_code = 200
        resp.encoding = "utf-8"
        resp._content = b"<html>not json</html>"
        with patch("app.journal_channel.requests.post", return_value=resp):
            result = JournalChannel(url="http://j").post(submission)
        assert not result.ok
        assert result.error == "Invalid response from journal"

    def test_non_object_body(self, submission):
        with patch("app.journal_channel.requests.post", return_value=_response(["x"])):
            result = JournalChannel(url="http://j").post(submission)
        assert result.error == "Invalid response from journal"


class TestSendAndDetach:
    def test_send_invokes_callback(self, submission):
        received = []
        with patch("app.journal_channel.requests.post", return_value=_response({"reply": ["ok"]})):
            JournalChannel(url="http://j").send(submission, received.append)
        assert len(received) == 1
        assert received[0].ok

    def test_detach_forwards_handle(self):
        detached = []
        JournalChannel(url="http://j", on_detach=detached.append).detach("h")
        assert detached == ["h"]

    def test_detach_without_listener(self):
        JournalChannel(url="http://j").detach("h")
