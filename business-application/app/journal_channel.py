"""Submission channel that posts applications to the journal service.

The journal accepts ``{"type": ..., "data": ...}`` JSON and answers with
``{"reply": [...], "error": ...}``. An empty reply counts as a failure,
the same as an explicit error or a transport problem.

Settings come from the tool config, overridable by environment:
    BUSINESS_JOURNAL_URL, BUSINESS_JOURNAL_TIMEOUT
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import requests

from app.form_definitions import journal_timeout, journal_url
from app.schema import Submission, SubmissionResult

logger = logging.getLogger(__name__)


class JournalChannel:
    """Synchronous HTTP transport for submissions."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        handle: Any = None,
        on_detach: Callable[[Any], None] | None = None,
    ) -> None:
        self.url = url or journal_url()
        self.timeout = timeout if timeout is not None else journal_timeout()
        self.handle = handle
        self._on_detach = on_detach

    def post(self, submission: Submission) -> SubmissionResult:
        """Send one submission and translate the response into a result."""
        try:
            resp = requests.post(self.url, json=submission.to_dict(), timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        # requests.JSONDecodeError is both a ValueError and a RequestException
        except ValueError as exc:
            logger.warning("journal_bad_response url=%s error=%s", self.url, exc)
            return SubmissionResult(error="Invalid response from journal", handle=self.handle)
        except requests.RequestException as exc:
            logger.warning("journal_post_failed url=%s kind=%s error=%s", self.url, submission.kind, exc)
            return SubmissionResult(error=str(exc), handle=self.handle)

        if not isinstance(data, dict):
            return SubmissionResult(error="Invalid response from journal", handle=self.handle)
        result = SubmissionResult.from_dict(data, handle=self.handle)
        logger.info("journal_post kind=%s ok=%s", submission.kind, result.ok)
        return result

    def send(self, submission: Submission, callback: Callable[[SubmissionResult], None]) -> None:
        callback(self.post(submission))

    def detach(self, handle: Any) -> None:
        if self._on_detach is not None:
            self._on_detach(handle)
