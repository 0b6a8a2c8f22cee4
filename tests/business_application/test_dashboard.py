"""Tests for business-application/app/dashboard.py — Streamlit page."""

from __future__ import annotations

from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

_DASHBOARD = str(Path(__file__).resolve().parents[2] / "business-application" / "app" / "dashboard.py")


@pytest.fixture()
def page():
    at = AppTest.from_file(_DASHBOARD, default_timeout=30)
    at.run()
    assert not at.exception
    return at


class TestAddButton:
    def test_disabled_while_draft_incomplete(self, page):
        assert page.button(key="add_pharmacies_0").disabled
        assert page.button(key="add_pharmacists_0").disabled

    def test_disabled_for_malformed_draft(self, page):
        page.text_input(key="field_pharmacies.draft.ods_0").input("A1").run()
        assert page.button(key="add_pharmacies_0").disabled

    def test_enabled_once_draft_valid(self, page):
        page.text_input(key="field_pharmacies.draft.ods_0").input("FA123").run()
        assert not page.exception
        assert not page.button(key="add_pharmacies_0").disabled
