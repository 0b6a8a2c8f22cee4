"""Shared fixtures for all tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

import shared.config_store as config_mod


@pytest.fixture(autouse=True)
def tmp_config_dir(tmp_path: Path, monkeypatch):
    """Point the config store at an empty temp dir and clear env overrides."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.delenv("BUSINESS_JOURNAL_URL", raising=False)
    monkeypatch.delenv("BUSINESS_JOURNAL_TIMEOUT", raising=False)
    with patch.object(config_mod, "CONFIG_DIR", config_dir):
        yield config_dir


@pytest.fixture()
def sole_trader_values():
    """A complete, valid Sole Trader application."""
    return {
        "category": "soleTrader",
        "fields": {
            "name": "Jane's Pharmacy",
            "address": "1 High Street, Leeds",
            "contactName": "Jane Smith",
            "position": "Owner",
            "email": "jane@example.com",
            "invoiceEmail": "",
            "telephone": "07123456789",
        },
        "collections": {
            "pharmacies": [{"ods": "FA123"}],
            "pharmacists": [],
        },
    }
