"""Tests for shared/config_store.py — per-tool config lookup."""

from __future__ import annotations

import json

import shared.config_store as config_mod


# ── load_config ──────────────────────────────────────────────────────────


class TestLoadConfig:
    def test_returns_none_when_missing(self):
        assert config_mod.load_config("nonexistent") is None

    def test_reads_valid_json(self, tmp_config_dir):
        path = tmp_config_dir / "my-tool.json"
        path.write_text(json.dumps({"key": "value"}))
        assert config_mod.load_config("my-tool") == {"key": "value"}

    def test_returns_none_on_corrupt_json(self, tmp_config_dir):
        (tmp_config_dir / "bad.json").write_text("NOT VALID JSON")
        assert config_mod.load_config("bad") is None

    def test_returns_none_for_non_object(self, tmp_config_dir):
        (tmp_config_dir / "list.json").write_text("[1, 2]")
        assert config_mod.load_config("list") is None


# ── get_config_value ─────────────────────────────────────────────────────


class TestGetConfigValue:
    def test_returns_default_when_no_config(self):
        assert config_mod.get_config_value("missing", "key", "default") == "default"

    def test_returns_value_when_present(self, tmp_config_dir):
        (tmp_config_dir / "tool.json").write_text(json.dumps({"timeout": 30}))
        assert config_mod.get_config_value("tool", "timeout", 10) == 30

    def test_returns_default_for_missing_key(self, tmp_config_dir):
        (tmp_config_dir / "tool.json").write_text(json.dumps({"timeout": 30}))
        assert config_mod.get_config_value("tool", "retries", 3) == 3


# ── get_setting ──────────────────────────────────────────────────────────


class TestGetSetting:
    def test_falls_back_to_default(self):
        assert config_mod.get_setting("tool", "url", "TOOL_URL_UNSET", "http://x") == "http://x"

    def test_config_used_when_env_unset(self, tmp_config_dir, monkeypatch):
        monkeypatch.delenv("TOOL_URL", raising=False)
        (tmp_config_dir / "tool.json").write_text(json.dumps({"url": "http://config"}))
        assert config_mod.get_setting("tool", "url", "TOOL_URL", "http://x") == "http://config"

    def test_env_wins_over_config(self, tmp_config_dir, monkeypatch):
        (tmp_config_dir / "tool.json").write_text(json.dumps({"url": "http://config"}))
        monkeypatch.setenv("TOOL_URL", "http://env")
        assert config_mod.get_setting("tool", "url", "TOOL_URL", "http://x") == "http://env"

    def test_blank_env_is_ignored(self, monkeypatch):
        monkeypatch.setenv("TOOL_URL", "   ")
        assert config_mod.get_setting("tool", "url", "TOOL_URL", "http://x") == "http://x"

    def test_env_coerced_to_default_type(self, monkeypatch):
        monkeypatch.setenv("TOOL_TIMEOUT", "12.5")
        monkeypatch.setenv("TOOL_RETRIES", "4")
        monkeypatch.setenv("TOOL_DEBUG", "yes")
        assert config_mod.get_setting("tool", "timeout", "TOOL_TIMEOUT", 30.0) == 12.5
        assert config_mod.get_setting("tool", "retries", "TOOL_RETRIES", 3) == 4
        assert config_mod.get_setting("tool", "debug", "TOOL_DEBUG", False) is True

    def test_unparseable_env_returns_default(self, monkeypatch):
        monkeypatch.setenv("TOOL_RETRIES", "many")
        assert config_mod.get_setting("tool", "retries", "TOOL_RETRIES", 3) == 3
