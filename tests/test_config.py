"""Tests for configuration loading."""

from pathlib import Path

from deltalytix.config import DEFAULT_DB_PATH, get_db_path, get_setting, load_config


class TestConfig:
    def test_missing_file_is_empty(self, tmp_path):
        assert load_config(tmp_path / "missing.toml") == {}

    def test_reads_settings(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[ai]\nmodel = "gpt-4o"\n', encoding="utf-8")

        config = load_config(path)

        assert get_setting("ai", "model", "default", config) == "gpt-4o"
        assert get_setting("ai", "other", "default", config) == "default"

    def test_malformed_file_is_ignored(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("[ai\nmodel = ", encoding="utf-8")

        assert load_config(path) == {}

    def test_db_path_precedence(self, monkeypatch, tmp_path):
        monkeypatch.delenv("DELTALYTIX_DB", raising=False)
        assert get_db_path({}) == DEFAULT_DB_PATH
        assert get_db_path({"database": {"path": str(tmp_path / "a.db")}}) == tmp_path / "a.db"

        monkeypatch.setenv("DELTALYTIX_DB", str(tmp_path / "env.db"))
        assert get_db_path({"database": {"path": "/ignored.db"}}) == Path(tmp_path / "env.db")
