"""Tests for flexidb.config -- option defaults and YAML loading.

All file I/O uses tmp_path so nothing touches a real config.
"""

from __future__ import annotations

import logging

import yaml

from flexidb.config import DatabaseOptions, load_options


class TestDefaults:
    def test_defaults(self):
        opts = DatabaseOptions()
        assert opts.file_name == "database.json"
        assert opts.data_dir == "FlexiDB"
        assert opts.debounce_seconds == 0.5
        assert opts.indent == 2
        assert opts.auto_backup.enabled is False
        assert opts.auto_backup.interval_seconds == 60.0

    def test_paths_are_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        opts = DatabaseOptions()
        assert opts.data_path == tmp_path.resolve() / "FlexiDB"
        assert opts.file_path == opts.data_path / "database.json"

    def test_auto_backup_options_not_shared(self):
        a = DatabaseOptions()
        b = DatabaseOptions()
        a.auto_backup.enabled = True
        assert b.auto_backup.enabled is False


class TestLoadOptions:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_options(tmp_path / "nope.yaml") == DatabaseOptions()

    def test_full_file(self, tmp_path):
        path = tmp_path / "flexidb.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "file_name": "app.json",
                    "data_dir": str(tmp_path / "store"),
                    "debounce_seconds": 1.5,
                    "indent": 4,
                    "auto_backup": {"enabled": True, "interval_seconds": 30},
                }
            ),
            encoding="utf-8",
        )
        opts = load_options(path)
        assert opts.file_name == "app.json"
        assert opts.data_path == (tmp_path / "store").resolve()
        assert opts.debounce_seconds == 1.5
        assert opts.indent == 4
        assert opts.auto_backup.enabled is True
        assert opts.auto_backup.interval_seconds == 30.0

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "flexidb.yaml"
        path.write_text("debounce_seconds: 0.1\n", encoding="utf-8")
        opts = load_options(path)
        assert opts.debounce_seconds == 0.1
        assert opts.file_name == "database.json"
        assert opts.auto_backup.enabled is False

    def test_negative_debounce_clamped(self, tmp_path):
        path = tmp_path / "flexidb.yaml"
        path.write_text("debounce_seconds: -3\n", encoding="utf-8")
        assert load_options(path).debounce_seconds == 0.0

    def test_invalid_yaml_falls_back(self, tmp_path, caplog):
        path = tmp_path / "flexidb.yaml"
        path.write_text("file_name: [unclosed\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="flexidb"):
            assert load_options(path) == DatabaseOptions()
        assert "failed to load options" in caplog.text

    def test_bad_value_falls_back(self, tmp_path):
        path = tmp_path / "flexidb.yaml"
        path.write_text("indent: lots\n", encoding="utf-8")
        assert load_options(path) == DatabaseOptions()

    def test_non_mapping_falls_back(self, tmp_path):
        path = tmp_path / "flexidb.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        assert load_options(path) == DatabaseOptions()
