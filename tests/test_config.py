#!/usr/bin/env python3
"""Tests for settings loading."""

import pytest
import yaml

from parallelsbox.config import CONFIG_FILE, load_settings


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PARALLELSBOX_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.delenv("PARALLELSBOX_PRLCTL", raising=False)
    monkeypatch.delenv("PARALLELSBOX_PRLSRVCTL", raising=False)
    return tmp_path


class TestLoadSettings:
    def test_defaults_without_files(self, isolated):
        settings = load_settings()
        assert settings.prlctl_path == "prlctl"

    def test_project_file(self, isolated):
        (isolated / CONFIG_FILE).write_text(
            yaml.dump({"driver": {"prlctl_path": "/usr/local/bin/prlctl", "retry_attempts": 5}})
        )

        settings = load_settings()

        assert settings.prlctl_path == "/usr/local/bin/prlctl"
        assert settings.retry_attempts == 5

    def test_flat_file_and_directory_path(self, isolated):
        (isolated / CONFIG_FILE).write_text(yaml.dump({"retry_delay_seconds": 0.5}))

        assert load_settings(isolated).retry_delay_seconds == 0.5

    def test_user_file(self, isolated, monkeypatch):
        user = isolated / "user.yaml"
        user.write_text(yaml.dump({"prlsrvctl_path": "/opt/prlsrvctl"}))
        monkeypatch.setenv("PARALLELSBOX_CONFIG", str(user))

        assert load_settings().prlsrvctl_path == "/opt/prlsrvctl"

    def test_env_overrides(self, isolated, monkeypatch):
        (isolated / CONFIG_FILE).write_text(yaml.dump({"prlctl_path": "/from/file"}))
        monkeypatch.setenv("PARALLELSBOX_PRLCTL", "/from/env")

        assert load_settings().prlctl_path == "/from/env"

    def test_missing_explicit_path(self, isolated):
        with pytest.raises(FileNotFoundError):
            load_settings(isolated / "nope.yaml")

    def test_non_mapping(self, isolated):
        path = isolated / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError):
            load_settings(path)

    def test_invalid_values(self, isolated):
        path = isolated / "bad.yaml"
        path.write_text(yaml.dump({"retry_attempts": 0}))

        with pytest.raises(ValueError):
            load_settings(path)
