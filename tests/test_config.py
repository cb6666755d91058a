"""Tests for settings sources."""

from unittest.mock import patch

from fluent_tutor.config import Settings


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("HISTORY_WINDOW", "4")
    settings = Settings(data_dir=tmp_path)
    assert settings.openai_api_key == "sk-env"
    assert settings.history_window == 4


def test_yaml_sections_flattened(tmp_path):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "settings.yaml").write_text(
        "tutor:\n"
        "  native_language: Japanese\n"
        "activity:\n"
        "  heartbeat_interval_seconds: 5\n"
        "storage:\n"
        f"  data_dir: {tmp_path / 'blobs'}\n",
        encoding="utf-8",
    )
    with patch("fluent_tutor.config._find_project_root", return_value=tmp_path):
        settings = Settings()
    assert settings.native_language == "Japanese"
    assert settings.heartbeat_interval_seconds == 5.0
    assert settings.target_language == "English"
    assert settings.store_dir == tmp_path / "blobs"
    assert settings.store_dir.is_dir()
