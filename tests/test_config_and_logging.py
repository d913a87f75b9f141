from pathlib import Path

import pytest

from course_utils import logger as logging_setup
from course_utils.config import PROJECT_DIRECTORY, Settings, get_settings


def test_defaults():
    settings = Settings()
    assert settings.data_dir == PROJECT_DIRECTORY / "data"
    assert settings.random_state == 42
    assert settings.wine_quality_url.endswith("winequality-red.csv")


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("COURSE_RANDOM_STATE", "7")
    monkeypatch.setenv("COURSE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("COURSE_LOG_JSON", "true")
    settings = Settings()
    assert settings.random_state == 7
    assert settings.data_dir == Path(tmp_path)
    assert settings.log_json is True


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_configure_logging_runs_once(monkeypatch):
    monkeypatch.setattr(logging_setup, "_configured", False)
    logging_setup.configure_logging("tests")
    assert logging_setup._configured is True

    def fail():
        pytest.fail("settings were read on a second configure call")

    monkeypatch.setattr(logging_setup, "get_settings", fail)
    logging_setup.configure_logging("tests")
