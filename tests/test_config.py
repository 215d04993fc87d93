import json
import os
from unittest.mock import patch

import pytest

from brainvault.config import (
    DEFAULT_NOTIFIER,
    DEFAULT_REASONING,
    config_from_dict,
    load_config,
)


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with patch.dict(os.environ, {}, clear=True):
        yield


def test_defaults_without_any_file():
    config = load_config()
    assert config.confidence_threshold == 0.6
    assert config.reasoning.class_path == DEFAULT_REASONING
    assert config.notifier.class_path == DEFAULT_NOTIFIER
    assert config.daily.time == "07:00"
    assert config.daily.limit == 3
    assert config.weekly.day == "sunday"
    assert config.weekly.time == "16:00"
    assert config.git_commit is False


def test_file_values_and_env_references(tmp_path):
    os.environ["BOT_TOKEN"] = "secret"
    path = tmp_path / "custom.json"
    path.write_text(
        json.dumps(
            {
                "data_dir": "/srv/brain",
                "confidence_threshold": 0.75,
                "chat_id": 12345,
                "git_enabled": True,
                "git_auto_commit": True,
                "notifier": {
                    "class": "brainvault.adapters.notifier_telegram.TelegramNotifier",
                    "settings": {"bot_token": "$BOT_TOKEN"},
                },
                "digest": {"daily": {"time": "06:30", "timezone": "America/Chicago", "limit": 5}},
            }
        )
    )
    config = load_config(str(path))

    assert config.data_dir == "/srv/brain"
    assert config.confidence_threshold == 0.75
    assert config.chat_id == "12345"
    assert config.git_commit is True
    assert config.notifier.settings == {"bot_token": "secret"}
    assert config.daily.time == "06:30"
    assert config.daily.timezone == "America/Chicago"
    assert config.daily.limit == 5


def test_dotenv_does_not_override_environment(tmp_path):
    (tmp_path / ".env").write_text("# comment\nSECONDBRAIN_CONFIDENCE_THRESHOLD=0.8\nSECONDBRAIN_DATA_DIR='from-dotenv'\n")
    os.environ["SECONDBRAIN_DATA_DIR"] = "from-env"
    config = load_config()
    assert config.confidence_threshold == 0.8
    assert config.data_dir == "from-env"


def test_environment_overrides():
    os.environ.update(
        {
            "SECONDBRAIN_DIGEST_DAILY_TIME": "08:15",
            "SECONDBRAIN_DIGEST_WEEKLY_DAY": "Friday",
            "SECONDBRAIN_DIGEST_WEEKLY_ENABLED": "false",
            "SECONDBRAIN_GIT_ENABLED": "1",
        }
    )
    config = config_from_dict({"git_auto_commit": True})
    assert config.daily.time == "08:15"
    assert config.weekly.day == "Friday"
    assert config.weekly.enabled is False
    assert config.git_commit is True


@pytest.mark.parametrize(
    "raw",
    [
        {"confidence_threshold": 1.5},
        {"digest": {"daily": {"time": "7am"}}},
        {"digest": {"daily": {"limit": 0}}},
        {"digest": {"weekly": {"day": "funday"}}},
        {"digest": {"daily": {"timezone": "Mars/Olympus_Mons"}}},
        {"digest": {"weekly": {"timezone": "../etc/passwd"}}},
    ],
)
def test_invalid_values(raw):
    with pytest.raises(ValueError):
        config_from_dict(raw)
