import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from brainvault.core.scheduler import parse_time, parse_weekday


@dataclass
class AdapterConfig:
    class_path: str
    settings: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DailyDigestConfig:
    enabled: bool = True
    time: str = "07:00"
    timezone: str = ""
    limit: int = 3


@dataclass
class WeeklyDigestConfig:
    enabled: bool = True
    day: str = "sunday"
    time: str = "16:00"
    timezone: str = ""


@dataclass
class AppConfig:
    data_dir: str
    confidence_threshold: float
    reasoning: AdapterConfig
    notifier: AdapterConfig
    chat_id: str = ""
    git_enabled: bool = False
    git_auto_commit: bool = False
    templates_dir: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    daily: DailyDigestConfig = field(default_factory=DailyDigestConfig)
    weekly: WeeklyDigestConfig = field(default_factory=WeeklyDigestConfig)

    @property
    def git_commit(self) -> bool:
        return self.git_enabled and self.git_auto_commit


DEFAULT_CONFIG_PATH = "config.json"
ENV_CONFIG_PATH = "SB_CONFIG_PATH"
DEFAULT_DATA_DIR = os.path.join("data", "secondbrain")
DEFAULT_REASONING = "brainvault.adapters.ai_claude_cli.ClaudeCliProvider"
DEFAULT_NOTIFIER = "brainvault.adapters.notifier_console.ConsoleNotifier"


def load_dotenv(path: str = ".env") -> None:
    if not os.path.exists(path):
        return
    with open(path, "r", encoding="utf-8") as handle:
        for line in handle:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip("\"'")
            if key and key not in os.environ:
                os.environ[key] = value


def _resolve_env(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("$"):
        return os.environ.get(value[1:], value)
    if isinstance(value, dict):
        return {k: _resolve_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env(v) for v in value]
    return value


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_str(name: str, default: Any) -> Any:
    value = os.environ.get(name)
    return value if value else default


def _find_config(path: Optional[str]) -> Optional[str]:
    config_path = path or os.environ.get(ENV_CONFIG_PATH, DEFAULT_CONFIG_PATH)
    if not path and config_path == DEFAULT_CONFIG_PATH and not os.path.exists(config_path):
        example_path = "config.example.json"
        if os.path.exists(example_path):
            return example_path
        return None
    return config_path


def load_config(path: Optional[str] = None) -> AppConfig:
    load_dotenv()
    config_path = _find_config(path)
    raw: Dict[str, Any] = {}
    if config_path:
        with open(config_path, "r", encoding="utf-8") as handle:
            raw = json.load(handle)
    return config_from_dict(_resolve_env(raw))


def config_from_dict(raw: Dict[str, Any]) -> AppConfig:
    def _adapter(key: str, default_class: str) -> AdapterConfig:
        payload = raw.get(key) or {}
        return AdapterConfig(
            class_path=payload.get("class") or default_class,
            settings=payload.get("settings", {}),
        )

    digest = raw.get("digest", {})
    daily_raw = digest.get("daily", {})
    weekly_raw = digest.get("weekly", {})

    daily = DailyDigestConfig(
        enabled=_env_bool("SECONDBRAIN_DIGEST_DAILY_ENABLED", bool(daily_raw.get("enabled", True))),
        time=_env_str("SECONDBRAIN_DIGEST_DAILY_TIME", daily_raw.get("time", "07:00")),
        timezone=_env_str("SECONDBRAIN_DIGEST_DAILY_TIMEZONE", daily_raw.get("timezone", "")),
        limit=int(_env_str("SECONDBRAIN_DIGEST_DAILY_LIMIT", daily_raw.get("limit", 3))),
    )
    weekly = WeeklyDigestConfig(
        enabled=_env_bool("SECONDBRAIN_DIGEST_WEEKLY_ENABLED", bool(weekly_raw.get("enabled", True))),
        day=_env_str("SECONDBRAIN_DIGEST_WEEKLY_DAY", weekly_raw.get("day", "sunday")),
        time=_env_str("SECONDBRAIN_DIGEST_WEEKLY_TIME", weekly_raw.get("time", "16:00")),
        timezone=_env_str("SECONDBRAIN_DIGEST_WEEKLY_TIMEZONE", weekly_raw.get("timezone", "")),
    )

    config = AppConfig(
        data_dir=_env_str("SECONDBRAIN_DATA_DIR", raw.get("data_dir", DEFAULT_DATA_DIR)),
        confidence_threshold=float(
            _env_str("SECONDBRAIN_CONFIDENCE_THRESHOLD", raw.get("confidence_threshold", 0.6))
        ),
        reasoning=_adapter("reasoning", DEFAULT_REASONING),
        notifier=_adapter("notifier", DEFAULT_NOTIFIER),
        chat_id=str(_env_str("SECONDBRAIN_CHAT_ID", raw.get("chat_id", ""))),
        git_enabled=_env_bool("SECONDBRAIN_GIT_ENABLED", bool(raw.get("git_enabled", False))),
        git_auto_commit=_env_bool("SECONDBRAIN_GIT_AUTOCOMMIT", bool(raw.get("git_auto_commit", False))),
        templates_dir=raw.get("templates_dir") or None,
        log_level=str(raw.get("log_level", "INFO")).upper(),
        log_file=raw.get("log_file") or None,
        daily=daily,
        weekly=weekly,
    )
    validate_config(config)
    return config


def validate_config(config: AppConfig) -> None:
    if not 0.0 <= config.confidence_threshold <= 1.0:
        raise ValueError(
            f"confidence_threshold must be between 0 and 1, got {config.confidence_threshold}"
        )
    if config.daily.limit < 1:
        raise ValueError(f"digest.daily.limit must be positive, got {config.daily.limit}")
    parse_time(config.daily.time)
    parse_time(config.weekly.time)
    parse_weekday(config.weekly.day)
    _check_timezone("digest.daily.timezone", config.daily.timezone)
    _check_timezone("digest.weekly.timezone", config.weekly.timezone)


def _check_timezone(key: str, name: str) -> None:
    if not name:
        return
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"{key} is not a known timezone: {name}") from exc
