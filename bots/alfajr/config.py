"""Configuration helpers for the Alfajr bot."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _ensure_directory(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _parse_ids(value: str | None) -> frozenset[int]:
    ids: set[int] = set()
    for item in _split_csv(value):
        try:
            ids.add(int(item))
        except ValueError:
            continue
    return frozenset(ids)


@dataclass(slots=True)
class Settings:
    """Runtime configuration loaded from environment variables."""

    bot_token: str
    data_dir: Path
    database_path: Path
    backup_dir: Path
    label_dir: Path
    http_timeout_seconds: float = 10.0
    activation_pin: str = "1404"
    admin_user_ids: frozenset[int] = field(default_factory=frozenset)
    backup_interval_hours: int = 24
    backup_keep: int = 10
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        token = os.getenv("ALFAJR_BOT_TOKEN") or os.getenv("TELEGRAM_BOT_TOKEN") or ""
        if not token:
            raise RuntimeError("Missing ALFAJR_BOT_TOKEN/TELEGRAM_BOT_TOKEN env var")

        data_dir = _ensure_directory(
            Path(os.getenv("ALFAJR_DATA_DIR", "alfajr_data")).resolve()
        )

        return cls(
            bot_token=token,
            data_dir=data_dir,
            database_path=data_dir / "alfajr.sqlite3",
            backup_dir=data_dir / "backups",
            label_dir=data_dir / "labels",
            http_timeout_seconds=_env_float("ALFAJR_HTTP_TIMEOUT", 10.0),
            activation_pin=os.getenv("ALFAJR_ACTIVATION_PIN", "1404"),
            admin_user_ids=_parse_ids(os.getenv("ALFAJR_ADMINS")),
            backup_interval_hours=max(_env_int("ALFAJR_BACKUP_HOURS", 24), 0),
            backup_keep=max(_env_int("ALFAJR_BACKUP_KEEP", 10), 1),
            log_level=os.getenv("ALFAJR_LOG_LEVEL", "INFO").upper(),
        )


def is_admin(settings: Settings, user_id: int | None) -> bool:
    """An empty admin list leaves the bot open to whoever knows the pin."""

    if user_id is None:
        return False
    if not settings.admin_user_ids:
        return True
    return user_id in settings.admin_user_ids
