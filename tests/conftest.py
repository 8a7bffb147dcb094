"""Shared fixtures: a temporary database and fake Telegram objects."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from alfajr.backup import BackupManager
from alfajr.config import Settings
from alfajr.database import Database
from alfajr.labels import LabelBuilder


@pytest.fixture
def db(tmp_path: Path):
    database = Database(tmp_path / "alfajr.sqlite3")
    yield database
    database.close()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        bot_token="123:abc",
        data_dir=tmp_path,
        database_path=tmp_path / "alfajr.sqlite3",
        backup_dir=tmp_path / "backups",
        label_dir=tmp_path / "labels",
        activation_pin="4321",
    )


@pytest.fixture
def bot_context(db: Database, settings: Settings):
    """Context object shaped like telegram.ext.CallbackContext for handler tests."""

    return SimpleNamespace(
        args=[],
        matches=None,
        user_data={},
        bot_data={
            "settings": settings,
            "db": db,
            "labels": LabelBuilder(settings.label_dir),
            "backups": BackupManager(db, settings.backup_dir, keep=settings.backup_keep),
            "activated": True,
        },
    )


def make_update(text: str = "", *, user_id: int = 7, chat_type: str = "private", document=None):
    message = SimpleNamespace(
        text=text,
        document=document,
        reply_text=AsyncMock(),
        reply_document=AsyncMock(),
    )
    return SimpleNamespace(
        effective_user=SimpleNamespace(id=user_id, username="tailor", full_name="Tailor"),
        effective_chat=SimpleNamespace(id=user_id, type=chat_type),
        effective_message=message,
    )


def replies(update) -> list[str]:
    return [call.args[0] for call in update.effective_message.reply_text.await_args_list]
