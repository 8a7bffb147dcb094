"""JSON backups of the customer table."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Mapping

from .database import Database
from .errors import BackupFormatError
from .models import Customer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ImportResult:
    imported: int
    skipped: int

    def as_text(self) -> str:
        text = f"{self.imported} مشتری وارد شد"
        if self.skipped:
            text += f" ({self.skipped} مورد رد شد)"
        return text


def backup_filename(day: date | None = None) -> str:
    day = day or date.today()
    return f"alfajr-backup-{day.isoformat()}.json"


def dump_customers(customers: Iterable[Customer]) -> str:
    return json.dumps([customer.to_dict() for customer in customers], ensure_ascii=False, indent=2)


def export_customers(db: Database, directory: Path, *, day: date | None = None) -> Path:
    """Write every record, soft-deleted ones included, and log the backup."""

    directory.mkdir(parents=True, exist_ok=True)
    customers = db.get_all_customers(include_deleted=True)
    path = directory / backup_filename(day)
    path.write_text(dump_customers(customers), encoding="utf-8")
    db.record_backup(path, len(customers))
    logger.info("Wrote backup %s (%d customers)", path, len(customers))
    return path


def import_customers(db: Database, raw: str | bytes | bytearray) -> ImportResult:
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise BackupFormatError("فایل باید UTF-8 باشد") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise BackupFormatError(f"فرمت فایل نامعتبر: {exc.msg}") from exc
    if not isinstance(data, list):
        raise BackupFormatError("فرمت فایل نامعتبر")

    imported = 0
    skipped = 0
    for index, entry in enumerate(data):
        if not isinstance(entry, Mapping) or entry.get("deleted"):
            skipped += 1
            continue
        try:
            customer = Customer.from_dict(entry)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping backup entry %d: %s", index, exc)
            skipped += 1
            continue
        db.save_customer(customer)
        imported += 1
    logger.info("Imported %d customers (%d skipped)", imported, skipped)
    return ImportResult(imported=imported, skipped=skipped)


class BackupManager:
    """Periodic exports with a bounded number of retained files."""

    def __init__(self, db: Database, directory: Path, keep: int = 10) -> None:
        self.db = db
        self.directory = directory
        self.keep = max(keep, 1)

    def run(self, *, day: date | None = None) -> Path:
        path = export_customers(self.db, self.directory, day=day)
        self.prune()
        return path

    def prune(self) -> int:
        removed = 0
        seen: set[str] = set()
        kept = 0
        # One file per day: a second run on the same day overwrites the file,
        # so only distinct paths count against the retention limit.
        for record in self.db.list_backups():
            path = record["path"]
            if path in seen:
                self.db.delete_backup(record["id"])
                continue
            seen.add(path)
            kept += 1
            if kept <= self.keep:
                continue
            try:
                Path(path).unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not delete old backup %s: %s", path, exc)
            self.db.delete_backup(record["id"])
            removed += 1
        return removed
