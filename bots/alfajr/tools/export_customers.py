"""Dump the customer database to a JSON backup without starting the bot.

Usage:
    python -m alfajr.tools.export_customers --db alfajr_data/alfajr.sqlite3 --out backups/
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from ..backup import dump_customers, export_customers
from ..database import Database

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    data_dir = Path(os.getenv("ALFAJR_DATA_DIR", "alfajr_data"))
    parser = argparse.ArgumentParser(description="Export Alfajr customers to JSON.")
    parser.add_argument(
        "--db",
        type=Path,
        default=data_dir / "alfajr.sqlite3",
        help="Path to the bot's SQLite database.",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=data_dir / "backups",
        help="Directory that receives alfajr-backup-YYYY-MM-DD.json.",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the JSON instead of writing a file.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    args = parse_args(argv)
    if not args.db.exists():
        logger.error("Database %s does not exist", args.db)
        return 1
    db = Database(args.db)
    try:
        if args.stdout:
            print(dump_customers(db.get_all_customers(include_deleted=True)))
        else:
            path = export_customers(db, args.out)
            print(path)
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
