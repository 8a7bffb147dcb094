"""SQLite-backed persistence for Alfajr."""

from __future__ import annotations

import json
import sqlite3
import threading
from pathlib import Path
from typing import Any

from .errors import CustomerNotFoundError, DatabaseNotReadyError
from .models import Customer, generate_customer_id, now_iso

_MAX_ID_ATTEMPTS = 20


class Database:
    """Customer, settings and backup-log storage."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._setup()

    @property
    def is_initialized(self) -> bool:
        return self._conn is not None

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise DatabaseNotReadyError()
        return self._conn

    def _setup(self) -> None:
        conn = self._connection()
        with conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS customers (
                    id         TEXT PRIMARY KEY,
                    name       TEXT NOT NULL,
                    phone      TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    deleted    INTEGER DEFAULT 0,
                    version    INTEGER DEFAULT 1,
                    payload    TEXT NOT NULL
                );
                CREATE INDEX IF NOT EXISTS idx_customers_name ON customers (name);
                CREATE INDEX IF NOT EXISTS idx_customers_phone ON customers (phone);
                CREATE INDEX IF NOT EXISTS idx_customers_created ON customers (created_at);
                CREATE INDEX IF NOT EXISTS idx_customers_deleted ON customers (deleted);

                CREATE TABLE IF NOT EXISTS settings (
                    key        TEXT PRIMARY KEY,
                    value      TEXT,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS backups (
                    id             INTEGER PRIMARY KEY AUTOINCREMENT,
                    created_at     TEXT NOT NULL,
                    path           TEXT NOT NULL,
                    customer_count INTEGER DEFAULT 0
                );
                """
            )

    def _execute(self, query: str, *params: Any) -> sqlite3.Cursor:
        with self._lock:
            conn = self._connection()
            cur = conn.execute(query, params)
            conn.commit()
            return cur

    def _write_customer(self, customer: Customer) -> None:
        self._execute(
            """
            INSERT INTO customers (id, name, phone, created_at, updated_at, deleted, version, payload)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE
            SET name = excluded.name,
                phone = excluded.phone,
                created_at = excluded.created_at,
                updated_at = excluded.updated_at,
                deleted = excluded.deleted,
                version = excluded.version,
                payload = excluded.payload
            """,
            customer.id,
            customer.name,
            customer.phone,
            customer.created_at,
            customer.updated_at,
            1 if customer.deleted else 0,
            customer.version,
            json.dumps(customer.to_dict(), ensure_ascii=False),
        )

    @staticmethod
    def _row_to_customer(row: sqlite3.Row) -> Customer:
        return Customer.from_dict(json.loads(row["payload"]))

    def customer_exists(self, customer_id: str) -> bool:
        cur = self._execute("SELECT 1 FROM customers WHERE id = ?", customer_id)
        return cur.fetchone() is not None

    def get_customer(self, customer_id: str) -> Customer | None:
        cur = self._execute("SELECT payload FROM customers WHERE id = ?", str(customer_id))
        row = cur.fetchone()
        return self._row_to_customer(row) if row else None

    def save_customer(self, customer: Customer) -> Customer:
        # Round-trip through from_dict so partially built records get their defaults.
        normalized = Customer.from_dict(customer.to_dict())
        customer.measurements = normalized.measurements
        customer.updated_at = now_iso()
        customer.version = (customer.version or 0) + 1
        self._write_customer(customer)
        return customer

    def add_customer(self, name: str, phone: str) -> Customer:
        for _ in range(_MAX_ID_ATTEMPTS):
            candidate = generate_customer_id()
            if not self.customer_exists(candidate):
                break
        else:
            raise RuntimeError("Could not allocate a free customer id")
        customer = Customer.create(name, phone, customer_id=candidate)
        return self.save_customer(customer)

    def get_all_customers(self, include_deleted: bool = False) -> list[Customer]:
        if include_deleted:
            cur = self._execute("SELECT payload FROM customers ORDER BY created_at, rowid")
        else:
            cur = self._execute(
                "SELECT payload FROM customers WHERE deleted = 0 ORDER BY created_at, rowid"
            )
        return [self._row_to_customer(row) for row in cur.fetchall()]

    def search_customers(self, query: str, field: str = "name") -> list[Customer]:
        needle = (query or "").lower()
        results: list[Customer] = []
        for customer in self.get_all_customers():
            if field in ("name", "phone"):
                value = getattr(customer, field) or ""
                if needle in str(value).lower():
                    results.append(customer)
                continue
            values = customer.to_dict().values()
            if any(isinstance(value, str) and value and needle in value.lower() for value in values):
                results.append(customer)
        return results

    def delete_customer(self, customer_id: str) -> bool:
        customer = self.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        customer.deleted = True
        customer.updated_at = now_iso()
        self._write_customer(customer)
        return True

    def clear_all_data(self) -> int:
        cur = self._execute("DELETE FROM customers")
        return cur.rowcount

    def optimize(self) -> int:
        active = self.get_all_customers()
        for customer in active:
            self.save_customer(customer)
        with self._lock:
            self._connection().execute("VACUUM")
        return len(active)

    def get_setting(self, key: str, default: Any = None) -> Any:
        cur = self._execute("SELECT value FROM settings WHERE key = ?", key)
        row = cur.fetchone()
        if row is None or row["value"] is None:
            return default
        return json.loads(row["value"])

    def save_setting(self, key: str, value: Any) -> None:
        self._execute(
            """
            INSERT INTO settings (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE
            SET value = excluded.value,
                updated_at = excluded.updated_at
            """,
            key,
            json.dumps(value, ensure_ascii=False),
            now_iso(),
        )

    def get_flag(self, key: str, default: bool = False) -> bool:
        return bool(self.get_setting(key, default))

    def set_flag(self, key: str, enabled: bool) -> None:
        self.save_setting(key, bool(enabled))

    def record_backup(self, path: Path, customer_count: int) -> int:
        cur = self._execute(
            "INSERT INTO backups (created_at, path, customer_count) VALUES (?, ?, ?)",
            now_iso(),
            str(path),
            customer_count,
        )
        return int(cur.lastrowid)

    def list_backups(self, limit: int | None = None) -> list[dict[str, Any]]:
        if limit:
            cur = self._execute("SELECT * FROM backups ORDER BY id DESC LIMIT ?", limit)
        else:
            cur = self._execute("SELECT * FROM backups ORDER BY id DESC")
        return [dict(row) for row in cur.fetchall()]

    def delete_backup(self, backup_id: int) -> None:
        self._execute("DELETE FROM backups WHERE id = ?", backup_id)

    def counts_summary(self) -> dict[str, int]:
        active = self.get_all_customers()
        cur = self._execute("SELECT COUNT(*) AS total FROM customers WHERE deleted = 1")
        row = cur.fetchone()
        return {
            "total_customers": len(active),
            "total_orders": sum(customer.total_orders for customer in active),
            "paid": sum(1 for customer in active if customer.payment_received),
            "unpaid": sum(1 for customer in active if not customer.payment_received),
            "deleted": int(row["total"] if row else 0),
            "db_size": self.size_bytes(),
        }

    def size_bytes(self) -> int:
        try:
            return self.path.stat().st_size
        except OSError:
            return 0
