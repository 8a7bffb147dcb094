"""Exceptions raised by the Alfajr bot."""

from __future__ import annotations


class AlfajrError(Exception):
    """Base class for errors whose message can be shown to the shop owner."""


class ValidationError(AlfajrError, ValueError):
    """Raised when user input does not fit a customer record."""


class CustomerNotFoundError(AlfajrError, LookupError):
    def __init__(self, customer_id: str) -> None:
        super().__init__(f"مشتری یافت نشد: {customer_id}")
        self.customer_id = customer_id


class BackupFormatError(AlfajrError):
    """Raised when a backup file cannot be restored."""


class DatabaseNotReadyError(AlfajrError, RuntimeError):
    def __init__(self) -> None:
        super().__init__("دیتابیس راه‌اندازی نشده")
