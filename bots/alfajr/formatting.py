"""Plain-text renderings of customer records for chat replies."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, Mapping

from .catalog import MEASUREMENT_FIELDS, field_label
from .models import Customer

NO_NAME = "بدون نام"
NO_PHONE = "بدون شماره"
NOTE_PREVIEW = 50


def format_bytes(size: int, decimals: int = 2) -> str:
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    index = min(int(math.floor(math.log(size, 1024))), len(units) - 1)
    value = round(size / 1024**index, max(decimals, 0))
    text = f"{value:.{max(decimals, 0)}f}".rstrip("0").rstrip(".") if decimals > 0 else f"{value:.0f}"
    return f"{text} {units[index]}"


def _short_date(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except (ValueError, AttributeError):
        return value or "-"


def customer_line(customer: Customer) -> str:
    number = customer.id[:4] if customer.id else "----"
    line = f"[{number}] {customer.name or NO_NAME} - {customer.phone or NO_PHONE}  /show_{customer.id}"
    if customer.notes:
        preview = customer.notes
        if len(preview) > NOTE_PREVIEW:
            preview = preview[:NOTE_PREVIEW] + "..."
        line += f"\n    {preview}"
    return line


def customer_list(customers: Iterable[Customer], *, empty_text: str = "مشتری وجود ندارد") -> str:
    lines = [customer_line(customer) for customer in customers]
    if not lines:
        return empty_text
    return "\n".join(lines)


def measurements_text(customer: Customer) -> str:
    lines = ["اندازه‌گیری‌ها:"]
    for name in MEASUREMENT_FIELDS:
        lines.append(f"- {field_label(name)}: {customer.measurements.get(name) or '-'}")
    extra = [key for key in customer.measurements if key not in MEASUREMENT_FIELDS]
    for name in extra:
        lines.append(f"- {field_label(name)}: {customer.measurements.get(name) or '-'}")
    return "\n".join(lines)


def models_text(customer: Customer) -> str:
    models = customer.models
    return "\n".join(
        [
            "مدل‌ها:",
            f"- یخن: {models.yakhun or '-'}",
            f"- آستین: {models.sleeve or '-'}",
            f"- دامن: {'، '.join(models.skirt) if models.skirt else '-'}",
            f"- ویژگی‌ها: {'، '.join(models.features) if models.features else '-'}",
        ]
    )


def orders_text(customer: Customer) -> str:
    if not customer.orders:
        return "هیچ سفارشی"
    lines = []
    for idx, order in enumerate(customer.orders, start=1):
        lines.append(f"سفارش #{idx} ({_short_date(order.date)}): {order.details or 'بدون توضیحات'}")
    return "\n".join(lines)


def payment_text(customer: Customer) -> str:
    price = (
        f"{customer.sewing_price_afghani} افغانی"
        if customer.sewing_price_afghani is not None
        else "-"
    )
    paid = "دریافت شد" if customer.payment_received else "دریافت نشده"
    if customer.payment_received and customer.payment_date:
        paid += f" ({_short_date(customer.payment_date)})"
    return "\n".join(
        [
            f"قیمت دوخت: {price}",
            f"پرداخت: {paid}",
            f"روز تحویل: {customer.delivery_day or '-'}",
        ]
    )


def profile_text(customer: Customer) -> str:
    header = f"{customer.name or NO_NAME} | {customer.phone or NO_PHONE}\nشناسه: {customer.id}"
    if customer.deleted:
        header += " (حذف شده)"
    sections = [
        header,
        measurements_text(customer),
        models_text(customer),
        payment_text(customer),
        "سفارش‌ها:\n" + orders_text(customer),
    ]
    if customer.notes:
        sections.append(f"یادداشت:\n{customer.notes}")
    return "\n\n".join(sections)


def stats_text(summary: Mapping[str, int]) -> str:
    return "\n".join(
        [
            "آمار:",
            f"- مشتریان: {summary.get('total_customers', 0)}",
            f"- سفارش‌ها: {summary.get('total_orders', 0)}",
            f"- پرداخت شده: {summary.get('paid', 0)}",
            f"- پرداخت نشده: {summary.get('unpaid', 0)}",
            f"- حذف شده: {summary.get('deleted', 0)}",
            f"- حجم دیتابیس: {format_bytes(summary.get('db_size', 0))}",
        ]
    )
