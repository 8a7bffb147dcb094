"""Customer records as stored by the shop."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from .catalog import (
    DELIVERY_DAYS,
    FEATURES_LIST,
    MEASUREMENT_FIELDS,
    SKIRT_MODELS,
    SLEEVE_MODELS,
    YAKHUN_MODELS,
    resolve_measurement_field,
    resolve_option,
)
from .errors import ValidationError

CLEAR_WORDS = {"", "-", "clear", "پاک", "حذف"}


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_customer_id() -> str:
    """Eight digits: tail of the millisecond clock followed by a random block."""

    timestamp = str(int(time.time() * 1000))[-4:]
    block = random.randint(1000, 9999)
    return f"{timestamp}{block}"[-8:]


def empty_measurements() -> dict[str, str]:
    return {name: "" for name in MEASUREMENT_FIELDS}


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _as_version(value: Any) -> int:
    try:
        return max(int(value), 1)
    except (TypeError, ValueError):
        return 1


def _as_price(value: Any) -> int | None:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(slots=True)
class GarmentModels:
    yakhun: str = ""
    sleeve: str = ""
    skirt: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "GarmentModels":
        if not isinstance(data, Mapping):
            data = {}
        return cls(
            yakhun=_as_text(data.get("yakhun")),
            sleeve=_as_text(data.get("sleeve")),
            skirt=_as_list(data.get("skirt")),
            features=_as_list(data.get("features")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "yakhun": self.yakhun,
            "sleeve": self.sleeve,
            "skirt": list(self.skirt),
            "features": list(self.features),
        }


@dataclass(slots=True)
class Order:
    id: str
    date: str
    details: str
    status: str = "pending"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Order":
        return cls(
            id=str(data.get("id") or ""),
            date=_as_text(data.get("date")),
            details=_as_text(data.get("details")),
            status=_as_text(data.get("status")) or "pending",
        )

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "date": self.date, "details": self.details, "status": self.status}


@dataclass(slots=True)
class Customer:
    """One customer card: contact, measurements, chosen styles, payment and orders."""

    id: str
    name: str
    phone: str
    measurements: dict[str, str] = field(default_factory=empty_measurements)
    orders: list[Order] = field(default_factory=list)
    notes: str = ""
    models: GarmentModels = field(default_factory=GarmentModels)
    sewing_price_afghani: int | None = None
    delivery_day: str = ""
    payment_received: bool = False
    payment_date: str | None = None
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)
    deleted: bool = False
    version: int = 1

    @classmethod
    def create(cls, name: str, phone: str, *, customer_id: str | None = None) -> "Customer":
        name = (name or "").strip()
        phone = (phone or "").strip()
        if not name:
            raise ValidationError("لطفاً نام معتبر وارد کنید")
        if not phone:
            raise ValidationError("لطفاً شماره معتبر وارد کنید")
        return cls(id=customer_id or generate_customer_id(), name=name, phone=phone)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Customer":
        """Load a stored or imported record, filling whatever is missing."""

        measurements = empty_measurements()
        stored = data.get("measurements")
        if isinstance(stored, Mapping):
            for key, value in stored.items():
                measurements[key] = "" if value is None else str(value)
        orders = data.get("orders")
        if not isinstance(orders, list):
            orders = []
        payment_date = _pick(data, "paymentDate", "payment_date")
        created_at = _as_text(_pick(data, "createdAt", "created_at")) or now_iso()
        return cls(
            id=_as_text(_pick(data, "id")) or generate_customer_id(),
            name=_as_text(data.get("name")),
            phone=_as_text(data.get("phone")),
            measurements=measurements,
            orders=[Order.from_dict(item) for item in orders if isinstance(item, Mapping)],
            notes=_as_text(data.get("notes")),
            models=GarmentModels.from_dict(data.get("models")),
            sewing_price_afghani=_as_price(_pick(data, "sewingPriceAfghani", "sewing_price_afghani")),
            delivery_day=_as_text(_pick(data, "deliveryDay", "delivery_day")),
            payment_received=bool(_pick(data, "paymentReceived", "payment_received", default=False)),
            payment_date=None if payment_date is None else str(payment_date),
            created_at=created_at,
            updated_at=_as_text(_pick(data, "updatedAt", "updated_at")) or created_at,
            deleted=bool(data.get("deleted", False)),
            version=_as_version(data.get("version")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "measurements": dict(self.measurements),
            "orders": [order.to_dict() for order in self.orders],
            "notes": self.notes,
            "models": self.models.to_dict(),
            "sewingPriceAfghani": self.sewing_price_afghani,
            "deliveryDay": self.delivery_day,
            "paymentReceived": self.payment_received,
            "paymentDate": self.payment_date,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "deleted": self.deleted,
            "version": self.version,
        }

    @property
    def total_orders(self) -> int:
        return len(self.orders)

    def touch(self) -> None:
        self.updated_at = now_iso()

    def set_measurement(self, name: str, value: str) -> str:
        key = resolve_measurement_field(name)
        self.measurements[key] = (value or "").strip()
        self.touch()
        return key

    def set_yakhun(self, value: str) -> str:
        self.models.yakhun = resolve_option(value, YAKHUN_MODELS, kind="مدل یخن")
        self.touch()
        return self.models.yakhun

    def set_sleeve(self, value: str) -> str:
        self.models.sleeve = resolve_option(value, SLEEVE_MODELS, kind="مدل آستین")
        self.touch()
        return self.models.sleeve

    def toggle_skirt(self, value: str) -> tuple[str, bool]:
        option = resolve_option(value, SKIRT_MODELS, kind="مدل دامن")
        added = _toggle(self.models.skirt, option)
        self.touch()
        return option, added

    def toggle_feature(self, value: str) -> tuple[str, bool]:
        option = resolve_option(value, FEATURES_LIST, kind="ویژگی")
        added = _toggle(self.models.features, option)
        self.touch()
        return option, added

    def set_price(self, raw: str | int | None) -> int | None:
        text = "" if raw is None else str(raw).strip().replace(",", "")
        if text.lower() in CLEAR_WORDS:
            self.sewing_price_afghani = None
        else:
            try:
                price = int(text)
            except ValueError as exc:
                raise ValidationError(f"قیمت نامعتبر: {raw}") from exc
            if price < 0:
                raise ValidationError("قیمت نمی‌تواند منفی باشد")
            self.sewing_price_afghani = price
        self.touch()
        return self.sewing_price_afghani

    def toggle_payment(self) -> bool:
        self.payment_received = not self.payment_received
        self.payment_date = now_iso() if self.payment_received else None
        self.touch()
        return self.payment_received

    def set_delivery_day(self, day: str) -> str:
        self.delivery_day = resolve_option(day, DELIVERY_DAYS, kind="روز تحویل")
        self.touch()
        return self.delivery_day

    def add_order(self, details: str) -> Order:
        details = (details or "").strip()
        if not details:
            raise ValidationError("جزئیات سفارش خالی است")
        order = Order(id=str(int(time.time() * 1000)), date=now_iso(), details=details)
        self.orders.append(order)
        self.touch()
        return order

    def set_notes(self, text: str) -> None:
        self.notes = text or ""
        self.touch()


def _as_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item is not None]


def _toggle(items: list[str], option: str) -> bool:
    if option in items:
        items.remove(option)
        return False
    items.append(option)
    return True
