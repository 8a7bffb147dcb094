"""Customer lookups beyond plain name matching."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .catalog import DELIVERY_DAYS, YAKHUN_MODELS, resolve_option
from .database import Database
from .errors import ValidationError
from .models import Customer

SEARCH_KINDS = ("name", "phone", "yakhun", "price", "delivery")


@dataclass(slots=True, frozen=True)
class PriceRange:
    minimum: int | None = None
    maximum: int | None = None
    inclusive: bool = True

    def matches(self, price: int) -> bool:
        if self.minimum is not None:
            if price < self.minimum or (not self.inclusive and price == self.minimum):
                return False
        if self.maximum is not None:
            if price > self.maximum or (not self.inclusive and price == self.maximum):
                return False
        return True


def _to_int(text: str, expr: str) -> int:
    try:
        return int(text.strip().replace(",", ""))
    except ValueError as exc:
        raise ValidationError(f"محدوده قیمت نامعتبر: {expr}") from exc


def parse_price_range(expr: str) -> PriceRange:
    """Parse ``1000-2000`` (inclusive), ``>1000`` or ``<2000``."""

    text = (expr or "").strip()
    if text.startswith(">"):
        return PriceRange(minimum=_to_int(text[1:], expr), inclusive=False)
    if text.startswith("<"):
        return PriceRange(maximum=_to_int(text[1:], expr), inclusive=False)
    if "-" in text:
        low, _, high = text.partition("-")
        minimum, maximum = _to_int(low, expr), _to_int(high, expr)
        if minimum > maximum:
            minimum, maximum = maximum, minimum
        return PriceRange(minimum=minimum, maximum=maximum)
    raise ValidationError(f"محدوده قیمت نامعتبر: {expr}")


def by_yakhun(customers: Iterable[Customer], model: str) -> list[Customer]:
    return [customer for customer in customers if customer.models.yakhun == model]


def by_delivery_day(customers: Iterable[Customer], day: str) -> list[Customer]:
    return [customer for customer in customers if customer.delivery_day == day]


def by_price(customers: Iterable[Customer], expr: str) -> list[Customer]:
    price_range = parse_price_range(expr)
    return [
        customer
        for customer in customers
        if customer.sewing_price_afghani and price_range.matches(customer.sewing_price_afghani)
    ]


def quick_search(db: Database, term: str) -> list[Customer]:
    """Name match first; phone numbers only when no name matched."""

    term = (term or "").strip()
    if not term:
        return db.get_all_customers()
    results = db.search_customers(term, "name")
    if not results:
        results = db.search_customers(term, "phone")
    return results


def advanced_search(db: Database, kind: str, value: str) -> list[Customer]:
    kind = (kind or "").strip().lower()
    if kind not in SEARCH_KINDS:
        raise ValidationError(f"نوع جستجو نامعتبر: {kind}. گزینه‌ها: {', '.join(SEARCH_KINDS)}")
    if kind in ("name", "phone"):
        return db.search_customers(value, kind)
    customers = db.get_all_customers()
    if kind == "yakhun":
        return by_yakhun(customers, resolve_option(value, YAKHUN_MODELS, kind="مدل یخن"))
    if kind == "delivery":
        return by_delivery_day(customers, resolve_option(value, DELIVERY_DAYS, kind="روز تحویل"))
    return by_price(customers, value)
