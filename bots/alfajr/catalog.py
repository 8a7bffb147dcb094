"""Fixed vocabularies of the shop: measurement fields, garment styles and days."""

from __future__ import annotations

import re
from typing import Sequence

from .errors import ValidationError

MEASUREMENT_FIELDS: tuple[str, ...] = (
    "قد",
    "شانه_یک",
    "شانه_دو",
    "آستین_یک",
    "آستین_دو",
    "آستین_سه",
    "بغل",
    "دامن",
    "گردن",
    "دور_سینه",
    "شلوار",
    "دم_پاچه",
    "بر_تمبان",
    "خشتک",
    "چاک_پتی",
    "تعداد_سفارش",
    "مقدار_تکه",
)

YAKHUN_MODELS: tuple[str, ...] = (
    "آف دار",
    "چپه یخن",
    "پاکستانی",
    "ملی",
    "شهبازی",
    "خامک",
    "قاسمی",
)
SLEEVE_MODELS: tuple[str, ...] = (
    "کفک",
    "ساده شیش بخیه",
    "بندک",
    "پر بخیه",
    "آف دار",
    "لایی یک انچ",
)
SKIRT_MODELS: tuple[str, ...] = (
    "دامن یک بخیه",
    "دامن دوبخیه",
    "دامن چهارکنج",
    "دامن ترخیز",
    "دامن گاوی",
)
FEATURES_LIST: tuple[str, ...] = (
    "جیب رو",
    "جیب شلوار",
    "یک بخیه سند",
    "دو بخیه سند",
    "مکمل دو بخیه",
)
DELIVERY_DAYS: tuple[str, ...] = (
    "شنبه",
    "یکشنبه",
    "دوشنبه",
    "سه‌شنبه",
    "چهارشنبه",
    "پنجشنبه",
    "جمعه",
)

_WHITESPACE = re.compile(r"\s+")


def _normalize(value: str) -> str:
    # Persian keyboards emit a zero-width non-joiner that users type inconsistently.
    return _WHITESPACE.sub(" ", value.replace("\u200c", "")).strip()


def field_label(field: str) -> str:
    return field.replace("_", " ")


def resolve_option(value: str, options: Sequence[str], *, kind: str = "گزینه") -> str:
    """Map user text (exact name or 1-based index) onto one of ``options``."""

    cleaned = _normalize(value or "")
    if not cleaned:
        raise ValidationError(f"{kind} خالی است")
    if cleaned.isdigit():
        index = int(cleaned)
        if 1 <= index <= len(options):
            return options[index - 1]
        raise ValidationError(f"{kind} شماره {index} وجود ندارد")
    for option in options:
        if _normalize(option) == cleaned:
            return option
    raise ValidationError(f"{kind} نامعتبر: {value}")


def resolve_measurement_field(name: str) -> str:
    cleaned = _normalize(name or "").replace(" ", "_")
    for field in MEASUREMENT_FIELDS:
        if _normalize(field) == cleaned:
            return field
    raise ValidationError(f"اندازه نامعتبر: {name}")


def numbered(options: Sequence[str]) -> str:
    return "\n".join(f"{idx}. {option}" for idx, option in enumerate(options, start=1))
