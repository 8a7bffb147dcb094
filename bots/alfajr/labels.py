"""Printable garment labels."""

from __future__ import annotations

import html
import os
import re
from pathlib import Path

from .formatting import NO_NAME, NO_PHONE
from .models import Customer

_LABEL_TEMPLATE = """<!DOCTYPE html>
<html lang="fa" dir="rtl">
<head>
<meta charset="utf-8">
<title>لیبل {name}</title>
<style>
body {{ font-family: Tahoma, sans-serif; direction: rtl; padding: 20px; }}
.label {{ border: 2px solid #000; padding: 15px; margin: 10px; width: 300px; }}
.label-header {{ text-align: center; border-bottom: 1px solid #000; margin-bottom: 10px; padding-bottom: 5px; }}
.label-row {{ margin: 8px 0; display: flex; justify-content: space-between; }}
</style>
</head>
<body onload="window.print()">
<div class="label">
<div class="label-header">
<h3>{name}</h3>
<h4>{phone}</h4>
</div>
{rows}
</div>
</body>
</html>
"""


def label_rows(customer: Customer) -> list[tuple[str, str]]:
    price = (
        f"{customer.sewing_price_afghani} افغانی"
        if customer.sewing_price_afghani
        else "-"
    )
    return [
        ("قد", customer.measurements.get("قد") or "-"),
        ("یخن", customer.models.yakhun or "-"),
        ("آستین", customer.models.sleeve or "-"),
        ("تحویل", customer.delivery_day or "-"),
        ("قیمت", price),
    ]


def render_label_html(customer: Customer) -> str:
    rows = "\n".join(
        f'<div class="label-row"><strong>{html.escape(title)}:</strong>'
        f"<span>{html.escape(value)}</span></div>"
        for title, value in label_rows(customer)
    )
    return _LABEL_TEMPLATE.format(
        name=html.escape(customer.name or NO_NAME),
        phone=html.escape(customer.phone or NO_PHONE),
        rows=rows,
    )


def render_label_text(customer: Customer) -> str:
    lines = [customer.name or NO_NAME, customer.phone or NO_PHONE]
    lines.extend(f"{title}: {value}" for title, value in label_rows(customer))
    return "\n".join(lines)


class LabelBuilder:
    """Writes one HTML label per customer into ``output_dir``."""

    def __init__(self, output_dir: str | os.PathLike[str] = "labels") -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def build(self, customer: Customer) -> Path:
        path = self.output_dir / f"label-{self._slugify(customer.id)}.html"
        path.write_text(render_label_html(customer), encoding="utf-8")
        return path

    def _slugify(self, value: str) -> str:
        slug = re.sub(r"[^A-Za-z0-9]+", "-", value).strip("-")
        return slug or "customer"
