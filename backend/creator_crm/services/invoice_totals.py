from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    discount_amount: float
    tax_amount: float
    total: float


def _as_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    return float(value)


def normalize_line_item(item: Mapping[str, Any]) -> dict[str, Any]:
    """Return a plain dict line item with `amount == quantity * rate`."""

    quantity = _as_float(item.get("quantity"), 1.0)
    rate = _as_float(item.get("rate"))
    return {
        "service": item.get("service"),
        "description": item.get("description"),
        "quantity": quantity,
        "rate": rate,
        "amount": quantity * rate,
    }


def normalize_line_items(items: Iterable[Mapping[str, Any]] | None) -> list[dict[str, Any]]:
    return [normalize_line_item(item) for item in (items or [])]


def compute_totals(
    line_items: Iterable[Mapping[str, Any]] | None,
    *,
    discount_rate: float | None = 0.0,
    tax_rate: float | None = 0.0,
) -> InvoiceTotals:
    """Deterministic invoice aggregates.

    - subtotal = sum of line item amounts
    - discount is taken off the subtotal, tax is applied to what remains
    """

    subtotal = sum(_as_float(item.get("amount")) for item in (line_items or []))
    discount_amount = subtotal * (_as_float(discount_rate) / 100)
    taxable = subtotal - discount_amount
    tax_amount = taxable * (_as_float(tax_rate) / 100)
    total = subtotal - discount_amount + tax_amount
    return InvoiceTotals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax_amount=tax_amount,
        total=total,
    )


def apply_totals(values: dict[str, Any], current: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Recompute line item amounts and aggregates into `values`.

    `current` holds the stored invoice for partial updates; fields absent from
    `values` are taken from it. An invoice without line items keeps its own
    `amount`; otherwise `amount` follows `total`.
    """

    current = current or {}
    touches_amounts = any(k in values for k in ("line_items", "discount_rate", "tax_rate"))
    if current and not touches_amounts:
        return values

    raw_items = values["line_items"] if "line_items" in values else current.get("line_items")
    items = normalize_line_items(raw_items)
    discount_rate = _as_float(
        values["discount_rate"] if "discount_rate" in values else current.get("discount_rate")
    )
    tax_rate = _as_float(values["tax_rate"] if "tax_rate" in values else current.get("tax_rate"))
    totals = compute_totals(items, discount_rate=discount_rate, tax_rate=tax_rate)

    values["line_items"] = items
    values["discount_rate"] = discount_rate
    values["tax_rate"] = tax_rate
    values["subtotal"] = totals.subtotal
    values["discount_amount"] = totals.discount_amount
    values["tax_amount"] = totals.tax_amount
    values["total"] = totals.total
    if items:
        values["amount"] = totals.total
    return values
