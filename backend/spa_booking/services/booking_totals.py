# backend/spa_booking/services/booking_totals.py
"""
Booking totals.

Totals are a pure function of the snapshotted selections. Currencies are
summed as-is: a booking mixing currencies gets a numerically summed total
with no conversion.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Mapping

_ZERO = Decimal("0")


@dataclass(frozen=True)
class BookingTotals:
    subtotal: Decimal
    grand_total: Decimal

    def as_dict(self) -> dict[str, Decimal]:
        return {"subtotal": self.subtotal, "grand_total": self.grand_total}


def _price(selection: Mapping[str, Any]) -> Decimal:
    raw = selection.get("price_snapshot")
    if raw is None:
        return _ZERO
    return raw if isinstance(raw, Decimal) else Decimal(str(raw))


def _qty(selection: Mapping[str, Any]) -> int:
    qty = selection.get("qty")
    return 1 if qty is None else int(qty)


def line_total(selection: Mapping[str, Any]) -> Decimal:
    return _price(selection) * _qty(selection)


def compute_totals(items: Iterable[Mapping[str, Any]]) -> BookingTotals:
    subtotal = _ZERO
    for item in items:
        for program in item.get("programs") or ():
            subtotal += line_total(program)
        for package in item.get("packages") or ():
            subtotal += line_total(package)
    # No discount or tax layer: grand_total == subtotal
    return BookingTotals(subtotal=subtotal, grand_total=subtotal)


def currencies_in(items: Iterable[Mapping[str, Any]]) -> set[str]:
    """Distinct snapshot currencies across all selections."""
    found: set[str] = set()
    for item in items:
        for selection in [*(item.get("programs") or ()), *(item.get("packages") or ())]:
            currency = selection.get("currency_snapshot")
            if currency:
                found.add(str(currency))
    return found
