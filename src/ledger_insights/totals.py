"""Invoice line and invoice total computation.

Aggregation runs at full float precision; only :func:`round_cents` and
:meth:`InvoiceTotals.rounded` round, and only for presentation.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Dict, Iterable


@dataclass(frozen=True)
class LineItem:
    description: str = ""
    quantity: float = 1.0
    unit_price: float = 0.0
    vat_rate: float = 5.0

    @property
    def amount(self) -> float:
        return self.quantity * self.unit_price

    @property
    def tax(self) -> float:
        return self.amount * self.vat_rate / 100

    @property
    def total(self) -> float:
        return line_total(self.quantity, self.unit_price, self.vat_rate)


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float = 0.0
    tax_total: float = 0.0
    grand_total: float = 0.0

    def rounded(self) -> "InvoiceTotals":
        return InvoiceTotals(
            subtotal=round_cents(self.subtotal),
            tax_total=round_cents(self.tax_total),
            grand_total=round_cents(self.grand_total),
        )

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def round_cents(value: float) -> float:
    """Round to cents with halves going up, on the binary value of ``value``.

    ``2.675`` is stored as 2.67499..., so it rounds to 2.67; ``0.125`` is
    exact and rounds to 0.13; ``-0.125`` rounds to -0.12.
    """
    return math.floor(float(value) * 100 + 0.5) / 100


def line_total(quantity: float, unit_price: float, vat_rate: float) -> float:
    return quantity * unit_price * (1 + vat_rate / 100)


def invoice_totals(items: Iterable[LineItem]) -> InvoiceTotals:
    subtotal = 0.0
    tax_total = 0.0
    for item in items:
        # No sign validation: credit notes carry negative quantities or prices.
        base = item.quantity * item.unit_price
        subtotal += base
        tax_total += base * item.vat_rate / 100
    return InvoiceTotals(
        subtotal=subtotal,
        tax_total=tax_total,
        grand_total=subtotal + tax_total,
    )
