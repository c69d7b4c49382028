"""Display helpers: French-style amounts, dates and labels."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

import pandas as pd

from .records import InvoiceStatus
from .totals import round_cents

# U+202F, the thousands separator used by fr-FR number formatting.
GROUP_SEPARATOR = "\u202f"

MONTHS_FR_SHORT = (
    "janv.", "févr.", "mars", "avr.", "mai", "juin",
    "juil.", "août", "sept.", "oct.", "nov.", "déc.",
)

STATUS_LABELS = {
    InvoiceStatus.DRAFT: "Brouillon",
    InvoiceStatus.SENT: "Envoyée",
    InvoiceStatus.PAID: "Payée",
    InvoiceStatus.OVERDUE: "En retard",
    InvoiceStatus.CANCELLED: "Annulée",
}


def format_amount(amount: Optional[float]) -> str:
    value = round_cents(amount or 0.0)
    text = f"{value:,.2f}"
    return text.replace(",", GROUP_SEPARATOR).replace(".", ",")


def format_currency(amount: Optional[float], currency: str = "AED") -> str:
    return f"{format_amount(amount)} {currency}"


def format_date(value: Union[date, datetime, str, None]) -> str:
    if not value:
        return ""
    parsed = pd.Timestamp(value)
    return parsed.strftime("%d/%m/%Y")


def month_label(month: Union[str, date]) -> str:
    """``"2025-01"`` -> ``"janv. 25"``."""
    period = pd.Timestamp(month).to_period("M")
    return f"{MONTHS_FR_SHORT[period.month - 1]} {period.year % 100:02d}"
