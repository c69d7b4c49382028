"""Tests for display formatting."""

from datetime import date

from ledger_insights.formatting import (
    GROUP_SEPARATOR,
    STATUS_LABELS,
    format_currency,
    format_date,
    month_label,
)
from ledger_insights.records import InvoiceStatus


def test_format_currency_french_grouping():
    assert format_currency(1234567.891, "AED") == f"1{GROUP_SEPARATOR}234{GROUP_SEPARATOR}567,89 AED"


def test_format_currency_small_and_missing_amounts():
    assert format_currency(5, "EUR") == "5,00 EUR"
    assert format_currency(None) == "0,00 AED"
    assert format_currency(-1500.5, "EUR") == f"-1{GROUP_SEPARATOR}500,50 EUR"


def test_format_date():
    assert format_date(date(2025, 3, 7)) == "07/03/2025"
    assert format_date("2025-12-31") == "31/12/2025"
    assert format_date(None) == ""
    assert format_date("") == ""


def test_month_label():
    assert month_label("2025-01") == "janv. 25"
    assert month_label("2024-08") == "août 24"
    assert month_label(date(2026, 12, 3)) == "déc. 26"


def test_labels_cover_all_values():
    assert set(STATUS_LABELS) == set(InvoiceStatus)
    assert STATUS_LABELS[InvoiceStatus.PAID] == "Payée"
