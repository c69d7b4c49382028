"""Tests for parsing AI invoice proposals."""

from datetime import date

import pytest

from ledger_insights.config import Settings
from ledger_insights.extraction import (
    draft_from_payload,
    draft_from_reply,
    extract_invoice_json,
    strip_invoice_json,
)
from ledger_insights.records import InvoiceStatus


def test_extract_invoice_json(invoice_reply):
    payload = extract_invoice_json(invoice_reply)
    assert payload["client_name"] == "Acme Trading LLC"
    assert len(payload["items"]) == 3


def test_reply_without_block():
    assert extract_invoice_json("Bonjour, envoyez-moi le document.") is None
    assert draft_from_reply("Pas de facture ici.") is None


def test_malformed_json_is_ignored():
    reply = "```invoice_json\n{\"client_name\": \"Acme\",}\n```"
    assert extract_invoice_json(reply) is None


def test_non_object_payload_is_ignored():
    assert extract_invoice_json("```invoice_json\n[1, 2]\n```") is None


def test_strip_invoice_json_keeps_surrounding_text(invoice_reply):
    message = strip_invoice_json(invoice_reply)
    assert message.startswith("Voici la facture proposée")
    assert message.endswith("calculé à 5 %.")
    assert "invoice_json" not in message
    assert "Acme Trading LLC" not in message


def test_strip_invoice_json_removes_every_block():
    reply = "A\n```invoice_json\n{}\n```\nB\n```invoice_json\n[]\n```\n"
    assert strip_invoice_json(reply) == "A\n\nB"
    assert strip_invoice_json("  Rien à extraire.\n") == "Rien à extraire."
    assert strip_invoice_json(None) == ""


def test_draft_defaults(invoice_reply):
    settings = Settings(currency="AED", default_vat_rate=5.0)
    invoice, client = draft_from_reply(invoice_reply, settings=settings)

    assert client.name == "Acme Trading LLC"
    assert client.email == "billing@acme.example"
    assert invoice.client_name == client.name
    assert invoice.status is InvoiceStatus.DRAFT
    assert invoice.currency == "AED"
    assert invoice.date == date(2025, 3, 1)
    assert invoice.due_date == date(2025, 3, 31)

    consulting, fees, exempt = invoice.items
    assert consulting.total == pytest.approx(210)
    assert fees.quantity == 1
    assert fees.unit_price == pytest.approx(25.5)
    assert fees.vat_rate == 5.0
    assert exempt.vat_rate == 0

    totals = invoice.totals()
    assert totals.subtotal == pytest.approx(275.5)
    assert totals.tax_total == pytest.approx(11.275)


def test_missing_date_uses_today():
    settings = Settings(currency="EUR", default_vat_rate=20.0)
    invoice, _ = draft_from_payload(
        {"items": [{"description": "Abonnement", "unit_price": 10}]},
        settings=settings,
        today=date(2025, 5, 2),
    )
    assert invoice.date == date(2025, 5, 2)
    assert invoice.currency == "EUR"
    assert invoice.items[0].vat_rate == 20.0
    assert invoice.items[0].quantity == 1
