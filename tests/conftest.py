"""Pytest configuration and fixtures."""

from datetime import date

import pytest

from ledger_insights.config import get_settings
from ledger_insights.records import Invoice, InvoiceStatus, Transaction, TransactionType
from ledger_insights.totals import LineItem


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate every test from LEDGER_* variables and the settings cache."""
    for key in ("CURRENCY", "DEFAULT_VAT_RATE", "FORECAST_HORIZON", "HISTORY_MONTHS", "REVENUE_GOALS"):
        monkeypatch.delenv(f"LEDGER_{key}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _tx(day, kind, amount, category="Non catégorisé", invoice_id=None):
    return Transaction(
        date=day,
        type=kind,
        amount=amount,
        category=category,
        invoice_id=invoice_id,
    )


@pytest.fixture
def transactions():
    revenue, expense = TransactionType.REVENUE, TransactionType.EXPENSE
    return [
        _tx(date(2025, 1, 10), revenue, 1000.0),
        _tx(date(2025, 1, 20), expense, 400.0, "Loyer"),
        _tx(date(2025, 2, 5), revenue, 1500.0),
        _tx(date(2025, 2, 15), expense, 400.0, "Loyer"),
        _tx(date(2025, 3, 3), revenue, 2000.0),
        _tx(date(2025, 3, 4), expense, 400.0, "Loyer"),
        _tx(date(2025, 3, 12), expense, 150.0, "Logiciels"),
        _tx(date(2025, 3, 28), expense, 50.0),
        # outside the March 2025 window used by most tests
        _tx(date(2024, 6, 1), revenue, 99999.0),
    ]


@pytest.fixture
def invoices():
    return [
        Invoice(
            invoice_number="INV-001",
            date=date(2025, 3, 1),
            status=InvoiceStatus.SENT,
            items=[LineItem("Conseil", 1, 100, 5), LineItem("Support", 2, 50, 0)],
        ),
        Invoice(
            invoice_number="INV-002",
            date=date(2025, 3, 2),
            status=InvoiceStatus.OVERDUE,
            items=[LineItem("Audit", 1, 1000, 5)],
        ),
        Invoice(
            invoice_number="INV-003",
            date=date(2025, 3, 5),
            status=InvoiceStatus.DRAFT,
            items=[LineItem("Formation", 3, 200, 5)],
        ),
    ]


@pytest.fixture
def transactions_csv(tmp_path):
    path = tmp_path / "transactions.csv"
    path.write_text(
        "date,type,amount,currency,description,category,category_color,invoice_id\n"
        "2025-01-10,revenue,1000,AED,Vente,,,\n"
        "2025-01-20,expense,400,AED,Loyer janvier,Loyer,#ef4444,\n"
        "2025-02-05T09:30:00,Revenue,1500,AED,Vente,,,\n"
        "not-a-date,expense,10,AED,,,,\n"
        "2025-02-10,transfer,10,AED,,,,\n"
        "2025-03-01,expense,abc,AED,,,,\n"
        "2025-03-03,revenue,2000,AED,Facture INV-001,,,INV-001\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def items_csv(tmp_path):
    path = tmp_path / "items.csv"
    path.write_text(
        "invoice_number,description,quantity,unit_price,vat_rate\n"
        "INV-001,Conseil,1,100,5\n"
        "INV-001,Support,2,50,0\n"
        "INV-002,Audit,,1000,\n"
        "INV-002,Remise,0,,5\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def invoices_csv(tmp_path):
    path = tmp_path / "invoices.csv"
    path.write_text(
        "invoice_number,client_name,date,due_date,status,currency,notes\n"
        "INV-001,Acme,2025-03-01,2025-03-31,sent,,\n"
        "INV-002,Globex,2025-03-02,,OVERDUE,EUR,Relance\n"
        "INV-003,Initech,2025-03-05,,archived,,\n",
        encoding="utf-8",
    )
    return path


INVOICE_REPLY = """Voici la facture proposée à partir du bon de commande.

```invoice_json
{
  "client_name": "Acme Trading LLC",
  "client_email": "billing@acme.example",
  "client_address": "Dubai",
  "date": "2025-03-01",
  "due_date": "2025-03-31",
  "currency": "",
  "notes": "Paiement à 30 jours",
  "items": [
    {"description": "Conseil", "quantity": 2, "unit_price": 100, "vat_rate": 5},
    {"description": "Frais", "quantity": 0, "unit_price": "25.5"},
    {"description": "Exonéré", "quantity": 1, "unit_price": 50, "vat_rate": 0}
  ]
}
```

Le montant de la TVA a été calculé à 5 %."""


@pytest.fixture
def invoice_reply():
    return INVOICE_REPLY
