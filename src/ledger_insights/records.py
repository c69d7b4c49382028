"""Typed ledger records handed to the pipeline by the loaders."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional

from .totals import InvoiceTotals, LineItem, invoice_totals

UNCATEGORIZED = "Non catégorisé"
DEFAULT_CATEGORY_COLOR = "#64748b"


class TransactionType(str, Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"


class InvoiceStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


PENDING_STATUSES = frozenset({InvoiceStatus.SENT, InvoiceStatus.OVERDUE})


@dataclass
class Transaction:
    date: date
    type: TransactionType
    amount: float
    currency: str = "AED"
    description: str = ""
    category: str = UNCATEGORIZED
    category_color: str = DEFAULT_CATEGORY_COLOR
    invoice_id: Optional[str] = None


@dataclass
class Invoice:
    invoice_number: str
    date: date
    status: InvoiceStatus = InvoiceStatus.DRAFT
    client_name: str = ""
    due_date: Optional[date] = None
    currency: str = "AED"
    notes: str = ""
    items: List[LineItem] = field(default_factory=list)

    def totals(self) -> InvoiceTotals:
        return invoice_totals(self.items)

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES


@dataclass
class Client:
    name: str
    email: str = ""
    address: str = ""
    phone: str = ""
