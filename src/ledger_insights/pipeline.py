from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .data import expense_breakdown, monthly_totals
from .log import get_logger
from .models import linear_forecast
from .records import Invoice, InvoiceStatus, Transaction, TransactionType
from .totals import round_cents

logger = get_logger(__name__)


@dataclass
class DashboardConfig:
    horizon: int = 3
    history_months: int = 6
    currency: str = "AED"
    # monthly revenue targets keyed by "YYYY-MM"
    revenue_goals: Dict[str, float] = field(default_factory=dict)


@dataclass
class DashboardStats:
    revenue: float
    expenses: float
    balance: float
    pending_count: int
    pending_total: float


@dataclass
class DashboardReport:
    stats: DashboardStats
    monthly: pd.DataFrame
    forecast: pd.DataFrame
    breakdown: pd.DataFrame
    goal_progress: Optional[float]


def build_forecast_frame(monthly: pd.DataFrame, horizon: int) -> pd.DataFrame:
    """Project revenue and expenses ``horizon`` months past the last row of ``monthly``."""
    if monthly.empty:
        return pd.DataFrame(columns=["month", "revenue", "expenses"])

    revenue = linear_forecast(monthly["revenue"].fillna(0.0).tolist(), horizon)
    expenses = linear_forecast(monthly["expenses"].fillna(0.0).tolist(), horizon)

    last = pd.Period(monthly["month"].iloc[-1], freq="M")
    months = [str(last + i + 1) for i in range(horizon)]
    return pd.DataFrame({"month": months, "revenue": revenue, "expenses": expenses})


def compute_stats(
    transactions: Sequence[Transaction],
    invoices: Iterable[Invoice],
    as_of: date,
) -> DashboardStats:
    in_month = [
        t for t in transactions if t.date.year == as_of.year and t.date.month == as_of.month
    ]
    revenue = sum(t.amount for t in in_month if t.type is TransactionType.REVENUE)
    expenses = sum(t.amount for t in in_month if t.type is TransactionType.EXPENSE)

    pending = [inv for inv in invoices if inv.is_pending]
    pending_total = sum(inv.totals().grand_total for inv in pending)

    return DashboardStats(
        revenue=round_cents(revenue),
        expenses=round_cents(expenses),
        balance=round_cents(revenue - expenses),
        pending_count=len(pending),
        pending_total=round_cents(pending_total),
    )


def goal_progress(revenue: float, goal: Optional[float]) -> Optional[float]:
    if not goal or goal <= 0 or revenue <= 0:
        return None
    return min(revenue / goal * 100, 100.0)


def build_dashboard(
    transactions: Sequence[Transaction],
    invoices: Sequence[Invoice],
    config: DashboardConfig,
    as_of: Optional[date] = None,
) -> DashboardReport:
    as_of = as_of or date.today()
    monthly = monthly_totals(transactions, months=config.history_months, as_of=as_of)
    forecast = build_forecast_frame(monthly, config.horizon)
    stats = compute_stats(transactions, invoices, as_of)
    month = as_of.strftime("%Y-%m")
    breakdown = expense_breakdown(transactions, month)

    logger.info(
        "dashboard_built",
        as_of=as_of.isoformat(),
        transactions=len(transactions),
        invoices=len(invoices),
        horizon=config.horizon,
    )
    return DashboardReport(
        stats=stats,
        monthly=monthly,
        forecast=forecast,
        breakdown=breakdown,
        goal_progress=goal_progress(stats.revenue, config.revenue_goals.get(month)),
    )


def revenue_transaction_for(
    invoice: Invoice,
    paid_on: date,
    existing: Iterable[Transaction] = (),
) -> Optional[Transaction]:
    """Revenue entry to book when ``invoice`` is marked paid.

    Returns ``None`` if the invoice is not paid or a transaction already
    references its number.
    """
    if invoice.status is not InvoiceStatus.PAID:
        return None
    if any(t.invoice_id == invoice.invoice_number for t in existing):
        logger.debug("revenue_already_booked", invoice=invoice.invoice_number)
        return None
    return Transaction(
        date=paid_on,
        type=TransactionType.REVENUE,
        amount=round_cents(invoice.totals().grand_total),
        currency=invoice.currency,
        description=f"Facture {invoice.invoice_number}",
        invoice_id=invoice.invoice_number,
    )


def mark_paid(
    invoice: Invoice,
    paid_on: date,
    ledger: List[Transaction],
) -> Optional[Transaction]:
    invoice.status = InvoiceStatus.PAID
    booked = revenue_transaction_for(invoice, paid_on, ledger)
    if booked is not None:
        ledger.append(booked)
        logger.info("revenue_booked", invoice=invoice.invoice_number, amount=booked.amount)
    return booked
