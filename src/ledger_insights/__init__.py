"""Ledger analytics for small businesses: invoice totals and revenue/expense forecasts."""

from .backtest import BacktestConfig, BacktestResult, rolling_backtest
from .data import expense_breakdown, load_invoices, load_line_items, load_transactions, monthly_totals
from .models import forecast, linear_forecast
from .pipeline import DashboardConfig, DashboardReport, build_dashboard, revenue_transaction_for
from .records import Invoice, InvoiceStatus, Transaction, TransactionType
from .totals import InvoiceTotals, LineItem, invoice_totals, line_total

__all__ = [
    "BacktestConfig",
    "BacktestResult",
    "DashboardConfig",
    "DashboardReport",
    "Invoice",
    "InvoiceStatus",
    "InvoiceTotals",
    "LineItem",
    "Transaction",
    "TransactionType",
    "build_dashboard",
    "expense_breakdown",
    "forecast",
    "invoice_totals",
    "line_total",
    "linear_forecast",
    "load_invoices",
    "load_line_items",
    "load_transactions",
    "monthly_totals",
    "revenue_transaction_for",
    "rolling_backtest",
]

__version__ = "0.1.0"
