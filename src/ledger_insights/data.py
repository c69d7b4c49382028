from __future__ import annotations

from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .log import get_logger
from .records import (
    DEFAULT_CATEGORY_COLOR,
    UNCATEGORIZED,
    Invoice,
    InvoiceStatus,
    Transaction,
    TransactionType,
)
from .totals import LineItem, round_cents

logger = get_logger(__name__)

TRANSACTION_COLUMNS: Sequence[str] = ("date", "type", "amount")
LINE_ITEM_COLUMNS: Sequence[str] = ("invoice_number",)
INVOICE_COLUMNS: Sequence[str] = ("invoice_number", "status", "date")


def _require_columns(df: pd.DataFrame, required: Sequence[str], label: str) -> None:
    missing = set(required) - set(df.columns)
    if missing:
        raise ValueError(f"{label} data missing required columns: {sorted(missing)}")


def _text(value: object, default: str = "") -> str:
    if value is None or pd.isna(value):
        return default
    text = str(value).strip()
    return text or default


def _parse_dates(series: pd.Series) -> pd.Series:
    return pd.to_datetime(series.astype(str).str[:10], errors="coerce")


def load_transactions(transactions_path: Path) -> List[Transaction]:
    df = pd.read_csv(transactions_path, dtype={"invoice_id": str})
    _require_columns(df, TRANSACTION_COLUMNS, "Transaction")

    df["date"] = _parse_dates(df["date"])
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce")
    df["type"] = df["type"].astype(str).str.strip().str.lower()
    valid_types = {t.value for t in TransactionType}

    before = len(df)
    df = df.dropna(subset=["date", "amount"])
    df = df[df["type"].isin(valid_types)]
    if len(df) < before:
        logger.warning("transactions_dropped", path=str(transactions_path), dropped=before - len(df))

    transactions = []
    for row in df.to_dict(orient="records"):
        invoice_id = _text(row.get("invoice_id"))
        transactions.append(
            Transaction(
                date=row["date"].date(),
                type=TransactionType(row["type"]),
                amount=float(row["amount"]),
                currency=_text(row.get("currency"), "AED"),
                description=_text(row.get("description")),
                category=_text(row.get("category"), UNCATEGORIZED),
                category_color=_text(row.get("category_color"), DEFAULT_CATEGORY_COLOR),
                invoice_id=invoice_id or None,
            )
        )
    logger.debug("transactions_loaded", path=str(transactions_path), count=len(transactions))
    return transactions


def load_line_items(items_path: Path, default_vat_rate: float = 5.0) -> Dict[str, List[LineItem]]:
    """Read invoice line items grouped by invoice number, in file order.

    Blank or zero quantities become 1, blank prices 0 and blank VAT rates
    ``default_vat_rate``. A VAT rate of 0 is kept as given.
    """
    df = pd.read_csv(items_path, dtype={"invoice_number": str})
    _require_columns(df, LINE_ITEM_COLUMNS, "Line item")

    for column in ("quantity", "unit_price", "vat_rate"):
        if column not in df.columns:
            df[column] = float("nan")
        df[column] = pd.to_numeric(df[column], errors="coerce")
    if "description" not in df.columns:
        df["description"] = ""

    df["quantity"] = df["quantity"].fillna(0.0)
    df.loc[df["quantity"] == 0, "quantity"] = 1.0
    df["unit_price"] = df["unit_price"].fillna(0.0)
    df["vat_rate"] = df["vat_rate"].fillna(default_vat_rate)

    grouped: Dict[str, List[LineItem]] = defaultdict(list)
    for row in df.to_dict(orient="records"):
        number = _text(row["invoice_number"])
        if not number:
            continue
        grouped[number].append(
            LineItem(
                description=_text(row["description"]),
                quantity=float(row["quantity"]),
                unit_price=float(row["unit_price"]),
                vat_rate=float(row["vat_rate"]),
            )
        )
    return dict(grouped)


def _status(raw: object) -> InvoiceStatus:
    try:
        return InvoiceStatus(_text(raw).lower())
    except ValueError:
        return InvoiceStatus.DRAFT


def load_invoices(
    invoices_path: Path,
    items: Optional[Dict[str, List[LineItem]]] = None,
    default_currency: str = "AED",
) -> List[Invoice]:
    df = pd.read_csv(invoices_path, dtype={"invoice_number": str})
    _require_columns(df, INVOICE_COLUMNS, "Invoice")

    df["date"] = _parse_dates(df["date"])
    if "due_date" in df.columns:
        df["due_date"] = _parse_dates(df["due_date"])
    df = df.dropna(subset=["invoice_number", "date"])

    items = items or {}
    invoices = []
    for row in df.to_dict(orient="records"):
        number = _text(row["invoice_number"])
        due = row.get("due_date")
        invoices.append(
            Invoice(
                invoice_number=number,
                date=row["date"].date(),
                status=_status(row["status"]),
                client_name=_text(row.get("client_name")),
                due_date=None if due is None or pd.isna(due) else due.date(),
                currency=_text(row.get("currency"), default_currency),
                notes=_text(row.get("notes")),
                items=list(items.get(number, [])),
            )
        )
    return invoices


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    records = [
        {
            "date": pd.Timestamp(t.date),
            "type": t.type.value,
            "amount": float(t.amount),
            "category": t.category,
            "color": t.category_color,
        }
        for t in transactions
    ]
    df = pd.DataFrame.from_records(
        records, columns=["date", "type", "amount", "category", "color"]
    )
    df["date"] = pd.to_datetime(df["date"])
    df["amount"] = df["amount"].astype(float)
    return df


def _monthly_sum(df: pd.DataFrame, kind: TransactionType, periods: pd.PeriodIndex) -> pd.Series:
    subset = df[df["type"] == kind.value]
    if subset.empty:
        return pd.Series(0.0, index=periods)
    sums = subset.groupby("period")["amount"].sum()
    return sums.reindex(periods, fill_value=0.0).astype(float)


def monthly_totals(
    transactions: Iterable[Transaction],
    months: int = 6,
    as_of: Optional[date] = None,
) -> pd.DataFrame:
    """Revenue and expenses for the trailing ``months`` calendar months.

    The last row is the month containing ``as_of``. Months without any
    transaction are present with zeros.
    """
    as_of = as_of or date.today()
    end = pd.Timestamp(as_of).to_period("M")
    periods = pd.period_range(end=end, periods=months, freq="M")

    df = transactions_frame(transactions)
    df["period"] = df["date"].dt.to_period("M")
    df = df[df["period"].isin(periods)]

    return pd.DataFrame(
        {
            "month": [str(p) for p in periods],
            "revenue": _monthly_sum(df, TransactionType.REVENUE, periods).map(round_cents).to_numpy(),
            "expenses": _monthly_sum(df, TransactionType.EXPENSE, periods).map(round_cents).to_numpy(),
        }
    )


def expense_breakdown(transactions: Iterable[Transaction], month: str) -> pd.DataFrame:
    df = transactions_frame(transactions)
    df = df[(df["type"] == TransactionType.EXPENSE.value) & (df["date"].dt.strftime("%Y-%m") == month)]
    if df.empty:
        return pd.DataFrame(columns=["category", "color", "total"])

    breakdown = (
        df.groupby("category", sort=False)
        .agg(color=("color", "first"), total=("amount", "sum"))
        .reset_index()
        .sort_values("total", ascending=False, kind="stable")
        .reset_index(drop=True)
    )
    return breakdown
