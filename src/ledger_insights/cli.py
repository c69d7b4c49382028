from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from .backtest import BacktestConfig, rolling_backtest
from .config import get_settings
from .data import load_invoices, load_line_items, load_transactions, monthly_totals
from .extraction import draft_from_reply, strip_invoice_json
from .formatting import STATUS_LABELS, format_currency, format_date, month_label
from .log import configure_logging
from .pipeline import DashboardConfig, DashboardReport, build_dashboard
from .totals import invoice_totals


def _parse_date(raw: str) -> date:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {raw!r}") from None


def summarize_metrics(metrics: pd.DataFrame) -> str:
    if metrics.empty:
        return "No metrics were generated."

    valid = metrics[metrics["wmape"].notna()]
    if valid.empty:
        return "Metrics contain only NaN values; inspect error column."

    lines: List[str] = []
    aggregate = (
        valid.groupby(["series", "model"])[["wmape", "mase", "mae"]]
        .mean()
        .sort_values(["series", "wmape"])
    )
    lines.append("Aggregate accuracy (lower is better):")
    lines.append(aggregate.to_string(float_format=lambda x: f"{x:.4f}"))

    errors = metrics[metrics["error"].str.len().gt(0)]
    if not errors.empty:
        lines.append("\nWarnings:")
        for _, row in errors.iterrows():
            lines.append(f"- {row['series']} @ {row['cutoff']}: {row['model']} -> {row['error']}")

    return "\n".join(lines)


def summarize_dashboard(report: DashboardReport, currency: str) -> str:
    stats = report.stats
    lines = [
        f"CA du mois:           {format_currency(stats.revenue, currency)}",
        f"Dépenses:             {format_currency(stats.expenses, currency)}",
        f"Solde:                {format_currency(stats.balance, currency)}",
        f"Factures en attente:  {stats.pending_count} "
        f"(Total: {format_currency(stats.pending_total, currency)})",
    ]
    if report.goal_progress is not None:
        lines.append(f"Objectif de revenus:  {report.goal_progress:.0f}%")

    def _table(frame: pd.DataFrame) -> str:
        shown = frame.copy()
        shown["month"] = shown["month"].map(month_label)
        return shown.to_string(index=False, float_format=lambda x: f"{x:.2f}")

    lines.append("\nHistorique:")
    lines.append(_table(report.monthly))
    if not report.forecast.empty:
        lines.append("\nPrévisions:")
        lines.append(_table(report.forecast))
    if not report.breakdown.empty:
        lines.append("\nRépartition des dépenses:")
        lines.append(
            report.breakdown[["category", "total"]].to_string(
                index=False, float_format=lambda x: f"{x:.2f}"
            )
        )
    return "\n".join(lines)


def build_argument_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Small-business ledger analytics: dashboard, invoice totals and forecasts.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    dashboard = subparsers.add_parser("dashboard", help="Monthly KPIs, history and forecast.")
    dashboard.add_argument(
        "--transactions-path",
        type=Path,
        required=True,
        help="Transactions CSV (columns: date, type, amount, optional category).",
    )
    dashboard.add_argument("--invoices-path", type=Path, help="Invoices CSV (optional).")
    dashboard.add_argument("--items-path", type=Path, help="Invoice line items CSV (optional).")
    dashboard.add_argument("--as-of", type=_parse_date, help="Reference day (default: today).")
    dashboard.add_argument(
        "--horizon",
        type=int,
        default=settings.forecast_horizon,
        help=f"Number of future months to forecast (default: {settings.forecast_horizon}).",
    )
    dashboard.add_argument(
        "--months",
        type=int,
        default=settings.history_months,
        help=f"Trailing months of history (default: {settings.history_months}).",
    )
    dashboard.add_argument(
        "--forecast-output",
        type=Path,
        help="Optional path to write the forecast as CSV.",
    )

    totals = subparsers.add_parser("totals", help="Subtotal, VAT and total per invoice.")
    totals.add_argument("--items-path", type=Path, required=True, help="Invoice line items CSV.")
    totals.add_argument("--invoice", help="Only show this invoice number.")

    backtest = subparsers.add_parser("backtest", help="Rolling backtest of the forecast models.")
    backtest.add_argument("--transactions-path", type=Path, required=True)
    backtest.add_argument("--as-of", type=_parse_date, help="Reference day (default: today).")
    backtest.add_argument("--months", type=int, default=24, help="History length (default: 24).")
    backtest.add_argument(
        "--horizon",
        type=int,
        default=settings.forecast_horizon,
        help=f"Forecast horizon in months (default: {settings.forecast_horizon}).",
    )
    backtest.add_argument(
        "--min-train",
        type=int,
        default=3,
        help="Minimum history (months) before the first fold (default: 3).",
    )
    backtest.add_argument(
        "--metrics-output",
        type=Path,
        help="Optional path to write fold-level backtest metrics as CSV.",
    )

    extract = subparsers.add_parser("extract", help="Invoice draft from an assistant reply.")
    extract.add_argument("--reply-path", type=Path, required=True, help="Text file with the reply.")

    return parser


def run_dashboard(args: argparse.Namespace) -> None:
    settings = get_settings()
    transactions = load_transactions(args.transactions_path)
    items = (
        load_line_items(args.items_path, settings.default_vat_rate) if args.items_path else {}
    )
    invoices = (
        load_invoices(args.invoices_path, items, settings.currency) if args.invoices_path else []
    )
    config = DashboardConfig(
        horizon=args.horizon,
        history_months=args.months,
        currency=settings.currency,
        revenue_goals=settings.revenue_goals,
    )
    report = build_dashboard(transactions, invoices, config, as_of=args.as_of)
    print(summarize_dashboard(report, config.currency))

    if args.forecast_output:
        report.forecast.to_csv(args.forecast_output, index=False)
        print(f"\nSaved forecast to {args.forecast_output}")


def run_totals(args: argparse.Namespace) -> None:
    settings = get_settings()
    items = load_line_items(args.items_path, settings.default_vat_rate)
    if args.invoice:
        if args.invoice not in items:
            raise ValueError(f"Invoice {args.invoice!r} has no line items.")
        items = {args.invoice: items[args.invoice]}

    rows = []
    for number, lines in items.items():
        totals = invoice_totals(lines).rounded()
        rows.append({"invoice_number": number, "lines": len(lines), **totals.as_dict()})
    frame = pd.DataFrame.from_records(
        rows, columns=["invoice_number", "lines", "subtotal", "tax_total", "grand_total"]
    )
    if frame.empty:
        print("No line items found.")
    else:
        print(frame.to_string(index=False, float_format=lambda x: f"{x:.2f}"))


def run_backtest(args: argparse.Namespace) -> None:
    transactions = load_transactions(args.transactions_path)
    monthly = monthly_totals(transactions, months=args.months, as_of=args.as_of)
    config = BacktestConfig(horizon=args.horizon, min_train=args.min_train)
    result = rolling_backtest(monthly, config)

    print(summarize_metrics(result.metrics))
    if result.model_selection:
        print("\nBest model per series:")
        for series, model in sorted(result.model_selection.items()):
            print(f"- {series}: {model}")

    if args.metrics_output:
        result.metrics.to_csv(args.metrics_output, index=False)
        print(f"\nSaved metrics to {args.metrics_output}")


def run_extract(args: argparse.Namespace) -> None:
    settings = get_settings()
    reply = args.reply_path.read_text(encoding="utf-8")
    message = strip_invoice_json(reply)
    if message:
        print(message + "\n")
    draft = draft_from_reply(reply, settings=settings)
    if draft is None:
        print("No invoice proposal found in the reply.")
        return

    invoice, client = draft
    totals = invoice.totals()
    print(f"Client:     {client.name or '-'}")
    print(f"Date:       {format_date(invoice.date)}")
    print(f"Échéance:   {format_date(invoice.due_date) or '-'}")
    print(f"Statut:     {STATUS_LABELS[invoice.status]}")
    for item in invoice.items:
        print(
            f"- {item.description or '(sans description)'}: {item.quantity:g} x "
            f"{format_currency(item.unit_price, invoice.currency)} "
            f"(TVA {item.vat_rate:g}%) = {format_currency(item.total, invoice.currency)}"
        )
    print(f"Sous-total: {format_currency(totals.subtotal, invoice.currency)}")
    print(f"TVA totale: {format_currency(totals.tax_total, invoice.currency)}")
    print(f"Total TTC:  {format_currency(totals.grand_total, invoice.currency)}")


COMMANDS = {
    "dashboard": run_dashboard,
    "totals": run_totals,
    "backtest": run_backtest,
    "extract": run_extract,
}


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_argument_parser()
    args = parser.parse_args(argv)
    configure_logging()

    try:
        COMMANDS[args.command](args)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()
