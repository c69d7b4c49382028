"""Turn AI-proposed invoices into typed drafts.

The assistant replies in free text and, when it proposes an invoice,
includes one fenced block tagged ``invoice_json``::

    ```invoice_json
    {"client_name": "...", "date": "YYYY-MM-DD", "items": [...]}
    ```
"""

from __future__ import annotations

import json
import re
from datetime import date
from typing import Any, Dict, Optional, Tuple

import pandas as pd

from .config import Settings, get_settings
from .log import get_logger
from .records import Client, Invoice, InvoiceStatus
from .totals import LineItem

logger = get_logger(__name__)

INVOICE_BLOCK = re.compile(r"```invoice_json\s*(.*?)```", re.DOTALL)

DRAFT_NUMBER = "BROUILLON"


def strip_invoice_json(reply: str) -> str:
    """The reply text with every ``invoice_json`` block removed."""
    return INVOICE_BLOCK.sub("", reply or "").strip()


def extract_invoice_json(reply: str) -> Optional[Dict[str, Any]]:
    match = INVOICE_BLOCK.search(reply or "")
    if match is None:
        return None
    try:
        payload = json.loads(match.group(1).strip())
    except json.JSONDecodeError as exc:
        logger.warning("invoice_json_malformed", error=str(exc))
        return None
    if not isinstance(payload, dict):
        logger.warning("invoice_json_not_object", kind=type(payload).__name__)
        return None
    return payload


def _number(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return default if pd.isna(number) else number


def _date(value: Any) -> Optional[date]:
    if not value:
        return None
    parsed = pd.to_datetime(str(value)[:10], errors="coerce")
    return None if pd.isna(parsed) else parsed.date()


def _line_item(raw: Dict[str, Any], default_vat_rate: float) -> LineItem:
    quantity = _number(raw.get("quantity"), 1.0)
    vat_rate = raw.get("vat_rate")
    return LineItem(
        description=str(raw.get("description") or ""),
        quantity=quantity or 1.0,
        unit_price=_number(raw.get("unit_price"), 0.0),
        vat_rate=default_vat_rate if vat_rate is None else _number(vat_rate, default_vat_rate),
    )


def draft_from_payload(
    payload: Dict[str, Any],
    settings: Optional[Settings] = None,
    today: Optional[date] = None,
) -> Tuple[Invoice, Client]:
    settings = settings or get_settings()
    raw_items = payload.get("items") or []
    items = [
        _line_item(raw, settings.default_vat_rate)
        for raw in raw_items
        if isinstance(raw, dict)
    ]
    client = Client(
        name=str(payload.get("client_name") or ""),
        email=str(payload.get("client_email") or ""),
        address=str(payload.get("client_address") or ""),
        phone=str(payload.get("client_phone") or ""),
    )
    invoice = Invoice(
        invoice_number=DRAFT_NUMBER,
        date=_date(payload.get("date")) or today or date.today(),
        status=InvoiceStatus.DRAFT,
        client_name=client.name,
        due_date=_date(payload.get("due_date")),
        currency=str(payload.get("currency") or settings.currency),
        notes=str(payload.get("notes") or ""),
        items=items,
    )
    return invoice, client


def draft_from_reply(
    reply: str,
    settings: Optional[Settings] = None,
    today: Optional[date] = None,
) -> Optional[Tuple[Invoice, Client]]:
    payload = extract_invoice_json(reply)
    if payload is None:
        return None
    return draft_from_payload(payload, settings=settings, today=today)
