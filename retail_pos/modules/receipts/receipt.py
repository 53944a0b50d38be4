"""
receipts/receipt.py

Receipt rendering: a plain dict context, a Jinja2 HTML template, and an optional
WeasyPrint PDF. Figures come straight from the stored Totals; nothing here
recomputes or re-rounds money, it only formats it.
"""
from __future__ import annotations

import logging
from pathlib import Path

from jinja2 import Template

from ...config import TEMPLATES_PATH, Settings
from ...constants import RECEIPT_TEMPLATE
from ..pricing.money import to_display_string
from ..transactions import payment_methods, status as tx_status
from ..transactions.transaction import Transaction

_log = logging.getLogger(__name__)

_RECEIPT_PDF_CSS = """
    @page {
        margin: 6mm;
        size: 80mm 297mm;
    }
    body {
        margin: 0 !important;
        padding: 0 !important;
        width: 100% !important;
    }
"""


def _load_template(template_path: Path | None = None) -> Template:
    path = Path(template_path) if template_path else TEMPLATES_PATH / RECEIPT_TEMPLATE
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Receipt template not found at: {path}. Error: {e}"
        _log.error(msg)
        raise FileNotFoundError(msg) from e
    return Template(content, autoescape=True)


def build_receipt_context(transaction: Transaction, settings: Settings) -> dict:
    """Everything the receipt template shows, already formatted as strings."""
    sym = settings.currency_symbol
    t = transaction.totals

    def money(v) -> str:
        return to_display_string(v, symbol=sym)

    lines = [
        {
            "product_id": it.product_id,
            "name": it.name or it.product_id,
            "quantity": it.quantity,
            "unit_price": money(it.unit_price),
            "line_total": money(it.line_total),
        }
        for it in transaction.items
    ]

    discount = None
    if transaction.discount is not None:
        discount = {
            "description": transaction.discount.description,
            "amount": money(-t.discount_amount),
            "active": t.discount_active,
        }

    tendered = change = None
    if transaction.amount_tendered is not None:
        tendered = money(transaction.amount_tendered)
    if transaction.change_due is not None:
        change = money(transaction.change_due)

    # the rate this transaction was taxed at, not whatever is configured today
    rate = transaction.tax_rate if transaction.tax_rate is not None else settings.tax_rate

    b = settings.business
    return {
        "business": {
            "name": b.name,
            "address": b.address,
            "phone": b.phone,
            "email": b.email,
            "tax_id": b.tax_id,
        },
        "title": "Refund Receipt" if transaction.is_return else "Sales Receipt",
        "total_label": "Refund Total" if transaction.is_return else "Total",
        "id": transaction.id,
        "timestamp": transaction.timestamp.strftime("%Y-%m-%d %H:%M"),
        "status": tx_status.label(transaction.status),
        "payment_method": payment_methods.label(transaction.payment_method),
        "currency": transaction.currency,
        "lines": lines,
        "item_count": transaction.item_count,
        "subtotal": money(t.subtotal),
        "discount": discount,
        "tax_applied": t.tax_applied,
        "tax_rate_pct": f"{(rate * 100).normalize():f}",
        "tax": money(t.tax),
        "total": money(transaction.signed_total),
        "amount_tendered": tendered,
        "change_due": change,
        "is_return": transaction.is_return,
    }


def render_receipt_html(
    transaction: Transaction,
    settings: Settings,
    template_path: Path | None = None,
) -> str:
    template = _load_template(template_path)
    return template.render(**build_receipt_context(transaction, settings))


def write_receipt_pdf(html: str, path: Path | str) -> Path:
    """Render `html` to a PDF file with WeasyPrint and return the path written."""
    from weasyprint import CSS, HTML

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    HTML(string=html).write_pdf(str(out), stylesheets=[CSS(string=_RECEIPT_PDF_CSS)])
    _log.info("Receipt PDF written to %s", out)
    return out
