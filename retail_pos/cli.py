"""
Command-line access to the transaction store.

    python -m retail_pos init-db
    python -m retail_pos recent --limit 10
    python -m retail_pos show TX20250101-0001
    python -m retail_pos summary --date 2025-01-01
    python -m retail_pos products --date 2025-01-01 --category Beverages
    python -m retail_pos receipt TX20250101-0001 --pdf out/receipt.pdf
"""
from __future__ import annotations

import argparse
from dataclasses import replace
from datetime import date, datetime, time, timezone
import logging
from pathlib import Path
import sys

from . import __version__
from .config import load_settings
from .constants import APP_NAME
from .database import get_connection, get_schema_version
from .database.repositories import TransactionsRepo
from .errors import PersistenceError
from .modules.pricing.money import to_display_string
from .modules.receipts import render_receipt_html, write_receipt_pdf
from .modules.transactions import ledger, payment_methods, status as tx_status
from .utils.helpers import today_str
from .utils.loggers import get_logger


def _parse_day(raw: str) -> date:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {raw!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="retail_pos", description=f"{APP_NAME} transaction tools")
    parser.add_argument("--db", help="Path to SQLite database (default: POS_DB_PATH or data/pos.db)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at INFO level")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create the schema and seed the starter catalog")

    p = sub.add_parser("recent", help="List the most recent transactions")
    p.add_argument("--limit", type=int, default=20)

    p = sub.add_parser("show", help="Show one transaction with its lines")
    p.add_argument("transaction_id")

    p = sub.add_parser("summary", help="Sales / returns summary for one day (UTC)")
    p.add_argument("--date", type=_parse_day, default=None, help="YYYY-MM-DD (default: today)")

    p = sub.add_parser("products", help="Units and revenue per product for one day (UTC)")
    p.add_argument("--date", type=_parse_day, default=None, help="YYYY-MM-DD (default: today)")
    p.add_argument("--category", default=None)

    p = sub.add_parser("receipt", help="Render a receipt as HTML (stdout) or PDF")
    p.add_argument("transaction_id")
    p.add_argument("--pdf", type=Path, default=None, help="Write a PDF here instead of printing HTML")

    return parser


def _print_transaction_row(tx, out) -> None:
    print(
        f"{tx.id:<18} {tx.timestamp:%Y-%m-%d %H:%M}  "
        f"{'Return' if tx.is_return else 'Sale':<6} "
        f"{payment_methods.label(tx.payment_method):<14} "
        f"{tx_status.label(tx.status):<18} "
        f"{to_display_string(tx.signed_total):>12}",
        file=out,
    )


def _cmd_init_db(conn, args, settings, out) -> int:
    print(f"Database ready at {settings.db_path} (schema {get_schema_version(conn)})", file=out)
    return 0


def _cmd_recent(repo, args, settings, out) -> int:
    rows = repo.load_recent(args.limit)
    if not rows:
        print("No transactions.", file=out)
        return 0
    for tx in rows:
        _print_transaction_row(tx, out)
    return 0


def _cmd_show(repo, args, settings, out) -> int:
    tx = repo.load_by_id(args.transaction_id)
    if tx is None:
        print(f"Transaction not found: {args.transaction_id}", file=sys.stderr)
        return 1
    _print_transaction_row(tx, out)
    for it in tx.items:
        print(
            f"    {it.quantity:>4} x {it.name or it.product_id:<28} "
            f"{to_display_string(it.unit_price):>10} {to_display_string(it.line_total):>12}",
            file=out,
        )
    t = tx.totals
    print(f"    Subtotal: {to_display_string(t.subtotal)}", file=out)
    if tx.discount is not None:
        print(f"    {tx.discount.description}: -{to_display_string(t.discount_amount)}", file=out)
    print(f"    Tax: {to_display_string(t.tax) if t.tax_applied else 'exempt'}", file=out)
    print(f"    Total: {to_display_string(tx.signed_total)}", file=out)
    return 0


def _cmd_summary(repo, args, settings, out) -> int:
    day = args.date or date.fromisoformat(today_str())
    s = ledger.daily_summary(repo, day)
    print(f"Summary for {day.isoformat()}", file=out)
    print(f"  Transactions: {s.transaction_count}", file=out)
    print(f"  Sales:        {to_display_string(s.total_sales)}", file=out)
    print(f"  Returns:      {to_display_string(s.total_returns)}", file=out)
    print(f"  Net:          {to_display_string(s.net_sales)}", file=out)
    return 0


def _cmd_products(repo, args, settings, out) -> int:
    day = args.date or date.fromisoformat(today_str())
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    end = datetime.combine(day, time.max, tzinfo=timezone.utc)
    rows = ledger.product_sales_report(repo, start, end, category=args.category)
    if not rows:
        print("No product sales.", file=out)
        return 0
    for r in rows:
        print(
            f"{r.product_id:<12} {r.name:<28} {r.category:<16} "
            f"{r.units_sold:>6} {to_display_string(r.revenue):>12}",
            file=out,
        )
    return 0


def _cmd_receipt(repo, args, settings, out) -> int:
    tx = repo.load_by_id(args.transaction_id)
    if tx is None:
        print(f"Transaction not found: {args.transaction_id}", file=sys.stderr)
        return 1
    html = render_receipt_html(tx, settings)
    if args.pdf is None:
        print(html, file=out)
    else:
        path = write_receipt_pdf(html, args.pdf)
        print(f"Receipt written to {path}", file=out)
    return 0


_COMMANDS = {
    "recent": _cmd_recent,
    "show": _cmd_show,
    "summary": _cmd_summary,
    "products": _cmd_products,
    "receipt": _cmd_receipt,
}


def main(argv=None, out=None) -> int:
    out = out or sys.stdout
    args = build_parser().parse_args(argv)
    get_logger(level=logging.INFO if args.verbose else logging.WARNING)

    settings = load_settings()
    if args.db:
        settings = replace(settings, db_path=Path(args.db))

    conn = get_connection(settings.db_path)
    try:
        if args.command == "init-db":
            return _cmd_init_db(conn, args, settings, out)
        return _COMMANDS[args.command](TransactionsRepo(conn), args, settings, out)
    except PersistenceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    finally:
        conn.close()
