from .receipt import build_receipt_context, render_receipt_html, write_receipt_pdf

__all__ = ["build_receipt_context", "render_receipt_html", "write_receipt_pdf"]
