# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from retail_pos.database.repositories import (
        # Products
        ProductsRepo, Product,
        # Transactions
        TransactionsRepo,
    )
"""

# ---------------- Products -----------------
from .products_repo import ProductsRepo, Product

# -------------- Transactions ---------------
from .transactions_repo import TransactionsRepo

__all__ = [
    # products_repo
    "ProductsRepo",
    "Product",
    # transactions_repo
    "TransactionsRepo",
]
