from .cart import Cart, CatalogProduct, ProductCatalog
from .checkout import CheckoutService, generate_transaction_id

__all__ = [
    "Cart",
    "CatalogProduct",
    "ProductCatalog",
    "CheckoutService",
    "generate_transaction_id",
]
