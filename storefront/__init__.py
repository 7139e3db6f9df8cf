"""Storefront client: catalog, cart and checkout over a REST API with a local fallback store."""

from .cart import CartManager
from .checkout import place_order
from .config import Settings, load_settings
from .pricing import CartTotals, compute_totals
from .services import CategoryService, CustomerService, OrderService, ProductService
from .storage import LocalStore

__version__ = "1.0.0"

__all__ = [
    "CartManager",
    "CartTotals",
    "CategoryService",
    "CustomerService",
    "LocalStore",
    "OrderService",
    "ProductService",
    "Settings",
    "compute_totals",
    "load_settings",
    "place_order",
]
