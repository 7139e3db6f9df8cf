from .base import FallbackService
from .categories import CategoryService
from .customers import CustomerService
from .orders import OrderService
from .products import ProductService

__all__ = [
    "CategoryService",
    "CustomerService",
    "FallbackService",
    "OrderService",
    "ProductService",
]
