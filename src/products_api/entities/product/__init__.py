"""Entity package: Product."""

from .entity import Product
from .repository import ProductRepository, ProductStoreError, StoreResult
from .table import ProductTable

__all__ = [
    "Product",
    "ProductRepository",
    "ProductStoreError",
    "ProductTable",
    "StoreResult",
]
