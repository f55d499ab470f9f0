"""
Catalog exceptions.
"""

from .base import ShopException


class ProductException(ShopException):
    """Base exception for catalog errors."""
    pass


class ProductNotFoundException(ProductException):
    def __init__(self, product_id: int):
        super().__init__(
            "Product not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class DuplicateProductException(ProductException):
    def __init__(self, sku: str):
        super().__init__(
            f"Product with SKU {sku} already exists",
            details={'sku': sku}
        )
        self.sku = sku


class CatalogImportException(ProductException):
    """Raised when the external product source cannot be read."""

    def __init__(self, reason: str):
        super().__init__(
            f"Failed to fetch products: {reason}",
            details={'reason': reason}
        )
        self.reason = reason
