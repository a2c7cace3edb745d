"""
Product models module.
"""
from .product import Product, ProductVariant
from .inventory import InventoryLog, StockAlert

__all__ = [
    'Product',
    'ProductVariant',
    'InventoryLog',
    'StockAlert',
]
