"""
Product services module.
"""
from .catalog_service import CatalogService, CartLine
from .inventory_service import InventoryService

__all__ = [
    'CatalogService',
    'CartLine',
    'InventoryService',
]
