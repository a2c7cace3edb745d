"""
Common models module.
"""
from .store import Store

__all__ = [
    'Store',
]
