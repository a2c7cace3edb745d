"""
Order views module.
"""
from .order_views import CreateOrderView, OrderDetailView

__all__ = [
    'CreateOrderView',
    'OrderDetailView',
]
