"""
Order serializers module.
"""
from .order_serializers import (
    CartItemSerializer,
    OrderCreateSerializer,
    OrderDiscountSerializer,
    OrderItemSerializer,
    OrderSerializer,
)

__all__ = [
    'CartItemSerializer',
    'OrderCreateSerializer',
    'OrderDiscountSerializer',
    'OrderItemSerializer',
    'OrderSerializer',
]
