"""
Order services module.
"""
from .pricing_service import PricingService, PriceBreakdown
from .order_payment_service import OrderPaymentService
from .order_service import OrderService
from .post_payment import PostPaymentDispatcher

__all__ = [
    'PricingService',
    'PriceBreakdown',
    'OrderService',
    'OrderPaymentService',
    'PostPaymentDispatcher',
]
