"""
Order creation and staff detail views.
"""
import logging

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.views import APIView

from apps.common.utils import success_response, error_response
from ..models import Order
from ..serializers import OrderCreateSerializer, OrderSerializer
from ..services import OrderService

logger = logging.getLogger(__name__)


class CreateOrderView(APIView):
    """Turn a storefront cart into an order"""
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = OrderCreateSerializer(data=request.data)
        if not serializer.is_valid():
            logger.info(f"CreateOrder validation failed: {serializer.errors}")
            return error_response("Invalid order data", serializer.errors)

        order, message = OrderService.create_order(serializer.validated_data)
        if order is None:
            return error_response(message, data={'success': False, 'error': str(message)})

        return success_response({
            'success': True,
            'order_id': str(order.id),
            'order_number': order.order_number,
            'total': str(order.total),
            'currency': order.currency,
            'financial_status': order.financial_status,
        }, message, status_code=status.HTTP_201_CREATED)


class OrderDetailView(APIView):
    """Order detail for the staff user owning the store"""
    permission_classes = [IsAuthenticated]

    def get(self, request, order_id):
        order = (
            Order.objects
            .select_related('store')
            .prefetch_related('items', 'discounts', 'payment_transactions')
            .filter(pk=order_id)
            .first()
        )
        if order is None:
            return error_response("Order not found", status_code=status.HTTP_404_NOT_FOUND)
        if not request.user.is_superuser and order.store.owner_id != request.user.id:
            return error_response("Permission denied", status_code=status.HTTP_403_FORBIDDEN)

        return success_response(OrderSerializer(order).data)
