"""
Storefront payment views: card tokenization and charge.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny
import logging

from apps.common.utils import success_response, error_response
from ..providers import CardDetails
from ..serializers import TokenizeSerializer, ChargeSerializer
from ..services import PaymentService

logger = logging.getLogger(__name__)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def tokenize_card(request, slug):
    """Exchange card details for a single-use provider token"""
    serializer = TokenizeSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response("Invalid card details", serializer.errors)

    data = serializer.validated_data
    card = CardDetails(
        number=data['card_number'],
        expiry_month=data['expiry_month'],
        expiry_year=data['expiry_year'],
        cvv=data['cvv'],
        holder_name=data['holder_name'],
        holder_id=data['holder_id'],
        email=data['email'],
    )
    result = PaymentService.tokenize(slug, card, amount=data.get('amount'))
    return success_response(result, "Card tokenized")


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def charge_order(request, slug):
    """Charge a tokenized card for an order"""
    serializer = ChargeSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response("Missing required details", serializer.errors)

    data = serializer.validated_data
    result = PaymentService.charge(
        store_slug=slug,
        order_id=data['order_id'],
        token=data['token'],
        amount=data['amount'],
        currency=data.get('currency') or None,
        card_meta={'card_mask': data['card_mask'], 'card_type': data['card_type']},
    )

    if result['success']:
        return success_response(result, "Payment approved")
    if result.get('requires_3ds'):
        return success_response(result, "3-D Secure authentication required")

    return error_response(result['error'], data=result, status_code=status.HTTP_402_PAYMENT_REQUIRED)
