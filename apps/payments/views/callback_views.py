"""
Payment provider callback views.
"""
from rest_framework.decorators import api_view, permission_classes, authentication_classes, parser_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
import json
import logging

from apps.common.exceptions import CheckoutError
from ..models import PaymentCallback
from ..services import PaymentService

logger = logging.getLogger(__name__)


def _flatten(data):
    if hasattr(data, 'dict'):
        return data.dict()
    return dict(data)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@parser_classes([JSONParser, FormParser, MultiPartParser])
def payment_callback(request, provider='quick_payments'):
    """Provider sale notification endpoint (form-encoded or JSON)"""
    request_body_str = request.body.decode('utf-8', errors='replace') if request.body else ''
    callback_log = PaymentCallback.objects.create(
        provider=provider,
        request_method=request.method,
        request_path=request.path,
        request_headers=dict(request.headers),
        request_body=request_body_str,
        request_ip=request.META.get('REMOTE_ADDR') or None,
    )

    try:
        result = PaymentService.handle_callback(_flatten(request.data), provider_name=provider)
    except CheckoutError as e:
        response_data = {'success': False, 'error': str(e.message)}
        callback_log.processing_error = str(e.message)
        callback_log.response_status = 400
    except Exception as e:
        logger.error(f"Payment callback error: {e}", exc_info=True)
        response_data = {'success': False, 'error': 'Internal error'}
        callback_log.processing_error = str(e)
        callback_log.response_status = 500
    else:
        response_data = {'success': True, 'message': 'Callback processed successfully'}
        callback_log.processed = True
        callback_log.duplicate = result.get('duplicate', False)
        callback_log.transaction_id = result.get('transaction_id', '')

    callback_log.response_body = json.dumps(response_data, ensure_ascii=False)
    callback_log.save()
    return Response(response_data, status=callback_log.response_status)
