"""
Checkout exceptions and the DRF exception handler
"""
from rest_framework.views import exception_handler
from rest_framework import status
from django.utils.translation import gettext_lazy as _
import logging

logger = logging.getLogger(__name__)


class CheckoutError(Exception):
    """Base class for errors surfaced to the buyer with a specific message"""

    default_message = _('Checkout failed')
    code = 'checkout_error'
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None, code=None):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(str(self.message))


class ValidationFailed(CheckoutError):
    default_message = _('Missing required details')
    code = 'validation_failed'


class NotFound(CheckoutError):
    default_message = _('Not found')
    code = 'not_found'
    status_code = status.HTTP_404_NOT_FOUND


class InsufficientInventory(CheckoutError):
    """Requested quantity exceeds tracked stock for a named item"""

    code = 'insufficient_inventory'

    def __init__(self, item_name, available, requested):
        self.item_name = item_name
        self.available = available
        self.requested = requested
        super().__init__(
            _('Not enough stock for "%(name)s": %(available)s available, %(requested)s requested') % {
                'name': item_name,
                'available': available,
                'requested': requested,
            }
        )


class AmountBelowMinimum(CheckoutError):
    code = 'amount_too_low'

    def __init__(self, minimum, currency=''):
        self.minimum = minimum
        super().__init__(
            _('Amount is too low. The minimum charge is %(minimum)s %(currency)s') % {
                'minimum': minimum,
                'currency': currency,
            }
        )


class GiftCardCodeUnavailable(CheckoutError):
    """No unused gift card code could be generated for the store"""

    default_message = _('Could not issue gift card, please try again')
    code = 'gift_card_code_unavailable'
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class PaymentProviderError(CheckoutError):
    """Provider call failed or was declined; ``provider_code`` is the raw provider code"""

    default_message = _('Payment failed')
    code = 'payment_failed'
    status_code = status.HTTP_402_PAYMENT_REQUIRED

    def __init__(self, message=None, provider_code=None):
        self.provider_code = provider_code
        super().__init__(message)


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns consistent error responses
    """
    if isinstance(exc, CheckoutError):
        from apps.common.utils import error_response
        logger.info(f"Checkout error {exc.code}: {exc.message}")
        return error_response(exc.message, errors={'code': exc.code}, status_code=exc.status_code)

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        logger.error(f"API Exception: {exc}", exc_info=True)

        custom_response_data = {
            'code': response.status_code,
            'msg': 'An error occurred',
            'errors': response.data
        }

        if response.status_code == status.HTTP_400_BAD_REQUEST:
            custom_response_data['msg'] = 'Validation error'
        elif response.status_code == status.HTTP_401_UNAUTHORIZED:
            custom_response_data['msg'] = 'Authentication required'
        elif response.status_code == status.HTTP_403_FORBIDDEN:
            custom_response_data['msg'] = 'Permission denied'
        elif response.status_code == status.HTTP_404_NOT_FOUND:
            custom_response_data['msg'] = 'Resource not found'
        elif response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            custom_response_data['msg'] = 'Method not allowed'
        elif response.status_code >= 500:
            custom_response_data['msg'] = 'Internal server error'
            if not hasattr(context['request'], 'user') or not context['request'].user.is_staff:
                custom_response_data['errors'] = {'detail': 'Internal server error'}

        response.data = custom_response_data

    return response
