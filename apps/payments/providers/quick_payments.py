"""
Quick Payments (hosted card processor) adapter.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict
import logging

import requests
from django.conf import settings
from django.utils.translation import gettext_lazy as _

from apps.common.exceptions import PaymentProviderError, ValidationFailed
from .base import BasePaymentProvider, CallbackResult, ChargeResult

logger = logging.getLogger(__name__)

STATUS_MAP = {
    'completed': 'approved',
    'success': 'approved',
    'initial': 'pending',
    'pending': 'pending',
    'failure': 'declined',
    'failed': 'declined',
    'refunded': 'refunded',
}

NOTIFY_TYPE_MAP = {
    'sale-complete': 'approved',
    'sale-failure': 'declined',
    'sale-refund': 'refunded',
}

THREE_DS_STATUS_CODE = 5


def to_minor_units(amount) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def from_minor_units(value) -> Decimal:
    return (Decimal(str(value)) / 100).quantize(Decimal('0.01'))


class QuickPaymentsProvider(BasePaymentProvider):
    name = 'quick_payments'
    display_name = 'Quick Payments'
    minimum_amount = Decimal('5.00')

    ERROR_MESSAGES = {
        '1': _('General payment error'),
        '2': _('Invalid credit card'),
        '3': _('Card has expired'),
        '4': _('Card is blocked'),
        '5': _('Insufficient credit on card'),
        '6': _('Invalid CVV'),
        '7': _('ID number does not match card'),
        '8': _('Transaction declined by card issuer'),
        '10': _('3D Secure authentication required'),
        '11': _('3D Secure authentication failed'),
        '100': _('System error, please try again'),
    }

    @property
    def seller_id(self) -> str:
        return self.credentials.get('seller_id', '')

    @property
    def base_url(self) -> str:
        if self.options.get('use_sandbox_api'):
            return settings.QUICK_PAYMENTS_SANDBOX_URL
        return settings.QUICK_PAYMENTS_API_URL

    def _post(self, endpoint: str, body: Dict) -> Dict:
        url = f"{self.base_url.rstrip('/')}/{endpoint}"
        headers = {'Content-Type': 'application/json'}
        if self.credentials.get('api_key'):
            headers['PayMe-Merchant-Key'] = self.credentials['api_key']

        try:
            response = requests.post(url, json=body, headers=headers,
                                     timeout=settings.PAYMENT_PROVIDER_TIMEOUT)
        except requests.Timeout:
            logger.error(f"Quick Payments {endpoint} timed out after {settings.PAYMENT_PROVIDER_TIMEOUT}s")
            raise PaymentProviderError(_('Payment provider did not respond'), provider_code='timeout')
        except requests.RequestException as e:
            logger.error(f"Quick Payments {endpoint} request failed: {e}")
            raise PaymentProviderError(_('Payment provider is unavailable'), provider_code='network')

        try:
            data = response.json()
        except ValueError:
            logger.error(f"Quick Payments {endpoint} returned non-JSON (HTTP {response.status_code})")
            raise PaymentProviderError(_('Invalid response from payment provider'), provider_code='invalid_response')

        logger.info(f"Quick Payments {endpoint}: HTTP {response.status_code}, status_code={data.get('status_code')}")
        return data

    def _error_from(self, data: Dict):
        code = data.get('status_error_code') or data.get('status_code') or ''
        details = data.get('status_error_details') or data.get('status_message') or ''
        return str(code), self.map_error(code, details)

    def _tokenize(self, card):
        data = self._post('capture-buyer-token', {
            'seller_payme_id': self.seller_id,
            'credit_card_number': card.number,
            'credit_card_exp': f"{card.expiry_month.zfill(2)}{card.expiry_year[-2:]}",
            'credit_card_cvv': card.cvv,
            'buyer_name': card.holder_name,
            'buyer_social_id': card.holder_id,
            'buyer_email': card.email,
        })
        if data.get('status_code') == 0 and data.get('buyer_key'):
            return data['buyer_key']
        code, message = self._error_from(data)
        logger.warning(f"Quick Payments tokenization rejected: code={code}")
        raise PaymentProviderError(message, provider_code=code)

    def _charge(self, request):
        body = {
            'seller_payme_id': self.seller_id,
            'sale_price': to_minor_units(request.amount),
            'currency': request.currency,
            'product_name': request.description,
            'transaction_id': request.order_reference,
            'installments': str(request.installments),
            'sale_type': 'sale',
            'sale_payment_method': 'credit-card',
            'buyer_key': request.token,
            'sale_email': request.customer_email,
            'sale_name': request.customer_name,
            'sale_mobile': request.customer_phone,
        }
        if request.callback_url:
            body['sale_callback_url'] = request.callback_url
        if request.return_url:
            body['sale_return_url'] = request.return_url

        data = self._post('generate-sale', body)
        status_code = data.get('status_code')

        if status_code == 0 and data.get('payme_sale_id'):
            return ChargeResult(
                success=True,
                transaction_id=data['payme_sale_id'],
                approval_number=str(data.get('transaction_cc_auth_number')
                                    or data.get('payme_transaction_auth_number') or ''),
                raw=data,
            )

        if status_code == THREE_DS_STATUS_CODE and data.get('redirect_url'):
            return ChargeResult(
                success=False,
                requires_3ds=True,
                transaction_id=data.get('payme_sale_id', ''),
                redirect_url=data['redirect_url'],
                raw=data,
            )

        code, message = self._error_from(data)
        logger.warning(f"Quick Payments declined {request.order_reference}: code={code}")
        return ChargeResult(success=False, error_code=code, error_message=message,
                            transaction_id=data.get('payme_sale_id', ''), raw=data)

    @staticmethod
    def callback_references(payload):
        return (payload.get('payme_sale_id', ''), payload.get('transaction_id', ''),
                payload.get('seller_payme_id', ''))

    def parse_callback(self, payload):
        sale_id = payload.get('payme_sale_id')
        if not sale_id:
            raise ValidationFailed(_('Missing sale ID'))

        seller_id = payload.get('seller_payme_id')
        if seller_id and self.seller_id and seller_id != self.seller_id:
            logger.warning(f"Quick Payments callback seller mismatch for sale {sale_id}")
            raise ValidationFailed(_('Seller mismatch'), code='seller_mismatch')

        notify_type = payload.get('notify_type', '')
        status = NOTIFY_TYPE_MAP.get(notify_type) or STATUS_MAP.get(payload.get('sale_status', ''), 'pending')

        amount = payload.get('sale_price')
        error_code = str(payload.get('status_error_code') or '')
        return CallbackResult(
            provider_transaction_id=sale_id,
            status=status,
            amount=from_minor_units(amount) if amount not in (None, '') else None,
            currency=payload.get('sale_currency') or payload.get('currency', ''),
            order_reference=payload.get('transaction_id', ''),
            approval_number=payload.get('transaction_auth_number', ''),
            error_code=error_code,
            error_message=self.map_error(error_code, payload.get('status_error_details', '')) if error_code else '',
            raw=dict(payload),
        )
