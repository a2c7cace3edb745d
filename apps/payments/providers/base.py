"""
Payment provider adapter contract.

Every adapter turns a card into a reusable token, charges a token, and
parses the provider's asynchronous callback into a provider-neutral result.
Sandbox mode (per-store ``test_mode`` or the global ``PAYMENT_SANDBOX_MODE``)
never calls the provider and returns deterministic approvals.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional
import hashlib
import logging

from django.conf import settings
from django.utils.translation import gettext_lazy as _

from apps.common.exceptions import AmountBelowMinimum

logger = logging.getLogger(__name__)


@dataclass
class CardDetails:
    number: str
    expiry_month: str
    expiry_year: str
    cvv: str
    holder_name: str = ''
    holder_id: str = ''
    email: str = ''

    @property
    def last_four(self) -> str:
        return self.number[-4:]


@dataclass
class ChargeRequest:
    token: str
    amount: Decimal
    currency: str
    order_reference: str
    description: str = ''
    customer_email: str = ''
    customer_name: str = ''
    customer_phone: str = ''
    callback_url: str = ''
    return_url: str = ''
    installments: int = 1


@dataclass
class ChargeResult:
    success: bool
    transaction_id: str = ''
    approval_number: str = ''
    requires_3ds: bool = False
    redirect_url: str = ''
    error_code: str = ''
    error_message: str = ''
    raw: Dict = field(default_factory=dict)

    @property
    def status(self) -> str:
        if self.success:
            return 'approved'
        if self.requires_3ds:
            return 'requires_3ds'
        return 'declined'


@dataclass
class CallbackResult:
    provider_transaction_id: str
    status: str
    amount: Optional[Decimal] = None
    currency: str = ''
    order_reference: str = ''
    approval_number: str = ''
    error_code: str = ''
    error_message: str = ''
    raw: Dict = field(default_factory=dict)


class BasePaymentProvider:
    """Base class for payment provider adapters"""

    name = ''
    display_name = ''
    minimum_amount = Decimal('0.00')
    ERROR_MESSAGES: Dict[str, str] = {}
    DEFAULT_ERROR = _('Payment failed, please try again')

    def __init__(self, config=None):
        self.config = config
        self.credentials = dict(getattr(config, 'credentials', None) or {})
        self.options = dict(getattr(config, 'settings', None) or {})

    @property
    def sandbox(self) -> bool:
        return bool(settings.PAYMENT_SANDBOX_MODE or getattr(self.config, 'test_mode', False))

    def get_minimum_amount(self) -> Decimal:
        override = self.options.get('minimum_amount')
        if override is not None:
            return Decimal(str(override))
        return self.minimum_amount

    def check_minimum(self, amount, currency=''):
        minimum = self.get_minimum_amount()
        if Decimal(str(amount)) < minimum:
            logger.info(f"{self.name}: amount {amount} below minimum {minimum}")
            raise AmountBelowMinimum(minimum, currency)

    def map_error(self, code, details='') -> str:
        message = self.ERROR_MESSAGES.get(str(code)) if code not in (None, '') else None
        return str(message or details or self.DEFAULT_ERROR)

    def tokenize(self, card: CardDetails) -> str:
        if self.sandbox:
            digest = hashlib.sha256(card.number.encode('utf-8')).hexdigest()[:12]
            return f"sandbox_tok_{digest}"
        return self._tokenize(card)

    def charge(self, request: ChargeRequest) -> ChargeResult:
        if self.sandbox:
            logger.info(f"{self.name}: sandbox approval for {request.order_reference}")
            return ChargeResult(
                success=True,
                transaction_id=f"sandbox_{request.order_reference}",
                approval_number='000000',
                raw={'sandbox': True, 'amount': str(request.amount)},
            )
        return self._charge(request)

    @staticmethod
    def callback_references(payload: Dict):
        """Return (provider transaction id, order reference, seller id) from a raw callback"""
        return payload.get('transaction_id', ''), payload.get('order_reference', ''), ''

    def parse_callback(self, payload: Dict) -> CallbackResult:
        raise NotImplementedError

    def _tokenize(self, card: CardDetails) -> str:
        raise NotImplementedError

    def _charge(self, request: ChargeRequest) -> ChargeResult:
        raise NotImplementedError


class SandboxProvider(BasePaymentProvider):
    """Provider for stores without a processor; always in sandbox mode"""

    name = 'sandbox'
    display_name = 'Sandbox'

    @property
    def sandbox(self) -> bool:
        return True

    def parse_callback(self, payload):
        return CallbackResult(
            provider_transaction_id=str(payload.get('transaction_id', '')),
            status=str(payload.get('status', 'approved')),
            order_reference=str(payload.get('order_reference', '')),
            raw=dict(payload),
        )
