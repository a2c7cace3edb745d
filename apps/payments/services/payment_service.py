"""
Payment service: tokenization, charges and provider callbacks.
"""
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional
import logging
import uuid

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.urls import reverse
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.common.exceptions import NotFound, PaymentProviderError, ValidationFailed
from apps.common.models import Store
from apps.orders.models import Order
from apps.orders.services import OrderPaymentService
from ..models import PaymentProvider, PaymentTransaction
from ..providers import PROVIDERS, CardDetails, ChargeRequest, get_provider

logger = logging.getLogger(__name__)


def _parse_amount(value) -> Optional[Decimal]:
    try:
        return Decimal(str(value)).quantize(Decimal('0.01'))
    except (InvalidOperation, TypeError, ValueError):
        return None


def _parse_order_id(value) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class PaymentService:
    """Service class for payment operations"""

    @staticmethod
    def get_store(store_slug) -> Store:
        store = Store.objects.filter(slug=store_slug, is_active=True).first()
        if store is None:
            raise NotFound(_('Store not found'), code='store_not_found')
        return store

    @staticmethod
    def get_provider_config(store, provider_name=None) -> PaymentProvider:
        queryset = PaymentProvider.objects.filter(store=store, is_active=True)
        if provider_name:
            queryset = queryset.filter(provider=provider_name)
        config = queryset.first()
        if config is None:
            raise ValidationFailed(_('Payment provider is not configured'), code='provider_not_configured')
        return config

    @staticmethod
    def tokenize(store_slug, card: CardDetails, amount=None) -> Dict:
        """Exchange card details for a provider token usable by ``charge``"""
        store = PaymentService.get_store(store_slug)
        config = PaymentService.get_provider_config(store)
        provider = get_provider(config)

        if amount is not None:
            provider.check_minimum(amount, store.currency)

        token = provider.tokenize(card)
        logger.info(f"Card tokenized for store {store.slug} via {provider.name}")
        return {'token': token, 'card_last_four': card.last_four}

    @staticmethod
    def charge(store_slug, order_id, token, amount, currency=None, card_meta=None) -> Dict:
        """
        Charge ``token`` for an unpaid order.

        Returns one of:
            {'success': True, 'transaction_id': ...}
            {'success': False, 'requires_3ds': True, 'redirect_url': ...}
            {'success': False, 'error': ..., 'error_code': ...}

        Validation failures and amounts below the provider minimum raise
        before any transaction row is written or the provider is called.
        """
        card_meta = card_meta or {}
        amount = _parse_amount(amount)
        order_pk = _parse_order_id(order_id)
        if not token or order_pk is None or amount is None or amount <= 0:
            raise ValidationFailed(_('Missing required details'))

        store = PaymentService.get_store(store_slug)
        order = Order.objects.filter(store=store, pk=order_pk).first()
        if order is None:
            raise NotFound(_('Order not found'), code='order_not_found')
        if order.financial_status != 'pending':
            raise ValidationFailed(_('Order has already been paid'), code='order_already_paid')
        if amount != order.total:
            logger.warning(f"Charge amount {amount} does not match order #{order.order_number} total {order.total}")
            raise ValidationFailed(_('Amount does not match order total'), code='amount_mismatch')

        if currency and currency.upper() != order.currency.upper():
            logger.warning(f"Charge currency {currency} does not match order #{order.order_number} currency {order.currency}")
            raise ValidationFailed(_('Currency does not match order currency'), code='currency_mismatch')

        currency = order.currency
        config = PaymentService.get_provider_config(store)
        provider = get_provider(config)
        provider.check_minimum(amount, currency)

        payment = PaymentTransaction.objects.create(
            store=store,
            order=order,
            provider_config=config,
            provider=provider.name,
            amount=amount,
            currency=currency,
            card_brand=card_meta.get('card_type', ''),
            card_last_four=str(card_meta.get('card_mask', ''))[-4:],
            metadata={'sandbox': provider.sandbox},
        )

        request = ChargeRequest(
            token=token,
            amount=amount,
            currency=currency,
            order_reference=str(order.pk),
            description=str(_('Order #%(number)s') % {'number': order.order_number}),
            customer_email=order.customer_email,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            callback_url=f"{settings.CHECKOUT_CALLBACK_BASE_URL.rstrip('/')}{reverse('payments:callback')}",
        )

        try:
            result = provider.charge(request)
        except PaymentProviderError as e:
            PaymentService._record_outcome(
                payment,
                status='error',
                error_code=str(e.provider_code or e.code),
                error_message=str(e.message),
            )
            logger.error(f"Charge for order #{order.order_number} failed: {e.message}")
            return PaymentService._charge_response(payment, order)

        outcome = {
            'provider_transaction_id': result.transaction_id or None,
            'provider_approval_num': result.approval_number,
            'provider_response': result.raw,
        }

        if result.requires_3ds:
            PaymentService._record_outcome(payment, status='requires_3ds', redirect_url=result.redirect_url, **outcome)
            logger.info(f"Order #{order.order_number} requires 3-D Secure")
        elif not result.success:
            PaymentService._record_outcome(
                payment,
                status='declined',
                error_code=result.error_code,
                error_message=result.error_message,
                **outcome,
            )
            logger.warning(f"Charge for order #{order.order_number} declined: code={result.error_code}")
        else:
            if not (PaymentService._record_outcome(payment, **outcome) and PaymentService.settle(payment)):
                payment.refresh_from_db()
            logger.info(f"Order #{order.order_number} charged {amount} {currency} via {provider.name}")

        return PaymentService._charge_response(payment, order)

    @staticmethod
    def _record_outcome(payment: PaymentTransaction, **fields) -> bool:
        """
        Store the provider's answer on a transaction still in ``initiated``.

        A callback may have settled the row while the provider call was open;
        in that case nothing is written and ``payment`` is reloaded.
        """
        fields['updated_at'] = timezone.now()
        if fields.get('status') in PaymentTransaction.TERMINAL_STATUSES:
            fields['processed_at'] = fields['updated_at']
        updated = PaymentTransaction.objects.filter(pk=payment.pk, status='initiated').update(**fields)
        if not updated:
            payment.refresh_from_db()
            logger.info(f"Payment {payment.transaction_id} already {payment.status}; charge result not recorded")
            return False
        for name, value in fields.items():
            setattr(payment, name, value)
        return True

    @staticmethod
    def _charge_response(payment: PaymentTransaction, order) -> Dict:
        if payment.status == 'approved':
            return {'success': True, 'transaction_id': payment.provider_transaction_id, 'order_id': str(order.pk)}
        if payment.status == 'requires_3ds':
            return {
                'success': False,
                'requires_3ds': True,
                'redirect_url': payment.redirect_url,
                'transaction_id': payment.transaction_id,
            }
        return {
            'success': False,
            'error': payment.error_message or str(_('Payment failed, please try again')),
            'error_code': payment.error_code,
        }

    @staticmethod
    @transaction.atomic
    def settle(payment: PaymentTransaction) -> bool:
        """
        Move ``payment`` to approved and mark its order paid.

        Provider statistics are bumped only by the call that performs the
        transition, so replays of the same approval count once.
        """
        now = timezone.now()
        settled = PaymentTransaction.objects.filter(
            pk=payment.pk,
            status__in=[s for s, targets in PaymentTransaction.TRANSITIONS.items() if 'approved' in targets],
        ).update(status='approved', processed_at=now, updated_at=now)
        if not settled:
            return False

        payment.status = 'approved'
        payment.processed_at = now

        if payment.provider_config_id:
            PaymentProvider.objects.filter(pk=payment.provider_config_id).update(
                total_transactions=F('total_transactions') + 1,
                total_volume=F('total_volume') + payment.amount,
            )
        if payment.order_id:
            OrderPaymentService.mark_paid(payment.order)
        return True

    @staticmethod
    def resolve_callback_config(provider_name, sale_id, order_reference, seller_id):
        payment = PaymentTransaction.objects.select_related('provider_config').filter(
            provider_transaction_id=sale_id
        ).first() if sale_id else None
        if payment and payment.provider_config:
            return payment.provider_config

        order_pk = _parse_order_id(order_reference)
        if order_pk:
            store_id = Order.objects.filter(pk=order_pk).values_list('store_id', flat=True).first()
            if store_id:
                config = PaymentProvider.objects.filter(store_id=store_id, provider=provider_name).first()
                if config:
                    return config

        if seller_id:
            return PaymentProvider.objects.filter(
                provider=provider_name, is_active=True, credentials__seller_id=seller_id
            ).first()
        return None

    @staticmethod
    def handle_callback(payload: Dict, provider_name='quick_payments') -> Dict:
        """
        Apply an asynchronous provider notification.

        Callbacks that do not move the stored transaction to a new state
        (replays, or anything after approval except a refund) are
        acknowledged as duplicates without side effects.
        """
        provider_class = PROVIDERS.get(provider_name)
        if provider_class is None:
            raise ValidationFailed(_('Unknown payment provider'), code='unknown_provider')

        sale_id, order_reference, seller_id = provider_class.callback_references(payload)
        if not sale_id:
            raise ValidationFailed(_('Missing sale ID'))

        config = PaymentService.resolve_callback_config(provider_name, sale_id, order_reference, seller_id)
        if config is None:
            logger.warning(f"Callback for sale {sale_id} acknowledged but no provider config found")
            return {'success': True, 'message': 'Acknowledged but no config found', 'transaction_id': sale_id}

        result = get_provider(config).parse_callback(payload)

        try:
            return PaymentService._apply_callback(config, result)
        except IntegrityError:
            # Concurrent first callback inserted the row; the replay sees it as settled or pending
            logger.info(f"Concurrent callback for sale {sale_id}; retrying against stored row")
            return PaymentService._apply_callback(config, result)

    @staticmethod
    @transaction.atomic
    def _apply_callback(config, result) -> Dict:
        payment = PaymentTransaction.objects.select_for_update().filter(
            provider_transaction_id=result.provider_transaction_id
        ).first()

        if payment is None:
            order = None
            order_pk = _parse_order_id(result.order_reference)
            if order_pk:
                order = Order.objects.filter(pk=order_pk, store_id=config.store_id).first()
            if order is not None:
                payment = PaymentTransaction.objects.select_for_update().filter(
                    order=order, provider_transaction_id__isnull=True,
                    status__in=['initiated', 'requires_3ds', 'error'],
                ).order_by('-created_at').first()
            if payment is not None:
                payment.provider_transaction_id = result.provider_transaction_id
                logger.info(f"Callback adopted transaction {payment.transaction_id} for sale {result.provider_transaction_id}")

        if payment is None:
            payment = PaymentTransaction.objects.create(
                store_id=config.store_id,
                order=order,
                provider_config=config,
                provider=config.provider,
                transaction_type='refund' if result.status == 'refunded' else 'charge',
                status='initiated',
                amount=result.amount if result.amount is not None else (order.total if order else Decimal('0.00')),
                currency=result.currency or (order.currency if order else config.store.currency),
                provider_transaction_id=result.provider_transaction_id,
            )
            logger.info(f"Callback created transaction {payment.transaction_id} for sale {result.provider_transaction_id}")

        payment.callback_data = result.raw
        if result.status == payment.status or not payment.can_transition_to(result.status):
            payment.save(update_fields=['provider_transaction_id', 'callback_data', 'updated_at'])
            logger.info(f"Duplicate callback for sale {result.provider_transaction_id} "
                        f"(stored {payment.status}, received {result.status})")
            return {'success': True, 'duplicate': True, 'transaction_id': result.provider_transaction_id,
                    'status': payment.status}

        if result.approval_number:
            payment.provider_approval_num = result.approval_number

        if result.status == 'approved':
            payment.save()
            PaymentService.settle(payment)
        elif result.status == 'declined':
            payment.status = 'declined'
            payment.error_code = result.error_code
            payment.error_message = result.error_message
            payment.save()
        elif result.status == 'refunded':
            payment.status = 'refunded'
            payment.save()
            if payment.order_id:
                OrderPaymentService.mark_refunded(payment.order)
        else:
            payment.status = result.status
            payment.save()

        logger.info(f"Callback applied for sale {result.provider_transaction_id}: {payment.status}")
        return {'success': True, 'duplicate': False, 'transaction_id': result.provider_transaction_id,
                'status': payment.status}
