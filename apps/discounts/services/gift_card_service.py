"""
Gift card redemption and issuance.
"""
import logging
import secrets
from datetime import timedelta
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Case, F, Value, When
from django.utils import timezone

from apps.common.db import conditional_decrement
from apps.common.exceptions import GiftCardCodeUnavailable
from ..models import GiftCard, GiftCardTransaction

logger = logging.getLogger(__name__)

# No O/0 or I/1, they are misread on printed cards
CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'


class GiftCardService:
    """Service for gift card balance operations"""

    @staticmethod
    def generate_code(groups=4, group_size=4):
        return '-'.join(
            ''.join(secrets.choice(CODE_ALPHABET) for _ in range(group_size))
            for _ in range(groups)
        )

    @staticmethod
    def find_redeemable(store, code) -> Optional[GiftCard]:
        code = (code or '').strip().upper()
        if not code:
            return None
        card = GiftCard.objects.filter(
            store=store, code=code, status='active', current_balance__gt=0
        ).first()
        if card is None or card.is_expired:
            return None
        return card

    @staticmethod
    @transaction.atomic
    def redeem(card, amount, order=None) -> Optional[GiftCardTransaction]:
        """
        Debit ``amount`` from the card if its balance still covers it.

        The card flips to ``used`` in the same statement when the debit
        empties it. Returns None when the debit was rejected.
        """
        amount = Decimal(amount)
        if amount <= 0:
            return None

        balance_after = conditional_decrement(
            GiftCard.objects.filter(pk=card.pk),
            'current_balance',
            amount,
            guard={'status': 'active'},
            status=Case(
                When(current_balance__lte=amount, then=Value('used')),
                default=F('status'),
            ),
            last_used_at=timezone.now(),
        )
        if balance_after is None:
            logger.warning(f"Gift card debit rejected: card={card.pk} amount={amount}")
            return None

        card.current_balance = balance_after
        if balance_after <= 0:
            card.status = 'used'

        return GiftCardTransaction.objects.create(
            gift_card=card,
            order=order,
            transaction_type='redemption',
            amount=-amount,
            balance_after=balance_after,
            note=f'Order #{order.order_number}' if order else '',
        )

    @staticmethod
    def issue(store, amount, purchaser_email='', recipient_email='', order=None, attempts=5) -> GiftCard:
        """Create a new active card and its opening ledger entry"""
        amount = Decimal(amount)
        expires_at = timezone.now() + timedelta(days=round(settings.GIFT_CARD_VALIDITY_MONTHS * 365 / 12))

        for attempt in range(attempts):
            try:
                with transaction.atomic():
                    card = GiftCard.objects.create(
                        store=store,
                        code=GiftCardService.generate_code(),
                        initial_balance=amount,
                        current_balance=amount,
                        currency=store.currency,
                        recipient_email=recipient_email or purchaser_email,
                        purchased_by_email=purchaser_email,
                        source_order=order,
                        expires_at=expires_at,
                    )
                    GiftCardTransaction.objects.create(
                        gift_card=card,
                        order=order,
                        transaction_type='issue',
                        amount=amount,
                        balance_after=amount,
                        note=f'Purchased in order #{order.order_number}' if order else '',
                    )
                return card
            except IntegrityError:
                logger.info(f"Gift card code collision for store {store.id}, retry {attempt + 1}")
        logger.error(f"Gift card code allocation failed for store {store.id} after {attempts} attempts")
        raise GiftCardCodeUnavailable()
