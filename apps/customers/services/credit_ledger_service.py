"""
Store-credit ledger.
"""
import logging
from decimal import Decimal
from typing import Optional

from django.db import transaction

from apps.common.db import conditional_decrement
from ..models import Customer, CreditTransaction

logger = logging.getLogger(__name__)


class CreditLedgerService:
    """Race-safe store-credit debits and credits"""

    @staticmethod
    @transaction.atomic
    def debit(customer, amount, order=None, reason='') -> Optional[CreditTransaction]:
        """
        Debit ``amount`` from the customer's live balance.

        Returns the ledger entry, or None when the balance no longer covers
        the amount at execution time; the caller continues without the debit.
        """
        amount = Decimal(amount)
        if amount <= 0:
            return None

        balance_after = conditional_decrement(
            Customer.objects.filter(pk=customer.pk), 'credit_balance', amount
        )
        if balance_after is None:
            logger.warning(
                f"Credit debit rejected: customer={customer.pk} amount={amount} "
                f"(balance changed since it was read)"
            )
            return None

        customer.credit_balance = balance_after
        return CreditTransaction.objects.create(
            customer=customer,
            store_id=customer.store_id,
            order=order,
            transaction_type='debit',
            amount=-amount,
            balance_after=balance_after,
            reason=reason or (f'Order #{order.order_number}' if order else ''),
        )

    @staticmethod
    @transaction.atomic
    def credit(customer, amount, reason='', transaction_type='credit', order=None) -> CreditTransaction:
        """Add ``amount`` to the balance and record it"""
        amount = Decimal(amount)
        if amount <= 0:
            raise ValueError("Credit amount must be positive")

        account = Customer.objects.select_for_update().get(pk=customer.pk)
        account.credit_balance += amount
        account.save(update_fields=['credit_balance', 'updated_at'])
        customer.credit_balance = account.credit_balance

        return CreditTransaction.objects.create(
            customer=account,
            store_id=account.store_id,
            order=order,
            transaction_type=transaction_type,
            amount=amount,
            balance_after=account.credit_balance,
            reason=reason,
        )
