"""
Customer upsert and lifetime aggregates.
"""
import logging
from decimal import Decimal
from typing import Tuple

from django.db.models import F

from ..models import Customer

logger = logging.getLogger(__name__)


class CustomerService:
    """Service for checkout-time customer records"""

    @staticmethod
    def normalize_email(email):
        return (email or '').strip().lower()

    @staticmethod
    def upsert(store, contact, address=None, create_account=False, password=None,
               accepts_marketing=False, join_club=False) -> Tuple[Customer, bool]:
        """
        Update the customer for (store, email) in place, or insert a new one.

        Contact fields only overwrite stored values when non-empty, so a
        sparse checkout form cannot blank out an existing profile.
        """
        email = CustomerService.normalize_email(contact.get('email'))
        customer, created = Customer.objects.select_for_update().get_or_create(
            store=store,
            email=email,
            defaults={
                'first_name': contact.get('first_name', ''),
                'last_name': contact.get('last_name', ''),
                'phone': contact.get('phone', ''),
                'accepts_marketing': accepts_marketing,
                'default_address': address or {},
            }
        )

        changed = []
        if not created:
            for field in ('first_name', 'last_name', 'phone'):
                value = contact.get(field)
                if value and getattr(customer, field) != value:
                    setattr(customer, field, value)
                    changed.append(field)
            if accepts_marketing and not customer.accepts_marketing:
                customer.accepts_marketing = True
                changed.append('accepts_marketing')
            if address:
                customer.default_address = address
                changed.append('default_address')

        if create_account and password and not customer.has_account:
            customer.set_password(password)
            changed.append('password_hash')

        if changed:
            changed.append('updated_at')
            customer.save(update_fields=changed)

        if join_club:
            from apps.points.services import PointsService
            PointsService.get_or_create_account(customer)

        logger.debug(f"Customer {'created' if created else 'updated'}: store={store.id} email={email}")
        return customer, created

    @staticmethod
    def record_order(customer, total):
        """Bump lifetime order count and spend"""
        Customer.objects.filter(pk=customer.pk).update(
            total_orders=F('total_orders') + 1,
            total_spent=F('total_spent') + Decimal(total),
        )
