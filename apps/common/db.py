"""
Conditional single-statement updates for contended rows.

Every helper issues one ``UPDATE ... WHERE`` whose predicate carries the
guard, and decides success from the affected row count, never from an
earlier read. Callers that need the resulting value must run inside
``transaction.atomic`` so the read-back sees their own write.
"""
from decimal import Decimal

from django.db.models import F, Q, Value
from django.db.models.functions import Greatest


def conditional_decrement(queryset, field, amount, guard=None, **extra_updates):
    """
    Subtract ``amount`` from ``field`` only while ``field >= amount``.

    ``queryset`` must address exactly one row. ``guard`` adds filter
    conditions that apply to the update only, not to the read-back. Returns
    the balance after the update, or ``None`` when the guard rejected it
    (insufficient balance at execution time). ``extra_updates`` are applied
    in the same statement and see the pre-update column values.
    """
    amount = Decimal(amount)
    updated = queryset.filter(**(guard or {})).filter(**{f'{field}__gte': amount}).update(
        **{field: F(field) - amount},
        **extra_updates
    )
    if not updated:
        return None
    return queryset.values_list(field, flat=True).get()


def increment_within_limit(queryset, field, limit_field):
    """
    Add one to ``field`` if ``limit_field`` is null or ``field < limit_field``.

    Returns True when the increment was accepted.
    """
    unlimited = Q(**{f'{limit_field}__isnull': True})
    below_limit = Q(**{f'{field}__lt': F(limit_field)})
    updated = queryset.filter(unlimited | below_limit).update(**{field: F(field) + 1})
    return updated == 1


def increment_and_fetch(queryset, field, step=1):
    """Add ``step`` to ``field`` and return the value this statement produced."""
    updated = queryset.update(**{field: F(field) + step})
    if not updated:
        return None
    return queryset.values_list(field, flat=True).get()


def clamped_decrement(queryset, field, amount):
    """Subtract ``amount`` from ``field`` without going below zero. Returns rows updated."""
    return queryset.update(**{field: Greatest(F(field) - amount, Value(0))})
