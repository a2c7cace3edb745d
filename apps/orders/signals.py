"""
Order lifecycle signals.

``order_paid`` is sent once per order, after the paid transition has
committed. Receivers run isolated from each other (``send_robust``).
"""
from django.dispatch import Signal

order_paid = Signal()
