"""
Customer models module.
"""
from .customer import Customer
from .credit import CreditTransaction

__all__ = [
    'Customer',
    'CreditTransaction',
]
