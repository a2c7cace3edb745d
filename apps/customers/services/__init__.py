"""
Customer services module.
"""
from .customer_service import CustomerService
from .credit_ledger_service import CreditLedgerService

__all__ = [
    'CustomerService',
    'CreditLedgerService',
]
