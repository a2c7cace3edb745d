"""
Payment provider adapters and registry.
"""
from .base import (
    BasePaymentProvider, SandboxProvider,
    CardDetails, ChargeRequest, ChargeResult, CallbackResult,
)
from .quick_payments import QuickPaymentsProvider

PROVIDERS = {
    QuickPaymentsProvider.name: QuickPaymentsProvider,
    SandboxProvider.name: SandboxProvider,
}


def get_provider(config) -> BasePaymentProvider:
    """Return the adapter instance for a ``PaymentProvider`` row"""
    try:
        provider_class = PROVIDERS[config.provider]
    except KeyError:
        raise ValueError(f"Unknown payment provider: {config.provider}")
    return provider_class(config)


__all__ = [
    'BasePaymentProvider',
    'SandboxProvider',
    'QuickPaymentsProvider',
    'CardDetails',
    'ChargeRequest',
    'ChargeResult',
    'CallbackResult',
    'PROVIDERS',
    'get_provider',
]
