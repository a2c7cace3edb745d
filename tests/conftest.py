"""
Test configuration for the checkout server.
"""
import os

import django
import pytest


def pytest_configure():
    """Configure Django settings for testing."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'checkout_server.settings.test')
    django.setup()


@pytest.fixture
def store():
    from tests.factories import StoreFactory
    return StoreFactory()


@pytest.fixture
def product(store):
    from tests.factories import ProductFactory
    return ProductFactory(store=store)


@pytest.fixture
def quick_payments(store):
    """Live-mode Quick Payments configuration for ``store``"""
    from tests.factories import PaymentProviderFactory
    return PaymentProviderFactory(store=store)


@pytest.fixture
def api_client():
    from rest_framework.test import APIClient
    return APIClient()
