"""
API endpoint tests: order creation, order detail, charge and provider callback
"""
from decimal import Decimal
from unittest.mock import MagicMock, patch
from urllib.parse import urlencode

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from apps.orders.models import Order
from apps.payments.models import PaymentCallback, PaymentTransaction
from tests.factories import (
    OrderFactory, PaymentProviderFactory, ProductFactory, StoreFactory, UserFactory, cart_item,
)

REQUESTS_POST = 'apps.payments.providers.quick_payments.requests.post'


def provider_response(payload):
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = payload
    return response


class TestCreateOrderAPI(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.store = StoreFactory()
        self.product = ProductFactory(store=self.store, name='Tea Kettle', price=Decimal('80.00'), inventory=5)
        self.url = reverse('create-order')

    def payload(self, **extra):
        data = {
            'store_slug': self.store.slug,
            'items': [cart_item(self.product, 2)],
            'customer': {'email': 'buyer@example.com', 'first_name': 'Dana'},
            'shipping_address': {'street': 'Herzl', 'house_number': '12', 'city': 'Tel Aviv'},
            'shipping': '15.00',
        }
        data.update(extra)
        return data

    def test_create_order(self):
        response = self.client.post(self.url, self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertTrue(data['success'])
        self.assertEqual(data['total'], '175.00')
        order = Order.objects.get(pk=data['order_id'])
        self.assertEqual(order.order_number, data['order_number'])

    def test_invalid_payload(self):
        response = self.client.post(self.url, {'items': []}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('customer', response.data['errors'])

    def test_insufficient_inventory(self):
        response = self.client.post(self.url, self.payload(items=[cart_item(self.product, 6)]), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['data']['success'])
        self.assertIn('Tea Kettle', response.data['msg'])
        self.assertFalse(Order.objects.exists())

    def test_unknown_store(self):
        response = self.client.post(self.url, self.payload(store_slug='no-such-store'), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Order.objects.exists())


class TestOrderDetailAPI(APITestCase):

    def setUp(self):
        self.owner = UserFactory()
        self.store = StoreFactory(owner=self.owner)
        self.order = OrderFactory(store=self.store)
        self.url = reverse('order-detail', kwargs={'order_id': self.order.pk})

    def test_requires_authentication(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_owner_sees_order(self):
        self.client.force_authenticate(user=self.owner)

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['order_number'], self.order.order_number)

    def test_other_staff_forbidden(self):
        self.client.force_authenticate(user=UserFactory())

        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class TestChargeAPI(APITestCase):

    def setUp(self):
        self.store = StoreFactory()
        self.config = PaymentProviderFactory(store=self.store)
        self.order = OrderFactory(store=self.store, total=Decimal('120.00'))
        self.url = reverse('shop_payments:charge', kwargs={'slug': self.store.slug})

    def payload(self, **extra):
        data = {
            'token': 'BUYER-TOKEN',
            'order_id': str(self.order.pk),
            'amount': str(self.order.total),
            'card_mask': '458000******1234',
            'card_type': 'visa',
        }
        data.update(extra)
        return data

    def test_approved(self):
        sale = provider_response({'status_code': 0, 'payme_sale_id': 'SALE-API-1'})
        with patch(REQUESTS_POST, return_value=sale):
            response = self.client.post(self.url, self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['success'])
        self.order.refresh_from_db()
        self.assertEqual(self.order.financial_status, 'paid')

    def test_three_d_secure_redirect(self):
        sale = provider_response({
            'status_code': 5, 'payme_sale_id': 'SALE-API-3DS', 'redirect_url': 'https://acs.example.com/auth',
        })
        with patch(REQUESTS_POST, return_value=sale):
            response = self.client.post(self.url, self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['requires_3ds'])
        self.assertEqual(response.data['data']['redirect_url'], 'https://acs.example.com/auth')

    def test_declined(self):
        declined = provider_response({'status_code': 1, 'status_error_code': 5})
        with patch(REQUESTS_POST, return_value=declined):
            response = self.client.post(self.url, self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_402_PAYMENT_REQUIRED)
        self.assertEqual(response.data['msg'], 'Insufficient credit on card')
        self.assertEqual(response.data['data']['error_code'], '5')

    def test_amount_too_low(self):
        small = OrderFactory(store=self.store, total=Decimal('2.00'))

        with patch(REQUESTS_POST) as post:
            response = self.client.post(self.url, self.payload(order_id=str(small.pk), amount='2.00'),
                                        format='json')

        post.assert_not_called()
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors']['code'], 'amount_too_low')
        self.assertFalse(PaymentTransaction.objects.exists())

    def test_missing_token(self):
        response = self.client.post(self.url, self.payload(token=''), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('token', response.data['errors'])

    def test_unknown_order(self):
        response = self.client.post(
            self.url, self.payload(order_id='00000000-0000-4000-8000-000000000000'), format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['errors']['code'], 'order_not_found')


class TestTokenizeAPI(APITestCase):

    def setUp(self):
        self.store = StoreFactory()
        PaymentProviderFactory(store=self.store)
        self.url = reverse('shop_payments:tokenize', kwargs={'slug': self.store.slug})

    def test_tokenize(self):
        token = provider_response({'status_code': 0, 'buyer_key': 'BUYER-KEY-1'})
        with patch(REQUESTS_POST, return_value=token):
            response = self.client.post(self.url, {
                'card_number': '4580000000001234',
                'expiry_month': '7',
                'expiry_year': '2031',
                'cvv': '123',
                'holder_name': 'Dana Levi',
            }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], {'token': 'BUYER-KEY-1', 'card_last_four': '1234'})

    def test_invalid_card_number(self):
        response = self.client.post(self.url, {
            'card_number': '4580-abc', 'expiry_month': '7', 'expiry_year': '31', 'cvv': '123',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('card_number', response.data['errors'])


class TestCallbackAPI(APITestCase):

    def setUp(self):
        self.store = StoreFactory()
        PaymentProviderFactory(store=self.store)
        self.order = OrderFactory(store=self.store, total=Decimal('60.00'))
        self.url = reverse('payments:callback')

    def post_form(self, **overrides):
        data = {
            'payme_sale_id': 'SALE-FORM-1',
            'seller_payme_id': 'MPL-TEST-0001',
            'sale_status': 'completed',
            'notify_type': 'sale-complete',
            'sale_price': '6000',
            'currency': 'ILS',
            'transaction_id': str(self.order.pk),
        }
        data.update(overrides)
        return self.client.post(self.url, urlencode(data), content_type='application/x-www-form-urlencoded')

    def test_form_callback_marks_paid_and_logs(self):
        response = self.post_form()

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.order.refresh_from_db()
        self.assertEqual(self.order.financial_status, 'paid')
        log = PaymentCallback.objects.get()
        self.assertTrue(log.processed)
        self.assertFalse(log.duplicate)
        self.assertIn('SALE-FORM-1', log.request_body)

    def test_repeated_callback_logged_as_duplicate(self):
        self.post_form()
        response = self.post_form()

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            list(PaymentCallback.objects.order_by('received_at', 'id').values_list('duplicate', flat=True)),
            [False, True],
        )
        self.assertEqual(PaymentTransaction.objects.count(), 1)

    def test_seller_mismatch_rejected(self):
        response = self.post_form(seller_payme_id='MPL-SOMEONE-ELSE')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        log = PaymentCallback.objects.get()
        self.assertFalse(log.processed)
        self.assertEqual(log.response_status, 400)

    def test_provider_path(self):
        url = reverse('payments:provider_callback', kwargs={'provider': 'quick_payments'})
        response = self.client.post(url, {
            'payme_sale_id': 'SALE-JSON-1',
            'seller_payme_id': 'MPL-TEST-0001',
            'sale_status': 'completed',
            'sale_price': '6000',
            'transaction_id': str(self.order.pk),
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(PaymentCallback.objects.get().provider, 'quick_payments')
