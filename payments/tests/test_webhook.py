"""
Mercado Pago webhook: status mapping, local upsert and subscription renewal.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from payments.models import Payment, Subscription
from payments.services.webhook import (
    activate_subscription,
    add_one_month,
    handle_payment_webhook,
    map_payment_method,
    map_payment_status,
)
from .helpers import create_plans, create_provider_with_request


class StatusMappingTests(TestCase):

    def test_gateway_statuses(self):
        self.assertEqual(map_payment_status('approved'), Payment.Status.APPROVED)
        self.assertEqual(map_payment_status('in_process'), Payment.Status.PROCESSING)
        self.assertEqual(map_payment_status('in_mediation'), Payment.Status.PROCESSING)
        self.assertEqual(map_payment_status('pending_waiting_payment'), Payment.Status.PENDING)
        self.assertEqual(map_payment_status('rejected'), Payment.Status.REJECTED)
        self.assertEqual(map_payment_status('cancelled'), Payment.Status.REJECTED)
        self.assertEqual(map_payment_status('charged_back'), Payment.Status.REFUNDED)
        self.assertEqual(map_payment_status('something_new'), Payment.Status.PENDING)
        self.assertEqual(map_payment_status(None), Payment.Status.PENDING)

    def test_payment_methods(self):
        self.assertEqual(map_payment_method('pix'), Payment.Method.PIX)
        self.assertEqual(map_payment_method('bank_transfer'), Payment.Method.PIX)
        self.assertEqual(map_payment_method('bolbradesco'), Payment.Method.BOLETO)
        self.assertEqual(map_payment_method('debit_card'), Payment.Method.DEBIT_CARD)
        self.assertEqual(map_payment_method('account_money'), Payment.Method.CREDIT_CARD)

    def test_add_one_month_clamps_day(self):
        self.assertEqual(add_one_month(datetime(2024, 1, 31)), datetime(2024, 2, 29))
        self.assertEqual(add_one_month(datetime(2023, 12, 15)), datetime(2024, 1, 15))


class HandlePaymentWebhookTests(TestCase):

    def setUp(self):
        self.client_user, self.provider_user, self.booking = create_provider_with_request()
        self.provider = self.provider_user.service_provider
        self.premium, self.enterprise = create_plans()

    def gateway_payment(self, **overrides):
        data = {
            'id': 987654,
            'status': 'approved',
            'transaction_amount': 29.9,
            'currency_id': 'BRL',
            'payment_type_id': 'pix',
            'description': 'MyServ PREMIUM',
            'metadata': {
                'purpose': 'SUBSCRIPTION',
                'payer': {'user_id': self.provider_user.id, 'provider_id': self.provider.id},
                'plan': {'id': self.premium.id},
            },
        }
        data.update(overrides)
        return data

    def test_updates_local_payment_from_metadata(self):
        local = Payment.objects.create(
            user=self.provider_user,
            service_request=self.booking,
            amount=Decimal('4.90'),
            purpose=Payment.Purpose.UNLOCK,
        )
        payment, subscription = handle_payment_webhook(self.gateway_payment(
            transaction_amount=4.9,
            external_reference=f'unlock-{self.booking.id}',
            metadata={
                'purpose': 'UNLOCK',
                'payment_id': local.id,
                'payer': {'user_id': self.provider_user.id},
                'booking': {'id': self.booking.id},
            },
        ))

        self.assertEqual(payment.id, local.id)
        self.assertIsNone(subscription)
        local.refresh_from_db()
        self.assertEqual(local.status, Payment.Status.APPROVED)
        self.assertEqual(local.gateway_payment_id, '987654')
        self.assertEqual(local.payment_method, Payment.Method.PIX)

    def test_repeated_notification_updates_same_payment(self):
        handle_payment_webhook(self.gateway_payment(status='in_process'))
        handle_payment_webhook(self.gateway_payment(status='rejected'))

        self.assertEqual(Payment.objects.filter(gateway_payment_id='987654').count(), 1)
        self.assertEqual(Payment.objects.get(gateway_payment_id='987654').status, Payment.Status.REJECTED)

    def test_unknown_payment_without_payer_is_ignored(self):
        payment, subscription = handle_payment_webhook(self.gateway_payment(metadata={}))

        self.assertIsNone(payment)
        self.assertIsNone(subscription)
        self.assertFalse(Payment.objects.exists())

    def test_approved_subscription_starts_plan(self):
        payment, subscription = handle_payment_webhook(self.gateway_payment())

        self.assertEqual(payment.purpose, Payment.Purpose.SUBSCRIPTION)
        self.assertEqual(subscription.plan, self.premium)
        self.assertEqual(subscription.status, Subscription.Status.ACTIVE)
        self.assertEqual(payment.subscription, subscription)

    def test_pending_subscription_payment_does_not_activate(self):
        payment, subscription = handle_payment_webhook(self.gateway_payment(status='pending'))

        self.assertIsNone(subscription)
        self.assertFalse(Subscription.objects.exists())

    def test_same_plan_is_extended_one_month(self):
        end_date = timezone.now() + timedelta(days=10)
        current = Subscription.objects.create(
            provider=self.provider,
            plan=self.premium,
            start_date=timezone.now() - timedelta(days=20),
            end_date=end_date,
        )

        _, subscription = handle_payment_webhook(self.gateway_payment())

        self.assertEqual(subscription.id, current.id)
        current.refresh_from_db()
        self.assertEqual(current.end_date, add_one_month(end_date))
        self.assertEqual(Subscription.objects.count(), 1)

    def test_other_plan_replaces_current(self):
        current = Subscription.objects.create(
            provider=self.provider,
            plan=self.enterprise,
            start_date=timezone.now() - timedelta(days=5),
            end_date=timezone.now() + timedelta(days=25),
        )

        _, subscription = handle_payment_webhook(self.gateway_payment())

        current.refresh_from_db()
        self.assertEqual(current.status, Subscription.Status.CANCELLED)
        self.assertNotEqual(subscription.id, current.id)
        self.assertEqual(subscription.plan, self.premium)

    def test_repeated_approval_does_not_extend_again(self):
        _, subscription = handle_payment_webhook(self.gateway_payment())
        end_date = subscription.end_date

        payment, replayed = handle_payment_webhook(self.gateway_payment())

        self.assertIsNone(replayed)
        self.assertEqual(payment.subscription_id, subscription.id)
        subscription.refresh_from_db()
        self.assertEqual(subscription.end_date, end_date)
        self.assertEqual(Subscription.objects.count(), 1)
        self.assertEqual(Payment.objects.count(), 1)

    def test_pending_then_approved_activates_once(self):
        handle_payment_webhook(self.gateway_payment(status='pending'))
        _, subscription = handle_payment_webhook(self.gateway_payment())
        _, replayed = handle_payment_webhook(self.gateway_payment())

        self.assertIsNotNone(subscription)
        self.assertIsNone(replayed)
        self.assertEqual(Subscription.objects.get().end_date, subscription.end_date)

    def test_non_numeric_references_are_ignored(self):
        payment, subscription = handle_payment_webhook(self.gateway_payment(
            transaction_amount=4.9,
            external_reference='unlock-abc',
            metadata={
                'purpose': 'UNLOCK',
                'payment_id': 'xyz',
                'payer': {'user_id': self.provider_user.id},
                'booking': {'id': 'not-a-number'},
            },
        ))

        self.assertIsNone(payment.service_request)
        self.assertEqual(payment.purpose, Payment.Purpose.UNLOCK)
        self.assertIsNone(subscription)

    def test_non_numeric_payer_is_ignored(self):
        payment, subscription = handle_payment_webhook(self.gateway_payment(
            metadata={'payer': {'user_id': 'abc'}, 'plan': {'id': 'premium'}},
        ))

        self.assertIsNone(payment)
        self.assertFalse(Payment.objects.exists())

    def test_expired_same_plan_restarts_from_now(self):
        now = timezone.now()
        current = Subscription.objects.create(
            provider=self.provider,
            plan=self.premium,
            start_date=now - timedelta(days=60),
            end_date=now - timedelta(days=30),
        )
        payment = Payment.objects.create(user=self.provider_user, amount=Decimal('29.90'))

        subscription = activate_subscription(self.provider.id, self.premium, payment, now=now)

        self.assertEqual(subscription.id, current.id)
        self.assertEqual(subscription.end_date, add_one_month(now))


class PaymentWebhookViewTests(APITestCase):

    def setUp(self):
        self.api = APIClient()
        self.client_user, self.provider_user, self.booking = create_provider_with_request()

    def test_unhandled_type_is_acknowledged(self):
        response = self.api.post('/api/payments/webhook/', {'type': 'merchant_order'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('merchant_order', response.data['message'])

    def test_missing_id_is_rejected(self):
        response = self.api.post('/api/payments/webhook/', {'type': 'payment'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('payments.views.webhook_views.MercadoPagoClient')
    def test_unknown_gateway_payment(self, mock_client):
        mock_client.return_value.get_payment.return_value = None

        response = self.api.post(
            '/api/payments/webhook/', {'type': 'payment', 'data': {'id': '1'}}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @patch('payments.views.webhook_views.MercadoPagoClient')
    def test_malformed_reference_is_acknowledged(self, mock_client):
        mock_client.return_value.get_payment.return_value = {
            'id': 556,
            'status': 'approved',
            'transaction_amount': 4.9,
            'external_reference': 'unlock-abc',
            'metadata': {'purpose': 'UNLOCK', 'payer': {'user_id': self.provider_user.id}},
        }

        response = self.api.post(
            '/api/payments/webhook/', {'type': 'payment', 'data': {'id': '556'}}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(Payment.objects.get(gateway_payment_id='556').service_request_id)

    @patch('payments.views.webhook_views.MercadoPagoClient')
    def test_approved_unlock_lets_provider_accept(self, mock_client):
        mock_client.return_value.get_payment.return_value = {
            'id': 555,
            'status': 'approved',
            'transaction_amount': 4.9,
            'payment_type_id': 'credit_card',
            'external_reference': f'unlock-{self.booking.id}',
            'metadata': {
                'purpose': 'UNLOCK',
                'payer': {'user_id': self.provider_user.id},
            },
        }

        response = self.api.post('/api/payments/webhook/?type=payment&data.id=555')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], Payment.Status.APPROVED)
        mock_client.return_value.get_payment.assert_called_once_with('555')

        payment = Payment.objects.get(gateway_payment_id='555')
        self.assertEqual(payment.service_request, self.booking)
        self.assertEqual(payment.purpose, Payment.Purpose.UNLOCK)

        self.api.force_authenticate(user=self.provider_user)
        response = self.api.patch(
            f'/api/bookings/{self.booking.id}/status/', {'status': 'ACCEPTED'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
