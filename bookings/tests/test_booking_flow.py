"""
Booking lifecycle: creation, acceptance gate, status transitions,
cancellation and quote scheduling.
"""
import datetime
from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.core import mail
from django.utils import timezone
from rest_framework import status
from redis.exceptions import ConnectionError as RedisConnectionError
from rest_framework.test import APITestCase, APIClient

from bookings.models import ServiceRequest
from notifications.models import Notification
from payments.models import Payment, Plan, Subscription
from .helpers import create_marketplace


class BookingTestMixin:
    def setUp(self):
        self.client_user, self.provider_user, self.provider, self.service, self.offering = create_marketplace()
        self.api = APIClient()
        self.future_date = timezone.localdate() + timedelta(days=7)

    def make_booking(self, **kwargs):
        defaults = {
            'client': self.client_user,
            'provider': self.provider,
            'service': self.service,
            'description': 'Limpeza completa do apartamento',
        }
        defaults.update(kwargs)
        return ServiceRequest.objects.create(**defaults)

    def patch_status(self, user, booking, payload):
        self.api.force_authenticate(user=user)
        return self.api.patch(f'/api/bookings/{booking.id}/status/', payload, format='json')


class BookingCreateTests(BookingTestMixin, APITestCase):

    def test_quote_request_without_date(self):
        self.api.force_authenticate(user=self.client_user)
        response = self.api.post('/api/bookings/', {
            'provider': self.provider.id,
            'service': self.service.id,
            'description': 'Preciso de uma faxina completa',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['request_type'], 'QUOTE')
        self.assertEqual(response.data['status'], 'PENDING')
        self.assertEqual(Decimal(response.data['estimated_price']), Decimal('100.00'))
        self.assertIsNotNone(response.data['expires_at'])

    def test_scheduling_request_notifies_provider(self):
        self.api.force_authenticate(user=self.client_user)
        response = self.api.post('/api/bookings/', {
            'provider': self.provider.id,
            'service': self.service.id,
            'description': 'Preciso de uma faxina completa',
            'preferred_date': self.future_date.isoformat(),
            'preferred_time': '10:00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['request_type'], 'SCHEDULING')
        self.assertTrue(
            Notification.objects.filter(user=self.provider_user, type=Notification.Type.SERVICE_REQUEST).exists()
        )
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.provider_user.email])

    def test_only_date_without_time_is_rejected(self):
        self.api.force_authenticate(user=self.client_user)
        response = self.api.post('/api/bookings/', {
            'provider': self.provider.id,
            'service': self.service.id,
            'description': 'Preciso de uma faxina completa',
            'preferred_date': self.future_date.isoformat(),
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_short_description_is_rejected(self):
        self.api.force_authenticate(user=self.client_user)
        response = self.api.post('/api/bookings/', {
            'provider': self.provider.id,
            'service': self.service.id,
            'description': 'curta',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('description', response.data)

    def test_service_not_offered_is_rejected(self):
        self.offering.is_active = False
        self.offering.save()
        self.api.force_authenticate(user=self.client_user)
        response = self.api.post('/api/bookings/', {
            'provider': self.provider.id,
            'service': self.service.id,
            'description': 'Preciso de uma faxina completa',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('service', response.data)

    def test_taken_slot_returns_conflict(self):
        self.make_booking(
            request_type=ServiceRequest.RequestType.SCHEDULING,
            scheduled_date=self.future_date,
            scheduled_time=datetime.time(10, 0),
            status=ServiceRequest.Status.ACCEPTED,
        )
        self.api.force_authenticate(user=self.client_user)
        response = self.api.post('/api/bookings/', {
            'provider': self.provider.id,
            'service': self.service.id,
            'description': 'Preciso de uma faxina completa',
            'preferred_date': self.future_date.isoformat(),
            'preferred_time': '10:00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(ServiceRequest.objects.count(), 1)

    def test_cancelled_booking_frees_the_slot(self):
        self.make_booking(
            request_type=ServiceRequest.RequestType.SCHEDULING,
            scheduled_date=self.future_date,
            scheduled_time=datetime.time(10, 0),
            status=ServiceRequest.Status.CANCELLED,
        )
        self.api.force_authenticate(user=self.client_user)
        response = self.api.post('/api/bookings/', {
            'provider': self.provider.id,
            'service': self.service.id,
            'description': 'Preciso de uma faxina completa',
            'preferred_date': self.future_date.isoformat(),
            'preferred_time': '10:00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)


class BookingListAndDetailTests(BookingTestMixin, APITestCase):

    def test_list_filters_by_role_and_status(self):
        self.make_booking()
        self.make_booking(status=ServiceRequest.Status.CANCELLED)

        self.api.force_authenticate(user=self.provider_user)
        response = self.api.get('/api/bookings/?role=provider&status=pending')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)

        response = self.api.get('/api/bookings/?role=client')
        self.assertEqual(response.data['count'], 0)

    def test_detail_forbidden_for_outsiders(self):
        booking = self.make_booking()
        outsider = type(self.client_user).objects.create_user(email='outro@example.com', password='testpass123')
        self.api.force_authenticate(user=outsider)

        response = self.api.get(f'/api/bookings/{booking.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_detail_visible_to_admin(self):
        booking = self.make_booking()
        admin = type(self.client_user).objects.create_superuser(email='admin@example.com', password='testpass123')
        self.api.force_authenticate(user=admin)

        response = self.api.get(f'/api/bookings/{booking.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class AcceptanceGateTests(BookingTestMixin, APITestCase):

    def test_accept_without_subscription_or_payment_requires_unlock(self):
        booking = self.make_booking()
        response = self.patch_status(self.provider_user, booking, {'status': 'ACCEPTED'})

        self.assertEqual(response.status_code, status.HTTP_402_PAYMENT_REQUIRED)
        self.assertIn('Desbloqueie', str(response.data['detail']))
        booking.refresh_from_db()
        self.assertEqual(booking.status, ServiceRequest.Status.PENDING)

    def test_accept_with_approved_unlock_payment(self):
        booking = self.make_booking()
        Payment.objects.create(
            user=self.provider_user,
            service_request=booking,
            amount=Decimal('4.90'),
            purpose=Payment.Purpose.UNLOCK,
            status=Payment.Status.APPROVED,
        )
        response = self.patch_status(self.provider_user, booking, {'status': 'ACCEPTED'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ACCEPTED')

    def test_accept_with_active_subscription(self):
        booking = self.make_booking()
        plan = Plan.objects.create(name='Enterprise', price=Decimal('59.90'))
        Subscription.objects.create(
            provider=self.provider,
            plan=plan,
            start_date=timezone.now() - timedelta(days=3),
            end_date=timezone.now() + timedelta(days=27),
        )
        response = self.patch_status(self.provider_user, booking, {'status': 'ACCEPTED'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_expired_subscription_does_not_unlock(self):
        booking = self.make_booking()
        plan = Plan.objects.create(name='Enterprise', price=Decimal('59.90'))
        Subscription.objects.create(
            provider=self.provider,
            plan=plan,
            start_date=timezone.now() - timedelta(days=40),
            end_date=timezone.now() - timedelta(days=10),
        )
        response = self.patch_status(self.provider_user, booking, {'status': 'ACCEPTED'})

        self.assertEqual(response.status_code, status.HTTP_402_PAYMENT_REQUIRED)

    def test_client_cannot_accept(self):
        booking = self.make_booking()
        response = self.patch_status(self.client_user, booking, {'status': 'ACCEPTED'})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class StatusTransitionTests(BookingTestMixin, APITestCase):

    def test_reject_notifies_client(self):
        booking = self.make_booking()
        response = self.patch_status(self.provider_user, booking, {'status': 'REJECTED'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        notification = Notification.objects.get(user=self.client_user)
        self.assertIn('Recusada', notification.title)

    def test_invalid_transition_returns_400(self):
        booking = self.make_booking(status=ServiceRequest.Status.REJECTED)
        response = self.patch_status(self.provider_user, booking, {'status': 'COMPLETED', 'payment': {
            'method': 'PIX', 'amount': '120.00',
        }})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_complete_requires_payment(self):
        booking = self.make_booking(status=ServiceRequest.Status.ACCEPTED)
        response = self.patch_status(self.provider_user, booking, {'status': 'COMPLETED'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('payment', response.data)

    def test_complete_creates_manual_service_payment(self):
        booking = self.make_booking(status=ServiceRequest.Status.ACCEPTED)
        unlock = Payment.objects.create(
            user=self.provider_user,
            service_request=booking,
            amount=Decimal('4.90'),
            purpose=Payment.Purpose.UNLOCK,
            status=Payment.Status.APPROVED,
        )

        response = self.patch_status(self.provider_user, booking, {
            'status': 'COMPLETED',
            'payment': {'method': 'PIX', 'amount': '150.00'},
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        booking.refresh_from_db()
        self.assertEqual(booking.final_price, Decimal('150.00'))
        self.assertEqual(booking.payment_method, 'PIX')

        service_payment = Payment.objects.get(service_request=booking, purpose=Payment.Purpose.SERVICE)
        self.assertEqual(service_payment.status, Payment.Status.APPROVED)
        self.assertEqual(service_payment.gateway, Payment.Gateway.MANUAL)
        self.assertEqual(service_payment.user, self.client_user)

        unlock.refresh_from_db()
        self.assertEqual(unlock.amount, Decimal('4.90'))

    def test_complete_approves_existing_service_payment(self):
        booking = self.make_booking(status=ServiceRequest.Status.ACCEPTED)
        pending = Payment.objects.create(
            user=self.client_user,
            service_request=booking,
            amount=Decimal('100.00'),
            purpose=Payment.Purpose.SERVICE,
            status=Payment.Status.PENDING,
        )

        self.patch_status(self.provider_user, booking, {
            'status': 'COMPLETED',
            'payment': {'method': 'CASH', 'amount': '110.00'},
        })

        pending.refresh_from_db()
        self.assertEqual(pending.status, Payment.Status.APPROVED)
        self.assertEqual(pending.amount, Decimal('110.00'))
        self.assertEqual(Payment.objects.filter(service_request=booking).count(), 1)

    def test_cancel_requires_reason(self):
        booking = self.make_booking()
        response = self.patch_status(self.client_user, booking, {'status': 'CANCELLED', 'reason': 'não'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('reason', response.data)

    def test_cancel_by_provider_cancels_open_payments(self):
        booking = self.make_booking(status=ServiceRequest.Status.ACCEPTED)
        payment = Payment.objects.create(
            user=self.client_user,
            service_request=booking,
            amount=Decimal('100.00'),
            status=Payment.Status.PROCESSING,
        )

        response = self.patch_status(self.provider_user, booking, {
            'status': 'CANCELLED',
            'reason': 'Imprevisto com o veículo',
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        booking.refresh_from_db()
        self.assertEqual(booking.cancelled_by, ServiceRequest.CancelledBy.PROVIDER)
        self.assertEqual(booking.cancellation_reason, 'Imprevisto com o veículo')
        self.assertIsNotNone(booking.cancelled_at)
        payment.refresh_from_db()
        self.assertEqual(payment.status, Payment.Status.CANCELLED)


class CancelShortcutTests(BookingTestMixin, APITestCase):

    def test_client_cancels_pending_request(self):
        booking = self.make_booking()
        self.api.force_authenticate(user=self.client_user)
        response = self.api.post(f'/api/bookings/{booking.id}/cancel/', {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        booking.refresh_from_db()
        self.assertEqual(booking.status, ServiceRequest.Status.CANCELLED)
        self.assertEqual(booking.cancelled_by, ServiceRequest.CancelledBy.CLIENT)

    @patch('notifications.services.dispatcher.async_to_sync')
    def test_cancel_survives_realtime_outage(self, mock_async_to_sync):
        mock_async_to_sync.return_value.side_effect = RedisConnectionError('redis down')
        booking = self.make_booking()
        self.api.force_authenticate(user=self.client_user)

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            response = self.api.post(f'/api/bookings/{booking.id}/cancel/', {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(callbacks)
        mock_async_to_sync.return_value.assert_called()
        booking.refresh_from_db()
        self.assertEqual(booking.status, ServiceRequest.Status.CANCELLED)
        self.assertTrue(Notification.objects.filter(user=self.provider_user).exists())

    def test_only_pending_can_be_cancelled(self):
        booking = self.make_booking(status=ServiceRequest.Status.ACCEPTED)
        self.api.force_authenticate(user=self.client_user)
        response = self.api.post(f'/api/bookings/{booking.id}/cancel/', {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_provider_cannot_use_client_shortcut(self):
        booking = self.make_booking()
        self.api.force_authenticate(user=self.provider_user)
        response = self.api.post(f'/api/bookings/{booking.id}/cancel/', {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ScheduleQuoteTests(BookingTestMixin, APITestCase):

    def schedule(self, booking, time='14:00'):
        self.api.force_authenticate(user=self.provider_user)
        return self.api.patch(f'/api/bookings/{booking.id}/schedule/', {
            'scheduled_date': self.future_date.isoformat(),
            'scheduled_time': time,
        }, format='json')

    def test_quote_becomes_accepted_appointment(self):
        booking = self.make_booking(status=ServiceRequest.Status.ACCEPTED)
        response = self.schedule(booking)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        booking.refresh_from_db()
        self.assertEqual(booking.request_type, ServiceRequest.RequestType.SCHEDULING)
        self.assertEqual(booking.status, ServiceRequest.Status.ACCEPTED)
        self.assertEqual(booking.scheduled_time, datetime.time(14, 0))

    def test_slot_taken_by_other_booking(self):
        self.make_booking(
            request_type=ServiceRequest.RequestType.SCHEDULING,
            scheduled_date=self.future_date,
            scheduled_time=datetime.time(14, 0),
            status=ServiceRequest.Status.PENDING,
        )
        booking = self.make_booking(status=ServiceRequest.Status.ACCEPTED)

        response = self.schedule(booking)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_closed_booking_cannot_be_scheduled(self):
        booking = self.make_booking(status=ServiceRequest.Status.COMPLETED)
        response = self.schedule(booking)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pending_quote_still_needs_unlock(self):
        booking = self.make_booking()
        response = self.schedule(booking)

        self.assertEqual(response.status_code, status.HTTP_402_PAYMENT_REQUIRED)
