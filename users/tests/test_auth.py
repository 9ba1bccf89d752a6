"""
Tests for registration, login, password management and account confirmation.
"""
import re
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.contrib.auth.tokens import default_token_generator
from django.core import mail
from django.core.cache import cache
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from notifications.models import Notification
from users.models import ServiceProvider
from users.tokens import email_verification_token

User = get_user_model()

STRONG_PASSWORD = 'Ipe#Amarelo2024'


class RegistrationTests(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = '/api/auth/register/'

    def _payload(self, **overrides):
        payload = {
            'email': 'Maria.Silva@Example.com',
            'password': STRONG_PASSWORD,
            'first_name': 'Maria',
            'last_name': 'Silva',
            'phone': '11912345678',
            'city': 'Campinas',
            'state': 'SP',
        }
        payload.update(overrides)
        return payload

    def test_register_client_sends_welcome(self):
        response = self.client.post(self.url, self._payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data)

        user = User.objects.get(email='maria.silva@example.com')
        self.assertEqual(user.role, User.Role.CLIENT)
        self.assertTrue(user.check_password(STRONG_PASSWORD))

        notification = Notification.objects.get(user=user)
        self.assertEqual(notification.type, Notification.Type.SYSTEM)
        self.assertIn('in_app', notification.sent_via)
        self.assertEqual(len(mail.outbox), 2)
        self.assertEqual({tuple(message.to) for message in mail.outbox}, {('maria.silva@example.com',)})
        self.assertTrue(any('/verificar-email?uid=' in message.body for message in mail.outbox))
        self.assertFalse(user.email_verified)

    def test_register_provider_creates_profile(self):
        response = self.client.post(
            self.url, self._payload(role=User.Role.SERVICE_PROVIDER), format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email='maria.silva@example.com')
        self.assertTrue(ServiceProvider.objects.filter(user=user).exists())
        self.assertFalse(user.is_approved)
        self.assertEqual(user.approval_status, User.ApprovalStatus.PENDING)

    def test_admin_cannot_self_register(self):
        response = self.client.post(self.url, self._payload(role=User.Role.ADMIN), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data)
        self.assertFalse(User.objects.exists())

    def test_duplicate_email_is_case_insensitive(self):
        User.objects.create_user(email='maria.silva@example.com', password=STRONG_PASSWORD)

        response = self.client.post(self.url, self._payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_weak_password_is_rejected(self):
        response = self.client.post(self.url, self._payload(password='12345678'), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.exists())


class LoginTests(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email='joao@example.com',
            password=STRONG_PASSWORD,
            first_name='João',
            role=User.Role.CLIENT,
        )

    def test_login_returns_tokens_and_user(self):
        response = self.client.post(
            '/api/auth/login/',
            {'email': 'joao@example.com', 'password': STRONG_PASSWORD},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['email'], 'joao@example.com')
        self.assertEqual(response.data['user']['role'], User.Role.CLIENT)

    def test_access_token_authenticates_requests(self):
        login = self.client.post(
            '/api/auth/login/',
            {'email': 'joao@example.com', 'password': STRONG_PASSWORD},
            format='json'
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {login.data['access']}")

        response = self.client.get('/api/users/me/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['first_name'], 'João')

    def test_wrong_password(self):
        response = self.client.post(
            '/api/auth/login/',
            {'email': 'joao@example.com', 'password': 'errada'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_inactive_account_cannot_login(self):
        self.user.is_active = False
        self.user.save()

        response = self.client.post(
            '/api/auth/login/',
            {'email': 'joao@example.com', 'password': STRONG_PASSWORD},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh(self):
        login = self.client.post(
            '/api/auth/login/',
            {'email': 'joao@example.com', 'password': STRONG_PASSWORD},
            format='json'
        )

        response = self.client.post(
            '/api/auth/refresh/', {'refresh': login.data['refresh']}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)


class PasswordTests(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email='joao@example.com',
            password=STRONG_PASSWORD,
            first_name='João',
        )

    def test_change_password(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post('/api/auth/change-password/', {
            'old_password': STRONG_PASSWORD,
            'new_password': 'Jabuticaba#77',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Jabuticaba#77'))

    def test_change_password_wrong_current(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post('/api/auth/change-password/', {
            'old_password': 'nao-e-essa',
            'new_password': 'Jabuticaba#77',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('old_password', response.data)

    def test_change_password_must_differ(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post('/api/auth/change-password/', {
            'old_password': STRONG_PASSWORD,
            'new_password': STRONG_PASSWORD,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('new_password', response.data)

    def test_change_password_requires_auth(self):
        response = self.client.post('/api/auth/change-password/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_reset_request_emails_link(self):
        response = self.client.post(
            '/api/auth/password-reset/', {'email': 'JOAO@example.com'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('/redefinir-senha?uid=', mail.outbox[0].body)

    def test_reset_request_unknown_email_gives_same_answer(self):
        known = self.client.post(
            '/api/auth/password-reset/', {'email': 'joao@example.com'}, format='json'
        )
        unknown = self.client.post(
            '/api/auth/password-reset/', {'email': 'ninguem@example.com'}, format='json'
        )

        self.assertEqual(unknown.status_code, status.HTTP_200_OK)
        self.assertEqual(known.data, unknown.data)
        self.assertEqual(len(mail.outbox), 1)

    def test_reset_link_from_email_works(self):
        self.client.post('/api/auth/password-reset/', {'email': 'joao@example.com'}, format='json')
        match = re.search(r'uid=([^&\s]+)&token=(\S+)', mail.outbox[0].body)

        response = self.client.post('/api/auth/password-reset-confirm/', {
            'uid': match.group(1),
            'token': match.group(2),
            'new_password': 'Jabuticaba#77',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Jabuticaba#77'))

    def test_reset_confirm_invalid_token(self):
        response = self.client.post('/api/auth/password-reset-confirm/', {
            'uid': urlsafe_base64_encode(force_bytes(self.user.pk)),
            'token': 'token-invalido',
            'new_password': 'Jabuticaba#77',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password(STRONG_PASSWORD))

    def test_reset_token_is_single_use(self):
        token = default_token_generator.make_token(self.user)
        uid = urlsafe_base64_encode(force_bytes(self.user.pk))
        payload = {'uid': uid, 'token': token, 'new_password': 'Jabuticaba#77'}

        first = self.client.post('/api/auth/password-reset-confirm/', payload, format='json')
        payload['new_password'] = 'Carambola#88'
        second = self.client.post('/api/auth/password-reset-confirm/', payload, format='json')

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_400_BAD_REQUEST)


class EmailVerificationTests(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email='bia@example.com',
            password=STRONG_PASSWORD,
            first_name='Beatriz',
        )
        self.uid = urlsafe_base64_encode(force_bytes(self.user.pk))

    def test_link_from_registration_confirms_email(self):
        self.client.post('/api/auth/register/', {
            'email': 'rafa@example.com',
            'password': STRONG_PASSWORD,
            'first_name': 'Rafael',
            'last_name': 'Lima',
        }, format='json')
        body = next(message.body for message in mail.outbox if 'verificar-email' in message.body)
        match = re.search(r'uid=([^&\s]+)&token=(\S+)', body)

        response = self.client.post('/api/auth/email/verify/', {
            'uid': match.group(1),
            'token': match.group(2),
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(User.objects.get(email='rafa@example.com').email_verified)

    def test_invalid_token_is_rejected(self):
        response = self.client.post('/api/auth/email/verify/', {
            'uid': self.uid,
            'token': 'token-invalido',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertFalse(self.user.email_verified)

    def test_password_reset_token_does_not_confirm_email(self):
        response = self.client.post('/api/auth/email/verify/', {
            'uid': self.uid,
            'token': default_token_generator.make_token(self.user),
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_confirming_twice_is_harmless(self):
        payload = {'uid': self.uid, 'token': email_verification_token.make_token(self.user)}

        first = self.client.post('/api/auth/email/verify/', payload, format='json')
        second = self.client.post('/api/auth/email/verify/', payload, format='json')

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.email_verified)

    def test_resend_emails_new_link(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.post('/api/auth/email/resend/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('/verificar-email?uid=', mail.outbox[0].body)

    def test_resend_when_already_confirmed(self):
        self.user.email_verified = True
        self.user.save()
        self.client.force_authenticate(user=self.user)

        response = self.client.post('/api/auth/email/resend/')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(len(mail.outbox), 0)

    def test_resend_requires_auth(self):
        response = self.client.post('/api/auth/email/resend/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class PhoneVerificationTests(APITestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email='caio@example.com',
            password=STRONG_PASSWORD,
            first_name='Caio',
            phone='11912345678',
        )
        self.client.force_authenticate(user=self.user)

    @patch('users.views.auth_views.whatsapp.send_whatsapp', return_value=True)
    def test_code_confirms_phone(self, mock_send):
        response = self.client.post('/api/auth/phone/send-code/', {'phone': '(19) 98765-4321'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        phone, message = mock_send.call_args[0]
        self.assertEqual(phone, '19987654321')
        code = re.search(r'\d{6}', message).group(0)

        response = self.client.post('/api/auth/phone/verify/', {'code': code}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.phone_verified)
        self.assertEqual(self.user.phone, '19987654321')
        self.assertIsNone(cache.get(f'phone-verification:{self.user.pk}'))

    @patch('users.views.auth_views.whatsapp.send_whatsapp', return_value=True)
    def test_wrong_code_is_rejected(self, mock_send):
        self.client.post('/api/auth/phone/send-code/', {}, format='json')
        code = re.search(r'\d{6}', mock_send.call_args[0][1]).group(0)
        wrong = '000000' if code != '000000' else '111111'

        response = self.client.post('/api/auth/phone/verify/', {'code': wrong}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertFalse(self.user.phone_verified)

    def test_verify_without_code_requested(self):
        response = self.client.post('/api/auth/phone/verify/', {'code': '123456'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('users.views.auth_views.whatsapp.send_whatsapp', return_value=False)
    def test_send_failure_is_reported(self, mock_send):
        response = self.client.post('/api/auth/phone/send-code/', {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertIsNone(cache.get(f'phone-verification:{self.user.pk}'))

    def test_invalid_phone_is_rejected(self):
        response = self.client.post('/api/auth/phone/send-code/', {'phone': '123'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('phone', response.data)

    def test_changing_phone_clears_confirmation(self):
        self.user.phone_verified = True
        self.user.save()

        response = self.client.patch('/api/users/me/', {'phone': '21999998888'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertFalse(self.user.phone_verified)
