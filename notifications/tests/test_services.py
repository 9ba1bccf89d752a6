from decimal import Decimal
from unittest.mock import patch

import requests
from channels.exceptions import ChannelFull
from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings
from redis.exceptions import ConnectionError as RedisConnectionError

from notifications.models import Notification
from notifications.services import notify
from notifications.services.dispatcher import push_realtime
from notifications.services.messages import render
from notifications.services.whatsapp import format_phone_number, send_whatsapp

User = get_user_model()

CHATPRO = {
    'CHATPRO_API_URL': 'https://chatpro.test/api/',
    'CHATPRO_API_KEY': 'secret',
    'CHATPRO_TIMEOUT': 10,
}


class PhoneFormatTests(TestCase):

    def test_brazilian_numbers(self):
        self.assertEqual(format_phone_number('(11) 98765-4321'), '5511987654321')
        self.assertEqual(format_phone_number('11 3456-7890'), '551134567890')
        self.assertEqual(format_phone_number('+55 11 98765-4321'), '5511987654321')
        self.assertEqual(format_phone_number('98765-4321'), '987654321')
        self.assertEqual(format_phone_number(''), '')


@override_settings(**CHATPRO)
class SendWhatsAppTests(TestCase):

    @patch('notifications.services.whatsapp.requests.post')
    def test_success(self, mock_post):
        mock_post.return_value.status_code = 200

        self.assertTrue(send_whatsapp('(11) 98765-4321', 'Olá'))

        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], 'https://chatpro.test/api/send-message')
        self.assertEqual(kwargs['json'], {'phone': '5511987654321', 'message': 'Olá', 'type': 'text'})
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer secret')
        self.assertEqual(kwargs['timeout'], 10)

    @patch('notifications.services.whatsapp.requests.post')
    def test_non_200_is_failure(self, mock_post):
        mock_post.return_value.status_code = 201

        self.assertFalse(send_whatsapp('11987654321', 'Olá'))

    @patch('notifications.services.whatsapp.requests.post')
    @patch('notifications.services.whatsapp.logger')
    def test_timeout_is_logged(self, mock_logger, mock_post):
        mock_post.side_effect = requests.Timeout()

        self.assertFalse(send_whatsapp('11987654321', 'Olá'))
        self.assertTrue(mock_logger.error.called)

    @override_settings(CHATPRO_API_URL='')
    @patch('notifications.services.whatsapp.requests.post')
    def test_not_configured(self, mock_post):
        self.assertFalse(send_whatsapp('11987654321', 'Olá'))
        mock_post.assert_not_called()


class RenderTests(TestCase):

    def test_amount_and_date_display(self):
        _, title, body = render('booking_request', {
            'user_name': 'Carlos',
            'service_name': 'Pintura',
            'client_name': 'Ana',
            'amount': Decimal('150.5'),
            'scheduled_date': '10/03/2025',
            'scheduled_time': '14:00',
        })

        self.assertIn('Nova Solicitação', title)
        self.assertIn('R$ 150,50', body)
        self.assertIn('10/03/2025 14:00', body)

    def test_missing_values(self):
        _, _, body = render('booking_request', {'user_name': 'Carlos', 'amount': None})

        self.assertIn('A negociar', body)
        self.assertIn('A combinar', body)
        self.assertNotIn('None', body)


class NotifyTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            email='ana@example.com', password='testpass123', first_name='Ana', phone='11987654321'
        )

    @override_settings(**CHATPRO)
    @patch('notifications.services.whatsapp.requests.post')
    def test_all_channels(self, mock_post):
        mock_post.return_value.status_code = 200

        results = notify(self.user, 'welcome')

        self.assertTrue(results['email'])
        self.assertTrue(results['whatsapp'])
        notification = results['in_app']
        self.assertEqual(notification.type, Notification.Type.SYSTEM)
        self.assertEqual(notification.sent_via, 'in_app,email,whatsapp')
        self.assertEqual(notification.data['kind'], 'welcome')
        self.assertIn('Ana', notification.message)

        self.assertEqual(len(mail.outbox), 1)
        self.assertTrue(mail.outbox[0].subject.endswith(' - MyServ'))
        self.assertIn('MyServ - Conectando', mail.outbox[0].body)

    def test_whatsapp_skipped_without_phone(self):
        self.user.phone = ''
        self.user.save()

        with patch('notifications.services.whatsapp.send_whatsapp') as mock_send:
            results = notify(self.user, 'welcome', channels=('in_app', 'whatsapp'))

        mock_send.assert_not_called()
        self.assertFalse(results['whatsapp'])
        self.assertEqual(results['in_app'].sent_via, 'in_app')
        self.assertEqual(len(mail.outbox), 0)

    def test_in_app_only(self):
        results = notify(self.user, 'payment_status', {'amount': Decimal('4.90'), 'status': 'Aprovado'},
                         channels=('in_app',))

        self.assertEqual(results['in_app'].type, Notification.Type.PAYMENT)
        self.assertEqual(results['in_app'].data['amount'], '4.90')
        self.assertEqual(len(mail.outbox), 0)


class PushRealtimeTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(email='ana@example.com', password='testpass123')

    def test_push_runs_after_commit(self):
        with patch('notifications.services.dispatcher.push_realtime') as mock_push:
            with self.captureOnCommitCallbacks(execute=True):
                results = notify(self.user, 'welcome', channels=('in_app',))
                mock_push.assert_not_called()

        mock_push.assert_called_once_with(results['in_app'])

    @patch('notifications.services.dispatcher.logger')
    @patch('notifications.services.dispatcher.async_to_sync')
    def test_channel_layer_errors_are_logged(self, mock_async_to_sync, mock_logger):
        notification = Notification.objects.create(user=self.user, title='Oi', message='Teste')

        for error in (RedisConnectionError('redis down'), ChannelFull(), OSError('refused')):
            mock_async_to_sync.return_value.side_effect = error
            self.assertFalse(push_realtime(notification))

        self.assertEqual(mock_logger.error.call_count, 3)
