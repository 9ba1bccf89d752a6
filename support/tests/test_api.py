from unittest.mock import patch

from django.contrib.auth import get_user_model
from redis.exceptions import ConnectionError as RedisConnectionError
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from support.models import SupportChat, SupportMessage

User = get_user_model()


class SupportChatTestMixin:
    def setUp(self):
        self.api = APIClient()
        self.user = User.objects.create_user(email='ana@example.com', password='testpass123', first_name='Ana')
        self.other = User.objects.create_user(email='bia@example.com', password='testpass123')
        self.admin = User.objects.create_superuser(email='suporte@example.com', password='testpass123')

    def open_chat(self, user=None, **kwargs):
        return SupportChat.objects.create(user=user or self.user, subject='Problema no pagamento', **kwargs)


class SupportChatUserTests(SupportChatTestMixin, APITestCase):

    def test_open_chat_with_first_message(self):
        self.api.force_authenticate(user=self.user)
        response = self.api.post('/api/support/chats/', {
            'subject': 'Não consigo aceitar solicitações',
            'description': 'Paguei o desbloqueio e continua bloqueado.',
            'priority': 'HIGH',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        chat = SupportChat.objects.get(pk=response.data['id'])
        self.assertEqual(chat.status, SupportChat.Status.OPEN)
        self.assertEqual(chat.priority, SupportChat.Priority.HIGH)
        self.assertEqual(chat.messages.count(), 1)
        self.assertEqual(len(response.data['messages']), 1)
        self.assertFalse(chat.messages.first().is_from_admin)

    def test_subject_is_required(self):
        self.api.force_authenticate(user=self.user)
        response = self.api.post('/api/support/chats/', {'description': 'Ajuda'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('subject', response.data)

    def test_list_only_own_chats(self):
        mine = self.open_chat()
        self.open_chat(user=self.other)

        self.api.force_authenticate(user=self.user)
        response = self.api.get('/api/support/chats/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([chat['id'] for chat in response.data['results']], [mine.id])

    def test_other_users_chat_is_forbidden(self):
        chat = self.open_chat(user=self.other)
        self.api.force_authenticate(user=self.user)

        response = self.api.get(f'/api/support/chats/{chat.id}/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_send_message(self):
        chat = self.open_chat()
        self.api.force_authenticate(user=self.user)

        response = self.api.post(f'/api/support/chats/{chat.id}/messages/', {'content': 'Alguma novidade?'},
                                 format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['content'], 'Alguma novidade?')

    @patch('support.services.async_to_sync')
    def test_message_is_saved_when_broadcast_fails(self, mock_async_to_sync):
        mock_async_to_sync.return_value.side_effect = RedisConnectionError('redis down')
        chat = self.open_chat()
        self.api.force_authenticate(user=self.user)

        response = self.api.post(f'/api/support/chats/{chat.id}/messages/', {'content': 'Ainda aguardo'},
                                 format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(chat.messages.filter(content='Ainda aguardo').exists())

    def test_closed_chat_rejects_messages(self):
        chat = self.open_chat(status=SupportChat.Status.CLOSED)
        self.api.force_authenticate(user=self.user)

        response = self.api.post(f'/api/support/chats/{chat.id}/messages/', {'content': 'Oi'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(SupportMessage.objects.exists())

    def test_unread_admin_replies(self):
        chat = self.open_chat()
        SupportMessage.objects.create(chat=chat, sender=self.admin, content='Estamos verificando.', is_from_admin=True)
        SupportMessage.objects.create(chat=chat, sender=self.user, content='Obrigada')
        self.api.force_authenticate(user=self.user)

        self.assertEqual(self.api.get('/api/support/unread-count/').data, {'unread_count': 1})

        response = self.api.post(f'/api/support/chats/{chat.id}/mark-all-read/')
        self.assertEqual(response.data, {'updated': 1})
        self.assertEqual(self.api.get('/api/support/unread-count/').data, {'unread_count': 0})


class AdminSupportChatTests(SupportChatTestMixin, APITestCase):

    def setUp(self):
        super().setUp()
        self.api.force_authenticate(user=self.admin)

    def test_admin_reply_is_flagged(self):
        chat = self.open_chat()

        response = self.api.post(f'/api/support/chats/{chat.id}/messages/', {'content': 'Olá, Ana!'},
                                 format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(SupportMessage.objects.get(pk=response.data['id']).is_from_admin)

    def test_assign_and_close(self):
        chat = self.open_chat()

        response = self.api.post(f'/api/support/admin/chats/{chat.id}/assign/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        chat.refresh_from_db()
        self.assertEqual(chat.status, SupportChat.Status.IN_PROGRESS)
        self.assertEqual(chat.assigned_admin, self.admin)

        response = self.api.post(f'/api/support/admin/chats/{chat.id}/close/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        chat.refresh_from_db()
        self.assertEqual(chat.status, SupportChat.Status.CLOSED)
        self.assertIsNotNone(chat.closed_at)

        response = self.api.post(f'/api/support/admin/chats/{chat.id}/assign/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_counts(self):
        chat = self.open_chat()
        self.open_chat(status=SupportChat.Status.CLOSED)
        SupportMessage.objects.create(chat=chat, sender=self.user, content='Ajuda')

        response = self.api.get('/api/support/admin/chats/counts/')

        self.assertEqual(response.data, {'open': 1, 'in_progress': 0, 'closed': 1, 'unread': 1})

    def test_status_filter(self):
        self.open_chat()
        self.open_chat(status=SupportChat.Status.CLOSED)

        response = self.api.get('/api/support/admin/chats/?status=closed')

        self.assertEqual(response.data['count'], 1)

    def test_non_admin_forbidden(self):
        self.api.force_authenticate(user=self.user)

        response = self.api.get('/api/support/admin/chats/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
