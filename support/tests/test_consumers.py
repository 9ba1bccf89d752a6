from channels.db import database_sync_to_async
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TransactionTestCase
from rest_framework_simplejwt.tokens import AccessToken

from support.middleware import JWTAuthMiddleware, get_user_from_token
from support.models import SupportChat, SupportMessage
from support.routing import websocket_urlpatterns

User = get_user_model()


class ChatConsumerTests(TransactionTestCase):

    def setUp(self):
        self.user = User.objects.create_user(email='ana@example.com', password='testpass123')
        self.stranger = User.objects.create_user(email='bia@example.com', password='testpass123')
        self.chat = SupportChat.objects.create(user=self.user, subject='Problema no pagamento')
        self.application = JWTAuthMiddleware(URLRouter(websocket_urlpatterns))

    def communicator(self, user=None, chat_id=None):
        path = f'/ws/support/{chat_id or self.chat.id}/'
        if user is not None:
            path += f'?token={AccessToken.for_user(user)}'
        return WebsocketCommunicator(self.application, path)

    async def test_owner_sends_and_receives(self):
        communicator = self.communicator(self.user)
        connected, _ = await communicator.connect()
        self.assertTrue(connected)

        greeting = await communicator.receive_json_from()
        self.assertEqual(greeting, {'type': 'connection_established', 'chat_id': self.chat.id})

        await communicator.send_json_to({'message': '  Olá, preciso de ajuda  '})
        event = await communicator.receive_json_from()

        self.assertEqual(event['type'], 'message')
        self.assertEqual(event['message']['content'], 'Olá, preciso de ajuda')
        count = await database_sync_to_async(SupportMessage.objects.filter(chat=self.chat).count)()
        self.assertEqual(count, 1)
        await communicator.disconnect()

    async def test_invalid_payloads(self):
        communicator = self.communicator(self.user)
        await communicator.connect()
        await communicator.receive_json_from()

        await communicator.send_to(text_data='not json')
        self.assertEqual((await communicator.receive_json_from())['type'], 'error')

        await communicator.send_json_to({'message': '   '})
        self.assertIn('vazia', (await communicator.receive_json_from())['message'])

        await communicator.send_json_to({'message': 'x' * 5001})
        self.assertIn('5000', (await communicator.receive_json_from())['message'])
        await communicator.disconnect()

    async def test_anonymous_rejected(self):
        connected, code = await self.communicator().connect()

        self.assertFalse(connected)
        self.assertEqual(code, 4001)

    async def test_stranger_rejected(self):
        connected, code = await self.communicator(self.stranger).connect()

        self.assertFalse(connected)
        self.assertEqual(code, 4003)

    async def test_unknown_chat(self):
        connected, code = await self.communicator(self.user, chat_id=999999).connect()

        self.assertFalse(connected)
        self.assertEqual(code, 4004)

    async def test_closed_chat(self):
        self.chat.status = SupportChat.Status.CLOSED
        await database_sync_to_async(self.chat.save)()

        connected, code = await self.communicator(self.user).connect()

        self.assertFalse(connected)
        self.assertEqual(code, 4005)

    async def test_invalid_token_is_anonymous(self):
        user = await get_user_from_token('definitely-not-a-jwt')

        self.assertIsInstance(user, AnonymousUser)
