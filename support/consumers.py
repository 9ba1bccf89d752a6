import json
import logging

from asgiref.sync import async_to_sync
from channels.generic.websocket import WebsocketConsumer

from .models import SupportChat
from .serializers import SupportMessageSerializer
from .services import chat_group, create_message

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 5000


class ChatConsumer(WebsocketConsumer):
    """
    Real-time support chat.

    URL: ws://localhost:8000/ws/support/{chat_id}/?token=<jwt_access_token>

    Protocol:
    - Client sends: {"message": "text"}
    - Server broadcasts: {"type": "message", "message": {...serialized SupportMessage...}}

    Close codes:
    - 4001: user not authenticated
    - 4003: user is neither the chat owner nor an admin
    - 4004: chat not found
    - 4005: chat already closed
    """

    def connect(self):
        self.user = self.scope['user']
        self.chat_id = self.scope['url_route']['kwargs']['chat_id']
        self.room_group_name = chat_group(self.chat_id)

        if not self.user.is_authenticated:
            logger.warning(f"Anonymous connection attempt to support chat {self.chat_id}")
            self.close(code=4001)
            return

        try:
            self.chat = SupportChat.objects.select_related('user').get(id=self.chat_id)
        except (SupportChat.DoesNotExist, ValueError):
            logger.warning(f"User {self.user.email} tried to join unknown support chat {self.chat_id}")
            self.close(code=4004)
            return

        if not self.chat.can_access(self.user):
            logger.warning(f"User {self.user.email} not allowed in support chat {self.chat_id}")
            self.close(code=4003)
            return

        if self.chat.status == SupportChat.Status.CLOSED:
            logger.info(f"Connection attempt to closed support chat {self.chat_id}")
            self.close(code=4005)
            return

        async_to_sync(self.channel_layer.group_add)(
            self.room_group_name,
            self.channel_name
        )
        self.accept()

        logger.info(f"User {self.user.email} connected to support chat {self.chat_id}")
        self.send(text_data=json.dumps({
            'type': 'connection_established',
            'chat_id': self.chat.id,
        }))

    def disconnect(self, close_code):
        if hasattr(self, 'room_group_name') and hasattr(self, 'chat'):
            async_to_sync(self.channel_layer.group_discard)(
                self.room_group_name,
                self.channel_name
            )
            logger.info(
                f"User {self.user.email} disconnected from support chat {self.chat_id} (code: {close_code})"
            )

    def _error(self, message):
        self.send(text_data=json.dumps({'type': 'error', 'message': message}))

    def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or '')
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON from {self.user.email}: {e}")
            self._error('Formato JSON inválido')
            return

        content = str(data.get('message', '')).strip() if isinstance(data, dict) else ''
        if not content:
            self._error('A mensagem não pode estar vazia')
            return
        if len(content) > MAX_MESSAGE_LENGTH:
            self._error(f'A mensagem não pode exceder {MAX_MESSAGE_LENGTH} caracteres')
            return

        self.chat.refresh_from_db(fields=['status'])
        if self.chat.status == SupportChat.Status.CLOSED:
            self._error('Este atendimento foi encerrado')
            self.close(code=4005)
            return

        message = create_message(self.chat, self.user, content)
        async_to_sync(self.channel_layer.group_send)(
            self.room_group_name,
            {
                'type': 'chat_message',
                'message': SupportMessageSerializer(message).data,
            }
        )

    def chat_message(self, event):
        self.send(text_data=json.dumps({
            'type': 'message',
            'message': event['message'],
        }))
