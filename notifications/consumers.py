import json
import logging

from asgiref.sync import async_to_sync
from channels.generic.websocket import WebsocketConsumer

from .services.dispatcher import user_group

logger = logging.getLogger(__name__)


class NotificationConsumer(WebsocketConsumer):
    """
    Pushes the authenticated user's new notifications.

    URL: ws://localhost:8000/ws/notifications/?token=<jwt_access_token>

    Close codes:
    - 4001: user not authenticated
    """

    def connect(self):
        self.user = self.scope['user']

        if not self.user.is_authenticated:
            logger.warning("Anonymous connection attempt to notifications socket")
            self.close(code=4001)
            return

        self.group_name = user_group(self.user.id)
        async_to_sync(self.channel_layer.group_add)(self.group_name, self.channel_name)
        self.accept()
        logger.info(f"User {self.user.email} connected to notifications socket")

    def disconnect(self, close_code):
        if hasattr(self, 'group_name'):
            async_to_sync(self.channel_layer.group_discard)(self.group_name, self.channel_name)

    def notification_message(self, event):
        self.send(text_data=json.dumps({
            'type': 'notification',
            'notification': event['notification'],
        }))
