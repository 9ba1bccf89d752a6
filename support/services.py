"""
Support chat operations shared by the REST views and the WebSocket consumer.
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

from notifications.services.dispatcher import REALTIME_ERRORS
from .models import SupportChat, SupportMessage
from .serializers import SupportMessageSerializer

logger = logging.getLogger(__name__)


def chat_group(chat_id):
    return f'support_chat_{chat_id}'


def is_admin(user):
    return user.role == 'ADMIN' or user.is_superuser


def create_message(chat, sender, content):
    """Persists a message and touches the chat so it sorts as most recent."""
    message = SupportMessage.objects.create(
        chat=chat,
        sender=sender,
        content=content,
        is_from_admin=is_admin(sender),
    )
    SupportChat.objects.filter(pk=chat.pk).update(updated_at=timezone.now())
    logger.info(f"Support message #{message.id} created by {sender.email} in chat {chat.id}")
    return message


def broadcast_message(message):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    try:
        async_to_sync(channel_layer.group_send)(
            chat_group(message.chat_id),
            {
                'type': 'chat_message',
                'message': SupportMessageSerializer(message).data,
            }
        )
    except REALTIME_ERRORS as e:
        logger.error(f"Broadcast of support message #{message.id} failed: {e}", exc_info=True)


def mark_chat_read(chat, reader):
    """Marks the other side's messages as read; returns how many changed."""
    return chat.messages.filter(
        is_from_admin=not is_admin(reader),
        read_at__isnull=True,
    ).update(read_at=timezone.now())
