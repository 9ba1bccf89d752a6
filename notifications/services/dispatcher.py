"""
Single entry point for user notifications.

``notify`` stores the in-app notification, pushes it to the user's
WebSocket group once the surrounding transaction commits and relays the
same text over email and WhatsApp.
"""

import json
import logging
from functools import partial

from asgiref.sync import async_to_sync
from channels.exceptions import ChannelFull
from channels.layers import get_channel_layer
from django.conf import settings
from django.db import transaction
from django.core.serializers.json import DjangoJSONEncoder
from redis.exceptions import RedisError

from ..models import Notification
from . import email, whatsapp
from .messages import FOOTER, render

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS = ('in_app', 'email', 'whatsapp')

# Failures of the in-memory or Redis channel layer
REALTIME_ERRORS = (OSError, RedisError, ChannelFull)


def user_group(user_id):
    return f"notifications_{user_id}"


def _json_safe(context):
    return json.loads(json.dumps(context, cls=DjangoJSONEncoder))


def push_realtime(notification):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False
    try:
        async_to_sync(channel_layer.group_send)(
            user_group(notification.user_id),
            {
                'type': 'notification_message',
                'notification': {
                    'id': notification.id,
                    'type': notification.type,
                    'title': notification.title,
                    'message': notification.message,
                    'data': notification.data,
                    'created_at': notification.created_at.isoformat(),
                },
            },
        )
    except REALTIME_ERRORS as e:
        logger.error(f"Realtime push of notification {notification.id} failed: {e}", exc_info=True)
        return False
    return True


def notify(user, kind, context=None, channels=DEFAULT_CHANNELS):
    """
    Sends notification ``kind`` to ``user`` over ``channels``.

    Returns ``{"in_app": Notification | None, "email": bool, "whatsapp": bool}``.
    """
    context = dict(context or {})
    context.setdefault('user_name', user.full_name)
    context.setdefault('base_url', settings.BASE_URL)
    template, title, body = render(kind, context)

    results = {'in_app': None, 'email': False, 'whatsapp': False}

    if 'email' in channels:
        results['email'] = email.send_email(user.email, title, body + FOOTER)

    if 'whatsapp' in channels and user.phone:
        results['whatsapp'] = whatsapp.send_whatsapp(user.phone, f"*{title}*\n\n{body}{FOOTER}")

    if 'in_app' in channels:
        sent_via = ['in_app'] + [channel for channel in ('email', 'whatsapp') if results[channel]]
        data = _json_safe({key: value for key, value in context.items() if key not in ('user_name', 'base_url')})
        data['kind'] = kind
        notification = Notification.objects.create(
            user=user,
            type=template.type,
            title=title,
            message=body,
            sent_via=','.join(sent_via),
            data=data,
        )
        transaction.on_commit(partial(push_realtime, notification))
        results['in_app'] = notification

    logger.info(
        f"Notification '{kind}' to {user.email}: "
        f"email={results['email']} whatsapp={results['whatsapp']} in_app={results['in_app'] is not None}"
    )
    return results
