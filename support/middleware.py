import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.tokens import AccessToken

from users.models import User

logger = logging.getLogger(__name__)


@database_sync_to_async
def get_user_from_token(token_key):
    """
    Resolves the user of a JWT access token.

    Returns ``AnonymousUser`` for empty, invalid or expired tokens and for
    inactive or unknown users.
    """
    if not token_key or len(token_key) < 10:
        logger.warning("Empty or too short JWT on WebSocket connection")
        return AnonymousUser()

    try:
        access_token = AccessToken(token_key)
        user = User.objects.get(id=access_token['user_id'])
    except (InvalidToken, TokenError) as e:
        logger.warning(f"Invalid WebSocket JWT: {e}")
        return AnonymousUser()
    except User.DoesNotExist:
        logger.warning("User from WebSocket token not found")
        return AnonymousUser()

    if not user.is_active:
        logger.warning(f"Inactive user attempted to connect: {user.email}")
        return AnonymousUser()

    logger.info(f"WebSocket user authenticated: {user.email}")
    return user


class JWTAuthMiddleware(BaseMiddleware):
    """
    Authenticates WebSockets with the JWT in the ``token`` query parameter.

    Usage: ws://localhost:8000/ws/support/{chat_id}/?token=<jwt_access_token>
    """

    async def __call__(self, scope, receive, send):
        query_params = parse_qs(scope.get('query_string', b'').decode('utf-8'))
        token = query_params.get('token', [None])[0]

        if token:
            scope['user'] = await get_user_from_token(token)
        else:
            scope['user'] = AnonymousUser()
            logger.debug("WebSocket connected without token (anonymous)")

        return await super().__call__(scope, receive, send)
