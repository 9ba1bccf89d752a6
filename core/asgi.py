import os
import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'core.settings')
django.setup()

from django.core.asgi import get_asgi_application
from channels.routing import ProtocolTypeRouter, URLRouter
from support.middleware import JWTAuthMiddleware
import notifications.routing
import support.routing

django_asgi_app = get_asgi_application()

application = ProtocolTypeRouter({
    'http': django_asgi_app,
    'websocket': JWTAuthMiddleware(
        URLRouter(
            support.routing.websocket_urlpatterns
            + notifications.routing.websocket_urlpatterns
        )
    ),
})
