from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import SupportChatViewSet, AdminSupportChatViewSet, unread_count

router = SimpleRouter()
router.register(r'chats', SupportChatViewSet, basename='support-chat')
router.register(r'admin/chats', AdminSupportChatViewSet, basename='support-admin-chat')

urlpatterns = [
    path('unread-count/', unread_count, name='support-unread-count'),
    path('', include(router.urls)),
]
