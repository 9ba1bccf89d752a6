from django.urls import path

from .views import (
    NotificationListView,
    unread_count,
    mark_read,
    mark_all_read,
    delete_notification,
    send_notification,
)

urlpatterns = [
    path('', NotificationListView.as_view(), name='notification-list'),
    path('count/', unread_count, name='notification-count'),
    path('mark-all-read/', mark_all_read, name='notification-mark-all-read'),
    path('send/', send_notification, name='notification-send'),
    path('<int:pk>/', delete_notification, name='notification-delete'),
    path('<int:pk>/read/', mark_read, name='notification-read'),
]
