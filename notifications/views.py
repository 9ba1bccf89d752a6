"""
Notification inbox endpoints.
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from bookings.models import ServiceRequest
from bookings.services.notifications import booking_context
from core.pagination import StandardResultsSetPagination
from users.permissions import IsAdminRole
from .models import Notification
from .serializers import NotificationSerializer, SendNotificationSerializer
from .services import notify
from .services.dispatcher import push_realtime

logger = logging.getLogger(__name__)


class NotificationListView(generics.ListAPIView):
    """GET /api/notifications/?unread=true"""
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        queryset = Notification.objects.filter(user=self.request.user)
        if self.request.query_params.get('unread', '').lower() in ('true', '1'):
            queryset = queryset.filter(is_read=False)
        return queryset.order_by('-created_at')


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def unread_count(request):
    """GET /api/notifications/count/"""
    count = Notification.objects.filter(user=request.user, is_read=False).count()
    return Response({'unread_count': count})


@api_view(['PATCH', 'POST'])
@permission_classes([permissions.IsAuthenticated])
def mark_read(request, pk):
    """PATCH /api/notifications/{id}/read/"""
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    if not notification.is_read:
        notification.is_read = True
        notification.save(update_fields=['is_read'])
    return Response(NotificationSerializer(notification).data)


@api_view(['PATCH', 'POST'])
@permission_classes([permissions.IsAuthenticated])
def mark_all_read(request):
    """PATCH /api/notifications/mark-all-read/"""
    updated = Notification.objects.filter(user=request.user, is_read=False).update(is_read=True)
    logger.debug(f"{updated} notifications marked as read by {request.user.email}")
    return Response({'updated': updated})


@api_view(['DELETE'])
@permission_classes([permissions.IsAuthenticated])
def delete_notification(request, pk):
    """DELETE /api/notifications/{id}/"""
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    notification.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated, IsAdminRole])
def send_notification(request):
    """
    POST /api/notifications/send/

    Body: ``{"user_id": 3, "kind": "payment_reminder", "booking_id": 7}`` or
    ``{"user_id": 3, "title": "...", "message": "...", "type": "PROMOTIONAL"}``.
    """
    serializer = SendNotificationSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data
    user = data['user']
    channels = tuple(data['channels'])

    if data.get('kind'):
        context = {}
        if data.get('booking_id'):
            booking = get_object_or_404(
                ServiceRequest.objects.select_related('client', 'provider__user', 'service'),
                pk=data['booking_id'],
            )
            context = booking_context(booking)
        results = notify(user, data['kind'], context, channels=channels)
        notification = results['in_app']
    else:
        notification = Notification.objects.create(
            user=user,
            type=data['type'],
            title=data['title'],
            message=data['message'],
            sent_via='in_app',
        )
        push_realtime(notification)
        results = {'in_app': notification, 'email': False, 'whatsapp': False}

    logger.info(f"Manual notification sent to {user.email} by {request.user.email}")
    return Response({
        'success': True,
        'results': {
            'in_app': notification is not None,
            'email': results['email'],
            'whatsapp': results['whatsapp'],
        },
        'notification': NotificationSerializer(notification).data if notification else None,
    }, status=status.HTTP_201_CREATED)
