"""
Support chat views.

Users open chats and talk to the back office; admins triage, assign and
close them.
"""
import logging

from django.db.models import Count, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.response import Response

from users.permissions import IsAdminRole
from .models import SupportChat, SupportMessage
from .serializers import (
    SupportChatCreateSerializer,
    SupportChatDetailSerializer,
    SupportChatSerializer,
    SupportMessageSerializer,
)
from .services import broadcast_message, create_message, mark_chat_read

logger = logging.getLogger(__name__)


class IsChatOwnerOrAdmin(permissions.BasePermission):
    def has_object_permission(self, request, view, obj):
        return obj.can_access(request.user)


class SupportChatViewSet(mixins.CreateModelMixin,
                         mixins.ListModelMixin,
                         mixins.RetrieveModelMixin,
                         viewsets.GenericViewSet):
    """
    /api/support/chats/

    - GET: the caller's chats (``?status=OPEN``)
    - POST: ``{"subject", "description", "priority"}``; the description
      becomes the first message
    - GET {id}/: chat with its messages
    - POST {id}/messages/: new message (400 on closed chats)
    - POST {id}/mark-all-read/
    """
    permission_classes = [permissions.IsAuthenticated, IsChatOwnerOrAdmin]

    def get_queryset(self):
        if self.action == 'list':
            queryset = SupportChat.objects.filter(user=self.request.user)
            status_filter = self.request.query_params.get('status')
            if status_filter:
                queryset = queryset.filter(status=status_filter.upper())
            return queryset.select_related('user', 'assigned_admin')
        # Admins reach any chat through detail routes
        return SupportChat.objects.select_related('user', 'assigned_admin').prefetch_related('messages__sender')

    def get_serializer_class(self):
        if self.action == 'create':
            return SupportChatCreateSerializer
        if self.action == 'retrieve':
            return SupportChatDetailSerializer
        return SupportChatSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        description = serializer.validated_data.pop('description')
        chat = serializer.save(user=request.user)
        create_message(chat, request.user, description)

        logger.info(f"Support chat #{chat.id} opened by {request.user.email}")
        data = SupportChatDetailSerializer(chat, context=self.get_serializer_context()).data
        return Response(data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def messages(self, request, pk=None):
        chat = self.get_object()
        if chat.status == SupportChat.Status.CLOSED:
            return Response(
                {'detail': _("Este atendimento foi encerrado.")},
                status=status.HTTP_400_BAD_REQUEST
            )

        serializer = SupportMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = create_message(chat, request.user, serializer.validated_data['content'])
        broadcast_message(message)

        return Response(SupportMessageSerializer(message).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='mark-all-read')
    def mark_all_read(self, request, pk=None):
        chat = self.get_object()
        updated = mark_chat_read(chat, request.user)
        return Response({'updated': updated})


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def unread_count(request):
    """GET /api/support/unread-count/ - admin replies the caller has not read."""
    count = SupportMessage.objects.filter(
        chat__user=request.user,
        is_from_admin=True,
        read_at__isnull=True,
    ).count()
    return Response({'unread_count': count})


class AdminSupportChatViewSet(viewsets.ReadOnlyModelViewSet):
    """
    /api/support/admin/chats/?status=OPEN

    Back-office triage: assign to self, close, counters per status.
    """
    permission_classes = [permissions.IsAuthenticated, IsAdminRole]

    def get_queryset(self):
        queryset = SupportChat.objects.select_related('user', 'assigned_admin')
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter.upper())
        return queryset.order_by('status', '-updated_at')

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return SupportChatDetailSerializer
        return SupportChatSerializer

    @action(detail=True, methods=['post'])
    def assign(self, request, pk=None):
        chat = self.get_object()
        if chat.status == SupportChat.Status.CLOSED:
            return Response(
                {'detail': _("Não é possível atribuir um atendimento encerrado.")},
                status=status.HTTP_400_BAD_REQUEST
            )

        chat.assigned_admin = request.user
        chat.status = SupportChat.Status.IN_PROGRESS
        chat.save(update_fields=['assigned_admin', 'status', 'updated_at'])
        logger.info(f"Support chat #{chat.id} assigned to {request.user.email}")
        return Response(SupportChatSerializer(chat, context=self.get_serializer_context()).data)

    @action(detail=True, methods=['post'])
    def close(self, request, pk=None):
        chat = self.get_object()
        chat.status = SupportChat.Status.CLOSED
        chat.closed_at = timezone.now()
        chat.save(update_fields=['status', 'closed_at', 'updated_at'])
        logger.info(f"Support chat #{chat.id} closed by {request.user.email}")
        return Response(SupportChatSerializer(chat, context=self.get_serializer_context()).data)

    @action(detail=False, methods=['get'])
    def counts(self, request):
        totals = SupportChat.objects.aggregate(
            open=Count('id', filter=Q(status=SupportChat.Status.OPEN)),
            in_progress=Count('id', filter=Q(status=SupportChat.Status.IN_PROGRESS)),
            closed=Count('id', filter=Q(status=SupportChat.Status.CLOSED)),
        )
        totals['unread'] = SupportMessage.objects.filter(
            is_from_admin=False,
            read_at__isnull=True,
        ).count()
        return Response(totals)
