"""
Back-office user moderation.

Endpoints:
    GET  /api/admin/users/?role=&approval_status=&is_active=&search=
    GET  /api/admin/users/{id}/
    POST /api/admin/users/{id}/approve/
    POST /api/admin/users/{id}/reject/          (reason required)
    POST /api/admin/users/{id}/toggle-active/
    GET  /api/admin/users/{id}/moderations/
"""
import logging
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from django_filters.rest_framework import DjangoFilterBackend

from core.pagination import StandardResultsSetPagination
from ..models import ModerationLog
from ..serializers import AdminUserSerializer, ModerationReasonSerializer, ModerationLogSerializer
from ..permissions import IsAdminRole
from ..filters import AdminUserFilter

User = get_user_model()
logger = logging.getLogger(__name__)


class AdminUserViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = User.objects.all().order_by('-date_joined')
    serializer_class = AdminUserSerializer
    permission_classes = [IsAdminRole]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = AdminUserFilter

    def _log(self, user, action_name, reason=''):
        ModerationLog.objects.create(
            user=user,
            admin=self.request.user,
            action=action_name,
            reason=reason,
        )
        logger.info(f"Admin {self.request.user.email} {action_name} {user.email}")

    @action(detail=True, methods=['post'])
    def approve(self, request, pk=None):
        user = self.get_object()
        serializer = ModerationReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            user.is_approved = True
            user.approval_status = User.ApprovalStatus.APPROVED
            user.save(update_fields=['is_approved', 'approval_status'])
            self._log(user, ModerationLog.Action.APPROVE, serializer.validated_data.get('reason', ''))

        return Response(AdminUserSerializer(user).data)

    @action(detail=True, methods=['post'])
    def reject(self, request, pk=None):
        user = self.get_object()
        serializer = ModerationReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reason = serializer.validated_data.get('reason', '').strip()

        if not reason:
            return Response(
                {'reason': [_("Informe o motivo da rejeição.")]},
                status=status.HTTP_400_BAD_REQUEST
            )

        with transaction.atomic():
            user.is_approved = False
            user.approval_status = User.ApprovalStatus.REJECTED
            user.save(update_fields=['is_approved', 'approval_status'])
            self._log(user, ModerationLog.Action.REJECT, reason)

        return Response(AdminUserSerializer(user).data)

    @action(detail=True, methods=['post'], url_path='toggle-active')
    def toggle_active(self, request, pk=None):
        user = self.get_object()

        if user == request.user:
            return Response(
                {'detail': _("Você não pode desativar a própria conta por aqui.")},
                status=status.HTTP_400_BAD_REQUEST
            )

        serializer = ModerationReasonSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            user.is_active = not user.is_active
            user.save(update_fields=['is_active'])
            self._log(
                user,
                ModerationLog.Action.ACTIVATE if user.is_active else ModerationLog.Action.DEACTIVATE,
                serializer.validated_data.get('reason', ''),
            )

        return Response(AdminUserSerializer(user).data)

    @action(detail=True, methods=['get'])
    def moderations(self, request, pk=None):
        user = self.get_object()
        logs = user.moderation_logs.select_related('admin')
        return Response(ModerationLogSerializer(logs, many=True).data)
