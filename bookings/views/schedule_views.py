"""
Provider schedule views: weekly availability and per-date slots.
"""
import datetime
import logging

from django.shortcuts import get_object_or_404
from django.utils.translation import gettext_lazy as _
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from users.models import ServiceProvider
from users.permissions import IsProviderOwnerOrReadOnly
from ..models import Availability, ServiceRequest
from ..serializers import AvailabilitySerializer
from ..services.availability import available_slots, day_of_week, weekly_schedule

logger = logging.getLogger(__name__)


def _parse_date(value):
    try:
        return datetime.date.fromisoformat(value or '')
    except ValueError:
        return None


class AvailabilityViewSet(viewsets.ModelViewSet):
    """
    /api/schedule/

    The authenticated provider's own weekly slots.
    """
    serializer_class = AvailabilitySerializer
    permission_classes = [permissions.IsAuthenticated, IsProviderOwnerOrReadOnly]
    pagination_class = None

    def get_queryset(self):
        return Availability.objects.filter(
            provider__user=self.request.user
        ).order_by('day_of_week', 'start_time')

    def get_serializer_context(self):
        context = super().get_serializer_context()
        provider = getattr(self.request.user, 'service_provider', None)
        if provider is not None:
            context['provider'] = provider
        return context

    def perform_create(self, serializer):
        slot = serializer.save(provider=self.request.user.service_provider)
        logger.info(f"Availability {slot} created by {self.request.user.email}")


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def provider_schedule(request, provider_id):
    """GET /api/schedule/{provider_id}/ - the 7-day weekly schedule."""
    provider = get_object_or_404(ServiceProvider, pk=provider_id)
    return Response({
        'provider_id': provider.id,
        'schedule': weekly_schedule(provider),
    })


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def provider_slots(request, provider_id):
    """
    GET /api/schedule/{provider_id}/slots/?date=YYYY-MM-DD

    Slots of that weekday flagged with ``is_available``.
    """
    provider = get_object_or_404(ServiceProvider, pk=provider_id)
    date = _parse_date(request.query_params.get('date'))
    if date is None:
        return Response(
            {'error': _("Informe a data no formato AAAA-MM-DD.")},
            status=status.HTTP_400_BAD_REQUEST
        )

    return Response({
        'provider_id': provider.id,
        'date': date.isoformat(),
        'day_of_week': day_of_week(date),
        'slots': available_slots(provider, date),
    })


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def provider_appointments(request, provider_id):
    """
    GET /api/schedule/{provider_id}/appointments/?date=YYYY-MM-DD

    Bookings on that date; only the provider itself or an admin.
    """
    provider = get_object_or_404(ServiceProvider.objects.select_related('user'), pk=provider_id)
    user = request.user
    if provider.user_id != user.id and not (user.role == 'ADMIN' or user.is_superuser):
        logger.warning(f"User {user.email} attempted to read appointments of provider {provider_id}")
        return Response(
            {'detail': _("Você não tem permissão para ver esta agenda.")},
            status=status.HTTP_403_FORBIDDEN
        )

    queryset = ServiceRequest.objects.filter(
        provider=provider,
        scheduled_date__isnull=False,
    ).exclude(
        status__in=[ServiceRequest.Status.CANCELLED, ServiceRequest.Status.REJECTED]
    ).select_related('client', 'service').order_by('scheduled_date', 'scheduled_time')

    raw_date = request.query_params.get('date')
    if raw_date:
        date = _parse_date(raw_date)
        if date is None:
            return Response(
                {'error': _("Informe a data no formato AAAA-MM-DD.")},
                status=status.HTTP_400_BAD_REQUEST
            )
        queryset = queryset.filter(scheduled_date=date)

    appointments = [
        {
            'id': booking.id,
            'status': booking.status,
            'scheduled_date': booking.scheduled_date.isoformat(),
            'scheduled_time': booking.scheduled_time.strftime('%H:%M') if booking.scheduled_time else None,
            'client': {
                'id': booking.client_id,
                'name': booking.client.full_name,
                'phone': booking.client.phone,
            },
            'service': {
                'id': booking.service_id,
                'name': booking.service.name,
            },
            'address': booking.address,
            'city': booking.city,
        }
        for booking in queryset
    ]
    return Response(appointments)
