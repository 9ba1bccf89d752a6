"""
Booking views.

Creation, listing and the status lifecycle of service requests.
"""
import logging

from django.db.models import Q
from django.utils.translation import gettext_lazy as _
from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.shortcuts import get_object_or_404

from core.pagination import StandardResultsSetPagination
from ..exceptions import UnlockRequired
from ..models import ServiceRequest
from ..permissions import CanChangeRequestStatus, IsRequestClient, IsRequestParticipant
from ..serializers import (
    BookingStatusSerializer,
    ScheduleQuoteSerializer,
    ServiceRequestCreateSerializer,
    ServiceRequestSerializer,
)
from ..services.acceptance import can_accept
from ..services.availability import ensure_slot_free
from ..services.notifications import notify_new_request, notify_status_change
from ..services.status import change_status

logger = logging.getLogger(__name__)

BOOKING_RELATIONS = ('client', 'provider', 'provider__user', 'service')


class ServiceRequestListCreateView(generics.ListCreateAPIView):
    """
    GET /api/bookings/?status=PENDING&role=client
    POST /api/bookings/

    Lists the caller's bookings, as client and/or as provider.

    Query params:
    - status: PENDING, ACCEPTED, REJECTED, COMPLETED, CANCELLED
    - role: ``client`` or ``provider`` to restrict the side
    """
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = StandardResultsSetPagination

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return ServiceRequestCreateSerializer
        return ServiceRequestSerializer

    def get_queryset(self):
        user = self.request.user
        role = self.request.query_params.get('role', '').lower()

        if role == 'client':
            condition = Q(client=user)
        elif role == 'provider':
            condition = Q(provider__user=user)
        else:
            condition = Q(client=user) | Q(provider__user=user)

        queryset = ServiceRequest.objects.filter(condition).select_related(*BOOKING_RELATIONS)

        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter.upper())

        return queryset.order_by('-created_at')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = serializer.save(client=request.user)

        logger.info(
            f"Request #{booking.id} ({booking.request_type}) created by {request.user.email} "
            f"for provider {booking.provider.user.email}"
        )
        notify_new_request(booking)

        return Response(ServiceRequestSerializer(booking).data, status=status.HTTP_201_CREATED)


class ServiceRequestDetailView(generics.RetrieveAPIView):
    """
    GET /api/bookings/{id}/

    Only the booking's client, its provider or an admin.
    """
    queryset = ServiceRequest.objects.select_related(*BOOKING_RELATIONS)
    serializer_class = ServiceRequestSerializer
    permission_classes = [permissions.IsAuthenticated, IsRequestParticipant]


class ServiceRequestStatusUpdateView(generics.UpdateAPIView):
    """
    PATCH /api/bookings/{id}/status/

    Body: ``{"status": ..., "reason": ..., "payment": {"method": ..., "amount": ...}}``

    Errors:
    - 400: invalid transition, missing payment or reason
    - 402: provider accepting without subscription or unlock payment
    - 403: caller not allowed to perform the transition
    """
    queryset = ServiceRequest.objects.select_related(*BOOKING_RELATIONS)
    serializer_class = BookingStatusSerializer
    permission_classes = [permissions.IsAuthenticated, IsRequestParticipant, CanChangeRequestStatus]
    http_method_names = ['patch', 'options']

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data['status'] == ServiceRequest.Status.ACCEPTED and not can_accept(instance.provider, instance):
            raise UnlockRequired()

        change_status(
            instance,
            request.user,
            data['status'],
            reason=data.get('reason', ''),
            payment=data.get('payment'),
        )
        notify_status_change(instance, request.user)

        return Response(ServiceRequestSerializer(instance).data)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def cancel_request(request, pk):
    """
    POST /api/bookings/{id}/cancel/

    Client shortcut to withdraw a request that is still PENDING.
    """
    booking = get_object_or_404(ServiceRequest.objects.select_related(*BOOKING_RELATIONS), pk=pk)

    if not IsRequestClient().has_object_permission(request, None, booking):
        logger.warning(f"User {request.user.email} attempted to cancel request #{pk} they do not own")
        return Response(
            {'detail': _("Apenas o cliente pode cancelar esta solicitação.")},
            status=status.HTTP_403_FORBIDDEN
        )

    if booking.status != ServiceRequest.Status.PENDING:
        return Response(
            {'detail': _("Apenas solicitações pendentes podem ser canceladas.")},
            status=status.HTTP_400_BAD_REQUEST
        )

    reason = (request.data.get('reason') or '').strip() or _("Cancelado pelo cliente.")
    change_status(booking, request.user, ServiceRequest.Status.CANCELLED, reason=str(reason)[:500])
    notify_status_change(booking, request.user)

    return Response(ServiceRequestSerializer(booking).data)


@api_view(['PATCH'])
@permission_classes([permissions.IsAuthenticated])
def schedule_quote(request, pk):
    """
    PATCH /api/bookings/{id}/schedule/

    Turns a quote into an accepted appointment at a free slot.
    Only the booking's provider may schedule it.
    """
    booking = get_object_or_404(ServiceRequest.objects.select_related(*BOOKING_RELATIONS), pk=pk)

    if booking.provider.user_id != request.user.id:
        return Response(
            {'detail': _("Apenas o profissional pode agendar esta solicitação.")},
            status=status.HTTP_403_FORBIDDEN
        )

    is_open = booking.status in (ServiceRequest.Status.PENDING, ServiceRequest.Status.ACCEPTED)
    is_schedulable = (
        booking.request_type == ServiceRequest.RequestType.QUOTE
        or booking.scheduled_date is None
    )
    if not (is_open and is_schedulable):
        return Response(
            {'detail': _("Esta solicitação não pode ser agendada.")},
            status=status.HTTP_400_BAD_REQUEST
        )

    serializer = ScheduleQuoteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    date = serializer.validated_data['scheduled_date']
    time = serializer.validated_data['scheduled_time']

    if booking.status == ServiceRequest.Status.PENDING and not can_accept(booking.provider, booking):
        raise UnlockRequired()

    ensure_slot_free(booking.provider, date, time, exclude_id=booking.id)

    booking.request_type = ServiceRequest.RequestType.SCHEDULING
    booking.scheduled_date = date
    booking.scheduled_time = time
    booking.status = ServiceRequest.Status.ACCEPTED
    booking.expires_at = None
    booking.save(update_fields=[
        'request_type', 'scheduled_date', 'scheduled_time', 'status', 'expires_at', 'updated_at'
    ])

    logger.info(f"Request #{booking.id} scheduled for {date} {time} by {request.user.email}")
    notify_status_change(booking, request.user)

    return Response(ServiceRequestSerializer(booking).data)
