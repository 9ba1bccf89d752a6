"""
Review views.

Clients rate completed bookings; listings come with aggregate statistics.
"""
import logging

from django.utils.translation import gettext_lazy as _
from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from notifications.services import notify
from ..filters import ReviewFilter
from ..models import Review, ServiceRequest
from ..pagination import ReviewPagination
from ..serializers import ReviewCreateSerializer, ReviewSerializer, ServiceRequestSerializer
from ..services.ratings import review_statistics
from ..throttles import ReviewCreateThrottle

logger = logging.getLogger(__name__)


class ReviewListCreateView(generics.ListCreateAPIView):
    """
    GET /api/reviews/?provider={id}&user={id}&booking={id}
    POST /api/reviews/

    **Throttling**: ``reviews`` rate on creation.

    **Restrictions on POST**:
    - Booking must be COMPLETED (400)
    - Only the booking's client can review it (403)
    - One review per booking (400)
    - Rating between 1 and 5
    """
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = ReviewPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = ReviewFilter

    def get_serializer_class(self):
        if self.request.method == 'POST':
            return ReviewCreateSerializer
        return ReviewSerializer

    def get_throttles(self):
        if self.request.method == 'POST':
            return [ReviewCreateThrottle()]
        return super().get_throttles()

    def get_queryset(self):
        return Review.objects.select_related(
            'giver', 'receiver', 'service_request__service'
        ).order_by('-created_at')

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        request.parser_context['statistics'] = review_statistics(queryset)

        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = serializer.validated_data['service_request']

        if booking.client_id != request.user.id:
            logger.warning(
                f"User {request.user.email} attempted to review request #{booking.id} without being its client"
            )
            return Response(
                {'detail': _("Apenas o cliente da solicitação pode avaliá-la.")},
                status=status.HTTP_403_FORBIDDEN
            )

        if booking.status != ServiceRequest.Status.COMPLETED:
            return Response(
                {'detail': _("Apenas serviços concluídos podem ser avaliados.")},
                status=status.HTTP_400_BAD_REQUEST
            )

        review = serializer.save()
        logger.info(
            f"Review created: Request #{booking.id}, Rating {review.rating}⭐ by {request.user.email}"
        )

        notify(
            booking.provider.user,
            'review_received',
            {
                'booking_id': booking.id,
                'service_name': booking.service.name,
                'client_name': request.user.full_name,
                'rating': review.rating,
            },
            channels=('in_app',),
        )

        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def pending_reviews(request):
    """GET /api/reviews/pending/ - completed bookings the caller has not reviewed yet."""
    queryset = ServiceRequest.objects.filter(
        client=request.user,
        status=ServiceRequest.Status.COMPLETED,
        review__isnull=True,
    ).select_related('client', 'provider', 'provider__user', 'service').order_by('-updated_at')

    serializer = ServiceRequestSerializer(queryset, many=True)
    return Response(serializer.data)
