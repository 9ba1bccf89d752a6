"""
Provider dashboard metrics, booking history and the back-office summary.
"""
import logging

from django.contrib.auth import get_user_model
from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.pagination import StandardResultsSetPagination
from notifications.models import Notification
from payments.models import Payment
from users.models import ServiceProvider
from users.permissions import IsAdminRole, IsServiceProvider
from ..models import Review, ServiceRequest
from ..serializers import ServiceRequestSerializer

User = get_user_model()
logger = logging.getLogger(__name__)

Status = ServiceRequest.Status


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def provider_metrics(request):
    """
    GET /api/providers/me/metrics/

    Returns for the authenticated provider:
    - pending_requests, active_jobs (ACCEPTED), completed_jobs
    - total_earnings and monthly_earnings from completed final prices
    - average_rating and total_reviews
    """
    if request.user.role != 'SERVICE_PROVIDER':
        logger.warning(
            f"User {request.user.email} with role {request.user.role} "
            f"attempted to access provider metrics"
        )
        return Response(
            {'detail': _("Apenas profissionais podem acessar estas métricas.")},
            status=status.HTTP_403_FORBIDDEN
        )

    try:
        provider = ServiceProvider.objects.select_related('user').get(user=request.user)
    except ServiceProvider.DoesNotExist:
        logger.error(f"Provider profile not found for {request.user.email}")
        return Response(
            {'detail': _("Perfil de profissional não encontrado.")},
            status=status.HTTP_404_NOT_FOUND
        )

    now = timezone.now()
    completed = Q(status=Status.COMPLETED)
    this_month = completed & Q(updated_at__year=now.year, updated_at__month=now.month)

    metrics = ServiceRequest.objects.filter(provider=provider).aggregate(
        pending_requests=Count('id', filter=Q(status=Status.PENDING)),
        active_jobs=Count('id', filter=Q(status=Status.ACCEPTED)),
        completed_jobs=Count('id', filter=completed),
        total_earnings=Sum('final_price', filter=completed),
        monthly_earnings=Sum('final_price', filter=this_month),
    )

    logger.info(f"Metrics generated for provider {request.user.email}")
    return Response({
        'pending_requests': metrics['pending_requests'] or 0,
        'active_jobs': metrics['active_jobs'] or 0,
        'completed_jobs': metrics['completed_jobs'] or 0,
        'total_earnings': float(metrics['total_earnings'] or 0),
        'monthly_earnings': float(metrics['monthly_earnings'] or 0),
        'average_rating': float(provider.average_rating),
        'total_reviews': provider.total_reviews,
    }, status=status.HTTP_200_OK)


class ProviderHistoryView(generics.ListAPIView):
    """GET /api/providers/me/history/ - closed bookings of the authenticated provider."""
    serializer_class = ServiceRequestSerializer
    permission_classes = [permissions.IsAuthenticated, IsServiceProvider]
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        return ServiceRequest.objects.filter(
            provider__user=self.request.user,
            status__in=[Status.COMPLETED, Status.CANCELLED, Status.REJECTED],
        ).select_related('client', 'provider', 'provider__user', 'service').order_by('-updated_at')


def _count_by(queryset, field, choices):
    counts = {value: 0 for value, _label in choices}
    for row in queryset.order_by().values(field).annotate(total=Count('id')):
        counts[row[field]] = row['total']
    return counts


@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_metrics_summary(request):
    """
    GET /api/admin/metrics/summary/

    Back-office counters: users by role, bookings by status with revenue,
    payments by status with the approved amount, reviews and notifications.
    """
    now = timezone.now()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    users = User.objects.all()
    bookings = ServiceRequest.objects.all()
    payments = Payment.objects.all()
    notifications = Notification.objects.all()

    completed = Q(status=Status.COMPLETED)
    booking_totals = bookings.aggregate(
        this_month=Count('id', filter=Q(created_at__gte=month_start)),
        revenue=Sum('final_price', filter=completed),
        monthly_revenue=Sum('final_price', filter=completed & Q(updated_at__gte=month_start)),
    )
    review_totals = Review.objects.aggregate(total=Count('id'), average=Avg('rating'))
    notification_totals = notifications.aggregate(
        read=Count('id', filter=Q(is_read=True)),
        email=Count('id', filter=Q(sent_via__contains='email')),
        whatsapp=Count('id', filter=Q(sent_via__contains='whatsapp')),
    )

    return Response({
        'users': {
            'total': users.count(),
            'by_role': _count_by(users, 'role', User.Role.choices),
            'pending_providers': users.filter(
                role=User.Role.SERVICE_PROVIDER,
                approval_status=User.ApprovalStatus.PENDING,
            ).count(),
        },
        'bookings': {
            'total': bookings.count(),
            'this_month': booking_totals['this_month'],
            'by_status': _count_by(bookings, 'status', Status.choices),
            'revenue': float(booking_totals['revenue'] or 0),
            'monthly_revenue': float(booking_totals['monthly_revenue'] or 0),
        },
        'payments': {
            'total': payments.count(),
            'by_status': _count_by(payments, 'status', Payment.Status.choices),
            'approved_amount': float(
                payments.filter(status=Payment.Status.APPROVED).aggregate(total=Sum('amount'))['total'] or 0
            ),
        },
        'reviews': {
            'total': review_totals['total'],
            'average_rating': round(float(review_totals['average'] or 0), 2),
        },
        'notifications': {
            'sent': notifications.count(),
            'read': notification_totals['read'],
            'email': notification_totals['email'],
            'whatsapp': notification_totals['whatsapp'],
        },
        'updated_at': now,
    })
