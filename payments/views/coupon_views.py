"""
Coupon validation and back-office coupon management.
"""
import logging

from rest_framework import permissions, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from users.permissions import IsAdminRole
from ..models import Coupon, Payment
from ..serializers import AdminPaymentSerializer, CouponSerializer
from ..services.coupons import CouponError, validate_coupon

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def validate_coupon_view(request):
    """
    GET /api/coupons/validate/?code=BEMVINDO&plan=PREMIUM

    Errors:
    - 400: missing code, expired coupon, plan mismatch
    - 404: unknown, inactive or not yet valid coupon
    """
    try:
        coupon = validate_coupon(
            request.query_params.get('code'),
            request.query_params.get('plan'),
        )
    except CouponError as e:
        return Response({'success': False, 'error': str(e.message)}, status=e.status_code)

    return Response({
        'success': True,
        'data': {
            'code': coupon.code,
            'discount_type': coupon.discount_type,
            'value': coupon.value,
            'applies_to': coupon.applies_to,
        }
    })


class AdminCouponViewSet(viewsets.ModelViewSet):
    """/api/admin/coupons/ - full CRUD for admins."""
    queryset = Coupon.objects.all().order_by('-created_at')
    serializer_class = CouponSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminRole]

    def perform_create(self, serializer):
        coupon = serializer.save()
        logger.info(f"Coupon {coupon.code} created by {self.request.user.email}")

    def perform_destroy(self, instance):
        logger.info(f"Coupon {instance.code} deleted by {self.request.user.email}")
        instance.delete()


class AdminPaymentViewSet(viewsets.ReadOnlyModelViewSet):
    """/api/admin/payments/?status=&purpose= - every payment, newest first."""
    serializer_class = AdminPaymentSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminRole]

    def get_queryset(self):
        queryset = Payment.objects.select_related('user', 'plan', 'service_request__service')
        for param in ('status', 'purpose', 'gateway'):
            value = self.request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{param: value.upper()})
        return queryset.order_by('-created_at')
