"""
Checkout views.

Providers pay either to unlock a single request or to subscribe to a plan.
Both create a PENDING local payment plus a Mercado Pago preference; the
webhook settles them later.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from bookings.models import ServiceRequest
from core.pagination import StandardResultsSetPagination
from users.permissions import IsServiceProvider
from ..models import Payment, Plan, Subscription, SystemSetting
from ..serializers import (
    FeeQuoteSerializer,
    PaymentSerializer,
    PlanSerializer,
    SubscribeSerializer,
    SubscriptionSerializer,
    UnlockRequestSerializer,
)
from ..services.coupons import CouponError, apply_discount, validate_coupon
from ..services.fees import calculate_fees
from ..services.gateway import MercadoPagoClient
from ..services.webhook import activate_subscription
from ..exceptions import PaymentGatewayUnavailable

logger = logging.getLogger(__name__)


def unlock_price():
    raw = SystemSetting.get_value('PLAN_UNLOCK_PRICE', settings.PLAN_UNLOCK_PRICE)
    try:
        price = Decimal(str(raw))
    except (InvalidOperation, TypeError):
        logger.warning(f"Invalid PLAN_UNLOCK_PRICE setting {raw!r}, using default")
        price = Decimal(str(settings.PLAN_UNLOCK_PRICE))
    return price.quantize(Decimal('0.01'))


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated, IsServiceProvider])
def unlock_request(request):
    """
    POST /api/payments/unlock-request/

    Body: ``{"request_id": 12}``

    Starts the checkout that lets the provider accept one request without a plan.
    """
    serializer = UnlockRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    booking = ServiceRequest.objects.select_related('provider', 'service').filter(
        pk=serializer.validated_data['request_id'],
        provider__user=request.user,
    ).first()
    if booking is None:
        return Response({'error': _("Solicitação inválida")}, status=status.HTTP_404_NOT_FOUND)

    already = Payment.objects.filter(
        service_request=booking,
        user=request.user,
        status=Payment.Status.APPROVED,
    ).exists()
    if already:
        return Response({'success': True, 'already': True})

    client = MercadoPagoClient()
    if not client.is_configured:
        raise PaymentGatewayUnavailable()

    price = unlock_price()
    with transaction.atomic():
        payment = Payment.objects.create(
            user=request.user,
            service_request=booking,
            amount=price,
            purpose=Payment.Purpose.UNLOCK,
            gateway=Payment.Gateway.MERCADO_PAGO,
            status=Payment.Status.PENDING,
            description=f"Desbloqueio da solicitação #{booking.id}",
        )
        preference = client.create_preference(
            items=[{
                'id': f'unlock-{booking.id}',
                'title': 'Desbloqueio de contato (solicitação)',
                'quantity': 1,
                'currency_id': 'BRL',
                'unit_price': float(price),
                'description': 'Acesso às informações de contato do cliente para esta solicitação',
            }],
            metadata={
                'purpose': Payment.Purpose.UNLOCK,
                'payment_id': payment.id,
                'payer': {'user_id': request.user.id},
                'booking': {'id': booking.id},
            },
            external_reference=f'unlock-{booking.id}',
        )
        payment.gateway_preference_id = preference['id'] or ''
        payment.save(update_fields=['gateway_preference_id', 'updated_at'])

    logger.info(f"Unlock checkout for request #{booking.id} started by {request.user.email}")
    return Response({
        'success': True,
        'already': False,
        'payment_id': payment.id,
        'amount': price,
        'preference_id': preference['id'],
        'init_point': preference['init_point'],
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated, IsServiceProvider])
def subscribe(request):
    """
    POST /api/payments/subscribe/

    Body: ``{"plan_id": 2, "coupon_code": "BEMVINDO"}``

    A plan discounted to zero is activated right away with a MANUAL payment.
    """
    serializer = SubscribeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    plan = get_object_or_404(Plan, pk=data['plan_id'], is_active=True)
    provider = request.user.service_provider

    coupon = None
    if data.get('coupon_code'):
        try:
            coupon = validate_coupon(data['coupon_code'], plan.name)
        except CouponError as e:
            return Response({'success': False, 'error': str(e.message)}, status=e.status_code)

    price = apply_discount(plan.price, coupon)
    description = f"Assinatura do plano {plan.name}" + (f" (cupom {coupon.code})" if coupon else '')

    if price == 0:
        with transaction.atomic():
            payment = Payment.objects.create(
                user=request.user,
                plan=plan,
                amount=price,
                purpose=Payment.Purpose.SUBSCRIPTION,
                gateway=Payment.Gateway.MANUAL,
                payment_method=Payment.Method.OTHER,
                status=Payment.Status.APPROVED,
                description=description,
            )
            subscription = activate_subscription(provider.id, plan, payment)
        logger.info(f"Provider {provider.id} subscribed to {plan.name} at no cost")
        return Response({
            'success': True,
            'payment_id': payment.id,
            'amount': price,
            'subscription': SubscriptionSerializer(subscription).data,
        }, status=status.HTTP_201_CREATED)

    client = MercadoPagoClient()
    if not client.is_configured:
        raise PaymentGatewayUnavailable()

    with transaction.atomic():
        payment = Payment.objects.create(
            user=request.user,
            plan=plan,
            amount=price,
            purpose=Payment.Purpose.SUBSCRIPTION,
            gateway=Payment.Gateway.MERCADO_PAGO,
            status=Payment.Status.PENDING,
            description=description,
        )
        preference = client.create_preference(
            items=[{
                'id': f'plan-{plan.id}',
                'title': f'MyServ {plan.name}',
                'quantity': 1,
                'currency_id': 'BRL',
                'unit_price': float(price),
            }],
            metadata={
                'purpose': Payment.Purpose.SUBSCRIPTION,
                'payment_id': payment.id,
                'payer': {'user_id': request.user.id, 'provider_id': provider.id},
                'plan': {'id': plan.id},
            },
            external_reference=f'subscription-{payment.id}',
        )
        payment.gateway_preference_id = preference['id'] or ''
        payment.save(update_fields=['gateway_preference_id', 'updated_at'])

    logger.info(f"Subscription checkout for plan {plan.name} started by {request.user.email}")
    return Response({
        'success': True,
        'payment_id': payment.id,
        'amount': price,
        'original_price': plan.price,
        'preference_id': preference['id'],
        'init_point': preference['init_point'],
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated, IsServiceProvider])
def my_subscription(request):
    """GET /api/payments/subscription/ - the provider's current ACTIVE subscription, if any."""
    now = timezone.now()
    subscription = Subscription.objects.select_related('plan').filter(
        provider__user=request.user,
        status=Subscription.Status.ACTIVE,
    ).exclude(end_date__lt=now).order_by('-created_at').first()

    return Response({
        'active': subscription is not None,
        'subscription': SubscriptionSerializer(subscription).data if subscription else None,
    })


class PaymentHistoryView(generics.ListAPIView):
    """GET /api/payments/history/?status=APPROVED - the caller's payments."""
    serializer_class = PaymentSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = StandardResultsSetPagination

    def get_queryset(self):
        queryset = Payment.objects.filter(user=self.request.user).select_related(
            'plan', 'service_request__service'
        )
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter.upper())
        return queryset.order_by('-created_at')


class PlanListView(generics.ListAPIView):
    """GET /api/plans/ - active plans, cheapest first."""
    queryset = Plan.objects.filter(is_active=True).order_by('price')
    serializer_class = PlanSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def fee_quote(request):
    """GET /api/payments/fees/?amount=150.00&scheduling=true"""
    serializer = FeeQuoteSerializer(data=request.query_params.dict())
    serializer.is_valid(raise_exception=True)
    fees = calculate_fees(
        serializer.validated_data['amount'],
        has_scheduling_fee=serializer.validated_data['scheduling'],
    )
    return Response(fees)
