"""
Mercado Pago notification endpoint.
"""
import logging

from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.response import Response

from notifications.services import notify
from ..models import Payment
from ..services.gateway import MercadoPagoClient
from ..services.webhook import handle_payment_webhook

logger = logging.getLogger(__name__)


def _notification_target(request):
    """
    Notification type and resource id from the JSON body, falling back to the
    ``?type=payment&data.id=...`` query string form.
    """
    body = request.data if isinstance(request.data, dict) else {}
    notification_type = body.get('type') or body.get('topic') or request.query_params.get('type') \
        or request.query_params.get('topic')
    resource_id = (body.get('data') or {}).get('id') or request.query_params.get('data.id') \
        or request.query_params.get('id')
    return notification_type, resource_id


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
@throttle_classes([])
def payment_webhook(request):
    """
    POST /api/payments/webhook/

    Always answers 200 for notifications it does not handle so the gateway
    stops retrying them.
    """
    notification_type, resource_id = _notification_target(request)

    if notification_type != 'payment':
        logger.info(f"Unhandled Mercado Pago notification type: {notification_type}")
        return Response({'message': f"Unhandled notification type: {notification_type}"})

    if not resource_id:
        return Response({'message': 'Missing payment id'}, status=status.HTTP_400_BAD_REQUEST)

    data = MercadoPagoClient().get_payment(resource_id)
    if not data:
        return Response({'message': 'Payment Not Found'}, status=status.HTTP_404_NOT_FOUND)

    payment, subscription = handle_payment_webhook(data)
    if payment is None:
        return Response({'message': 'Payment ignored'})

    notify(
        payment.user,
        'payment_status',
        {
            'payment_id': payment.id,
            'amount': payment.amount,
            'status': payment.get_status_display(),
            'approved': payment.status == Payment.Status.APPROVED,
            'plan_name': subscription.plan.name if subscription else None,
            'booking_id': payment.service_request_id,
        },
        channels=('in_app',),
    )

    return Response({
        'message': 'processed',
        'payment_id': payment.id,
        'status': payment.status,
        'subscription_id': subscription.id if subscription else None,
    })
