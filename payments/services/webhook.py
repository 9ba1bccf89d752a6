"""
Mercado Pago webhook processing.

A ``payment`` notification only carries the gateway id; the payment is
fetched from the gateway and upserted locally by ``gateway_payment_id``.
Approved subscription payments renew or replace the provider's plan.
"""

import calendar
import logging
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from bookings.models import ServiceRequest
from users.models import ServiceProvider
from ..models import Payment, Plan, Subscription

User = get_user_model()
logger = logging.getLogger(__name__)


def map_payment_status(status):
    status = (status or '').lower()
    if status == 'approved':
        return Payment.Status.APPROVED
    if status in ('in_process', 'in_mediation'):
        return Payment.Status.PROCESSING
    if status == 'pending' or status.startswith('pending_'):
        return Payment.Status.PENDING
    if status in ('rejected', 'cancelled'):
        return Payment.Status.REJECTED
    if status in ('refunded', 'charged_back'):
        return Payment.Status.REFUNDED
    return Payment.Status.PENDING


PAYMENT_METHODS = {
    'credit_card': Payment.Method.CREDIT_CARD,
    'debit_card': Payment.Method.DEBIT_CARD,
    'pix': Payment.Method.PIX,
    'bank_transfer': Payment.Method.PIX,
    'bolbradesco': Payment.Method.BOLETO,
    'boleto': Payment.Method.BOLETO,
    'ticket': Payment.Method.BOLETO,
}


def map_payment_method(method):
    """Unknown methods count as credit card, the checkout default."""
    return PAYMENT_METHODS.get((method or '').lower(), Payment.Method.CREDIT_CARD)


def add_one_month(value):
    month = value.month % 12 + 1
    year = value.year + (1 if value.month == 12 else 0)
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _local_id(value):
    """Primary key from gateway metadata; anything but a positive integer is ignored."""
    if value is None or value == '':
        return None
    text = str(value).strip()
    if text.isdigit() and int(text) > 0:
        return int(text)
    logger.warning(f"Ignoring non-numeric id in payment metadata: {value!r}")
    return None


def _nested_id(metadata, key):
    value = metadata.get(key)
    if isinstance(value, dict):
        value = value.get('id') or value.get('user_id')
    return _local_id(value)


def _booking_id(metadata, external_reference):
    booking_id = _nested_id(metadata, 'booking')
    if booking_id:
        return booking_id
    # "unlock-<id>" references come from the unlock checkout
    if external_reference and str(external_reference).startswith('unlock-'):
        return _local_id(str(external_reference).split('-', 1)[1])
    return None


def _find_local_payment(gateway_id, metadata):
    payment = Payment.objects.select_for_update().filter(gateway_payment_id=gateway_id).first()
    if payment:
        return payment

    local_id = _local_id(metadata.get('payment_id'))
    if local_id:
        return Payment.objects.select_for_update().filter(
            pk=local_id, gateway_payment_id__isnull=True
        ).first()
    return None


def _upsert_payment(data):
    metadata = data.get('metadata') or {}
    gateway_id = str(data['id'])
    payer = metadata.get('payer') or {}

    fields = {
        'status': map_payment_status(data.get('status')),
        'amount': Decimal(str(data.get('transaction_amount') or 0)),
        'currency': data.get('currency_id') or 'BRL',
        'payment_method': map_payment_method(data.get('payment_type_id') or data.get('payment_method_id')),
        'description': (data.get('description') or '')[:255],
        'gateway': Payment.Gateway.MERCADO_PAGO,
        'gateway_payment_id': gateway_id,
    }

    booking_id = _booking_id(metadata, data.get('external_reference'))
    if booking_id and ServiceRequest.objects.filter(pk=booking_id).exists():
        fields['service_request_id'] = booking_id

    payment = _find_local_payment(gateway_id, metadata)
    if payment:
        previous_status = payment.status
        for name, value in fields.items():
            setattr(payment, name, value)
        payment.save()
        return payment, previous_status

    payer_id = _local_id(payer.get('user_id'))
    if not payer_id or not User.objects.filter(pk=payer_id).exists():
        logger.warning(f"Payment {gateway_id} has no local match and no payer metadata")
        return None, None

    plan_id = _nested_id(metadata, 'plan')
    purpose = metadata.get('purpose') or (
        Payment.Purpose.UNLOCK if booking_id else Payment.Purpose.SUBSCRIPTION
    )
    payment = Payment.objects.create(
        user_id=payer_id,
        purpose=purpose,
        plan=Plan.objects.filter(pk=plan_id).first() if plan_id else None,
        **fields,
    )
    return payment, None


def activate_subscription(provider_id, plan, payment, now=None):
    """
    Same plan already ACTIVE: extend it one month from its end date.
    Different plan ACTIVE: cancel it and start a new one.
    Nothing ACTIVE: start a new one.
    """
    now = now or timezone.now()
    current = Subscription.objects.select_for_update().filter(
        provider_id=provider_id,
        status=Subscription.Status.ACTIVE,
    ).order_by('-created_at').first()

    if current and current.plan_id == plan.id:
        base = current.end_date if current.end_date and current.end_date > now else now
        current.end_date = add_one_month(base)
        current.save(update_fields=['end_date', 'updated_at'])
        subscription = current
        logger.info(f"Subscription {current.id} extended to {current.end_date:%Y-%m-%d}")
    else:
        if current:
            current.status = Subscription.Status.CANCELLED
            current.save(update_fields=['status', 'updated_at'])
            logger.info(f"Subscription {current.id} cancelled in favour of plan {plan.name}")
        subscription = Subscription.objects.create(
            provider_id=provider_id,
            plan=plan,
            status=Subscription.Status.ACTIVE,
            start_date=now,
            end_date=add_one_month(now),
            is_auto_renew=False,
        )
        logger.info(f"Subscription {subscription.id} created for provider {provider_id} on plan {plan.name}")

    payment.subscription = subscription
    payment.save(update_fields=['subscription', 'updated_at'])
    return subscription


def handle_payment_webhook(data):
    """
    Applies a gateway payment resource.

    Returns ``(payment, subscription)``; ``subscription`` is ``None`` unless an
    approved subscription payment activated one. Repeated notifications for
    a payment that is already APPROVED and linked to a subscription leave
    the subscription untouched.
    """
    metadata = data.get('metadata') or {}
    subscription = None

    with transaction.atomic():
        payment, previous_status = _upsert_payment(data)
        if payment is None:
            return None, None
        logger.info(
            f"Payment {payment.gateway_payment_id} updated from {previous_status or 'new'} "
            f"to {payment.status}"
        )

        already_applied = (
            previous_status == Payment.Status.APPROVED and payment.subscription_id is not None
        )
        if already_applied:
            logger.info(f"Payment {payment.gateway_payment_id} already applied to its subscription")
        elif payment.status == Payment.Status.APPROVED and payment.purpose == Payment.Purpose.SUBSCRIPTION:
            provider_id = _local_id((metadata.get('payer') or {}).get('provider_id'))
            if provider_id and not ServiceProvider.objects.filter(pk=provider_id).exists():
                provider_id = None
            if not provider_id and hasattr(payment.user, 'service_provider'):
                provider_id = payment.user.service_provider.id
            plan_id = _nested_id(metadata, 'plan')
            plan = payment.plan or (Plan.objects.filter(pk=plan_id).first() if plan_id else None)
            if provider_id and plan:
                subscription = activate_subscription(provider_id, plan, payment)
            else:
                logger.warning(
                    f"Approved subscription payment {payment.gateway_payment_id} without provider or plan"
                )

    return payment, subscription
