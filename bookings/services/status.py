"""
Booking status transitions and their side effects on payments.
"""

import logging

from django.db import transaction
from django.utils import timezone

from payments.models import Payment
from ..models import ServiceRequest

logger = logging.getLogger(__name__)

Status = ServiceRequest.Status

VALID_TRANSITIONS = {
    Status.PENDING: [Status.ACCEPTED, Status.REJECTED, Status.CANCELLED],
    Status.ACCEPTED: [Status.COMPLETED, Status.CANCELLED],
    Status.REJECTED: [],
    Status.COMPLETED: [],
    Status.CANCELLED: [],
}

# Transitions only the provider may perform; CANCELLED is open to both parties
PROVIDER_ONLY = {Status.ACCEPTED, Status.REJECTED, Status.COMPLETED}


def can_transition(current, new):
    return new in VALID_TRANSITIONS.get(current, [])


def _settle_payment(booking, method, amount):
    """Marks the booking's service payment as APPROVED, creating a MANUAL one if needed."""
    payment = Payment.objects.filter(
        service_request=booking,
        purpose=Payment.Purpose.SERVICE,
    ).order_by('-created_at').first()

    if payment:
        payment.amount = amount
        payment.payment_method = method
        payment.status = Payment.Status.APPROVED
        payment.gateway = payment.gateway or Payment.Gateway.MANUAL
        payment.save(update_fields=['amount', 'payment_method', 'status', 'gateway', 'updated_at'])
    else:
        payment = Payment.objects.create(
            user=booking.client,
            service_request=booking,
            amount=amount,
            payment_method=method,
            status=Payment.Status.APPROVED,
            gateway=Payment.Gateway.MANUAL,
            purpose=Payment.Purpose.SERVICE,
            description=f"Pagamento manual do serviço {booking.service.name}",
        )
    return payment


def change_status(booking, actor, new_status, reason='', payment=None):
    """
    Applies ``new_status`` to ``booking`` inside a transaction.

    ``payment`` is ``{"method": ..., "amount": ...}`` and is required for
    COMPLETED; ``reason`` is required for CANCELLED. Both are validated by
    ``BookingStatusSerializer`` before reaching here.
    """
    old_status = booking.status

    with transaction.atomic():
        booking.status = new_status
        booking.expires_at = None
        update_fields = ['status', 'expires_at', 'updated_at']

        if new_status == Status.COMPLETED:
            booking.final_price = payment['amount']
            booking.payment_method = payment['method']
            update_fields += ['final_price', 'payment_method']
            _settle_payment(booking, payment['method'], payment['amount'])

        if new_status == Status.CANCELLED:
            booking.cancellation_reason = reason
            booking.cancelled_by = (
                ServiceRequest.CancelledBy.CLIENT
                if actor.id == booking.client_id
                else ServiceRequest.CancelledBy.PROVIDER
            )
            booking.cancelled_at = timezone.now()
            update_fields += ['cancellation_reason', 'cancelled_by', 'cancelled_at']

            cancelled = Payment.objects.filter(
                service_request=booking,
                status__in=[Payment.Status.PENDING, Payment.Status.PROCESSING],
            ).update(status=Payment.Status.CANCELLED)
            if cancelled:
                logger.info(f"{cancelled} open payment(s) of request #{booking.id} cancelled")

        booking.save(update_fields=update_fields)

    logger.info(
        f"Request #{booking.id} updated from {old_status} to {new_status} by {actor.email}"
    )
    return booking
