"""
Booking events to notification kinds.
"""

from notifications.services import notify
from ..models import ServiceRequest

Status = ServiceRequest.Status

STATUS_NOTIFICATIONS = {
    Status.ACCEPTED: 'booking_confirmed',
    Status.REJECTED: 'booking_rejected',
    Status.COMPLETED: 'service_completed',
    Status.CANCELLED: 'booking_cancelled',
}


def booking_context(booking):
    return {
        'booking_id': booking.id,
        'service_name': booking.service.name,
        'client_name': booking.client.full_name,
        'provider_name': booking.provider.user.full_name,
        'scheduled_date': booking.scheduled_date.strftime('%d/%m/%Y') if booking.scheduled_date else None,
        'scheduled_time': booking.scheduled_time.strftime('%H:%M') if booking.scheduled_time else None,
        'amount': booking.final_price or booking.estimated_price,
        'reason': booking.cancellation_reason,
    }


def notify_new_request(booking):
    return notify(booking.provider.user, 'booking_request', booking_context(booking))


def notify_status_change(booking, actor):
    kind = STATUS_NOTIFICATIONS.get(booking.status)
    if kind is None:
        return None
    # The other party hears about it
    recipient = booking.provider.user if actor.id == booking.client_id else booking.client
    return notify(recipient, kind, booking_context(booking))
