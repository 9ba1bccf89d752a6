"""
Gate that decides whether a provider may accept a request: an ACTIVE
subscription (open-ended or not yet expired) or an approved payment the
provider made for that specific request.
"""

import logging

from django.db.models import Q
from django.utils import timezone

from payments.models import Payment, Subscription

logger = logging.getLogger(__name__)


def has_active_subscription(provider, now=None):
    now = now or timezone.now()
    return Subscription.objects.filter(
        provider=provider,
        status=Subscription.Status.ACTIVE,
    ).filter(
        Q(end_date__isnull=True) | Q(end_date__gte=now)
    ).exists()


def has_unlocked(provider, service_request):
    return Payment.objects.filter(
        user_id=provider.user_id,
        service_request=service_request,
        status=Payment.Status.APPROVED,
    ).exists()


def can_accept(provider, service_request):
    allowed = has_active_subscription(provider) or has_unlocked(provider, service_request)
    if not allowed:
        logger.info(
            f"Provider {provider.id} blocked from accepting request #{service_request.id}: "
            f"no active plan and no unlock payment"
        )
    return allowed
