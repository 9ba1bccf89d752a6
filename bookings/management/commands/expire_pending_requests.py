"""
Cancels PENDING requests whose ``expires_at`` has passed.

Usage:
    python manage.py expire_pending_requests
    python manage.py expire_pending_requests --dry-run
"""

import logging

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from payments.models import Payment
from bookings.models import ServiceRequest

logger = logging.getLogger(__name__)

EXPIRATION_REASON = "Solicitação expirada sem resposta do profissional."


class Command(BaseCommand):
    help = 'Cancela solicitações pendentes cujo prazo de resposta expirou'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Lista as solicitações sem alterá-las',
        )

    def handle(self, *args, **options):
        now = timezone.now()
        expired = ServiceRequest.objects.filter(
            status=ServiceRequest.Status.PENDING,
            expires_at__isnull=False,
            expires_at__lt=now,
        )
        ids = list(expired.values_list('id', flat=True))

        if options['dry_run']:
            self.stdout.write(f'{len(ids)} solicitação(ões) expirada(s): {ids}')
            return

        with transaction.atomic():
            ServiceRequest.objects.filter(id__in=ids).update(
                status=ServiceRequest.Status.CANCELLED,
                cancellation_reason=EXPIRATION_REASON,
                cancelled_at=now,
                expires_at=None,
                updated_at=now,
            )
            Payment.objects.filter(
                service_request_id__in=ids,
                status__in=[Payment.Status.PENDING, Payment.Status.PROCESSING],
            ).update(status=Payment.Status.CANCELLED)

        logger.info(f"{len(ids)} pending request(s) expired")
        self.stdout.write(self.style.SUCCESS(f'{len(ids)} solicitação(ões) cancelada(s) por expiração'))
