from decimal import Decimal

from django.contrib.auth import get_user_model

from bookings.models import ServiceRequest
from catalog.models import ServiceCategory, Service
from payments.models import Plan

User = get_user_model()


def create_provider_with_request():
    client = User.objects.create_user(
        email='cliente@example.com', password='testpass123', first_name='Ana', role='CLIENT'
    )
    provider_user = User.objects.create_user(
        email='profissional@example.com', password='testpass123', first_name='Carlos',
        role='SERVICE_PROVIDER', is_approved=True, approval_status='APPROVED',
    )
    category = ServiceCategory.objects.create(name='Reformas')
    service = Service.objects.create(name='Pintura', category=category)
    booking = ServiceRequest.objects.create(
        client=client,
        provider=provider_user.service_provider,
        service=service,
        description='Pintar a sala e dois quartos',
    )
    return client, provider_user, booking


def create_plans():
    return (
        Plan.objects.create(name='PREMIUM', price=Decimal('29.90')),
        Plan.objects.create(name='ENTERPRISE', price=Decimal('59.90')),
    )
