from decimal import Decimal

from django.contrib.auth import get_user_model

from catalog.models import ServiceCategory, Service, ProviderService

User = get_user_model()


def create_marketplace(base_price=Decimal('100.00')):
    """Client, approved provider (profile created by signal) and one offered service."""
    client = User.objects.create_user(
        email='cliente@example.com',
        password='testpass123',
        first_name='Ana',
        last_name='Souza',
        role='CLIENT',
        phone='11987654321',
    )
    provider_user = User.objects.create_user(
        email='profissional@example.com',
        password='testpass123',
        first_name='Carlos',
        last_name='Lima',
        role='SERVICE_PROVIDER',
        is_approved=True,
        approval_status='APPROVED',
        city='Testville',
        state='SP',
    )
    provider = provider_user.service_provider

    category = ServiceCategory.objects.create(name='Limpeza')
    service = Service.objects.create(name='Diarista', category=category)
    offering = ProviderService.objects.create(
        provider=provider,
        service=service,
        base_price=base_price,
        provides_home_service=True,
    )
    return client, provider_user, provider, service, offering
