from django.db.models.signals import post_save
from django.dispatch import receiver
from django.contrib.auth import get_user_model
from .models import ServiceProvider
import logging

User = get_user_model()
logger = logging.getLogger(__name__)


@receiver(post_save, sender=User)
def create_service_provider_profile(sender, instance, created, **kwargs):
    """
    Creates the ServiceProvider profile when a SERVICE_PROVIDER user is registered.
    """
    if created and instance.role == User.Role.SERVICE_PROVIDER:
        ServiceProvider.objects.get_or_create(user=instance)
        logger.info(f"ServiceProvider profile created for {instance.email}")
