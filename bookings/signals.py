import logging
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Avg, Count
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .models import Review

logger = logging.getLogger(__name__)


def _refresh_provider_rating(provider):
    aggregate = Review.objects.filter(receiver=provider).aggregate(
        average=Avg('rating'), total=Count('id')
    )
    average = aggregate['average']
    provider.average_rating = (
        Decimal(str(average)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        if average else Decimal('0.00')
    )
    provider.total_reviews = aggregate['total']
    provider.save(update_fields=['average_rating', 'total_reviews'])
    return provider


@receiver(post_save, sender=Review)
def update_provider_rating(sender, instance, created, **kwargs):
    """Recomputes the provider average each time a review is created."""
    if created:
        provider = _refresh_provider_rating(instance.receiver)
        logger.info(f"Provider {provider.id} rating updated: {provider.average_rating}⭐")


@receiver(post_delete, sender=Review)
def recalculate_provider_rating_on_delete(sender, instance, **kwargs):
    provider = _refresh_provider_rating(instance.receiver)
    logger.info(
        f"Provider {provider.id} rating recalculated after review removal: {provider.average_rating}⭐"
    )
