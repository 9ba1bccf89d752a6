"""
Rating aggregates for providers.
"""

from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Avg, Count

from ..models import Review, ServiceRequest

# Prior weight of the platform mean in the Bayesian average
BAYESIAN_PRIOR_WEIGHT = 8


def _round2(value):
    return float(Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def rating_distribution(reviews):
    distribution = {star: 0 for star in range(1, 6)}
    # Clear ordering so GROUP BY is on rating alone
    for row in reviews.order_by().values('rating').annotate(total=Count('id')):
        distribution[row['rating']] += row['total']
    return distribution


def review_statistics(reviews):
    """Average, total and 1..5 distribution of a Review queryset."""
    aggregate = reviews.aggregate(average=Avg('rating'), total=Count('id'))
    return {
        'average_rating': _round2(aggregate['average']) if aggregate['average'] else 0,
        'total_reviews': aggregate['total'],
        'rating_distribution': rating_distribution(reviews),
    }


def provider_rating_statistics(provider):
    """
    Provider statistics with a Bayesian average:
    ``(m * C + n * R) / (m + n)`` where C is the platform mean rating.
    """
    reviews = Review.objects.filter(receiver=provider)
    stats = review_statistics(reviews)

    platform_avg = Review.objects.aggregate(average=Avg('rating'))['average']
    platform_mean = _round2(platform_avg) if platform_avg else 0
    n = stats['total_reviews']
    m = BAYESIAN_PRIOR_WEIGHT
    provider_avg = reviews.aggregate(average=Avg('rating'))['average'] or 0
    bayesian = (m * platform_mean + n * float(provider_avg)) / (m + n) if n > 0 else platform_mean

    stats['bayesian_rating'] = _round2(bayesian)
    stats['total_completed_services'] = ServiceRequest.objects.filter(
        provider=provider,
        status=ServiceRequest.Status.COMPLETED,
    ).count()
    return stats
