"""
Service search: ORM filter composition plus the mapping from the UI sort
options to ORDER BY clauses.
"""

import logging
import math

from django.db.models import F, Q

from ..models import ProviderService
from .geo import distance_expression

logger = logging.getLogger(__name__)

SORT_OPTIONS = ('RELEVANCE', 'PRICE_LOW', 'PRICE_HIGH', 'NEWEST', 'RATING', 'DISTANCE')

ORDERINGS = {
    'RELEVANCE': ['-provider__is_highlighted', '-provider__average_rating', '-created_at'],
    'PRICE_LOW': [F('base_price').asc(nulls_last=True)],
    'PRICE_HIGH': [F('base_price').desc(nulls_last=True)],
    'NEWEST': ['-created_at'],
    'RATING': ['-provider__average_rating', '-provider__total_reviews'],
    'DISTANCE': [F('distance_km').asc(nulls_last=True)],
}


def split_location(value):
    """``"São Paulo, SP"`` -> ``("São Paulo", "SP")``."""
    if not value:
        return None, None
    city, _, state = value.partition(',')
    return city.strip() or None, state.strip() or None


def build_search_queryset(params):
    """
    ``params`` is the validated output of ``SearchParamsSerializer``.
    """
    qs = ProviderService.objects.filter(
        is_active=True,
        service__is_active=True,
        provider__user__is_active=True,
    ).select_related('service', 'service__category', 'provider', 'provider__user')

    q = params.get('q')
    if q:
        qs = qs.filter(Q(service__name__icontains=q) | Q(service__description__icontains=q))

    category_id = params.get('category_id')
    if category_id:
        qs = qs.filter(
            Q(service__category_id=category_id) | Q(service__category__parent_id=category_id)
        )

    city, state = params.get('city'), params.get('state')
    if not city:
        loc_city, loc_state = split_location(params.get('local') or params.get('location'))
        city = loc_city
        state = state or loc_state
    if city:
        qs = qs.filter(provider__user__city__iexact=city)
    if state:
        qs = qs.filter(provider__user__state__iexact=state)

    if params.get('min_price') is not None:
        qs = qs.filter(base_price__gte=params['min_price'])
    if params.get('max_price') is not None:
        qs = qs.filter(base_price__lte=params['max_price'])

    if params.get('home_service'):
        qs = qs.filter(provides_home_service=True)
    if params.get('local_service'):
        qs = qs.filter(provides_local_service=True)
    if params.get('scheduling'):
        qs = qs.filter(offers_scheduling=True)

    lat, lng = params.get('lat'), params.get('lng')
    if lat is not None and lng is not None:
        qs = qs.annotate(
            distance_km=distance_expression(lat, lng, 'provider__user__latitude', 'provider__user__longitude')
        )

    sort_by = params.get('sort_by') or 'RELEVANCE'
    return qs.order_by(*ORDERINGS[sort_by], 'id')


def search_services(params):
    """
    Returns ``{"results": [...], "pagination": {page, limit, total, pages}}``.
    """
    page = params.get('page') or 1
    limit = params.get('limit') or 20

    qs = build_search_queryset(params)
    total = qs.count()
    offset = (page - 1) * limit
    offerings = list(qs[offset:offset + limit])

    logger.debug(f"Search {dict(params)} matched {total} offerings")

    return {
        'results': [serialize_result(offering) for offering in offerings],
        'pagination': {
            'page': page,
            'limit': limit,
            'total': total,
            'pages': math.ceil(total / limit) if total else 0,
        },
    }


def serialize_result(offering):
    provider = offering.provider
    user = provider.user
    distance = getattr(offering, 'distance_km', None)
    return {
        'id': offering.id,
        'service_id': offering.service_id,
        'service_name': offering.service.name,
        'description': offering.description or offering.service.description,
        'category': {
            'id': offering.service.category_id,
            'name': offering.service.category.name,
        },
        'provider': {
            'id': provider.id,
            'name': user.full_name,
            'profile_image': user.profile_image.url if user.profile_image else None,
            'city': user.city,
            'state': user.state,
            'average_rating': float(provider.average_rating),
            'total_reviews': provider.total_reviews,
            'is_highlighted': provider.is_highlighted,
            'charges_travel': provider.charges_travel,
        },
        'base_price': float(offering.base_price) if offering.base_price is not None else None,
        'unit': offering.unit,
        'provides_home_service': offering.provides_home_service,
        'provides_local_service': offering.provides_local_service,
        'offers_scheduling': offering.offers_scheduling,
        'distance_km': round(distance, 2) if distance is not None else None,
    }
