"""
Service provider profile views.

Handles the provider's own profile, public discovery and the public
profile page data (offerings, weekly availability, rating statistics).
"""
import logging
from rest_framework import generics, permissions, viewsets, filters
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from django.db.models import F
from django.utils.translation import gettext_lazy as _
from django_filters.rest_framework import DjangoFilterBackend

from catalog.services.geo import distance_expression
from catalog.serializers import ProviderServiceSerializer
from bookings.serializers import AvailabilitySerializer
from bookings.services.ratings import provider_rating_statistics
from core.pagination import StandardResultsSetPagination
from ..models import ServiceProvider
from ..serializers import ServiceProviderSerializer, ProviderListSerializer, UserSerializer
from ..permissions import IsServiceProvider
from ..filters import ProviderFilter

logger = logging.getLogger(__name__)


class ManageProviderProfileView(generics.RetrieveUpdateAPIView):
    """
    GET/PATCH /api/providers/me/

    Retrieve or update the authenticated provider's profile and travel settings.
    Latitude/longitude are stored on the user address.
    """
    serializer_class = ServiceProviderSerializer
    permission_classes = [permissions.IsAuthenticated, IsServiceProvider]

    def get_object(self):
        profile, created = ServiceProvider.objects.select_related('user').get_or_create(
            user=self.request.user
        )
        if created:
            logger.warning(f"ServiceProvider profile was missing for {self.request.user.email}")
        return profile


class ProviderDiscoveryViewSet(viewsets.ReadOnlyModelViewSet):
    """
    GET /api/providers/?city=&state=&min_rating=&charges_travel=&lat=&lng=&radius=
    GET /api/providers/{id}/

    Approved and active providers only.
    """
    serializer_class = ProviderListSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = StandardResultsSetPagination
    lookup_value_regex = r'\d+'

    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    filterset_class = ProviderFilter
    search_fields = ['user__first_name', 'user__last_name', 'description']
    ordering_fields = ['average_rating', 'total_reviews', 'created_at']

    def get_queryset(self):
        qs = ServiceProvider.objects.filter(
            user__is_active=True,
            user__is_approved=True,
        ).select_related('user')

        lat = self.request.query_params.get('lat')
        lng = self.request.query_params.get('lng')
        user_ordering = self.request.query_params.get('ordering')

        if lat and lng:
            try:
                lat, lng = float(lat), float(lng)
                radius = float(self.request.query_params.get('radius', 20))
            except (TypeError, ValueError):
                raise ValidationError({'detail': _("Parâmetros lat, lng e radius devem ser numéricos.")})

            qs = qs.annotate(
                distance_km=distance_expression(lat, lng, 'user__latitude', 'user__longitude')
            ).filter(distance_km__lte=radius)

            # Explicit ?ordering= wins over distance
            if not user_ordering:
                qs = qs.order_by(F('distance_km').asc(nulls_last=True))
        elif not user_ordering:
            qs = qs.order_by('-is_highlighted', '-average_rating', '-created_at')

        return qs

    def retrieve(self, request, *args, **kwargs):
        provider = self.get_object()

        offerings = provider.offerings.filter(
            is_active=True, service__is_active=True
        ).select_related('service', 'service__category')
        availability = provider.availability.filter(is_active=True).order_by('day_of_week', 'start_time')

        user_data = UserSerializer(provider.user, context={'request': request}).data
        for private in ('cpf_cnpj', 'street', 'number', 'zip_code', 'latitude', 'longitude'):
            user_data.pop(private, None)

        data = {
            **ServiceProviderSerializer(provider, context={'request': request}).data,
            'user': user_data,
            'services': ProviderServiceSerializer(offerings, many=True).data,
            'availability': AvailabilitySerializer(availability, many=True).data,
            'statistics': provider_rating_statistics(provider),
        }
        data.pop('latitude', None)
        data.pop('longitude', None)
        return Response(data)
