"""
Catalog views.

Categories, services, provider offerings, search and travel-cost quotes.
"""
import logging
from rest_framework import generics, permissions, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.db.models import Prefetch, Q
from django.shortcuts import get_object_or_404
from django.utils.translation import gettext_lazy as _

from users.models import ServiceProvider
from users.permissions import IsAdminRole, IsProviderOwnerOrReadOnly
from .models import ServiceCategory, Service, ProviderService
from .serializers import (
    ServiceCategorySerializer,
    ServiceSerializer,
    ServiceDetailSerializer,
    ProviderServiceSerializer,
    SearchParamsSerializer,
    TravelCostRequestSerializer,
)
from .services.search import search_services
from .services.travel import Location, TravelSettings, calculate_travel_pricing

logger = logging.getLogger(__name__)

SUGGEST_MIN_LENGTH = 2
SUGGEST_MAX_RESULTS = 10


class CategoryListView(generics.ListAPIView):
    """
    GET /api/categories/?parent=<id>|root

    Active categories with their active children nested. Not paginated.
    """
    serializer_class = ServiceCategorySerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None

    def get_queryset(self):
        qs = ServiceCategory.objects.filter(is_active=True).prefetch_related(
            Prefetch('children', queryset=ServiceCategory.objects.order_by('name'))
        )
        parent = self.request.query_params.get('parent')
        if parent == 'root':
            qs = qs.filter(parent__isnull=True)
        elif parent:
            qs = qs.filter(parent_id=parent) if parent.isdigit() else qs.none()
        return qs.order_by('level', 'name')


@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def category_suggest(request):
    """
    GET /api/categories/suggest/?q=lim

    Leaf categories and services whose name contains ``q``.
    """
    q = request.query_params.get('q', '').strip()
    if len(q) < SUGGEST_MIN_LENGTH:
        return Response({'results': []})

    categories = ServiceCategory.objects.filter(
        is_active=True, is_leaf=True, name__icontains=q
    ).order_by('name')[:SUGGEST_MAX_RESULTS]

    results = [
        {'type': 'category', 'id': category.id, 'name': category.name, 'icon': category.icon}
        for category in categories
    ]

    remaining = SUGGEST_MAX_RESULTS - len(results)
    if remaining > 0:
        services = Service.objects.filter(
            is_active=True, name__icontains=q
        ).select_related('category').order_by('name')[:remaining]
        results.extend(
            {
                'type': 'service',
                'id': service.id,
                'name': service.name,
                'category_id': service.category_id,
                'category_name': service.category.name,
            }
            for service in services
        )

    return Response({'results': results})


class AdminCategoryViewSet(viewsets.ModelViewSet):
    """
    /api/admin/categories/

    Deleting a category still referenced by services or subcategories is refused.
    """
    queryset = ServiceCategory.objects.all().prefetch_related('children').order_by('level', 'name')
    serializer_class = ServiceCategorySerializer
    permission_classes = [IsAdminRole]

    def perform_create(self, serializer):
        category = serializer.save()
        self._sync_parent_leaf(category.parent)
        logger.info(f"Category '{category.name}' created by {self.request.user.email}")

    def perform_update(self, serializer):
        old_parent = serializer.instance.parent
        category = serializer.save()
        self._sync_parent_leaf(old_parent)
        self._sync_parent_leaf(category.parent)

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()

        if category.services.exists():
            return Response(
                {'detail': _("Categoria possui serviços vinculados e não pode ser removida.")},
                status=status.HTTP_400_BAD_REQUEST
            )
        if category.children.exists():
            return Response(
                {'detail': _("Categoria possui subcategorias e não pode ser removida.")},
                status=status.HTTP_400_BAD_REQUEST
            )

        parent = category.parent
        category.delete()
        self._sync_parent_leaf(parent)
        logger.info(f"Category #{kwargs.get('pk')} deleted by {request.user.email}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @staticmethod
    def _sync_parent_leaf(parent):
        if parent is None:
            return
        is_leaf = not parent.children.exists()
        if parent.is_leaf != is_leaf:
            parent.is_leaf = is_leaf
            parent.save(update_fields=['is_leaf'])


class ServiceListView(generics.ListAPIView):
    """
    GET /api/services/?category=<id>&q=<text>
    """
    serializer_class = ServiceSerializer
    permission_classes = [permissions.AllowAny]

    def get_queryset(self):
        qs = Service.objects.filter(is_active=True).select_related('category')
        category = self.request.query_params.get('category')
        q = self.request.query_params.get('q')
        if category and category.isdigit():
            qs = qs.filter(Q(category_id=category) | Q(category__parent_id=category))
        if q:
            qs = qs.filter(name__icontains=q)
        return qs.order_by('name')


class ServiceDetailView(generics.RetrieveAPIView):
    """GET /api/services/{id}/ with the active offerings."""
    queryset = Service.objects.filter(is_active=True).select_related('category')
    serializer_class = ServiceDetailSerializer
    permission_classes = [permissions.AllowAny]


class MyProviderServiceViewSet(viewsets.ModelViewSet):
    """
    /api/services/mine/

    CRUD over the authenticated provider's offerings.
    """
    serializer_class = ProviderServiceSerializer
    permission_classes = [permissions.IsAuthenticated, IsProviderOwnerOrReadOnly]

    def get_queryset(self):
        return ProviderService.objects.filter(
            provider__user=self.request.user
        ).select_related('service', 'service__category', 'provider')

    def perform_create(self, serializer):
        provider = get_object_or_404(ServiceProvider, user=self.request.user)
        offering = serializer.save(provider=provider)
        logger.info(f"Provider {self.request.user.email} now offers '{offering.service.name}'")

    def perform_destroy(self, instance):
        logger.info(f"Provider {self.request.user.email} removed offering #{instance.id}")
        instance.delete()


@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def search_view(request):
    """
    GET /api/services/search/

    Query params: q, category_id, city, state, local ("City, ST"), min_price,
    max_price, home_service, local_service, scheduling, sort_by
    (RELEVANCE | PRICE_LOW | PRICE_HIGH | NEWEST | RATING | DISTANCE),
    lat, lng, page, limit.
    """
    params = SearchParamsSerializer(data=request.query_params)
    if not params.is_valid():
        return Response(
            {'error': _("Parâmetros de busca inválidos."), 'details': params.errors},
            status=status.HTTP_400_BAD_REQUEST
        )

    return Response(search_services(params.validated_data), status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([permissions.AllowAny])
def travel_cost_view(request):
    """
    POST /api/services/travel-cost/

    Body: provider_id, optional service_id, client_lat/client_lng or
    address/city/state/zip_code.
    """
    serializer = TravelCostRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    provider = get_object_or_404(
        ServiceProvider.objects.select_related('user'),
        pk=data['provider_id'],
        user__is_active=True,
    )
    provider_user = provider.user

    if not provider_user.has_coordinates and not provider_user.address_line():
        return Response(
            {'error': _("Prestador sem endereço cadastrado.")},
            status=status.HTTP_400_BAD_REQUEST
        )

    base_price = None
    if data.get('service_id'):
        offering = ProviderService.objects.filter(
            provider=provider, service_id=data['service_id'], is_active=True
        ).first()
        base_price = offering.base_price if offering else None

    quote = calculate_travel_pricing(
        Location(
            lat=provider_user.latitude,
            lng=provider_user.longitude,
            address=provider_user.address_line(),
        ),
        TravelSettings.from_provider(provider),
        Location(
            lat=data.get('client_lat'),
            lng=data.get('client_lng'),
            address=serializer.client_address_line(),
        ),
        base_price=base_price,
    )

    if not quote.success:
        logger.info(f"Travel cost for provider {provider.id} could not be calculated: {quote.warnings}")
        return Response(
            {'error': _("Não foi possível calcular o deslocamento."), 'details': quote.as_dict()},
            status=status.HTTP_400_BAD_REQUEST
        )

    return Response(quote.as_dict(), status=status.HTTP_200_OK)
