from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import ServiceCategory, Service, ProviderService
from .services.search import SORT_OPTIONS


class CategoryChildSerializer(serializers.ModelSerializer):
    class Meta:
        model = ServiceCategory
        fields = ['id', 'name', 'slug', 'icon', 'level', 'is_leaf']


class ServiceCategorySerializer(serializers.ModelSerializer):
    children = serializers.SerializerMethodField()

    class Meta:
        model = ServiceCategory
        fields = [
            'id', 'name', 'slug', 'description', 'icon', 'parent',
            'level', 'is_leaf', 'is_active', 'children',
        ]
        read_only_fields = ['slug', 'level']

    def get_children(self, obj):
        children = [child for child in obj.children.all() if child.is_active]
        return CategoryChildSerializer(children, many=True).data

    def validate_name(self, value):
        value = value.strip()
        qs = ServiceCategory.objects.filter(name__iexact=value)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError(_("Já existe uma categoria com este nome."))
        return value

    def validate_parent(self, value):
        if value and self.instance and value.pk == self.instance.pk:
            raise serializers.ValidationError(_("Uma categoria não pode ser pai de si mesma."))
        return value


class ServiceSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True)

    class Meta:
        model = Service
        fields = ['id', 'name', 'description', 'category', 'category_name', 'is_active']


class ProviderServiceSerializer(serializers.ModelSerializer):
    service_name = serializers.CharField(source='service.name', read_only=True)
    category = serializers.SerializerMethodField()
    unit_display = serializers.CharField(source='get_unit_display', read_only=True)

    class Meta:
        model = ProviderService
        fields = [
            'id',
            'provider',
            'service',
            'service_name',
            'category',
            'base_price',
            'unit',
            'unit_display',
            'description',
            'is_active',
            'offers_scheduling',
            'provides_home_service',
            'provides_local_service',
            'created_at',
        ]
        read_only_fields = ['provider', 'created_at']

    def get_category(self, obj):
        return {'id': obj.service.category_id, 'name': obj.service.category.name}

    def validate_service(self, value):
        if not value.is_active:
            raise serializers.ValidationError(_("Serviço inativo."))
        if self.instance and self.instance.service_id != value.id:
            raise serializers.ValidationError(_("Não é possível trocar o serviço de uma oferta."))

        provider = self.context['request'].user.service_provider
        duplicate = ProviderService.objects.filter(provider=provider, service=value)
        if self.instance:
            duplicate = duplicate.exclude(pk=self.instance.pk)
        if duplicate.exists():
            raise serializers.ValidationError(_("Você já oferece este serviço."))
        return value

    def validate(self, attrs):
        home = attrs.get('provides_home_service', getattr(self.instance, 'provides_home_service', True))
        local = attrs.get('provides_local_service', getattr(self.instance, 'provides_local_service', False))
        if not home and not local:
            raise serializers.ValidationError(
                _("Informe se o serviço é prestado em domicílio, no local, ou ambos.")
            )
        return attrs


class ServiceDetailSerializer(serializers.ModelSerializer):
    category = CategoryChildSerializer(read_only=True)
    offerings = serializers.SerializerMethodField()

    class Meta:
        model = Service
        fields = ['id', 'name', 'description', 'category', 'is_active', 'offerings']

    def get_offerings(self, obj):
        offerings = obj.offerings.filter(
            is_active=True, provider__user__is_active=True
        ).select_related('provider', 'provider__user')
        return [
            {
                'id': offering.id,
                'provider_id': offering.provider_id,
                'provider_name': offering.provider.user.full_name,
                'average_rating': float(offering.provider.average_rating),
                'base_price': offering.base_price,
                'unit': offering.unit,
                'provides_home_service': offering.provides_home_service,
                'provides_local_service': offering.provides_local_service,
            }
            for offering in offerings
        ]


class SearchParamsSerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True, max_length=200)
    category_id = serializers.IntegerField(required=False, min_value=1)
    city = serializers.CharField(required=False, allow_blank=True, max_length=100)
    state = serializers.CharField(required=False, allow_blank=True, max_length=2)
    local = serializers.CharField(required=False, allow_blank=True, max_length=150)
    location = serializers.CharField(required=False, allow_blank=True, max_length=150)
    min_price = serializers.DecimalField(required=False, max_digits=10, decimal_places=2, min_value=0)
    max_price = serializers.DecimalField(required=False, max_digits=10, decimal_places=2, min_value=0)
    home_service = serializers.BooleanField(required=False, default=False)
    local_service = serializers.BooleanField(required=False, default=False)
    scheduling = serializers.BooleanField(required=False, default=False)
    sort_by = serializers.ChoiceField(choices=SORT_OPTIONS, required=False, default='RELEVANCE')
    lat = serializers.FloatField(required=False, min_value=-90, max_value=90)
    lng = serializers.FloatField(required=False, min_value=-180, max_value=180)
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    limit = serializers.IntegerField(required=False, default=20, min_value=1, max_value=100)

    def to_internal_value(self, data):
        if hasattr(data, 'dict'):
            data = data.dict()
        if data.get('sort_by'):
            data = {**data, 'sort_by': data['sort_by'].upper()}
        return super().to_internal_value(data)

    def validate(self, attrs):
        if attrs.get('sort_by') == 'DISTANCE' and (attrs.get('lat') is None or attrs.get('lng') is None):
            raise serializers.ValidationError(
                {'sort_by': _("Ordenação por distância requer lat e lng.")}
            )
        min_price, max_price = attrs.get('min_price'), attrs.get('max_price')
        if min_price is not None and max_price is not None and min_price > max_price:
            raise serializers.ValidationError(
                {'min_price': _("O preço mínimo não pode ser maior que o máximo.")}
            )
        return attrs


class TravelCostRequestSerializer(serializers.Serializer):
    provider_id = serializers.IntegerField(min_value=1)
    service_id = serializers.IntegerField(required=False, min_value=1)
    client_lat = serializers.FloatField(required=False, min_value=-90, max_value=90)
    client_lng = serializers.FloatField(required=False, min_value=-180, max_value=180)
    address = serializers.CharField(required=False, allow_blank=True, max_length=255)
    city = serializers.CharField(required=False, allow_blank=True, max_length=100)
    state = serializers.CharField(required=False, allow_blank=True, max_length=2)
    zip_code = serializers.CharField(required=False, allow_blank=True, max_length=10)

    def validate(self, attrs):
        has_coords = attrs.get('client_lat') is not None and attrs.get('client_lng') is not None
        has_address = any(attrs.get(key) for key in ('address', 'city', 'state', 'zip_code'))
        if not has_coords and not has_address:
            raise serializers.ValidationError(
                _("Informe as coordenadas ou o endereço do cliente.")
            )
        return attrs

    def client_address_line(self):
        parts = [self.validated_data.get(key) for key in ('address', 'city', 'state', 'zip_code')]
        return ", ".join(part for part in parts if part)
