import django_filters
from django.contrib.auth import get_user_model
from django.db.models import Q

from .models import ServiceProvider

User = get_user_model()


class ProviderFilter(django_filters.FilterSet):
    city = django_filters.CharFilter(field_name='user__city', lookup_expr='iexact')
    state = django_filters.CharFilter(field_name='user__state', lookup_expr='iexact')
    min_rating = django_filters.NumberFilter(field_name='average_rating', lookup_expr='gte')

    class Meta:
        model = ServiceProvider
        fields = ['charges_travel', 'has_scheduling', 'is_highlighted']


class AdminUserFilter(django_filters.FilterSet):
    role = django_filters.ChoiceFilter(choices=User.Role.choices)
    approval_status = django_filters.ChoiceFilter(choices=User.ApprovalStatus.choices)
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = User
        fields = ['role', 'approval_status', 'is_active', 'is_approved']

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(email__icontains=value)
            | Q(first_name__icontains=value)
            | Q(last_name__icontains=value)
            | Q(cpf_cnpj__icontains=value)
        )
