import django_filters

from .models import Review


class ReviewFilter(django_filters.FilterSet):
    provider = django_filters.NumberFilter(field_name='receiver_id')
    user = django_filters.NumberFilter(field_name='giver_id')
    booking = django_filters.NumberFilter(field_name='service_request_id')

    class Meta:
        model = Review
        fields = ['provider', 'user', 'booking', 'rating']
