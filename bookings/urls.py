from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import (
    ServiceRequestListCreateView,
    ServiceRequestDetailView,
    ServiceRequestStatusUpdateView,
    cancel_request,
    schedule_quote,
    AvailabilityViewSet,
    provider_schedule,
    provider_slots,
    provider_appointments,
    ReviewListCreateView,
    pending_reviews,
    provider_metrics,
    ProviderHistoryView,
    admin_metrics_summary,
)

router = SimpleRouter()
router.register(r'schedule/availability', AvailabilityViewSet, basename='availability')

availability_list = AvailabilityViewSet.as_view({'get': 'list', 'post': 'create'})

urlpatterns = [
    # Bookings
    path('bookings/', ServiceRequestListCreateView.as_view(), name='booking-list'),
    path('bookings/<int:pk>/', ServiceRequestDetailView.as_view(), name='booking-detail'),
    path('bookings/<int:pk>/status/', ServiceRequestStatusUpdateView.as_view(), name='booking-status'),
    path('bookings/<int:pk>/cancel/', cancel_request, name='booking-cancel'),
    path('bookings/<int:pk>/schedule/', schedule_quote, name='booking-schedule'),

    # Schedule
    path('schedule/', availability_list, name='schedule-mine'),
    path('schedule/<int:provider_id>/', provider_schedule, name='schedule-provider'),
    path('schedule/<int:provider_id>/slots/', provider_slots, name='schedule-slots'),
    path('schedule/<int:provider_id>/appointments/', provider_appointments, name='schedule-appointments'),

    # Reviews
    path('reviews/', ReviewListCreateView.as_view(), name='review-list'),
    path('reviews/pending/', pending_reviews, name='review-pending'),

    # Provider dashboard
    path('providers/me/metrics/', provider_metrics, name='provider-metrics'),
    path('providers/me/history/', ProviderHistoryView.as_view(), name='provider-history'),

    # Back-office
    path('admin/metrics/summary/', admin_metrics_summary, name='admin-metrics-summary'),

    path('', include(router.urls)),
]
