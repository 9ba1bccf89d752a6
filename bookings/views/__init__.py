"""
Bookings app views.

Organized into focused modules:
    - booking_views: Service request creation, listing and status lifecycle
    - schedule_views: Weekly availability and per-date slots
    - review_views: Review creation, listing and pending reviews
    - metrics_views: Provider dashboard metrics, history and admin summary
"""

# Bookings
from .booking_views import (
    ServiceRequestListCreateView,
    ServiceRequestDetailView,
    ServiceRequestStatusUpdateView,
    cancel_request,
    schedule_quote,
)

# Schedule
from .schedule_views import (
    AvailabilityViewSet,
    provider_schedule,
    provider_slots,
    provider_appointments,
)

# Reviews
from .review_views import (
    ReviewListCreateView,
    pending_reviews,
)

# Metrics
from .metrics_views import (
    provider_metrics,
    ProviderHistoryView,
    admin_metrics_summary,
)

__all__ = [
    # Bookings
    'ServiceRequestListCreateView',
    'ServiceRequestDetailView',
    'ServiceRequestStatusUpdateView',
    'cancel_request',
    'schedule_quote',
    # Schedule
    'AvailabilityViewSet',
    'provider_schedule',
    'provider_slots',
    'provider_appointments',
    # Reviews
    'ReviewListCreateView',
    'pending_reviews',
    # Metrics
    'provider_metrics',
    'ProviderHistoryView',
    'admin_metrics_summary',
]
