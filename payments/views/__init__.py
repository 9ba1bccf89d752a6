"""
Payments app views.

Organized into focused modules:
    - checkout_views: Unlock and subscription checkouts, history, plans, fee quotes
    - coupon_views: Coupon validation and admin management
    - webhook_views: Mercado Pago notifications
"""

from .checkout_views import (
    unlock_request,
    subscribe,
    my_subscription,
    PaymentHistoryView,
    PlanListView,
    fee_quote,
)

from .coupon_views import (
    validate_coupon_view,
    AdminCouponViewSet,
    AdminPaymentViewSet,
)

from .webhook_views import (
    payment_webhook,
)

__all__ = [
    'unlock_request',
    'subscribe',
    'my_subscription',
    'PaymentHistoryView',
    'PlanListView',
    'fee_quote',
    'validate_coupon_view',
    'AdminCouponViewSet',
    'AdminPaymentViewSet',
    'payment_webhook',
]
