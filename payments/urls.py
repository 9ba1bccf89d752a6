from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import (
    unlock_request,
    subscribe,
    my_subscription,
    PaymentHistoryView,
    PlanListView,
    fee_quote,
    validate_coupon_view,
    AdminCouponViewSet,
    AdminPaymentViewSet,
    payment_webhook,
)

router = SimpleRouter()
router.register(r'admin/coupons', AdminCouponViewSet, basename='admin-coupons')
router.register(r'admin/payments', AdminPaymentViewSet, basename='admin-payments')

urlpatterns = [
    path('plans/', PlanListView.as_view(), name='plan-list'),
    path('coupons/validate/', validate_coupon_view, name='coupon-validate'),
    path('payments/unlock-request/', unlock_request, name='payment-unlock'),
    path('payments/subscribe/', subscribe, name='payment-subscribe'),
    path('payments/subscription/', my_subscription, name='payment-subscription'),
    path('payments/history/', PaymentHistoryView.as_view(), name='payment-history'),
    path('payments/fees/', fee_quote, name='payment-fees'),
    path('payments/webhook/', payment_webhook, name='payment-webhook'),
    path('', include(router.urls)),
]
