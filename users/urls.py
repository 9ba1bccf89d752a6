from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    ChangePasswordView,
    PasswordResetRequestView,
    PasswordResetConfirmView,
    EmailVerifyView,
    EmailVerificationResendView,
    PhoneCodeRequestView,
    PhoneVerifyView,
    ManageUserView,
    accept_terms,
    deactivate_account,
    ManageProviderProfileView,
    ProviderDiscoveryViewSet,
    AdminUserViewSet,
    FavoriteListCreateView,
    remove_favorite,
)

router = DefaultRouter()
router.register(r'providers', ProviderDiscoveryViewSet, basename='provider-discovery')
router.register(r'admin/users', AdminUserViewSet, basename='admin-users')

urlpatterns = [
    path('auth/change-password/', ChangePasswordView.as_view(), name='change_password'),
    path('auth/password-reset/', PasswordResetRequestView.as_view(), name='password_reset'),
    path('auth/password-reset-confirm/', PasswordResetConfirmView.as_view(), name='password_reset_confirm'),
    path('auth/email/verify/', EmailVerifyView.as_view(), name='email_verify'),
    path('auth/email/resend/', EmailVerificationResendView.as_view(), name='email_resend'),
    path('auth/phone/send-code/', PhoneCodeRequestView.as_view(), name='phone_send_code'),
    path('auth/phone/verify/', PhoneVerifyView.as_view(), name='phone_verify'),
    path('users/me/', ManageUserView.as_view(), name='me'),
    path('users/me/accept-terms/', accept_terms, name='accept_terms'),
    path('users/me/deactivate/', deactivate_account, name='deactivate_account'),
    path('providers/me/', ManageProviderProfileView.as_view(), name='provider_profile'),
    path('favorites/', FavoriteListCreateView.as_view(), name='favorite-list'),
    path('favorites/<int:provider_id>/', remove_favorite, name='favorite-remove'),
    path('', include(router.urls)),
]
