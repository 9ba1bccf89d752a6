"""
Users app views.

Organized into focused modules:
    - auth_views: Authentication (register, login, password management, e-mail and phone confirmation)
    - user_views: The authenticated user's own account
    - provider_views: Provider profile, discovery and public profile
    - admin_views: Back-office moderation
    - favorite_views: Client favorites
"""

# Authentication
from .auth_views import (
    RegisterView,
    CustomTokenObtainPairView,
    ChangePasswordView,
    PasswordResetRequestView,
    PasswordResetConfirmView,
    EmailVerifyView,
    EmailVerificationResendView,
    PhoneCodeRequestView,
    PhoneVerifyView,
)

# User Management
from .user_views import (
    ManageUserView,
    accept_terms,
    deactivate_account,
)

# Providers
from .provider_views import (
    ManageProviderProfileView,
    ProviderDiscoveryViewSet,
)

# Back-office
from .admin_views import (
    AdminUserViewSet,
)

# Favorites
from .favorite_views import (
    FavoriteListCreateView,
    remove_favorite,
)

__all__ = [
    # Auth
    'RegisterView',
    'CustomTokenObtainPairView',
    'ChangePasswordView',
    'PasswordResetRequestView',
    'PasswordResetConfirmView',
    'EmailVerifyView',
    'EmailVerificationResendView',
    'PhoneCodeRequestView',
    'PhoneVerifyView',
    # Users
    'ManageUserView',
    'accept_terms',
    'deactivate_account',
    # Providers
    'ManageProviderProfileView',
    'ProviderDiscoveryViewSet',
    # Admin
    'AdminUserViewSet',
    # Favorites
    'FavoriteListCreateView',
    'remove_favorite',
]
