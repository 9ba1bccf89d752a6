"""
Role-based permissions shared by every app.

Roles live on ``User.role``; superusers are treated as ADMIN everywhere.
"""

from rest_framework.permissions import BasePermission, SAFE_METHODS


class IsServiceProvider(BasePermission):
    """Only authenticated users with role SERVICE_PROVIDER."""

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.role == "SERVICE_PROVIDER"


class IsAdminRole(BasePermission):
    """
    Back-office access.

    Accepts role ADMIN or Django superusers.
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.role == "ADMIN" or request.user.is_superuser


class IsProviderOwnerOrReadOnly(BasePermission):
    """
    Permission for objects owned by a provider (offerings, availability slots).

    Rules:
    - GET/HEAD/OPTIONS: any authenticated user
    - POST: only SERVICE_PROVIDER
    - PATCH/PUT/DELETE: only the owning provider or ADMIN
    """

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        if request.method in SAFE_METHODS:
            return True

        if request.method == "POST":
            return request.user.role == "SERVICE_PROVIDER"

        return True

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True

        user = request.user

        if user.role == "ADMIN" or user.is_superuser:
            return True

        return obj.provider.user_id == user.id
