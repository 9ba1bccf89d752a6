from rest_framework import permissions

from .services.status import PROVIDER_ONLY


def _is_admin(user):
    return user.role == 'ADMIN' or user.is_superuser


class IsRequestParticipant(permissions.BasePermission):
    """Client or provider of the booking; admins can read everything."""

    def has_object_permission(self, request, view, obj):
        if _is_admin(request.user) and request.method in permissions.SAFE_METHODS:
            return True
        return obj.is_participant(request.user)


class CanChangeRequestStatus(permissions.BasePermission):
    def has_object_permission(self, request, view, obj):
        user = request.user
        new_status = request.data.get('status')

        # Accept, reject and complete belong to the provider
        if new_status in PROVIDER_ONLY:
            return obj.provider.user_id == user.id

        # Either party may cancel
        if new_status == 'CANCELLED':
            return obj.is_participant(user)

        # Unknown target status falls through to serializer validation
        return True


class IsRequestClient(permissions.BasePermission):
    def has_object_permission(self, request, view, obj):
        return obj.client_id == request.user.id
