"""
Authenticated user's own account.
"""
import logging
from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ..serializers import UserSerializer

logger = logging.getLogger(__name__)


class ManageUserView(generics.RetrieveUpdateAPIView):
    """
    GET/PATCH /api/users/me/

    Retrieve or update the authenticated user's profile.
    Email and role are read-only.
    """
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        return self.request.user


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def accept_terms(request):
    """POST /api/users/me/accept-terms/"""
    user = request.user
    user.terms_accepted_at = timezone.now()
    user.save(update_fields=['terms_accepted_at'])
    return Response({'terms_accepted_at': user.terms_accepted_at}, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def deactivate_account(request):
    """
    POST /api/users/me/deactivate/

    Self-service deactivation. Tokens already issued stop working once
    the account is inactive.
    """
    user = request.user
    user.is_active = False
    user.save(update_fields=['is_active'])
    logger.info(f"User {user.email} deactivated their account")
    return Response({'detail': _("Conta desativada.")}, status=status.HTTP_200_OK)
