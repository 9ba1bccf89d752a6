"""
Client favorites.
"""
import logging
from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from django.shortcuts import get_object_or_404
from django.utils.translation import gettext_lazy as _

from ..models import Favorite, ServiceProvider
from ..serializers import FavoriteSerializer

logger = logging.getLogger(__name__)


class FavoriteListCreateView(generics.ListCreateAPIView):
    """
    GET  /api/favorites/
    POST /api/favorites/  {"provider": <id>}

    Adding an existing favorite returns the existing row with 200.
    """
    serializer_class = FavoriteSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        return Favorite.objects.filter(
            client=self.request.user
        ).select_related('provider', 'provider__user')

    def create(self, request, *args, **kwargs):
        provider_id = str(request.data.get('provider', ''))
        if not provider_id.isdigit():
            return Response(
                {'provider': [_("Informe o profissional.")]},
                status=status.HTTP_400_BAD_REQUEST
            )
        provider = get_object_or_404(ServiceProvider, pk=provider_id)
        favorite, created = Favorite.objects.get_or_create(client=request.user, provider=provider)

        if created:
            logger.info(f"{request.user.email} favorited provider {provider.id}")

        return Response(
            FavoriteSerializer(favorite).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )


@api_view(['DELETE'])
@permission_classes([permissions.IsAuthenticated])
def remove_favorite(request, provider_id):
    """DELETE /api/favorites/{provider_id}/"""
    favorite = get_object_or_404(Favorite, client=request.user, provider_id=provider_id)
    favorite.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)
