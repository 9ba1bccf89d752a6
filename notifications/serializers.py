from django.contrib.auth import get_user_model
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import Notification
from .services import TEMPLATES

User = get_user_model()


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'type', 'title', 'message', 'is_read', 'sent_via', 'data', 'created_at']
        read_only_fields = fields


class SendNotificationSerializer(serializers.Serializer):
    """Admin manual send: a catalogued kind or a free title/message."""
    user_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(is_active=True), source='user')
    kind = serializers.ChoiceField(choices=sorted(TEMPLATES), required=False)
    title = serializers.CharField(required=False, max_length=150)
    message = serializers.CharField(required=False)
    type = serializers.ChoiceField(choices=Notification.Type.choices, required=False, default=Notification.Type.SYSTEM)
    booking_id = serializers.IntegerField(required=False)
    channels = serializers.MultipleChoiceField(
        choices=['in_app', 'email', 'whatsapp'],
        required=False,
        default=['in_app', 'email', 'whatsapp'],
    )

    def validate(self, attrs):
        if not attrs.get('kind') and not (attrs.get('title') and attrs.get('message')):
            raise serializers.ValidationError(
                _("Informe um tipo de notificação ou título e mensagem.")
            )
        return attrs
