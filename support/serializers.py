from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import SupportChat, SupportMessage


class SupportMessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source='sender.full_name', read_only=True)
    content = serializers.CharField(min_length=1, max_length=5000, trim_whitespace=True)

    class Meta:
        model = SupportMessage
        fields = ['id', 'chat', 'sender', 'sender_name', 'content', 'is_from_admin', 'read_at', 'created_at']
        read_only_fields = ['id', 'chat', 'sender', 'sender_name', 'is_from_admin', 'read_at', 'created_at']


class SupportChatSerializer(serializers.ModelSerializer):
    """List representation with the latest message and the unread counter."""
    user_email = serializers.EmailField(source='user.email', read_only=True)
    assigned_admin_name = serializers.CharField(source='assigned_admin.full_name', read_only=True, default=None)
    last_message = serializers.SerializerMethodField()
    unread_count = serializers.SerializerMethodField()

    class Meta:
        model = SupportChat
        fields = [
            'id', 'subject', 'status', 'priority', 'user', 'user_email',
            'assigned_admin', 'assigned_admin_name', 'last_message', 'unread_count',
            'closed_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_last_message(self, obj):
        message = obj.messages.order_by('-created_at').first()
        return SupportMessageSerializer(message).data if message else None

    def get_unread_count(self, obj):
        # Unread messages written by the other side of the conversation
        request = self.context.get('request')
        from_admin = not (request and (request.user.role == 'ADMIN' or request.user.is_superuser))
        return obj.messages.filter(is_from_admin=from_admin, read_at__isnull=True).count()


class SupportChatDetailSerializer(SupportChatSerializer):
    messages = SupportMessageSerializer(many=True, read_only=True)

    class Meta(SupportChatSerializer.Meta):
        fields = SupportChatSerializer.Meta.fields + ['messages']
        read_only_fields = fields


class SupportChatCreateSerializer(serializers.ModelSerializer):
    subject = serializers.CharField(min_length=1, max_length=200)
    description = serializers.CharField(min_length=1, max_length=2000, write_only=True)

    class Meta:
        model = SupportChat
        fields = ['id', 'subject', 'description', 'priority']
        read_only_fields = ['id']

    def validate_description(self, value):
        if not value.strip():
            raise serializers.ValidationError(_("Descreva o problema."))
        return value
