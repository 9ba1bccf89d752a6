from django.db import models
from django.conf import settings
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    """In-app notification shown in the user's inbox."""

    class Type(models.TextChoices):
        SERVICE_REQUEST = 'SERVICE_REQUEST', _('Service request')
        PAYMENT = 'PAYMENT', _('Payment')
        SYSTEM = 'SYSTEM', _('System')
        PROMOTIONAL = 'PROMOTIONAL', _('Promotional')
        REVIEW = 'REVIEW', _('Review')

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications'
    )
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.SYSTEM)
    title = models.CharField(max_length=150)
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    sent_via = models.CharField(max_length=60, blank=True)
    data = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'is_read'], name='notification_user_read_idx'),
        ]

    def __str__(self):
        return f"{self.user.email}: {self.title}"
