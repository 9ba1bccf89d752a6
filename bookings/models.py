from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db.models import F, Q
from django.utils.translation import gettext_lazy as _


class ServiceRequest(models.Model):
    """A booking: either a quote request or a scheduled appointment."""

    class RequestType(models.TextChoices):
        QUOTE = 'QUOTE', _('Quote')
        SCHEDULING = 'SCHEDULING', _('Scheduling')

    class Status(models.TextChoices):
        PENDING = 'PENDING', _('Pending')
        ACCEPTED = 'ACCEPTED', _('Accepted')
        REJECTED = 'REJECTED', _('Rejected')
        COMPLETED = 'COMPLETED', _('Completed')
        CANCELLED = 'CANCELLED', _('Cancelled')

    class CancelledBy(models.TextChoices):
        CLIENT = 'CLIENT', _('Client')
        PROVIDER = 'PROVIDER', _('Provider')

    # Statuses that keep a time slot occupied
    OCCUPYING_STATUSES = [Status.PENDING, Status.ACCEPTED, Status.COMPLETED]

    client = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='client_requests',
        verbose_name=_('Client')
    )
    provider = models.ForeignKey(
        'users.ServiceProvider',
        on_delete=models.CASCADE,
        related_name='requests',
        verbose_name=_('Provider')
    )
    service = models.ForeignKey(
        'catalog.Service',
        on_delete=models.PROTECT,
        related_name='requests',
        verbose_name=_('Service')
    )
    request_type = models.CharField(
        max_length=20,
        choices=RequestType.choices,
        default=RequestType.QUOTE
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        verbose_name=_('Status')
    )
    description = models.TextField(verbose_name=_('Description'))

    scheduled_date = models.DateField(null=True, blank=True)
    scheduled_time = models.TimeField(null=True, blank=True)

    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=2, blank=True)
    zip_code = models.CharField(max_length=10, blank=True)

    estimated_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    base_price_snapshot = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    travel_cost = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    final_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    payment_method = models.CharField(max_length=20, blank=True)

    cancellation_reason = models.TextField(blank=True)
    cancelled_by = models.CharField(max_length=10, choices=CancelledBy.choices, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_('Created At'))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_('Updated At'))

    class Meta:
        verbose_name = _('Service Request')
        verbose_name_plural = _('Service Requests')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['provider', 'scheduled_date', 'scheduled_time'], name='request_provider_slot_idx'),
            models.Index(fields=['client', 'status'], name='request_client_status_idx'),
            models.Index(fields=['provider', 'status'], name='request_provider_status_idx'),
        ]

    def __str__(self):
        return f"Request #{self.pk} - {self.client.email} → {self.provider.user.email} ({self.status})"

    def is_participant(self, user):
        return self.client_id == user.id or self.provider.user_id == user.id


class Availability(models.Model):
    """Weekly working slot of a provider. ``day_of_week`` 0 is Sunday."""

    DAY_CHOICES = [
        (0, _('Sunday')),
        (1, _('Monday')),
        (2, _('Tuesday')),
        (3, _('Wednesday')),
        (4, _('Thursday')),
        (5, _('Friday')),
        (6, _('Saturday')),
    ]

    provider = models.ForeignKey(
        'users.ServiceProvider',
        on_delete=models.CASCADE,
        related_name='availability'
    )
    day_of_week = models.PositiveSmallIntegerField(
        choices=DAY_CHOICES,
        validators=[MinValueValidator(0), MaxValueValidator(6)]
    )
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = _('Availability')
        ordering = ['day_of_week', 'start_time']
        constraints = [
            models.UniqueConstraint(
                fields=['provider', 'day_of_week', 'start_time', 'end_time'],
                name='unique_availability_slot'
            ),
            models.CheckConstraint(
                condition=Q(end_time__gt=F('start_time')),
                name='availability_end_after_start'
            ),
        ]

    def __str__(self):
        return f"{self.get_day_of_week_display()} {self.start_time:%H:%M}-{self.end_time:%H:%M}"


class Review(models.Model):
    service_request = models.OneToOneField(
        ServiceRequest,
        on_delete=models.CASCADE,
        related_name='review',
        verbose_name=_('Service Request')
    )
    giver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reviews_given'
    )
    receiver = models.ForeignKey(
        'users.ServiceProvider',
        on_delete=models.CASCADE,
        related_name='reviews'
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
        verbose_name=_('Rating')
    )
    comment = models.TextField(blank=True, verbose_name=_('Comment'))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['receiver', '-created_at'], name='review_receiver_created_idx'),
        ]

    def __str__(self):
        return f"Review #{self.pk} ({self.rating}⭐) for request #{self.service_request_id}"

    def save(self, *args, **kwargs):
        # Giver and receiver always mirror the booking
        if self.service_request_id:
            self.giver_id = self.service_request.client_id
            self.receiver_id = self.service_request.provider_id
        super().save(*args, **kwargs)
