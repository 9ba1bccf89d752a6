from django.db import models
from django.core.validators import MinValueValidator
from django.utils.text import slugify
from django.utils.translation import gettext_lazy as _


class ServiceCategory(models.Model):
    name = models.CharField(_("Name"), max_length=120, unique=True)
    slug = models.SlugField(max_length=140, unique=True, blank=True)
    description = models.TextField(_("Description"), blank=True)
    icon = models.CharField(max_length=60, blank=True)
    parent = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='children'
    )
    level = models.PositiveSmallIntegerField(default=0)
    is_leaf = models.BooleanField(default=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _('Service Category')
        verbose_name_plural = _('Service Categories')
        ordering = ['level', 'name']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)[:140]
        self.level = self.parent.level + 1 if self.parent_id else 0
        super().save(*args, **kwargs)


class Service(models.Model):
    name = models.CharField(_("Name"), max_length=150)
    description = models.TextField(_("Description"), blank=True)
    category = models.ForeignKey(
        ServiceCategory,
        on_delete=models.PROTECT,
        related_name='services'
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']
        indexes = [
            models.Index(fields=['category', 'is_active'], name='service_category_active_idx'),
        ]

    def __str__(self):
        return self.name


class ProviderService(models.Model):
    """A Service offered by a provider, with its own price and flags."""

    class Unit(models.TextChoices):
        FIXED = 'FIXED', _('Fixed price')
        HOUR = 'HOUR', _('Per hour')
        SQUARE_METER = 'SQUARE_METER', _('Per square meter')
        ROOM = 'ROOM', _('Per room')
        CUSTOM = 'CUSTOM', _('Custom')

    provider = models.ForeignKey(
        'users.ServiceProvider',
        on_delete=models.CASCADE,
        related_name='offerings'
    )
    service = models.ForeignKey(
        Service,
        on_delete=models.CASCADE,
        related_name='offerings'
    )
    base_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)]
    )
    unit = models.CharField(max_length=20, choices=Unit.choices, default=Unit.FIXED)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    offers_scheduling = models.BooleanField(default=False)
    provides_home_service = models.BooleanField(default=True)
    provides_local_service = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['provider', 'service'], name='unique_provider_service')
        ]
        indexes = [
            models.Index(fields=['is_active', 'base_price'], name='offering_active_price_idx'),
        ]

    def __str__(self):
        return f"{self.service.name} por {self.provider.user.email}"
