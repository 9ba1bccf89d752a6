from django.db import models
from django.conf import settings
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _

from .managers import CustomUserManager


class User(AbstractBaseUser, PermissionsMixin):
    class Role(models.TextChoices):
        CLIENT = "CLIENT", _("Client")
        SERVICE_PROVIDER = "SERVICE_PROVIDER", _("Service Provider")
        ADMIN = "ADMIN", _("Administrator")

    class ApprovalStatus(models.TextChoices):
        PENDING = "PENDING", _("Pending")
        APPROVED = "APPROVED", _("Approved")
        REJECTED = "REJECTED", _("Rejected")

    email = models.EmailField(unique=True)
    first_name = models.CharField(_("First Name"), max_length=150, blank=True)
    last_name = models.CharField(_("Last Name"), max_length=150, blank=True)
    role = models.CharField(max_length=50, choices=Role.choices, default=Role.CLIENT)
    phone = models.CharField(_("Phone"), max_length=20, blank=True)
    cpf_cnpj = models.CharField(_("CPF/CNPJ"), max_length=18, blank=True)

    profile_image = models.ImageField(upload_to='profiles/', null=True, blank=True)

    # Address
    street = models.CharField(_("Street"), max_length=255, blank=True)
    number = models.CharField(_("Number"), max_length=20, blank=True)
    district = models.CharField(_("District"), max_length=100, blank=True)
    city = models.CharField(_("City"), max_length=100, blank=True)
    state = models.CharField(_("State"), max_length=2, blank=True)
    zip_code = models.CharField(_("ZIP Code"), max_length=10, blank=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    is_approved = models.BooleanField(_("Approved"), default=False)
    approval_status = models.CharField(
        max_length=20,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING
    )
    email_verified = models.BooleanField(default=False)
    phone_verified = models.BooleanField(default=False)
    terms_accepted_at = models.DateTimeField(null=True, blank=True)

    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    date_joined = models.DateTimeField(auto_now_add=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    def __str__(self):
        return f"{self.email} ({self.role})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip() or self.email

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN or self.is_superuser

    @property
    def is_provider(self):
        return self.role == self.Role.SERVICE_PROVIDER

    @property
    def has_coordinates(self):
        return self.latitude is not None and self.longitude is not None

    def address_line(self):
        """Single-line address used for geocoding ("Rua X, 10, Centro, São Paulo, SP, 01000-000")."""
        parts = [self.street, self.number, self.district, self.city, self.state, self.zip_code]
        return ", ".join(part for part in parts if part)


class ServiceProvider(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='service_provider')
    description = models.TextField(_("Description"), blank=True)
    has_scheduling = models.BooleanField(default=True)
    has_quoting = models.BooleanField(default=True)

    # Travel pricing
    charges_travel = models.BooleanField(default=False)
    travel_rate_per_km = models.DecimalField(
        max_digits=8, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)]
    )
    travel_minimum_fee = models.DecimalField(
        max_digits=8, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)]
    )
    travel_fixed_fee = models.DecimalField(
        max_digits=8, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(0)]
    )
    waives_travel_on_hire = models.BooleanField(default=False)
    service_radius_km = models.PositiveIntegerField(default=20)

    is_highlighted = models.BooleanField(default=False)
    average_rating = models.DecimalField(max_digits=3, decimal_places=2, default=0.0)
    total_reviews = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Service Provider')
        verbose_name_plural = _('Service Providers')

    def __str__(self):
        return f"Prestador {self.user.email}"


class ModerationLog(models.Model):
    class Action(models.TextChoices):
        APPROVE = 'APPROVE', _('Approve')
        REJECT = 'REJECT', _('Reject')
        ACTIVATE = 'ACTIVATE', _('Activate')
        DEACTIVATE = 'DEACTIVATE', _('Deactivate')

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='moderation_logs')
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='moderation_actions'
    )
    action = models.CharField(max_length=20, choices=Action.choices)
    reason = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.action} {self.user.email}"


class Favorite(models.Model):
    client = models.ForeignKey(User, on_delete=models.CASCADE, related_name='favorites')
    provider = models.ForeignKey(ServiceProvider, on_delete=models.CASCADE, related_name='favorited_by')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['client', 'provider'], name='unique_favorite')
        ]

    def __str__(self):
        return f"{self.client.email} ♥ {self.provider.user.email}"
