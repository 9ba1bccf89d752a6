from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from django.utils.translation import gettext_lazy as _


class Plan(models.Model):
    class BillingCycle(models.TextChoices):
        MONTHLY = 'MONTHLY', _('Monthly')
        YEARLY = 'YEARLY', _('Yearly')

    name = models.CharField(_("Name"), max_length=60, unique=True)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    billing_cycle = models.CharField(max_length=10, choices=BillingCycle.choices, default=BillingCycle.MONTHLY)
    features = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['price']

    def __str__(self):
        return f"{self.name} (R$ {self.price})"


class Subscription(models.Model):
    class Status(models.TextChoices):
        ACTIVE = 'ACTIVE', _('Active')
        CANCELLED = 'CANCELLED', _('Cancelled')
        EXPIRED = 'EXPIRED', _('Expired')

    provider = models.ForeignKey(
        'users.ServiceProvider',
        on_delete=models.CASCADE,
        related_name='subscriptions'
    )
    plan = models.ForeignKey(Plan, on_delete=models.PROTECT, related_name='subscriptions')
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField(null=True, blank=True)
    is_auto_renew = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['provider', 'status'], name='subscription_provider_idx'),
        ]

    def __str__(self):
        return f"{self.provider.user.email} - {self.plan.name} ({self.status})"


class Payment(models.Model):
    class Status(models.TextChoices):
        PENDING = 'PENDING', _('Pending')
        PROCESSING = 'PROCESSING', _('Processing')
        APPROVED = 'APPROVED', _('Approved')
        REJECTED = 'REJECTED', _('Rejected')
        CANCELLED = 'CANCELLED', _('Cancelled')
        REFUNDED = 'REFUNDED', _('Refunded')

    class Method(models.TextChoices):
        CREDIT_CARD = 'CREDIT_CARD', _('Credit card')
        DEBIT_CARD = 'DEBIT_CARD', _('Debit card')
        PIX = 'PIX', _('PIX')
        BOLETO = 'BOLETO', _('Boleto')
        CASH = 'CASH', _('Cash')
        BANK_TRANSFER = 'BANK_TRANSFER', _('Bank transfer')
        CHECKOUT = 'CHECKOUT', _('Checkout')
        OTHER = 'OTHER', _('Other')

    class Gateway(models.TextChoices):
        MERCADO_PAGO = 'MERCADO_PAGO', _('Mercado Pago')
        MANUAL = 'MANUAL', _('Manual')

    class Purpose(models.TextChoices):
        SERVICE = 'SERVICE', _('Service')
        UNLOCK = 'UNLOCK', _('Request unlock')
        SUBSCRIPTION = 'SUBSCRIPTION', _('Subscription')

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='payments'
    )
    service_request = models.ForeignKey(
        'bookings.ServiceRequest',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments'
    )
    subscription = models.ForeignKey(
        Subscription,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments'
    )
    plan = models.ForeignKey(
        Plan,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments'
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default='BRL')
    payment_method = models.CharField(max_length=20, choices=Method.choices, default=Method.CHECKOUT)
    gateway = models.CharField(max_length=20, choices=Gateway.choices, default=Gateway.MERCADO_PAGO)
    gateway_payment_id = models.CharField(max_length=64, unique=True, null=True, blank=True)
    gateway_preference_id = models.CharField(max_length=128, blank=True)
    purpose = models.CharField(max_length=20, choices=Purpose.choices, default=Purpose.SERVICE)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    description = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'status'], name='payment_user_status_idx'),
            models.Index(fields=['service_request', 'status'], name='payment_request_status_idx'),
        ]

    def __str__(self):
        return f"Payment #{self.pk} {self.amount} {self.currency} ({self.status})"


class Coupon(models.Model):
    class DiscountType(models.TextChoices):
        PERCENT = 'PERCENT', _('Percent')
        FIXED = 'FIXED', _('Fixed')

    class AppliesTo(models.TextChoices):
        ANY = 'ANY', _('Any plan')
        FREE = 'FREE', _('Free')
        PREMIUM = 'PREMIUM', _('Premium')
        ENTERPRISE = 'ENTERPRISE', _('Enterprise')

    code = models.CharField(max_length=40, unique=True)
    discount_type = models.CharField(max_length=10, choices=DiscountType.choices, default=DiscountType.PERCENT)
    value = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    applies_to = models.CharField(max_length=12, choices=AppliesTo.choices, default=AppliesTo.ANY)
    valid_from = models.DateTimeField(null=True, blank=True)
    valid_to = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.code

    def save(self, *args, **kwargs):
        self.code = self.code.strip().upper()
        super().save(*args, **kwargs)


class SystemSetting(models.Model):
    """Runtime key/value overrides, e.g. ``PLAN_UNLOCK_PRICE``."""
    key = models.CharField(max_length=80, unique=True)
    value = models.CharField(max_length=255)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.key}={self.value}"

    @classmethod
    def get_value(cls, key, default=None):
        setting = cls.objects.filter(key=key).first()
        return setting.value if setting else default
