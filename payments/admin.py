from django.contrib import admin

from .models import Plan, Subscription, Payment, Coupon, SystemSetting


@admin.register(Plan)
class PlanAdmin(admin.ModelAdmin):
    list_display = ('name', 'price', 'billing_cycle', 'is_active')
    list_filter = ('is_active', 'billing_cycle')


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ('provider', 'plan', 'status', 'start_date', 'end_date')
    list_filter = ('status', 'plan')
    raw_id_fields = ('provider',)


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'amount', 'purpose', 'payment_method', 'gateway', 'status', 'created_at')
    list_filter = ('status', 'purpose', 'gateway', 'payment_method')
    search_fields = ('user__email', 'gateway_payment_id', 'description')
    raw_id_fields = ('user', 'service_request', 'subscription')


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = ('code', 'discount_type', 'value', 'applies_to', 'valid_to', 'is_active')
    list_filter = ('is_active', 'applies_to')
    search_fields = ('code',)


@admin.register(SystemSetting)
class SystemSettingAdmin(admin.ModelAdmin):
    list_display = ('key', 'value', 'updated_at')
