from django.contrib import admin
from .models import User, ServiceProvider, ModerationLog, Favorite


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    """Admin interface for User model."""

    list_display = ['id', 'email', 'role', 'approval_status', 'is_active', 'is_staff', 'date_joined']
    list_filter = ['role', 'approval_status', 'is_active', 'is_staff', 'date_joined']
    search_fields = ['email', 'first_name', 'last_name', 'cpf_cnpj', 'phone']
    readonly_fields = ['date_joined']
    ordering = ['-date_joined']

    fieldsets = (
        ('Account Info', {
            'fields': ('email', 'password', 'role')
        }),
        ('Personal Info', {
            'fields': ('first_name', 'last_name', 'phone', 'cpf_cnpj', 'profile_image')
        }),
        ('Address', {
            'fields': ('street', 'number', 'district', 'city', 'state', 'zip_code', 'latitude', 'longitude')
        }),
        ('Approval', {
            'fields': ('is_approved', 'approval_status', 'email_verified', 'phone_verified', 'terms_accepted_at')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser')
        }),
        ('Timestamps', {
            'fields': ('date_joined',)
        }),
    )


@admin.register(ServiceProvider)
class ServiceProviderAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'user', 'charges_travel', 'has_scheduling',
        'is_highlighted', 'average_rating', 'total_reviews'
    ]
    list_filter = ['charges_travel', 'has_scheduling', 'is_highlighted']
    search_fields = ['user__email', 'user__first_name', 'user__last_name', 'description']
    readonly_fields = ['average_rating', 'total_reviews']


@admin.register(ModerationLog)
class ModerationLogAdmin(admin.ModelAdmin):
    list_display = ['id', 'user', 'action', 'admin', 'created_at']
    list_filter = ['action', 'created_at']
    search_fields = ['user__email', 'admin__email', 'reason']
    readonly_fields = ['created_at']


admin.site.register(Favorite)
