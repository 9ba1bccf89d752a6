from django.contrib import admin
from .models import ServiceCategory, Service, ProviderService


@admin.register(ServiceCategory)
class ServiceCategoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'parent', 'level', 'is_leaf', 'is_active']
    list_filter = ['level', 'is_leaf', 'is_active']
    search_fields = ['name', 'description']
    prepopulated_fields = {'slug': ('name',)}


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'category', 'is_active', 'created_at']
    list_filter = ['is_active', 'category']
    search_fields = ['name', 'description']


@admin.register(ProviderService)
class ProviderServiceAdmin(admin.ModelAdmin):
    list_display = ['id', 'service', 'provider', 'base_price', 'unit', 'is_active']
    list_filter = ['unit', 'is_active', 'provides_home_service', 'offers_scheduling']
    search_fields = ['service__name', 'provider__user__email']
