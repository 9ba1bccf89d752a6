from django.contrib import admin

from .models import ServiceRequest, Availability, Review


@admin.register(ServiceRequest)
class ServiceRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'client', 'provider', 'service', 'request_type', 'status', 'scheduled_date', 'created_at')
    list_filter = ('status', 'request_type', 'created_at')
    search_fields = ('client__email', 'provider__user__email', 'service__name', 'description')
    raw_id_fields = ('client', 'provider', 'service')
    readonly_fields = ('created_at', 'updated_at', 'cancelled_at')


@admin.register(Availability)
class AvailabilityAdmin(admin.ModelAdmin):
    list_display = ('provider', 'day_of_week', 'start_time', 'end_time', 'is_active')
    list_filter = ('day_of_week', 'is_active')


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('service_request', 'giver', 'receiver', 'rating', 'created_at')
    list_filter = ('rating',)
    search_fields = ('giver__email', 'receiver__user__email', 'comment')
    readonly_fields = ('giver', 'receiver', 'created_at')
