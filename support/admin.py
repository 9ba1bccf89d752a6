from django.contrib import admin

from .models import SupportChat, SupportMessage


class SupportMessageInline(admin.TabularInline):
    model = SupportMessage
    extra = 0
    readonly_fields = ('sender', 'content', 'is_from_admin', 'read_at', 'created_at')


@admin.register(SupportChat)
class SupportChatAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'subject', 'status', 'priority', 'assigned_admin', 'updated_at')
    list_filter = ('status', 'priority')
    search_fields = ('user__email', 'subject')
    inlines = [SupportMessageInline]
