from django.contrib import admin

from .models import AuditLogEntry


@admin.register(AuditLogEntry)
class AuditLogEntryAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'actor_name', 'action', 'entity_type', 'entity_title')
    list_filter = ('action', 'entity_type')
    search_fields = ('actor_name', 'entity_title')

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
