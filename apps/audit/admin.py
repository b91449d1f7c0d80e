from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action', 'actor', 'target_user', 'target_cohort')
    list_filter = ('action',)
    search_fields = ('action', 'actor__email', 'target_user__email')
    readonly_fields = ('actor', 'action', 'target_user', 'target_cohort', 'details', 'timestamp')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
