from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('email', 'first_name', 'last_name', 'role', 'status', 'active_cohort')
    list_filter = ('role', 'status', 'is_staff')
    search_fields = ('email', 'first_name', 'last_name')
    ordering = ('email',)
    # role is fixed at creation
    readonly_fields = ('role', 'date_joined', 'last_login')

    fieldsets = (
        (None, {"fields": ('email', 'password')}),
        ("Profile", {"fields": ('first_name', 'last_name', 'role', 'status', 'active_cohort')}),
        ("Permissions", {"fields": ('is_active', 'is_staff', 'is_superuser')}),
        ("Timestamps", {"fields": ('date_joined', 'last_login')}),
    )
    add_fieldsets = (
        (None, {"classes": ('wide',), "fields": ('email', 'role', 'password1', 'password2')}),
    )

    def get_readonly_fields(self, request, obj=None):
        if obj is None:
            return ('date_joined', 'last_login')
        return self.readonly_fields
