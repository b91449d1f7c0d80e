from django.contrib import admin

from .models import Appeal, DropRecommendation, GracePeriod, InstructorNote


@admin.register(DropRecommendation)
class DropRecommendationAdmin(admin.ModelAdmin):
    list_display = ('learner', 'cohort', 'instructor', 'status', 'submitted_at', 'reviewed_by')
    list_filter = ('status',)
    readonly_fields = ('dropped_progress',)


@admin.register(Appeal)
class AppealAdmin(admin.ModelAdmin):
    list_display = ('learner', 'cohort', 'drop_recommendation', 'status', 'submitted_at', 'reviewed_by')
    list_filter = ('status',)


@admin.register(GracePeriod)
class GracePeriodAdmin(admin.ModelAdmin):
    list_display = ('learner', 'cohort', 'extension_days', 'expires_at', 'granted_by')

    def has_change_permission(self, request, obj=None):
        return False


admin.site.register(InstructorNote)
