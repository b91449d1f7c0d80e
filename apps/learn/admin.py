from django.contrib import admin

from .models import (
    Assignment, Cohort, Course, EnrollmentRequest, Event, LearnerProgress, Lesson, Module,
    ModuleProgress, Submission,
)


# --------------------
# Catalog
# --------------------

class ModuleInline(admin.TabularInline):
    model = Module
    extra = 0
    fields = ('position', 'name', 'duration_hours')


class LessonInline(admin.TabularInline):
    model = Lesson
    extra = 0
    fields = ('position', 'name', 'duration_minutes')


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ('name', 'instructor', 'duration_hours', 'created_at')
    search_fields = ('name', 'description')
    filter_horizontal = ('registrars',)
    inlines = [ModuleInline]


@admin.register(Module)
class ModuleAdmin(admin.ModelAdmin):
    list_display = ('name', 'course', 'position')
    list_filter = ('course',)
    inlines = [LessonInline]


admin.site.register(Lesson)
admin.site.register(Assignment)


# --------------------
# Cohorts & enrollment
# --------------------

@admin.register(Cohort)
class CohortAdmin(admin.ModelAdmin):
    list_display = ('name', 'status', 'start_date', 'end_date', 'performance_threshold')
    list_filter = ('status',)
    search_fields = ('name',)
    filter_horizontal = ('instructors', 'learners', 'courses')


@admin.register(EnrollmentRequest)
class EnrollmentRequestAdmin(admin.ModelAdmin):
    list_display = ('learner', 'cohort', 'course', 'status', 'reviewed_by', 'reviewed_at')
    list_filter = ('status',)


# --------------------
# Progress & grading
# --------------------

class ModuleProgressInline(admin.TabularInline):
    model = ModuleProgress
    extra = 0
    readonly_fields = ('module', 'scores', 'average_score', 'is_graduated')


@admin.register(LearnerProgress)
class LearnerProgressAdmin(admin.ModelAdmin):
    list_display = ('learner', 'cohort', 'course', 'status', 'current_score', 'last_activity_date')
    list_filter = ('status', 'cohort')
    inlines = [ModuleProgressInline]


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ('learner', 'lesson', 'cohort', 'status', 'grade', 'graded_at')
    list_filter = ('status',)


admin.site.register(Event)
