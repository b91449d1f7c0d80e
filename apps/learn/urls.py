from django.urls import path

from .views import applications, cohorts, courses, events, progress, submissions

app_name = "learn"

urlpatterns = [
    # cohorts & enrollment
    path("cohorts", cohorts.cohort_list_view, name="cohort_list"),
    path("cohorts/join", cohorts.cohort_join_view, name="cohort_join"),
    path("cohorts/apply", applications.apply_view, name="cohort_apply"),
    path("cohorts/applications/pending", applications.pending_applications_view, name="applications_pending"),
    path("cohorts/applications/my", applications.my_applications_view, name="applications_my"),
    path("cohorts/applications/<uuid:request_id>/action", applications.application_action_view,
         name="application_action"),
    path("cohorts/<uuid:cohort_id>", cohorts.cohort_detail_view, name="cohort_detail"),
    path("cohorts/<uuid:cohort_id>/learners", cohorts.cohort_learners_view, name="cohort_learners"),
    path("cohorts/<uuid:cohort_id>/courses/<uuid:course_id>", cohorts.cohort_course_view, name="cohort_course"),

    # catalog
    path("courses", courses.course_list_view, name="course_list"),
    path("courses/modules", courses.module_create_view, name="module_create"),
    path("courses/lessons", courses.lesson_create_view, name="lesson_create"),
    path("courses/<uuid:course_id>", courses.course_detail_view, name="course_detail"),

    # grading & progress
    path("submissions", submissions.submission_list_view, name="submission_list"),
    path("submissions/my", submissions.my_submissions_view, name="submission_my"),
    path("submissions/all", submissions.all_submissions_view, name="submission_all"),
    path("submissions/grade", submissions.grade_submission_view, name="submission_grade"),
    path("learner-progress/<int:learner_id>", progress.learner_progress_view, name="learner_progress"),
    path("learner-progress/<int:learner_id>/tasks", progress.learner_tasks_view, name="learner_tasks"),

    # schedule
    path("events", events.event_list_view, name="event_list"),
    path("events/cohort/<uuid:cohort_id>", events.cohort_events_view, name="cohort_events"),
]
