"""
Cohort
    → courses (Course → Module → Lesson → Assignment)
    → learners join / apply (EnrollmentRequest)
            ↓
    LearnerProgress per (learner, cohort[, course])
    → Submission graded
    → currentScore / ModuleProgress recomputed
"""

# apps/learn/models.py
import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import Q, UniqueConstraint
from django.utils import timezone

from apps.core.managers import LearnerScopedManager, LearnerScopedQuerySet
from apps.core.models import TimeStampedModel

User = settings.AUTH_USER_MODEL


# ---------- Catalog ----------

class Course(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    duration_hours = models.PositiveIntegerField(default=0)
    instructor = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='courses_taught'
    )
    # learners approved into the course through an application
    registrars = models.ManyToManyField(User, blank=True, related_name='registered_courses')

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.name


class Module(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='modules')
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    position = models.PositiveIntegerField(default=0)
    duration_hours = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['position', 'created_at']
        indexes = [
            models.Index(fields=['course', 'position'], name='learn_module_course_pos_idx'),
        ]

    def __str__(self):
        return f"{self.course.name} / {self.name}"


class Lesson(TimeStampedModel):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    module = models.ForeignKey(Module, on_delete=models.CASCADE, related_name='lessons')
    name = models.CharField(max_length=255)
    content = models.TextField(blank=True)
    video_url = models.URLField(blank=True)
    position = models.PositiveIntegerField(default=0)
    duration_minutes = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['position', 'created_at']
        indexes = [
            models.Index(fields=['module', 'position'], name='learn_lesson_module_pos_idx'),
        ]

    def __str__(self):
        return self.name

    @property
    def course(self):
        return self.module.course


class Assignment(TimeStampedModel):
    """
    Optional assignment embedded in a lesson.
    Quiz questions are stored as [{"text", "options": [...], "correctOptionIndex"}].
    """
    TASK = 'task'
    QUIZ = 'quiz'
    VIDEO = 'video'
    TYPE_CHOICES = [
        (TASK, 'Task'),
        (QUIZ, 'Quiz'),
        (VIDEO, 'Video'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    lesson = models.OneToOneField(Lesson, on_delete=models.CASCADE, related_name='assignment')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    assignment_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TASK)
    questions = models.JSONField(default=list, blank=True)
    # informational for clients; grades are always validated against DEXTERHUB_MAX_GRADE
    max_score = models.PositiveIntegerField(default=10)
    passing_learners = models.ManyToManyField(User, blank=True, related_name='passed_assignments')

    def __str__(self):
        return f"Assignment({self.title})"

    @property
    def is_quiz(self):
        return self.assignment_type == self.QUIZ


# ---------- Cohorts & enrollment ----------

class Cohort(TimeStampedModel):
    UPCOMING = 'upcoming'
    ACTIVE = 'active'
    COMPLETED = 'completed'
    ARCHIVED = 'archived'
    STATUS_CHOICES = [
        (UPCOMING, 'Upcoming'),
        (ACTIVE, 'Active'),
        (COMPLETED, 'Completed'),
        (ARCHIVED, 'Archived'),
    ]
    JOINABLE_STATUSES = (UPCOMING, ACTIVE)

    REVIEW_CYCLE_CHOICES = [
        ('weekly', 'Weekly'),
        ('bi-weekly', 'Bi-weekly'),
        ('monthly', 'Monthly'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    start_date = models.DateField()
    end_date = models.DateField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=UPCOMING, db_index=True)

    instructors = models.ManyToManyField(User, blank=True, related_name='instructed_cohorts')
    # side effect of enrollment; progress rows are authoritative
    learners = models.ManyToManyField(User, blank=True, related_name='cohorts')
    courses = models.ManyToManyField(Course, blank=True, related_name='cohorts')

    performance_threshold = models.PositiveIntegerField(
        default=70, validators=[MaxValueValidator(100)], help_text="Percent, 0-100"
    )
    weekly_target_hours = models.PositiveIntegerField(default=10)
    grace_period_days = models.PositiveIntegerField(default=3)
    review_cycle_frequency = models.CharField(max_length=16, choices=REVIEW_CYCLE_CHOICES, default='weekly')

    class Meta:
        ordering = ['-start_date']

    def __str__(self):
        return self.name

    @property
    def is_joinable(self):
        return self.status in self.JOINABLE_STATUSES


class EnrollmentRequest(TimeStampedModel):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    learner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='enrollment_requests')
    cohort = models.ForeignKey(Cohort, on_delete=models.CASCADE, related_name='enrollment_requests')
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name='enrollment_requests')
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=PENDING, db_index=True)
    reason = models.TextField(blank=True)
    rejection_reason = models.TextField(blank=True)
    reviewed_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='reviewed_enrollment_requests'
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)

    objects = LearnerScopedManager()

    class Meta:
        ordering = ['-created_at']
        constraints = [
            UniqueConstraint(
                fields=['learner', 'cohort'],
                condition=Q(status='pending'),
                name='unique_pending_request_per_learner_cohort',
            ),
        ]

    def __str__(self):
        return f"EnrollmentRequest({self.learner_id}, {self.course_id}, {self.status})"

    @property
    def is_pending(self):
        return self.status == self.PENDING


# ---------- Progress & grading ----------

class LearnerProgressQuerySet(LearnerScopedQuerySet):
    def active(self):
        """Rows that count as a live enrollment."""
        return self.filter(status__in=LearnerProgress.ACTIVE_STATUSES)

    def not_dropped(self):
        return self.exclude(status=LearnerProgress.DROPPED)


class LearnerProgress(TimeStampedModel):
    """
    Authoritative record of a learner's enrollment, score and status in a
    cohort. `course` is null for the cohort-level row created by joining.
    Scores are percentages (0-100).
    """
    ON_TRACK = 'on-track'
    AT_RISK = 'at-risk'
    UNDER_REVIEW = 'under-review'
    DROPPED = 'dropped'
    FAILED = 'failed'
    STATUS_CHOICES = [
        (ON_TRACK, 'On track'),
        (AT_RISK, 'At risk'),
        (UNDER_REVIEW, 'Under review'),
        (DROPPED, 'Dropped'),
        (FAILED, 'Failed'),
    ]
    ACTIVE_STATUSES = (ON_TRACK, AT_RISK, UNDER_REVIEW)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    learner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='progress_records')
    cohort = models.ForeignKey(Cohort, on_delete=models.CASCADE, related_name='progress_records')
    course = models.ForeignKey(
        Course, on_delete=models.CASCADE, null=True, blank=True, related_name='progress_records'
    )
    completed_lessons = models.ManyToManyField(Lesson, blank=True, related_name='completed_by')
    current_score = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00')), MaxValueValidator(Decimal('100.00'))],
    )
    learning_hours_this_week = models.DecimalField(max_digits=6, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=ON_TRACK, db_index=True)
    inactivity_days = models.PositiveIntegerField(default=0)
    last_activity_date = models.DateTimeField(default=timezone.now)
    last_assessment_date = models.DateTimeField(null=True, blank=True)
    last_assessment_score = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    objects = models.Manager.from_queryset(LearnerProgressQuerySet)()

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['learner', 'cohort'], name='learn_progress_learner_idx'),
            models.Index(fields=['cohort', 'status'], name='learn_progress_cohort_idx'),
        ]

    def __str__(self):
        return f"Progress({self.learner_id}, {self.cohort_id}, {self.course_id}, {self.status})"

    @property
    def is_active(self):
        return self.status in self.ACTIVE_STATUSES


class ModuleProgress(models.Model):
    """Per-module scores of a progress row; created on the first graded lesson of the module."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    progress = models.ForeignKey(LearnerProgress, on_delete=models.CASCADE, related_name='module_progress')
    module = models.ForeignKey(Module, on_delete=models.CASCADE, related_name='progress_entries')
    scores = models.JSONField(default=list, blank=True)
    average_score = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    is_graduated = models.BooleanField(default=False)

    class Meta:
        constraints = [
            UniqueConstraint(fields=['progress', 'module'], name='unique_module_progress_per_progress'),
        ]

    def __str__(self):
        return f"ModuleProgress({self.module_id}, {self.average_score})"


class Submission(TimeStampedModel):
    PENDING = 'pending'
    GRADED = 'graded'
    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (GRADED, 'Graded'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    learner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='submissions')
    cohort = models.ForeignKey(Cohort, on_delete=models.CASCADE, related_name='submissions')
    lesson = models.ForeignKey(Lesson, on_delete=models.CASCADE, related_name='submissions')
    content = models.TextField(blank=True)
    answers = models.JSONField(default=list, blank=True, help_text="Selected option index per quiz question")
    # entered on the 0-10 scale
    grade = models.DecimalField(
        max_digits=4, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('10'))],
    )
    feedback = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=PENDING, db_index=True)
    submitted_at = models.DateTimeField(default=timezone.now)
    graded_at = models.DateTimeField(null=True, blank=True)
    graded_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='graded_submissions'
    )

    objects = LearnerScopedManager()

    class Meta:
        ordering = ['-submitted_at']
        constraints = [
            UniqueConstraint(fields=['learner', 'lesson', 'cohort'], name='unique_submission_per_learner_lesson_cohort'),
        ]
        indexes = [
            models.Index(fields=['learner', 'cohort', 'status'], name='learn_submission_learner_idx'),
        ]

    def __str__(self):
        return f"Submission({self.learner_id}, {self.lesson_id}, {self.status})"

    @property
    def is_graded(self):
        return self.status == self.GRADED


# ---------- Schedule ----------

class Event(TimeStampedModel):
    TYPE_CHOICES = [
        ('live-session', 'Live session'),
        ('deadline', 'Deadline'),
        ('workshop', 'Workshop'),
        ('other', 'Other'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    cohort = models.ForeignKey(Cohort, on_delete=models.CASCADE, related_name='events')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    date = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(default=60)
    event_type = models.CharField(max_length=32, choices=TYPE_CHOICES, default='live-session')
    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_events'
    )

    class Meta:
        ordering = ['date']

    def __str__(self):
        return f"Event({self.title}, {self.date:%Y-%m-%d})"
