"""
Instructor
    → DropRecommendation (pending)
            ↓
    Admin review → approved (learner dropped) | rejected
            ↓
    Learner → Appeal (recommendation becomes `appealed`)
            ↓
    Admin review → approved (learner restored) | rejected (recommendation restored)

An upheld appeal leaves a reviewed recommendation `appealed` for good; one
appealed while still pending is closed as `rejected` by the appeal's reviewer.
"""

# apps/reviews/models.py
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q, UniqueConstraint
from django.utils import timezone

from apps.core.managers import LearnerScopedManager
from apps.core.models import TimeStampedModel

User = settings.AUTH_USER_MODEL


class ReviewableModel(TimeStampedModel):
    """Shared pending → approved | rejected review fields."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    REVIEW_OUTCOMES = (APPROVED, REJECTED)

    reviewed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='+')
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_notes = models.TextField(blank=True)

    objects = LearnerScopedManager()

    class Meta:
        abstract = True

    @property
    def is_pending(self):
        return self.status == self.PENDING

    def mark_reviewed(self, status, reviewer, notes=''):
        self.status = status
        self.reviewed_by = reviewer
        self.reviewed_at = timezone.now()
        self.review_notes = notes or ''


class DropRecommendation(ReviewableModel):
    APPEALED = 'appealed'
    STATUS_CHOICES = [
        (ReviewableModel.PENDING, 'Pending'),
        (ReviewableModel.APPROVED, 'Approved'),
        (ReviewableModel.REJECTED, 'Rejected'),
        (APPEALED, 'Appealed'),
    ]
    APPEALABLE_STATUSES = (ReviewableModel.PENDING, ReviewableModel.APPROVED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    learner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='drop_recommendations')
    cohort = models.ForeignKey('learn.Cohort', on_delete=models.CASCADE, related_name='drop_recommendations')
    instructor = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, related_name='submitted_drop_recommendations'
    )
    reason = models.TextField()
    evidence = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=ReviewableModel.PENDING, db_index=True)
    submitted_at = models.DateTimeField(default=timezone.now)
    # rows dropped on approval; an approved appeal restores exactly these
    dropped_progress = models.ManyToManyField('learn.LearnerProgress', blank=True, related_name='+')

    class Meta:
        ordering = ['-submitted_at']

    def __str__(self):
        return f"DropRecommendation({self.learner_id}, {self.cohort_id}, {self.status})"

    @property
    def status_before_appeal(self):
        return self.APPROVED if self.reviewed_at else self.PENDING


class Appeal(ReviewableModel):
    STATUS_CHOICES = [
        (ReviewableModel.PENDING, 'Pending'),
        (ReviewableModel.APPROVED, 'Approved'),
        (ReviewableModel.REJECTED, 'Rejected'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    learner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='appeals')
    cohort = models.ForeignKey('learn.Cohort', on_delete=models.CASCADE, related_name='appeals')
    drop_recommendation = models.ForeignKey(DropRecommendation, on_delete=models.CASCADE, related_name='appeals')
    reason = models.TextField()
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=ReviewableModel.PENDING, db_index=True)
    submitted_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-submitted_at']
        constraints = [
            UniqueConstraint(
                fields=['drop_recommendation'],
                condition=Q(status='pending'),
                name='unique_pending_appeal_per_recommendation',
            ),
        ]

    def __str__(self):
        return f"Appeal({self.learner_id}, {self.drop_recommendation_id}, {self.status})"


class GracePeriod(models.Model):
    """Deadline extension record. Append-only and informational."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    learner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='grace_periods')
    cohort = models.ForeignKey('learn.Cohort', on_delete=models.CASCADE, related_name='grace_periods')
    granted_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='granted_grace_periods')
    reason = models.TextField(blank=True)
    extension_days = models.PositiveIntegerField(default=3)
    original_deadline = models.DateTimeField()
    new_deadline = models.DateTimeField()
    expires_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"GracePeriod({self.learner_id}, +{self.extension_days}d)"


class InstructorNote(TimeStampedModel):
    TYPE_CHOICES = [
        ('mentoring', 'Mentoring'),
        ('warning', 'Warning'),
        ('recommendation', 'Recommendation'),
        ('general', 'General'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    author = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='authored_notes')
    learner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='instructor_notes')
    cohort = models.ForeignKey('learn.Cohort', on_delete=models.CASCADE, related_name='instructor_notes')
    note = models.TextField()
    note_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default='general')
    action_required = models.BooleanField(default=False)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"Note({self.learner_id}, {self.note_type})"
