# apps/learn/services/enrollment.py
"""
Enrollment workflow: joining a cohort, applying to one of its courses and
reviewing those applications.

Per (learner, cohort) the learner is in exactly one enrollment state:

    idle ──apply──▶ applied ──approve──▶ enrolled ──drop──▶ dropped
      └─────────────join─────────────────▲

Progress rows are the authoritative record; `User.active_cohort` is only a
pointer to the cohort the learner last entered.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.accounts.policy import require
from apps.audit.services import log_action
from apps.core.exceptions import Conflict, Forbidden, InvalidState, NotFound, ValidationFailed
from ..models import EnrollmentRequest, LearnerProgress
from .cohorts import get_cohort, get_course

logger = logging.getLogger(__name__)

User = get_user_model()

IDLE = 'idle'
APPLIED = 'applied'
ENROLLED = 'enrolled'
DROPPED = 'dropped'

APPLICATION_ACTIONS = ('approve', 'reject')


def initial_score():
    return Decimal(settings.DEXTERHUB_INITIAL_PROGRESS_SCORE)


def enrollment_state(learner, cohort):
    """Derive the learner's state in `cohort` from progress rows and requests."""
    progress = LearnerProgress.objects.for_learner_in_cohort(learner, cohort)
    if progress.active().exists():
        return ENROLLED
    if EnrollmentRequest.objects.for_learner_in_cohort(learner, cohort).pending().exists():
        return APPLIED
    if progress.exists():
        return DROPPED
    return IDLE


@transaction.atomic
def join_cohort(learner, cohort_id):
    require(learner, 'cohort.join')
    cohort = get_cohort(cohort_id, for_update=True)

    if not cohort.is_joinable:
        raise InvalidState(f"Cannot join a cohort that is {cohort.status}")

    cohort.learners.add(learner)

    # single active cohort: every live row elsewhere is closed out
    closed = LearnerProgress.objects.for_learner(learner).active().select_for_update()
    closed_ids = [str(pk) for pk in closed.values_list('id', flat=True)]
    if closed_ids:
        LearnerProgress.objects.filter(id__in=closed_ids).update(
            status=LearnerProgress.DROPPED, updated_at=timezone.now()
        )

    progress = LearnerProgress.objects.create(
        learner=learner,
        cohort=cohort,
        status=LearnerProgress.ON_TRACK,
        current_score=initial_score(),
    )

    learner.active_cohort = cohort
    learner.save(update_fields=['active_cohort'])

    log_action(learner, 'cohort.joined', target_user=learner, target_cohort=cohort,
               details={'droppedProgressIds': closed_ids})
    logger.info(f"{learner.email} joined cohort {cohort.name}, closed {len(closed_ids)} progress rows")
    return progress


@transaction.atomic
def apply_to_course(learner, cohort_id, course_id, reason=''):
    require(learner, 'course.apply')
    cohort = get_cohort(cohort_id)
    course = get_course(course_id)

    if not cohort.courses.filter(id=course.id).exists():
        raise NotFound("Course not found in this cohort")

    already_enrolled = (
        LearnerProgress.objects.for_learner_in_cohort(learner, cohort)
        .filter(course__isnull=False)
        .not_dropped()
        .exists()
    )
    if already_enrolled:
        raise Conflict("You are already enrolled in a course in this cohort")

    if EnrollmentRequest.objects.for_learner_in_cohort(learner, cohort).pending().exists():
        raise Conflict("You already have a pending application for this cohort")

    request = EnrollmentRequest.objects.create(
        learner=learner, cohort=cohort, course=course, reason=reason or ''
    )
    log_action(learner, 'application.submitted', target_user=learner, target_cohort=cohort,
               details={'requestId': str(request.id), 'courseId': str(course.id)})
    logger.info(f"{learner.email} applied to course {course.id} in cohort {cohort.id}")
    return request


def pending_applications_for(reviewer):
    """Pending requests the reviewer may act on; instructors only see their own cohorts."""
    require(reviewer, 'application.list_pending')
    qs = EnrollmentRequest.objects.pending().select_related('learner', 'cohort', 'course')
    if reviewer.is_instructor:
        qs = qs.filter(cohort__instructors=reviewer)
    return qs


def applications_of(learner):
    return EnrollmentRequest.objects.for_learner(learner).select_related('cohort', 'course')


def _check_reviewer(reviewer, cohort):
    require(reviewer, 'application.review')
    if reviewer.is_instructor and not cohort.instructors.filter(id=reviewer.id).exists():
        raise Forbidden("You do not instruct this cohort")


@transaction.atomic
def handle_application(request_id, action, reviewer, reason=''):
    if action not in APPLICATION_ACTIONS:
        raise ValidationFailed("Action must be 'approve' or 'reject'")

    try:
        request = (
            EnrollmentRequest.objects.select_for_update()
            .select_related('learner', 'cohort', 'course')
            .get(id=request_id)
        )
    except (EnrollmentRequest.DoesNotExist, ValueError):
        raise NotFound("Application not found")

    _check_reviewer(reviewer, request.cohort)

    if not request.is_pending:
        raise Conflict(f"Application already {request.status}")

    learner, cohort, course = request.learner, request.cohort, request.course
    progress = None

    if action == 'approve':
        progress = LearnerProgress.objects.create(
            learner=learner,
            cohort=cohort,
            course=course,
            status=LearnerProgress.ON_TRACK,
            current_score=initial_score(),
        )
        cohort.learners.add(learner)
        course.registrars.add(learner)
        if learner.active_cohort_id is None:
            learner.active_cohort = cohort
            learner.save(update_fields=['active_cohort'])
        request.status = EnrollmentRequest.APPROVED
    else:
        request.status = EnrollmentRequest.REJECTED
        request.rejection_reason = reason or ''

    request.reviewed_by = reviewer
    request.reviewed_at = timezone.now()
    request.save(update_fields=['status', 'rejection_reason', 'reviewed_by', 'reviewed_at', 'updated_at'])

    log_action(reviewer, f'application.{request.status}', target_user=learner, target_cohort=cohort,
               details={'requestId': str(request.id), 'courseId': str(course.id), 'reason': reason or ''})
    logger.info(f"Application {request.id} {request.status} by {reviewer.email}")
    return request, progress
