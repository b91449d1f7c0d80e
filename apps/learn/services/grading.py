# apps/learn/services/grading.py
"""
Progress & grading engine.

Grades are entered on 0..MAX_GRADE and kept on the submission as entered.
Everything derived from them (current score, module scores and averages,
last assessment score) is a percentage, so the 50 / 70 thresholds and the
cohort's performance threshold are all compared on 0-100.

Recomputation always re-scans every graded submission of the pair; it never
applies deltas, so re-grading is idempotent.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.accounts.policy import require
from apps.audit.services import log_action
from apps.core.exceptions import Conflict, NotFound, ValidationFailed
from ..models import Cohort, Lesson, LearnerProgress, ModuleProgress, Submission

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')


def to_percent(grade):
    """0..MAX_GRADE -> 0..100"""
    percent = Decimal(grade) / Decimal(settings.DEXTERHUB_MAX_GRADE) * Decimal(100)
    return percent.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def mean(values):
    values = list(values)
    if not values:
        return None
    return (sum(values, Decimal(0)) / len(values)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def next_status(current_status, score):
    """Grading only moves rows into and out of under-review."""
    threshold = Decimal(settings.DEXTERHUB_UNDER_REVIEW_THRESHOLD)
    if score < threshold and current_status in LearnerProgress.ACTIVE_STATUSES:
        return LearnerProgress.UNDER_REVIEW
    if score >= threshold and current_status == LearnerProgress.UNDER_REVIEW:
        return LearnerProgress.ON_TRACK
    return current_status


def find_target_progress(learner, cohort, lesson):
    """
    The row a graded lesson counts towards: the live row for the lesson's
    course, else the live cohort-level row, else the newest live row, and
    only when nothing is live the newest dropped row. Locked for the rest of
    the transaction.
    """
    rows = list(
        LearnerProgress.objects.for_learner_in_cohort(learner, cohort)
        .select_for_update()
        .order_by('-created_at')
    )
    live = [row for row in rows if row.status != LearnerProgress.DROPPED]
    course_id = lesson.module.course_id

    for row in live:
        if row.course_id == course_id:
            return row
    for row in live:
        if row.course_id is None:
            return row
    if live:
        return live[0]
    return rows[0] if rows else None


def _graded(learner, cohort):
    return Submission.objects.for_learner_in_cohort(learner, cohort).filter(status=Submission.GRADED)


def recompute_module_progress(progress, module):
    graded = _graded(progress.learner, progress.cohort).filter(lesson__module=module).order_by('submitted_at')
    scores = [to_percent(s.grade) for s in graded]

    entry = ModuleProgress.objects.filter(progress=progress, module=module).first()
    if entry is None:
        if not scores:
            return None
        entry = ModuleProgress(progress=progress, module=module)

    average = mean(scores) or Decimal('0.00')
    entry.scores = [float(score) for score in scores]
    entry.average_score = average
    entry.is_graduated = bool(scores) and average >= Decimal(settings.DEXTERHUB_GRADUATION_THRESHOLD)
    entry.save()
    return entry


def recompute_progress(learner, cohort, lesson, actor=None):
    """
    Refresh the target progress row for (learner, cohort) after a grade on
    `lesson` was set or withdrawn. Must run inside a transaction.
    """
    progress = find_target_progress(learner, cohort, lesson)
    if progress is None:
        logger.warning(
            f"No progress row for learner {learner.id} in cohort {cohort.id}; "
            f"grade on lesson {lesson.id} not reflected in progress"
        )
        return None

    score = mean(to_percent(s.grade) for s in _graded(learner, cohort))
    if score is None:
        score = Decimal(settings.DEXTERHUB_INITIAL_PROGRESS_SCORE)

    previous_status = progress.status
    progress.current_score = score
    progress.status = next_status(previous_status, score)
    progress.save(update_fields=['current_score', 'status', 'updated_at'])

    recompute_module_progress(progress, lesson.module)

    if progress.status != previous_status:
        log_action(actor, 'progress.status_changed', target_user=learner, target_cohort=cohort,
                   details={'progressId': str(progress.id), 'from': previous_status, 'to': progress.status,
                            'currentScore': str(score)})
        logger.info(f"Progress {progress.id} {previous_status} -> {progress.status} at {score}")
    return progress


def _update_passing_learners(submission):
    assignment = getattr(submission.lesson, 'assignment', None)
    if assignment is None:
        return
    if submission.is_graded and submission.grade >= Decimal(settings.DEXTERHUB_PASSING_GRADE):
        assignment.passing_learners.add(submission.learner)
    else:
        assignment.passing_learners.remove(submission.learner)


def apply_grade(submission, grade, feedback='', grader=None):
    """Store a grade on the 0..MAX_GRADE scale and fan it out to progress."""
    now = timezone.now()
    submission.grade = Decimal(grade).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    submission.feedback = feedback or ''
    submission.status = Submission.GRADED
    submission.graded_by = grader
    submission.graded_at = now
    submission.save(update_fields=['grade', 'feedback', 'status', 'graded_by', 'graded_at', 'updated_at'])

    _update_passing_learners(submission)

    progress = recompute_progress(submission.learner, submission.cohort, submission.lesson, actor=grader)
    if progress is not None:
        progress.last_assessment_date = now
        progress.last_assessment_score = to_percent(submission.grade)
        progress.save(update_fields=['last_assessment_date', 'last_assessment_score', 'updated_at'])

    log_action(grader, 'submission.graded', target_user=submission.learner, target_cohort=submission.cohort,
               details={'submissionId': str(submission.id), 'grade': str(submission.grade),
                        'auto': grader is None})
    logger.info(f"Submission {submission.id} graded {submission.grade}/{settings.DEXTERHUB_MAX_GRADE}")
    return submission


def validate_grade(grade):
    try:
        value = Decimal(str(grade))
    except (ArithmeticError, ValueError, TypeError):
        raise ValidationFailed("Grade must be a number")
    if not value.is_finite() or value < 0 or value > Decimal(settings.DEXTERHUB_MAX_GRADE):
        raise ValidationFailed(f"Grade must be between 0 and {settings.DEXTERHUB_MAX_GRADE}")
    return value


@transaction.atomic
def grade_submission(submission_id, grade, feedback, grader):
    require(grader, 'submission.grade')
    value = validate_grade(grade)

    try:
        submission = (
            Submission.objects.select_for_update()
            .select_related('learner', 'cohort', 'lesson__module')
            .get(id=submission_id)
        )
    except (Submission.DoesNotExist, ValueError):
        raise NotFound("Submission not found")

    return apply_grade(submission, value, feedback, grader)


def score_quiz(assignment, answers):
    """Number of correct answers scaled to 0..MAX_GRADE."""
    questions = assignment.questions or []
    if not questions:
        return Decimal(0)
    answers = list(answers or [])
    correct = 0
    for index, question in enumerate(questions):
        if index < len(answers) and answers[index] == question.get('correctOptionIndex'):
            correct += 1
    return Decimal(correct) / Decimal(len(questions)) * Decimal(settings.DEXTERHUB_MAX_GRADE)


@transaction.atomic
def submit_assignment(learner, lesson_id, cohort_id, content='', answers=None):
    require(learner, 'submission.create')

    try:
        cohort = Cohort.objects.get(id=cohort_id)
    except (Cohort.DoesNotExist, ValueError):
        raise NotFound("Cohort not found")
    try:
        lesson = Lesson.objects.select_related('module').get(id=lesson_id)
    except (Lesson.DoesNotExist, ValueError):
        raise NotFound("Lesson not found")

    if not cohort.courses.filter(id=lesson.module.course_id).exists():
        raise NotFound("Lesson not found in this cohort")

    live_rows = LearnerProgress.objects.for_learner_in_cohort(learner, cohort).active()
    if not live_rows.exists():
        raise Conflict("You are not actively enrolled in this cohort")

    now = timezone.now()
    submission = (
        Submission.objects.for_learner_in_cohort(learner, cohort)
        .select_for_update()
        .filter(lesson=lesson)
        .first()
    )
    withdrawn = False
    if submission is None:
        submission = Submission.objects.create(
            learner=learner, cohort=cohort, lesson=lesson,
            content=content or '', answers=answers or [], submitted_at=now,
        )
    else:
        withdrawn = submission.is_graded
        submission.content = content or ''
        submission.answers = answers or []
        submission.status = Submission.PENDING
        submission.grade = None
        submission.feedback = ''
        submission.graded_at = None
        submission.graded_by = None
        submission.submitted_at = now
        submission.save()

    live_rows.update(last_activity_date=now, inactivity_days=0, updated_at=now)
    logger.info(f"{learner.email} submitted lesson {lesson.id} in cohort {cohort.id}")

    assignment = getattr(lesson, 'assignment', None)
    if assignment is not None and assignment.is_quiz:
        return apply_grade(submission, score_quiz(assignment, answers), grader=None)

    if withdrawn:
        _update_passing_learners(submission)
        recompute_progress(learner, cohort, lesson, actor=learner)
    return submission
