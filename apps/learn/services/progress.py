# apps/learn/services/progress.py
from django.contrib.auth import get_user_model

from apps.accounts.policy import can
from apps.core.exceptions import Forbidden, NotFound
from ..models import Assignment, LearnerProgress, Submission

User = get_user_model()

TASK_PENDING = 'pending'
TASK_SUBMITTED = 'submitted'
TASK_COMPLETED = 'completed'


def _visible_learner(viewer, learner_id):
    """Learners may only look at themselves; staff may look at anyone."""
    if str(viewer.id) != str(learner_id) and not can(viewer, 'progress.view_any'):
        raise Forbidden()
    try:
        return User.objects.get(id=learner_id)
    except (User.DoesNotExist, ValueError):
        raise NotFound("Learner not found")


def progress_for(viewer, learner_id):
    learner = _visible_learner(viewer, learner_id)
    rows = (
        LearnerProgress.objects.for_learner(learner)
        .select_related('cohort', 'course')
        .prefetch_related('module_progress', 'completed_lessons')
    )
    return learner, rows


def tasks_for(viewer, learner_id):
    """
    Every assignment in the learner's active cohort with where the learner
    stands on it: pending (nothing submitted), submitted, or completed (graded).
    """
    learner = _visible_learner(viewer, learner_id)
    cohort = learner.active_cohort
    if cohort is None:
        return learner, None, []

    assignments = (
        Assignment.objects.filter(lesson__module__course__in=cohort.courses.all())
        .select_related('lesson__module__course')
        .order_by('lesson__module__course__name', 'lesson__module__position', 'lesson__position')
    )
    submissions = {
        s.lesson_id: s
        for s in Submission.objects.for_learner_in_cohort(learner, cohort)
    }

    tasks = []
    for assignment in assignments:
        submission = submissions.get(assignment.lesson_id)
        if submission is None:
            status = TASK_PENDING
        elif submission.is_graded:
            status = TASK_COMPLETED
        else:
            status = TASK_SUBMITTED
        tasks.append({
            'assignment': assignment,
            'submission': submission,
            'status': status,
        })
    return learner, cohort, tasks
