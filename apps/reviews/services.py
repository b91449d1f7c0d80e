# apps/reviews/services.py
import logging
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.accounts.policy import require
from apps.audit.services import log_action
from apps.core.exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from apps.learn.models import LearnerProgress
from apps.learn.services.cohorts import get_cohort
from .models import Appeal, DropRecommendation, GracePeriod, InstructorNote

logger = logging.getLogger(__name__)

User = get_user_model()


def get_learner(learner_id):
    try:
        return User.objects.get(id=learner_id, role=User.LEARNER)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound("Learner not found")


def _validate_outcome(status):
    if status not in (DropRecommendation.APPROVED, DropRecommendation.REJECTED):
        raise ValidationFailed("Status must be 'approved' or 'rejected'")


def _locked(model, pk, label):
    try:
        return model.objects.select_for_update().select_related('learner', 'cohort').get(id=pk)
    except (model.DoesNotExist, ValueError):
        raise NotFound(f"{label} not found")


# ---------- Drop recommendations ----------

@transaction.atomic
def create_drop_recommendation(instructor, learner_id, cohort_id, reason, evidence=''):
    require(instructor, 'drop_recommendation.create')
    learner = get_learner(learner_id)
    cohort = get_cohort(cohort_id)

    recommendation = DropRecommendation.objects.create(
        learner=learner, cohort=cohort, instructor=instructor, reason=reason, evidence=evidence or ''
    )
    log_action(instructor, 'drop_recommendation.created', target_user=learner, target_cohort=cohort,
               details={'recommendationId': str(recommendation.id)})
    logger.info(f"Drop recommendation {recommendation.id} for {learner.email} by {instructor.email}")
    return recommendation


@transaction.atomic
def review_drop_recommendation(recommendation_id, status, notes, reviewer):
    _validate_outcome(status)
    recommendation = _locked(DropRecommendation, recommendation_id, "Drop recommendation")

    if recommendation.status == DropRecommendation.APPEALED and recommendation.reviewed_at is None:
        raise Conflict("Drop recommendation has a pending appeal")
    if not recommendation.is_pending:
        raise Conflict("Drop recommendation already reviewed")
    require(reviewer, 'drop_recommendation.review')

    learner, cohort = recommendation.learner, recommendation.cohort
    recommendation.mark_reviewed(status, reviewer, notes)
    recommendation.save()

    if status == DropRecommendation.APPROVED:
        rows = list(
            LearnerProgress.objects.for_learner_in_cohort(learner, cohort).not_dropped().select_for_update()
        )
        LearnerProgress.objects.filter(id__in=[row.id for row in rows]).update(
            status=LearnerProgress.DROPPED, updated_at=timezone.now()
        )
        recommendation.dropped_progress.add(*rows)

        learner.status = User.STATUS_DROPPED
        fields = ['status']
        if learner.active_cohort_id == cohort.id:
            learner.active_cohort = None
            fields.append('active_cohort')
        learner.save(update_fields=fields)
        logger.info(f"{learner.email} dropped from cohort {cohort.id}, {len(rows)} progress rows closed")

    log_action(reviewer, f'drop_recommendation.{status}', target_user=learner, target_cohort=cohort,
               details={'recommendationId': str(recommendation.id), 'notes': notes or ''})
    return recommendation


# ---------- Appeals ----------

@transaction.atomic
def file_appeal(learner, recommendation_id, reason):
    require(learner, 'appeal.create')
    recommendation = _locked(DropRecommendation, recommendation_id, "Drop recommendation")

    if recommendation.learner_id != learner.id:
        raise Forbidden("You can only appeal your own drop recommendation")
    if recommendation.status not in DropRecommendation.APPEALABLE_STATUSES:
        raise Conflict(f"A {recommendation.status} drop recommendation cannot be appealed")
    if recommendation.appeals.filter(status=Appeal.PENDING).exists():
        raise Conflict("A pending appeal already exists for this recommendation")

    appeal = Appeal.objects.create(
        learner=learner, cohort=recommendation.cohort, drop_recommendation=recommendation, reason=reason
    )
    recommendation.status = DropRecommendation.APPEALED
    recommendation.save(update_fields=['status', 'updated_at'])

    log_action(learner, 'appeal.filed', target_user=learner, target_cohort=recommendation.cohort,
               details={'appealId': str(appeal.id), 'recommendationId': str(recommendation.id)})
    logger.info(f"{learner.email} appealed drop recommendation {recommendation.id}")
    return appeal


@transaction.atomic
def review_appeal(appeal_id, status, notes, reviewer):
    _validate_outcome(status)
    appeal = _locked(Appeal, appeal_id, "Appeal")

    if not appeal.is_pending:
        raise Conflict("Appeal already reviewed")
    require(reviewer, 'appeal.review')

    learner, cohort = appeal.learner, appeal.cohort
    recommendation = DropRecommendation.objects.select_for_update().get(id=appeal.drop_recommendation_id)

    appeal.mark_reviewed(status, reviewer, notes)
    appeal.save()
    details = {'appealId': str(appeal.id), 'notes': notes or ''}

    if status == Appeal.APPROVED:
        now = timezone.now()
        restored = recommendation.dropped_progress.filter(status=LearnerProgress.DROPPED)
        restored_ids = [str(pk) for pk in restored.values_list('id', flat=True)]

        closed_ids = []
        if restored_ids:
            # reinstatement re-enters the cohort: live rows elsewhere are closed out as on join
            closed = (
                LearnerProgress.objects.for_learner(learner).active()
                .exclude(cohort=cohort)
                .select_for_update()
            )
            closed_ids = [str(pk) for pk in closed.values_list('id', flat=True)]
            LearnerProgress.objects.filter(id__in=closed_ids).update(
                status=LearnerProgress.DROPPED, updated_at=now
            )
            LearnerProgress.objects.filter(id__in=restored_ids).update(
                status=LearnerProgress.ON_TRACK, updated_at=now
            )

        learner.status = User.STATUS_ACTIVE
        fields = ['status']
        if restored_ids:
            learner.active_cohort = cohort
            fields.append('active_cohort')
        learner.save(update_fields=fields)

        if recommendation.reviewed_at is None:
            # never reviewed: the upheld appeal settles it
            recommendation.mark_reviewed(DropRecommendation.REJECTED, reviewer, notes)
            recommendation.save()

        details.update(restoredProgressIds=restored_ids, droppedProgressIds=closed_ids)
        logger.info(
            f"{learner.email} reinstated in cohort {cohort.id}, {len(restored_ids)} progress rows restored, "
            f"{len(closed_ids)} closed elsewhere"
        )
    else:
        recommendation.status = recommendation.status_before_appeal
        recommendation.save(update_fields=['status', 'updated_at'])

    log_action(reviewer, f'appeal.{status}', target_user=learner, target_cohort=cohort, details=details)
    return appeal


# ---------- Grace periods & notes ----------

@transaction.atomic
def grant_grace_period(grantor, learner_id, cohort_id, extension_days=None, reason='', original_deadline=None):
    """Append a deadline extension. Nothing reads these back to gate other operations."""
    require(grantor, 'grace_period.grant')
    learner = get_learner(learner_id)
    cohort = get_cohort(cohort_id)

    if extension_days is None:
        extension_days = cohort.grace_period_days
    now = timezone.now()
    deadline = now + timedelta(days=extension_days)

    grace = GracePeriod.objects.create(
        learner=learner,
        cohort=cohort,
        granted_by=grantor,
        reason=reason or '',
        extension_days=extension_days,
        original_deadline=original_deadline or now,
        new_deadline=deadline,
        expires_at=deadline,
    )
    log_action(grantor, 'grace_period.granted', target_user=learner, target_cohort=cohort,
               details={'gracePeriodId': str(grace.id), 'extensionDays': extension_days})
    logger.info(f"Grace period of {extension_days} days granted to {learner.email}")
    return grace


def create_note(author, learner_id, cohort_id, note, note_type='general', action_required=False):
    require(author, 'note.create')
    return InstructorNote.objects.create(
        author=author,
        learner=get_learner(learner_id),
        cohort=get_cohort(cohort_id),
        note=note,
        note_type=note_type,
        action_required=action_required,
    )
