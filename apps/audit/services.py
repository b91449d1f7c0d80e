# apps/audit/services.py
import logging

from django.conf import settings

from .models import AuditLog

logger = logging.getLogger(__name__)


def log_action(actor, action, target_user=None, target_cohort=None, details=None):
    """Record one workflow transition. Call inside the transition's transaction."""
    entry = AuditLog.objects.create(
        actor=actor,
        action=action,
        target_user=target_user,
        target_cohort=target_cohort,
        details=details or {},
    )
    logger.debug(f"Audit {action} by {getattr(actor, 'email', None)}")
    return entry


def recent_entries(limit=None):
    limit = limit or settings.DEXTERHUB_AUDIT_LOG_LIMIT
    return AuditLog.objects.select_related('actor', 'target_user', 'target_cohort')[:limit]
