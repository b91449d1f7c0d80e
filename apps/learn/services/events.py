# apps/learn/services/events.py
from ..models import Event


def events_for(user):
    """Events of the cohorts the user belongs to; admins see all."""
    qs = Event.objects.select_related('cohort')
    if user.is_platform_admin:
        return qs
    if user.is_instructor:
        return qs.filter(cohort__instructors=user)
    return qs.filter(cohort__learners=user)
