# apps/core/managers.py
from django.db import models


class LearnerScopedQuerySet(models.QuerySet):
    """
    Queryset for records keyed by (learner, cohort): progress rows,
    submissions, enrollment requests, drop recommendations and appeals.
    """
    def for_learner(self, learner):
        if not learner:
            # Prevent accidentally returning every learner's records
            raise ValueError("Learner must be provided for a learner-scoped query.")
        return self.filter(learner=learner)

    def for_cohort(self, cohort):
        return self.filter(cohort=cohort)

    def for_learner_in_cohort(self, learner, cohort):
        return self.for_learner(learner).for_cohort(cohort)

    def pending(self):
        return self.filter(status="pending")


LearnerScopedManager = models.Manager.from_queryset(LearnerScopedQuerySet)
