# apps/accounts/policy.py
"""
Role -> capability table.

Every role-gated endpoint and service names one action from this table, so
the whole authorization surface can be audited in one place.
"""
from apps.core.exceptions import Forbidden

LEARNER = 'learner'
INSTRUCTOR = 'instructor'
ADMIN = 'admin'
SUPER_ADMIN = 'super-admin'

STAFF = frozenset({INSTRUCTOR, ADMIN, SUPER_ADMIN})
ADMINS = frozenset({ADMIN, SUPER_ADMIN})

ACTION_ROLES = {
    # cohorts & enrollment
    'cohort.create': ADMINS,
    'cohort.manage_courses': ADMINS,
    'cohort.join': frozenset({LEARNER}),
    'course.apply': frozenset({LEARNER}),
    'application.list_pending': STAFF,
    'application.review': STAFF,

    # catalog
    'course.create': STAFF,
    'module.create': STAFF,
    'lesson.create': STAFF,
    'event.create': STAFF,

    # grading & progress
    'submission.create': frozenset({LEARNER}),
    'submission.list': STAFF,
    'submission.grade': STAFF,
    'progress.view_any': STAFF,

    # review workflow
    'drop_recommendation.create': frozenset({INSTRUCTOR}),
    'drop_recommendation.list': ADMINS,
    'drop_recommendation.review': ADMINS,
    'appeal.create': frozenset({LEARNER}),
    'appeal.list': ADMINS,
    'appeal.review': ADMINS,
    'grace_period.grant': ADMINS,
    'note.create': frozenset({INSTRUCTOR, ADMIN}),
    'audit_log.view': ADMINS,
}

ROLE_ACTIONS = {
    role: frozenset(action for action, roles in ACTION_ROLES.items() if role in roles)
    for role in (LEARNER, INSTRUCTOR, ADMIN, SUPER_ADMIN)
}


def can(user, action):
    """True when the user's role grants `action`."""
    if action not in ACTION_ROLES:
        raise KeyError(f"Unknown action: {action}")
    if user is None or not user.is_authenticated:
        return False
    return action in ROLE_ACTIONS.get(user.role, frozenset())


def require(user, action):
    if not can(user, action):
        raise Forbidden()
