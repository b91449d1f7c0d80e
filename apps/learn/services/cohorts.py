# apps/learn/services/cohorts.py
import logging

from django.db import transaction

from apps.audit.services import log_action
from apps.core.exceptions import Conflict, NotFound
from ..models import Cohort, Course

logger = logging.getLogger(__name__)


def get_cohort(cohort_id, for_update=False):
    qs = Cohort.objects.all()
    if for_update:
        qs = qs.select_for_update()
    try:
        return qs.get(id=cohort_id)
    except (Cohort.DoesNotExist, ValueError):
        raise NotFound("Cohort not found")


def get_course(course_id):
    try:
        return Course.objects.get(id=course_id)
    except (Course.DoesNotExist, ValueError):
        raise NotFound("Course not found")


@transaction.atomic
def create_cohort(*, creator, instructors=(), courses=(), **fields):
    if Cohort.objects.filter(name__iexact=fields['name']).exists():
        raise Conflict("A cohort with this name already exists")

    cohort = Cohort.objects.create(**fields)
    if instructors:
        cohort.instructors.set(instructors)
    if courses:
        cohort.courses.set(courses)
    logger.info(f"Cohort {cohort.name} created by {creator.email}")
    return cohort


@transaction.atomic
def add_course_to_cohort(cohort_id, course_id, actor):
    cohort = get_cohort(cohort_id, for_update=True)
    course = get_course(course_id)

    if cohort.courses.filter(id=course.id).exists():
        raise Conflict("Course already in cohort")

    cohort.courses.add(course)
    log_action(actor, 'cohort.course_added', target_cohort=cohort, details={'courseId': str(course.id)})
    logger.info(f"Course {course.id} added to cohort {cohort.id}")
    return cohort


@transaction.atomic
def remove_course_from_cohort(cohort_id, course_id, actor):
    """Removing a course that is not in the cohort is a no-op."""
    cohort = get_cohort(cohort_id, for_update=True)
    course = get_course(course_id)

    if cohort.courses.filter(id=course.id).exists():
        cohort.courses.remove(course)
        log_action(actor, 'cohort.course_removed', target_cohort=cohort, details={'courseId': str(course.id)})
        logger.info(f"Course {course.id} removed from cohort {cohort.id}")
    return cohort
