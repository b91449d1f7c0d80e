# apps/learn/services/catalog.py
import logging

from django.db import transaction
from django.db.models import Max

from apps.core.exceptions import NotFound
from ..models import Assignment, Course, Lesson, Module

logger = logging.getLogger(__name__)


def visible_courses(user):
    """Instructors see the courses they created; everybody else sees all."""
    qs = Course.objects.select_related('instructor').prefetch_related('registrars')
    if user.is_instructor:
        qs = qs.filter(instructor=user)
    return qs


def course_tree(course_id):
    try:
        return Course.objects.prefetch_related('modules__lessons__assignment').get(id=course_id)
    except (Course.DoesNotExist, ValueError):
        raise NotFound("Course not found")


def create_course(instructor, **fields):
    course = Course.objects.create(instructor=instructor, **fields)
    logger.info(f"Course {course.name} created by {instructor.email}")
    return course


def _next_position(qs):
    return (qs.aggregate(top=Max('position'))['top'] or 0) + 1


@transaction.atomic
def add_module(course_id, **fields):
    try:
        course = Course.objects.select_for_update().get(id=course_id)
    except (Course.DoesNotExist, ValueError):
        raise NotFound("Course not found")
    return Module.objects.create(course=course, position=_next_position(course.modules.all()), **fields)


@transaction.atomic
def add_lesson(module_id, assignment=None, **fields):
    try:
        module = Module.objects.select_for_update().get(id=module_id)
    except (Module.DoesNotExist, ValueError):
        raise NotFound("Module not found")

    lesson = Lesson.objects.create(module=module, position=_next_position(module.lessons.all()), **fields)
    if assignment:
        Assignment.objects.create(lesson=lesson, **assignment)
    return lesson
