import datetime
import itertools

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from apps.learn.models import Assignment, Cohort, Course, Lesson, Module

User = get_user_model()

PASSWORD = "pass12345"


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role=User.LEARNER, **extra):
        n = next(counter)
        return User.objects.create_user(
            email=f"{role}{n}@dexterhub.test",
            password=PASSWORD,
            role=role,
            first_name=role.title(),
            last_name=str(n),
            **extra,
        )
    return _make


@pytest.fixture
def learner(make_user):
    return make_user(User.LEARNER)


@pytest.fixture
def other_learner(make_user):
    return make_user(User.LEARNER)


@pytest.fixture
def instructor(make_user):
    return make_user(User.INSTRUCTOR)


@pytest.fixture
def admin_user(make_user):
    return make_user(User.ADMIN)


@pytest.fixture
def super_admin(make_user):
    return make_user(User.SUPER_ADMIN)


@pytest.fixture
def course(instructor):
    """
    Course with two modules:
        m1: lesson1 (task), lesson2 (task), lesson3 (no assignment)
        m2: quiz lesson with two questions
    """
    course = Course.objects.create(name="Data Engineering", instructor=instructor, duration_hours=40)

    m1 = Module.objects.create(course=course, name="Foundations", position=1)
    lesson1 = Lesson.objects.create(module=m1, name="SQL basics", position=1)
    lesson2 = Lesson.objects.create(module=m1, name="Joins", position=2)
    Lesson.objects.create(module=m1, name="Reading", position=3)
    Assignment.objects.create(lesson=lesson1, title="Write a query")
    Assignment.objects.create(lesson=lesson2, title="Join two tables")

    m2 = Module.objects.create(course=course, name="Pipelines", position=2)
    quiz_lesson = Lesson.objects.create(module=m2, name="Pipeline quiz", position=1)
    Assignment.objects.create(
        lesson=quiz_lesson,
        title="Quiz",
        assignment_type=Assignment.QUIZ,
        questions=[
            {"text": "Batch or stream?", "options": ["batch", "stream"], "correctOptionIndex": 0},
            {"text": "Idempotent?", "options": ["no", "yes"], "correctOptionIndex": 1},
        ],
    )
    return course


@pytest.fixture
def cohort(course, instructor):
    cohort = Cohort.objects.create(
        name="Spring Cohort",
        start_date=datetime.date(2026, 3, 1),
        end_date=datetime.date(2026, 6, 30),
        status=Cohort.ACTIVE,
    )
    cohort.instructors.add(instructor)
    cohort.courses.add(course)
    return cohort


@pytest.fixture
def other_cohort(course):
    cohort = Cohort.objects.create(
        name="Autumn Cohort",
        start_date=datetime.date(2026, 9, 1),
        end_date=datetime.date(2026, 12, 15),
        status=Cohort.UPCOMING,
    )
    cohort.courses.add(course)
    return cohort


@pytest.fixture
def lessons(course):
    """Lessons keyed by name."""
    return {lesson.name: lesson for lesson in Lesson.objects.filter(module__course=course)}


@pytest.fixture
def api_client():
    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client
    return _client
