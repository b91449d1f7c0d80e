# apps/learn/views/cohorts.py
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.accounts.decorators import action_required
from apps.accounts.policy import require
from apps.accounts.serializers import UserSerializer
from apps.core.exceptions import ValidationFailed
from ..models import Cohort, Course, LearnerProgress
from ..serializers import (
    CohortSerializer, CohortCreateSerializer, JoinCohortSerializer, LearnerProgressSerializer,
)
from ..services import cohorts as cohort_service
from ..services import enrollment

User = get_user_model()


def _cohort_queryset():
    return Cohort.objects.prefetch_related('instructors', 'learners', 'courses')


@api_view(["GET", "POST"])
def cohort_list_view(request):
    if request.method == "GET":
        return Response(CohortSerializer(_cohort_queryset(), many=True).data)

    require(request.user, 'cohort.create')
    serializer = CohortCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = dict(serializer.validated_data)

    instructor_ids = set(data.pop('instructorIds'))
    course_ids = set(data.pop('courseIds'))
    instructors = list(User.objects.filter(id__in=instructor_ids, role=User.INSTRUCTOR))
    courses = list(Course.objects.filter(id__in=course_ids))
    if len(instructors) != len(instructor_ids):
        raise ValidationFailed("Unknown instructor in instructorIds")
    if len(courses) != len(course_ids):
        raise ValidationFailed("Unknown course in courseIds")

    cohort = cohort_service.create_cohort(creator=request.user, instructors=instructors, courses=courses, **data)
    return Response(CohortSerializer(cohort).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
def cohort_detail_view(request, cohort_id):
    cohort = cohort_service.get_cohort(cohort_id)
    return Response(CohortSerializer(cohort).data)


@api_view(["GET"])
@action_required('progress.view_any')
def cohort_learners_view(request, cohort_id):
    """Each learner with their progress in the cohort, or a default when none exists."""
    cohort = cohort_service.get_cohort(cohort_id)
    rows = {}
    for row in (
        LearnerProgress.objects.for_cohort(cohort)
        .not_dropped()
        .prefetch_related('module_progress', 'completed_lessons')
        .order_by('created_at')
    ):
        rows.setdefault(row.learner_id, row)

    learners = []
    for learner in cohort.learners.all():
        row = rows.get(learner.id)
        if row is not None:
            progress = LearnerProgressSerializer(row).data
        else:
            progress = {"status": LearnerProgress.ON_TRACK, "currentScore": 0}
        learners.append({"learner": UserSerializer(learner).data, "progress": progress})
    return Response(learners)


@api_view(["POST"])
@action_required('cohort.join')
def cohort_join_view(request):
    serializer = JoinCohortSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    progress = enrollment.join_cohort(request.user, serializer.validated_data['cohortId'])
    return Response(
        {"message": "Joined cohort", "progress": LearnerProgressSerializer(progress).data},
        status=status.HTTP_201_CREATED,
    )


@api_view(["POST", "DELETE"])
@action_required('cohort.manage_courses')
def cohort_course_view(request, cohort_id, course_id):
    if request.method == "POST":
        cohort = cohort_service.add_course_to_cohort(cohort_id, course_id, request.user)
    else:
        cohort = cohort_service.remove_course_from_cohort(cohort_id, course_id, request.user)
    return Response(CohortSerializer(cohort).data)
