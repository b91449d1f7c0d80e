# apps/learn/views/submissions.py
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.accounts.decorators import action_required
from apps.accounts.policy import require
from ..models import Submission
from ..serializers import GradeSerializer, SubmissionFilterSerializer, SubmissionSerializer, SubmitSerializer
from ..services import grading


def _filtered(submissions, query_params):
    params = SubmissionFilterSerializer(data=query_params)
    params.is_valid(raise_exception=True)
    if 'lessonId' in params.validated_data:
        submissions = submissions.filter(lesson_id=params.validated_data['lessonId'])
    if 'cohortId' in params.validated_data:
        submissions = submissions.filter(cohort_id=params.validated_data['cohortId'])
    return submissions


@api_view(["GET", "POST"])
def submission_list_view(request):
    """POST: learner submits; GET: staff list, optionally filtered by ?cohortId."""
    if request.method == "POST":
        require(request.user, 'submission.create')
        serializer = SubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        submission = grading.submit_assignment(
            request.user, data['lessonId'], data['cohortId'], data['content'], data['answers']
        )
        return Response(SubmissionSerializer(submission).data, status=status.HTTP_201_CREATED)

    require(request.user, 'submission.list')
    submissions = _filtered(Submission.objects.select_related('learner', 'lesson'), request.query_params)
    return Response(SubmissionSerializer(submissions, many=True).data)


@api_view(["GET"])
def my_submissions_view(request):
    submissions = _filtered(Submission.objects.for_learner(request.user), request.query_params)
    return Response(SubmissionSerializer(submissions, many=True).data)


@api_view(["GET"])
@action_required('submission.list')
def all_submissions_view(request):
    """Submissions across the cohorts the instructor teaches; admins see all."""
    submissions = Submission.objects.select_related('learner', 'lesson')
    if request.user.is_instructor:
        submissions = submissions.filter(cohort__instructors=request.user)
    return Response(SubmissionSerializer(submissions, many=True).data)


@api_view(["POST"])
@action_required('submission.grade')
def grade_submission_view(request):
    serializer = GradeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    submission = grading.grade_submission(data['submissionId'], data['grade'], data['feedback'], request.user)
    return Response(SubmissionSerializer(submission).data)
