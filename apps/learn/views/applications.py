# apps/learn/views/applications.py
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.accounts.decorators import action_required
from ..serializers import (
    ApplySerializer, ApplicationActionSerializer, EnrollmentRequestSerializer, LearnerProgressSerializer,
)
from ..services import enrollment


@api_view(["POST"])
@action_required('course.apply')
def apply_view(request):
    serializer = ApplySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    application = enrollment.apply_to_course(request.user, data['cohortId'], data['courseId'], data['reason'])
    return Response(EnrollmentRequestSerializer(application).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@action_required('application.list_pending')
def pending_applications_view(request):
    applications = enrollment.pending_applications_for(request.user)
    return Response(EnrollmentRequestSerializer(applications, many=True).data)


@api_view(["GET"])
def my_applications_view(request):
    return Response(EnrollmentRequestSerializer(enrollment.applications_of(request.user), many=True).data)


@api_view(["POST"])
@action_required('application.review')
def application_action_view(request, request_id):
    serializer = ApplicationActionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    application, progress = enrollment.handle_application(request_id, data['action'], request.user, data['reason'])
    return Response({
        "application": EnrollmentRequestSerializer(application).data,
        "progress": LearnerProgressSerializer(progress).data if progress else None,
    })
