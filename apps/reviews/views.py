# apps/reviews/views.py
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from apps.accounts.decorators import action_required
from apps.accounts.policy import require
from . import services
from .models import Appeal, DropRecommendation
from .serializers import (
    AppealCreateSerializer, AppealSerializer, DropRecommendationCreateSerializer, DropRecommendationSerializer,
    GracePeriodCreateSerializer, GracePeriodSerializer, InstructorNoteCreateSerializer, InstructorNoteSerializer,
    ReviewSerializer,
)


@api_view(["GET", "POST"])
def drop_recommendation_list_view(request):
    if request.method == "GET":
        require(request.user, 'drop_recommendation.list')
        pending = DropRecommendation.objects.pending().select_related('learner')
        return Response(DropRecommendationSerializer(pending, many=True).data)

    require(request.user, 'drop_recommendation.create')
    serializer = DropRecommendationCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    recommendation = services.create_drop_recommendation(
        request.user, data['learnerId'], data['cohortId'], data['reason'], data['evidence']
    )
    return Response(DropRecommendationSerializer(recommendation).data, status=status.HTTP_201_CREATED)


@api_view(["PUT"])
@action_required('drop_recommendation.review')
def drop_recommendation_review_view(request, recommendation_id):
    serializer = ReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    recommendation = services.review_drop_recommendation(
        recommendation_id, data['status'], data['reviewNotes'], request.user
    )
    return Response(DropRecommendationSerializer(recommendation).data)


@api_view(["GET", "POST"])
def appeal_list_view(request):
    if request.method == "GET":
        require(request.user, 'appeal.list')
        pending = Appeal.objects.pending().select_related('learner')
        return Response(AppealSerializer(pending, many=True).data)

    require(request.user, 'appeal.create')
    serializer = AppealCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    appeal = services.file_appeal(request.user, data['dropRecommendationId'], data['reason'])
    return Response(AppealSerializer(appeal).data, status=status.HTTP_201_CREATED)


@api_view(["PUT"])
@action_required('appeal.review')
def appeal_review_view(request, appeal_id):
    serializer = ReviewSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    appeal = services.review_appeal(appeal_id, data['status'], data['reviewNotes'], request.user)
    return Response(AppealSerializer(appeal).data)


@api_view(["POST"])
@action_required('grace_period.grant')
def grace_period_create_view(request):
    serializer = GracePeriodCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    grace = services.grant_grace_period(
        request.user,
        data['learnerId'],
        data['cohortId'],
        extension_days=data.get('extensionDays'),
        reason=data['reason'],
        original_deadline=data.get('originalDeadline'),
    )
    return Response(GracePeriodSerializer(grace).data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@action_required('note.create')
def note_create_view(request):
    serializer = InstructorNoteCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    note = services.create_note(
        request.user, data['learnerId'], data['cohortId'], data['note'], data['type'], data['actionRequired']
    )
    return Response(InstructorNoteSerializer(note).data, status=status.HTTP_201_CREATED)
