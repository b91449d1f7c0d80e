from rest_framework import serializers

from .models import Appeal, DropRecommendation, GracePeriod, InstructorNote


class ReviewFieldsMixin(serializers.Serializer):
    reviewedBy = serializers.IntegerField(source='reviewed_by_id', read_only=True, allow_null=True)
    reviewedAt = serializers.DateTimeField(source='reviewed_at', read_only=True, allow_null=True)
    reviewNotes = serializers.CharField(source='review_notes', read_only=True)
    learnerId = serializers.IntegerField(source='learner_id', read_only=True)
    learnerEmail = serializers.EmailField(source='learner.email', read_only=True)
    cohortId = serializers.UUIDField(source='cohort_id', read_only=True)
    submittedAt = serializers.DateTimeField(source='submitted_at', read_only=True)


class DropRecommendationSerializer(ReviewFieldsMixin, serializers.ModelSerializer):
    instructorId = serializers.IntegerField(source='instructor_id', read_only=True, allow_null=True)
    droppedProgressIds = serializers.PrimaryKeyRelatedField(source='dropped_progress', many=True, read_only=True)

    class Meta:
        model = DropRecommendation
        fields = [
            'id', 'learnerId', 'learnerEmail', 'cohortId', 'instructorId', 'reason', 'evidence', 'status',
            'submittedAt', 'reviewedBy', 'reviewedAt', 'reviewNotes', 'droppedProgressIds',
        ]


class AppealSerializer(ReviewFieldsMixin, serializers.ModelSerializer):
    dropRecommendationId = serializers.UUIDField(source='drop_recommendation_id', read_only=True)

    class Meta:
        model = Appeal
        fields = [
            'id', 'learnerId', 'learnerEmail', 'cohortId', 'dropRecommendationId', 'reason', 'status',
            'submittedAt', 'reviewedBy', 'reviewedAt', 'reviewNotes',
        ]


class GracePeriodSerializer(serializers.ModelSerializer):
    learnerId = serializers.IntegerField(source='learner_id')
    cohortId = serializers.UUIDField(source='cohort_id')
    grantedBy = serializers.IntegerField(source='granted_by_id', allow_null=True)
    extensionDays = serializers.IntegerField(source='extension_days')
    originalDeadline = serializers.DateTimeField(source='original_deadline')
    newDeadline = serializers.DateTimeField(source='new_deadline')
    expiresAt = serializers.DateTimeField(source='expires_at')
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = GracePeriod
        fields = [
            'id', 'learnerId', 'cohortId', 'grantedBy', 'reason', 'extensionDays', 'originalDeadline',
            'newDeadline', 'expiresAt', 'createdAt',
        ]
        read_only_fields = fields


class InstructorNoteSerializer(serializers.ModelSerializer):
    authorId = serializers.IntegerField(source='author_id', allow_null=True)
    learnerId = serializers.IntegerField(source='learner_id')
    cohortId = serializers.UUIDField(source='cohort_id')
    type = serializers.CharField(source='note_type')
    actionRequired = serializers.BooleanField(source='action_required')
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = InstructorNote
        fields = ['id', 'authorId', 'learnerId', 'cohortId', 'note', 'type', 'actionRequired', 'createdAt']
        read_only_fields = fields


# ---------- Input ----------

class DropRecommendationCreateSerializer(serializers.Serializer):
    learnerId = serializers.IntegerField()
    cohortId = serializers.UUIDField()
    reason = serializers.CharField()
    evidence = serializers.CharField(required=False, allow_blank=True, default='')


class AppealCreateSerializer(serializers.Serializer):
    dropRecommendationId = serializers.UUIDField()
    reason = serializers.CharField()


class ReviewSerializer(serializers.Serializer):
    status = serializers.CharField()
    reviewNotes = serializers.CharField(required=False, allow_blank=True, default='')


class GracePeriodCreateSerializer(serializers.Serializer):
    learnerId = serializers.IntegerField()
    cohortId = serializers.UUIDField()
    extensionDays = serializers.IntegerField(min_value=1, max_value=365, required=False)
    reason = serializers.CharField(required=False, allow_blank=True, default='')
    originalDeadline = serializers.DateTimeField(required=False)


class InstructorNoteCreateSerializer(serializers.Serializer):
    learnerId = serializers.IntegerField()
    cohortId = serializers.UUIDField()
    note = serializers.CharField()
    type = serializers.ChoiceField(choices=InstructorNote.TYPE_CHOICES, default='general')
    actionRequired = serializers.BooleanField(default=False)
