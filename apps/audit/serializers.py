from rest_framework import serializers

from .models import AuditLog


class AuditLogSerializer(serializers.ModelSerializer):
    actorId = serializers.IntegerField(source='actor_id', read_only=True, allow_null=True)
    actorEmail = serializers.EmailField(source='actor.email', read_only=True, default=None)
    targetUserId = serializers.IntegerField(source='target_user_id', read_only=True, allow_null=True)
    targetCohortId = serializers.UUIDField(source='target_cohort_id', read_only=True, allow_null=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'actorId', 'actorEmail', 'action', 'targetUserId', 'targetCohortId', 'details', 'timestamp']
        read_only_fields = fields
