from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

User = get_user_model()

SELF_REGISTER_ROLES = [User.LEARNER, User.INSTRUCTOR]


class UserSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source='first_name', read_only=True)
    lastName = serializers.CharField(source='last_name', read_only=True)
    activeCohortId = serializers.UUIDField(source='active_cohort_id', read_only=True, allow_null=True)

    class Meta:
        model = User
        fields = ['id', 'firstName', 'lastName', 'email', 'role', 'status', 'activeCohortId']
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    firstName = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')
    lastName = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=SELF_REGISTER_ROLES, default=User.LEARNER)

    def validate_email(self, value):
        return User.objects.normalize_email(value).lower()

    def validate_password(self, value):
        validate_password(value)
        return value


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
