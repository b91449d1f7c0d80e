# apps/learn/serializers.py
from rest_framework import serializers

from apps.accounts.serializers import UserSerializer
from .models import (
    Assignment, Cohort, Course, EnrollmentRequest, Event, LearnerProgress, Lesson, Module,
    ModuleProgress, Submission,
)


# ---------- Catalog ----------

class QuestionSerializer(serializers.Serializer):
    text = serializers.CharField()
    options = serializers.ListField(child=serializers.CharField(), min_length=2)
    correctOptionIndex = serializers.IntegerField(min_value=0)

    def validate(self, attrs):
        if attrs['correctOptionIndex'] >= len(attrs['options']):
            raise serializers.ValidationError({"correctOptionIndex": "Must index into options."})
        return attrs


class AssignmentInputSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    type = serializers.ChoiceField(choices=Assignment.TYPE_CHOICES, source='assignment_type', default=Assignment.TASK)
    questions = QuestionSerializer(many=True, required=False, default=list)
    maxScore = serializers.IntegerField(
        source='max_score', min_value=1, default=10,
        help_text="Display only; grading always uses the platform 0-10 scale.",
    )

    def validate(self, attrs):
        if attrs['assignment_type'] == Assignment.QUIZ and not attrs.get('questions'):
            raise serializers.ValidationError({"questions": "A quiz needs at least one question."})
        return attrs


class AssignmentSerializer(serializers.ModelSerializer):
    type = serializers.CharField(source='assignment_type')
    maxScore = serializers.IntegerField(source='max_score')

    class Meta:
        model = Assignment
        fields = ['id', 'title', 'description', 'type', 'questions', 'maxScore']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        request = self.context.get('request')
        # learners never see the answer key
        if request is not None and request.user.is_learner:
            data['questions'] = [
                {k: v for k, v in q.items() if k != 'correctOptionIndex'} for q in data['questions']
            ]
        return data


class LessonSerializer(serializers.ModelSerializer):
    moduleId = serializers.UUIDField(source='module_id', read_only=True)
    videoUrl = serializers.URLField(source='video_url')
    duration = serializers.IntegerField(source='duration_minutes')
    assignment = serializers.SerializerMethodField()

    class Meta:
        model = Lesson
        fields = ['id', 'moduleId', 'name', 'content', 'videoUrl', 'position', 'duration', 'assignment']

    def get_assignment(self, obj):
        assignment = getattr(obj, 'assignment', None)
        if assignment is None:
            return None
        return AssignmentSerializer(assignment, context=self.context).data


class ModuleSerializer(serializers.ModelSerializer):
    courseId = serializers.UUIDField(source='course_id', read_only=True)
    duration = serializers.IntegerField(source='duration_hours')
    lessons = LessonSerializer(many=True, read_only=True)

    class Meta:
        model = Module
        fields = ['id', 'courseId', 'name', 'description', 'position', 'duration', 'lessons']


class CourseSerializer(serializers.ModelSerializer):
    duration = serializers.IntegerField(source='duration_hours')
    instructorId = serializers.IntegerField(source='instructor_id', read_only=True, allow_null=True)
    registrarsCount = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Course
        fields = ['id', 'name', 'description', 'duration', 'instructorId', 'registrarsCount', 'createdAt']

    def get_registrarsCount(self, obj):
        return len(obj.registrars.all())


class CourseDetailSerializer(CourseSerializer):
    modules = ModuleSerializer(many=True, read_only=True)

    class Meta(CourseSerializer.Meta):
        fields = CourseSerializer.Meta.fields + ['modules']


class CourseCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    duration = serializers.IntegerField(min_value=0, default=0)


class ModuleCreateSerializer(serializers.Serializer):
    courseId = serializers.UUIDField()
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    duration = serializers.IntegerField(min_value=0, default=0)


class LessonCreateSerializer(serializers.Serializer):
    moduleId = serializers.UUIDField()
    name = serializers.CharField(max_length=255)
    content = serializers.CharField(required=False, allow_blank=True, default='')
    videoUrl = serializers.URLField(required=False, allow_blank=True, default='')
    duration = serializers.IntegerField(min_value=0, default=0)
    assignment = AssignmentInputSerializer(required=False, allow_null=True)


# ---------- Cohorts & enrollment ----------

class CohortSerializer(serializers.ModelSerializer):
    startDate = serializers.DateField(source='start_date')
    endDate = serializers.DateField(source='end_date')
    instructorIds = serializers.PrimaryKeyRelatedField(source='instructors', many=True, read_only=True)
    learnerIds = serializers.PrimaryKeyRelatedField(source='learners', many=True, read_only=True)
    courseIds = serializers.PrimaryKeyRelatedField(source='courses', many=True, read_only=True)
    performanceThreshold = serializers.IntegerField(source='performance_threshold')
    weeklyTargetHours = serializers.IntegerField(source='weekly_target_hours')
    gracePeriodDays = serializers.IntegerField(source='grace_period_days')
    reviewCycleFrequency = serializers.CharField(source='review_cycle_frequency')

    class Meta:
        model = Cohort
        fields = [
            'id', 'name', 'description', 'startDate', 'endDate', 'status',
            'instructorIds', 'learnerIds', 'courseIds',
            'performanceThreshold', 'weeklyTargetHours', 'gracePeriodDays', 'reviewCycleFrequency',
        ]


class CohortCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    startDate = serializers.DateField(source='start_date')
    endDate = serializers.DateField(source='end_date')
    status = serializers.ChoiceField(choices=Cohort.STATUS_CHOICES, default=Cohort.UPCOMING)
    instructorIds = serializers.ListField(child=serializers.IntegerField(), required=False, default=list)
    courseIds = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)
    performanceThreshold = serializers.IntegerField(
        source='performance_threshold', min_value=0, max_value=100, default=70
    )
    weeklyTargetHours = serializers.IntegerField(source='weekly_target_hours', min_value=0, default=10)
    gracePeriodDays = serializers.IntegerField(source='grace_period_days', min_value=0, default=3)
    reviewCycleFrequency = serializers.ChoiceField(
        source='review_cycle_frequency', choices=Cohort.REVIEW_CYCLE_CHOICES, default='weekly'
    )

    def validate(self, attrs):
        if attrs['end_date'] < attrs['start_date']:
            raise serializers.ValidationError({"endDate": "Must not be before startDate."})
        return attrs


class JoinCohortSerializer(serializers.Serializer):
    cohortId = serializers.UUIDField()


class ApplySerializer(serializers.Serializer):
    cohortId = serializers.UUIDField()
    courseId = serializers.UUIDField()
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class ApplicationActionSerializer(serializers.Serializer):
    action = serializers.CharField()
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class EnrollmentRequestSerializer(serializers.ModelSerializer):
    learner = UserSerializer(read_only=True)
    cohortId = serializers.UUIDField(source='cohort_id')
    cohortName = serializers.CharField(source='cohort.name')
    courseId = serializers.UUIDField(source='course_id')
    courseName = serializers.CharField(source='course.name')
    rejectionReason = serializers.CharField(source='rejection_reason')
    reviewedBy = serializers.IntegerField(source='reviewed_by_id', allow_null=True)
    reviewedAt = serializers.DateTimeField(source='reviewed_at', allow_null=True)
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = EnrollmentRequest
        fields = [
            'id', 'learner', 'cohortId', 'cohortName', 'courseId', 'courseName', 'status', 'reason',
            'rejectionReason', 'reviewedBy', 'reviewedAt', 'createdAt',
        ]
        read_only_fields = fields


# ---------- Progress & grading ----------

class ModuleProgressSerializer(serializers.ModelSerializer):
    moduleId = serializers.UUIDField(source='module_id')
    averageScore = serializers.FloatField(source='average_score')
    isGraduated = serializers.BooleanField(source='is_graduated')

    class Meta:
        model = ModuleProgress
        fields = ['moduleId', 'scores', 'averageScore', 'isGraduated']
        read_only_fields = fields


class LearnerProgressSerializer(serializers.ModelSerializer):
    learnerId = serializers.IntegerField(source='learner_id')
    cohortId = serializers.UUIDField(source='cohort_id')
    courseId = serializers.UUIDField(source='course_id', allow_null=True)
    completedLessons = serializers.PrimaryKeyRelatedField(source='completed_lessons', many=True, read_only=True)
    moduleProgress = ModuleProgressSerializer(source='module_progress', many=True, read_only=True)
    currentScore = serializers.FloatField(source='current_score')
    learningHoursThisWeek = serializers.FloatField(source='learning_hours_this_week')
    inactivityDays = serializers.IntegerField(source='inactivity_days')
    lastActivityDate = serializers.DateTimeField(source='last_activity_date')
    lastAssessmentDate = serializers.DateTimeField(source='last_assessment_date', allow_null=True)
    lastAssessmentScore = serializers.FloatField(source='last_assessment_score', allow_null=True)

    class Meta:
        model = LearnerProgress
        fields = [
            'id', 'learnerId', 'cohortId', 'courseId', 'status', 'currentScore', 'completedLessons',
            'moduleProgress', 'learningHoursThisWeek', 'inactivityDays', 'lastActivityDate',
            'lastAssessmentDate', 'lastAssessmentScore',
        ]
        read_only_fields = fields


class SubmissionSerializer(serializers.ModelSerializer):
    learnerId = serializers.IntegerField(source='learner_id')
    cohortId = serializers.UUIDField(source='cohort_id')
    lessonId = serializers.UUIDField(source='lesson_id')
    grade = serializers.FloatField(allow_null=True)
    submittedAt = serializers.DateTimeField(source='submitted_at')
    gradedAt = serializers.DateTimeField(source='graded_at', allow_null=True)
    gradedBy = serializers.IntegerField(source='graded_by_id', allow_null=True)

    class Meta:
        model = Submission
        fields = [
            'id', 'learnerId', 'cohortId', 'lessonId', 'content', 'answers', 'grade', 'feedback', 'status',
            'submittedAt', 'gradedAt', 'gradedBy',
        ]
        read_only_fields = fields


class SubmitSerializer(serializers.Serializer):
    lessonId = serializers.UUIDField()
    cohortId = serializers.UUIDField()
    content = serializers.CharField(required=False, allow_blank=True, default='')
    answers = serializers.ListField(child=serializers.IntegerField(min_value=0), required=False, default=list)


class GradeSerializer(serializers.Serializer):
    submissionId = serializers.UUIDField()
    grade = serializers.DecimalField(max_digits=6, decimal_places=2)
    feedback = serializers.CharField(required=False, allow_blank=True, default='')


class TaskSerializer(serializers.Serializer):
    assignmentId = serializers.UUIDField(source='assignment.id')
    title = serializers.CharField(source='assignment.title')
    type = serializers.CharField(source='assignment.assignment_type')
    lessonId = serializers.UUIDField(source='assignment.lesson_id')
    lessonName = serializers.CharField(source='assignment.lesson.name')
    courseId = serializers.UUIDField(source='assignment.lesson.module.course_id')
    status = serializers.CharField()
    grade = serializers.SerializerMethodField()

    def get_grade(self, task):
        submission = task['submission']
        if submission is None or submission.grade is None:
            return None
        return float(submission.grade)


# ---------- Schedule ----------

class EventSerializer(serializers.ModelSerializer):
    cohortId = serializers.PrimaryKeyRelatedField(source='cohort', queryset=Cohort.objects.all())
    duration = serializers.IntegerField(source='duration_minutes', min_value=0, default=60)
    type = serializers.ChoiceField(source='event_type', choices=Event.TYPE_CHOICES, default='live-session')
    createdBy = serializers.IntegerField(source='created_by_id', read_only=True, allow_null=True)

    class Meta:
        model = Event
        fields = ['id', 'cohortId', 'title', 'description', 'date', 'duration', 'type', 'createdBy']
        read_only_fields = ['id', 'createdBy']


class SubmissionFilterSerializer(serializers.Serializer):
    lessonId = serializers.UUIDField(required=False)
    cohortId = serializers.UUIDField(required=False)
