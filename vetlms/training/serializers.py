from rest_framework import serializers

from courses.models import Course
from .models import Enrollment, TrainingRecord


class LearnerCourseSerializer(serializers.ModelSerializer):
    """Course as the learner sees it: localized content URL, quiz without the answer key"""
    content_url = serializers.SerializerMethodField()
    quiz = serializers.SerializerMethodField()

    class Meta:
        model = Course
        fields = [
            'id', 'title', 'description', 'category', 'content_type', 'content_url',
            'duration_minutes', 'pass_percentage', 'is_mandatory', 'quiz',
        ]

    def get_content_url(self, obj):
        return obj.content_url_for(self.context.get('language', 'en'))

    def get_quiz(self, obj):
        quiz = obj.quiz
        if quiz is None:
            return None
        return {'version': quiz.version, 'questions': quiz.to_learner_payload()}


class EnrollmentSerializer(serializers.ModelSerializer):
    course = LearnerCourseSerializer(read_only=True)

    class Meta:
        model = Enrollment
        fields = [
            'id', 'course', 'status', 'progress_percentage', 'deadline',
            'started_date', 'completed_date', 'attempt_count', 'created_at',
        ]
        read_only_fields = fields


class QuizAnswersSerializer(serializers.Serializer):
    answers = serializers.ListField(child=serializers.IntegerField(allow_null=True), allow_empty=False)


class TrainingRecordSubmitSerializer(serializers.Serializer):
    """Completion payload posted by the training flow (camelCase keys)"""
    courseId = serializers.UUIDField()
    enrollmentId = serializers.UUIDField()
    quizScore = serializers.IntegerField(min_value=0, max_value=100)
    passPercentage = serializers.IntegerField(min_value=0, max_value=100)
    employeeSignature = serializers.CharField(allow_blank=False, trim_whitespace=True)
    durationMinutes = serializers.FloatField(min_value=0)
    quizAttemptId = serializers.UUIDField(required=False, allow_null=True)
    answers = serializers.ListField(child=serializers.IntegerField(allow_null=True), required=False)
    timeTakenSeconds = serializers.IntegerField(required=False, min_value=0, allow_null=True)
    viewingToken = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_durationMinutes(self, value):
        if value <= 0:
            raise serializers.ValidationError('durationMinutes must be greater than 0')
        return value


class ApproveSerializer(serializers.Serializer):
    supervisorSignature = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True, default='')


class DenySerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class TrainingRecordSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='user.full_name', read_only=True)
    employee_id = serializers.CharField(source='user.employee_id', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)
    pass_percentage = serializers.IntegerField(source='course.pass_percentage', read_only=True)
    duration_minutes = serializers.IntegerField(source='course.duration_minutes', read_only=True)
    supervisor_name = serializers.CharField(source='supervisor.full_name', read_only=True, default=None)

    class Meta:
        model = TrainingRecord
        fields = [
            'id', 'organization', 'location', 'user', 'course', 'enrollment', 'quiz_attempt',
            'completion_date', 'quiz_score', 'employee_signature_data', 'employee_signature_date',
            'supervisor', 'supervisor_name', 'supervisor_signature_data', 'supervisor_signature_date',
            'approval_status', 'employee_name', 'employee_id', 'course_title', 'pass_percentage',
            'duration_minutes', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


