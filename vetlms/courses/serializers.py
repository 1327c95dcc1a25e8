from django.db.models import NOT_PROVIDED
from rest_framework import serializers

from .models import Course
from .quiz import parse_questions


class CourseSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(source='created_by.full_name', read_only=True, default=None)
    question_count = serializers.SerializerMethodField()

    class Meta:
        model = Course
        fields = [
            'id', 'organization', 'location', 'title', 'description', 'category',
            'content_type', 'content_url', 'content_url_en', 'content_url_es', 'content_url_ne',
            'duration_minutes', 'pass_percentage', 'is_mandatory', 'is_published',
            'assigned_departments', 'assigned_positions', 'assign_to_entire_company',
            'exception_positions', 'is_active', 'quiz_questions', 'question_count',
            'created_by', 'created_by_name', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'organization', 'location', 'created_by', 'created_at', 'updated_at']

    def get_question_count(self, obj):
        return len(obj.quiz_questions or [])

    def validate_pass_percentage(self, value):
        if not 1 <= value <= 100:
            raise serializers.ValidationError('pass_percentage must be between 1 and 100')
        return value

    def validate_duration_minutes(self, value):
        if value is not None and value < 1:
            raise serializers.ValidationError('duration_minutes must be positive')
        return value

    def validate_quiz_questions(self, value):
        try:
            questions = parse_questions(value)
        except ValueError as e:
            raise serializers.ValidationError(str(e))
        # stored in one canonical shape regardless of the editor's key style
        return [q.to_dict() for q in questions]

    def _list_field(self, value, name):
        if value is None:
            return []
        if not isinstance(value, list) or any(not isinstance(v, str) for v in value):
            raise serializers.ValidationError({name: 'Must be a list of strings'})
        return value

    def validate(self, attrs):
        for name in ('assigned_departments', 'assigned_positions', 'exception_positions'):
            if name in attrs:
                attrs[name] = self._list_field(attrs[name], name)

        def current(name):
            if name in attrs:
                return attrs[name]
            if self.instance is not None:
                return getattr(self.instance, name, None)
            # unsent fields take the model default on create
            default = Course._meta.get_field(name).default
            return None if default is NOT_PROVIDED else default

        if current('is_published') and current('content_type') in Course.LOCALIZED_CONTENT_TYPES:
            missing = [lang for lang in Course.CONTENT_LANGUAGES if not current(f'content_url_{lang}')]
            if missing:
                raise serializers.ValidationError({
                    'content_url': f'Published {current("content_type")} courses need content in every language; missing: {", ".join(missing)}'
                })

        if self.instance is not None and 'quiz_questions' in attrs:
            stored = [q.to_dict() for q in parse_questions(self.instance.quiz_questions)]
            if attrs['quiz_questions'] != stored and self.instance.quiz_attempts.exists():
                raise serializers.ValidationError({
                    'quiz_questions': 'Quiz questions cannot be changed once learners have attempted the quiz'
                })

        return attrs


class CourseStatusSerializer(serializers.Serializer):
    is_active = serializers.BooleanField()


class CourseAssignSerializer(serializers.Serializer):
    deadline = serializers.DateTimeField(required=False, allow_null=True)
